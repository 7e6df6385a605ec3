"""Input-layer public API: raw key decoding and key dispatch tables."""

from .key_registry import KeyBinding, KeyRegistry, fold_letter_case
from .reader import ESC_SEQUENCE_TIMEOUT_MS, KeyReader

__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyBinding",
    "KeyReader",
    "KeyRegistry",
    "fold_letter_case",
]
