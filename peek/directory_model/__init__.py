"""Directory listing model: entry types, classification, and navigation."""

from __future__ import annotations

from .classify import classify, display_glyphs, display_text, measure
from .fs import MSG_CANT_SCAN, PATH_MAX, DirectoryModel, is_listed, resolve_directory, scan_directory
from .types import DirectoryState, Entry, ScanOptions

__all__ = [
    "DirectoryModel",
    "DirectoryState",
    "Entry",
    "MSG_CANT_SCAN",
    "PATH_MAX",
    "ScanOptions",
    "classify",
    "display_glyphs",
    "display_text",
    "is_listed",
    "measure",
    "resolve_directory",
    "scan_directory",
]
