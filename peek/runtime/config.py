"""JSON configuration defaults.

Reads optional defaults for display flags and launch commands from the
platform config directory. The file is only ever read; command-line flags
override it. Missing or malformed config falls back safely.
"""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

from ..directory_model import ScanOptions

APP_NAME = "peek"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

BOOLEAN_KEYS = (
    "show_hidden",
    "color",
    "clear_on_exit",
    "show_directory",
    "indicators",
    "show_escapes",
)
COMMAND_KEYS = ("editor", "opener", "shell")


@dataclass(frozen=True)
class BrowserConfig:
    """Effective settings for one browser run."""

    show_hidden: bool = False
    color: bool = True
    clear_on_exit: bool = False
    show_directory: bool = True
    indicators: bool = False
    show_escapes: bool = False
    editor: tuple[str, ...] | None = None
    opener: tuple[str, ...] | None = None
    shell: tuple[str, ...] | None = None

    def scan_options(self) -> ScanOptions:
        return ScanOptions(
            show_hidden=self.show_hidden,
            indicators=self.indicators,
            show_escapes=self.show_escapes,
        )

    def with_overrides(self, **overrides: object) -> BrowserConfig:
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_command(value: object) -> tuple[str, ...] | None:
    """Accept a shell-style string or a list of strings as an argv prefix."""
    if isinstance(value, str):
        try:
            parts = shlex.split(value)
        except ValueError:
            return None
        return tuple(parts) or None
    if isinstance(value, list) and value and all(isinstance(part, str) for part in value):
        return tuple(value)
    return None


def load_browser_config() -> BrowserConfig:
    """Build ``BrowserConfig`` from the config file.

    Only explicit booleans are accepted for flag keys; anything else keeps the
    built-in default.
    """
    data = load_config()
    values: dict[str, object] = {}
    for key in BOOLEAN_KEYS:
        value = data.get(key)
        if isinstance(value, bool):
            values[key] = value
    for key in COMMAND_KEYS:
        command = _coerce_command(data.get(key))
        if command is not None:
            values[key] = command
    return BrowserConfig(**values)
