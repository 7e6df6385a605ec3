"""ANSI palettes for entry color classes and status-line chrome.

The plain palette drops entry colors but keeps reverse video and bold, so the
selection and header stay visible without color.
"""

from __future__ import annotations

from dataclasses import dataclass

from .directory_model.types import (
    COLOR_DEVICE,
    COLOR_DIRECTORY,
    COLOR_EXECUTABLE,
    COLOR_FIFO,
    COLOR_SOCKET,
    COLOR_SYMLINK,
)


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the renderer."""

    name: str
    reset: str
    reverse: str
    header: str
    selected_name: str
    status_error: str
    entry_colors: dict[str, str]

    def entry_color(self, color_class: str) -> str:
        return self.entry_colors.get(color_class, "")


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    header="\033[7m\033[1m",
    selected_name="\033[1m",
    status_error="\033[31m",
    entry_colors={
        COLOR_FIFO: "\033[33m",
        COLOR_DEVICE: "\033[33;1m",
        COLOR_DIRECTORY: "\033[34;1m",
        COLOR_SYMLINK: "\033[36;1m",
        COLOR_SOCKET: "\033[35;1m",
        COLOR_EXECUTABLE: "\033[32;1m",
    },
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="\033[0m",
    reverse="\033[7m",
    header="\033[7m\033[1m",
    selected_name="\033[1m",
    status_error="",
    entry_colors={},
)


TEXT_THEME = UITheme(
    name="text",
    reset="",
    reverse="",
    header="",
    selected_name="",
    status_error="",
    entry_colors={},
)


def resolve_theme(*, no_color: bool = False, tty: bool = True) -> UITheme:
    """Return the palette for the requested color mode.

    Output that is not a terminal gets no escape sequences at all.
    """
    if not tty:
        return TEXT_THEME
    return PLAIN_THEME if no_color else DEFAULT_THEME


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "TEXT_THEME",
    "resolve_theme",
]
