"""Directory scanning and the navigation-owning directory model."""

from __future__ import annotations

import errno
import locale
import os
import stat
from dataclasses import replace
from pathlib import Path

from ..errors import NavigationError, PathTooLong, ScanError
from .classify import classify, measure
from .types import (
    ENTRY_TYPE_BLOCK_DEVICE,
    ENTRY_TYPE_CHAR_DEVICE,
    ENTRY_TYPE_DIRECTORY,
    ENTRY_TYPE_FIFO,
    ENTRY_TYPE_REGULAR,
    ENTRY_TYPE_SOCKET,
    ENTRY_TYPE_SYMLINK,
    ENTRY_TYPE_UNKNOWN,
    DirectoryState,
    Entry,
    ScanOptions,
)

PATH_MAX = 4096
MSG_CANT_SCAN = "could not scan"


def is_listed(name: str, show_hidden: bool) -> bool:
    """Return whether ``name`` belongs in a listing.

    ``.`` and ``..`` never do; other dot-prefixed names only with
    ``show_hidden``.
    """
    if name in {".", ".."}:
        return False
    if name.startswith("."):
        return show_hidden
    return True


def _entry_type_for_mode(mode: int) -> str:
    if stat.S_ISDIR(mode):
        return ENTRY_TYPE_DIRECTORY
    if stat.S_ISLNK(mode):
        return ENTRY_TYPE_SYMLINK
    if stat.S_ISFIFO(mode):
        return ENTRY_TYPE_FIFO
    if stat.S_ISCHR(mode):
        return ENTRY_TYPE_CHAR_DEVICE
    if stat.S_ISBLK(mode):
        return ENTRY_TYPE_BLOCK_DEVICE
    if stat.S_ISSOCK(mode):
        return ENTRY_TYPE_SOCKET
    if stat.S_ISREG(mode):
        return ENTRY_TYPE_REGULAR
    return ENTRY_TYPE_UNKNOWN


def _entry_type(child: os.DirEntry) -> str:
    try:
        return _entry_type_for_mode(child.stat(follow_symlinks=False).st_mode)
    except OSError:
        return ENTRY_TYPE_UNKNOWN


def collation_key(name: str) -> tuple[str, str]:
    """Locale-aware sort key; undecodable bytes collate as replacement chars."""
    text = os.fsencode(name).decode("utf-8", errors="replace")
    try:
        collated = locale.strxfrm(text)
    except ValueError:
        collated = text
    return collated, name


def _os_error_message(exc: BaseException) -> str:
    strerror = getattr(exc, "strerror", None)
    return strerror if strerror else str(exc)


def scan_directory(directory: Path, options: ScanOptions) -> list[Entry]:
    """List, filter, classify, measure, and sort the children of ``directory``.

    Raises ``ScanError`` when the directory cannot be opened or read. An
    empty directory is a successful empty list.
    """
    entries: list[Entry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                name = child.name
                if not is_listed(name, options.show_hidden):
                    continue
                entry_type = _entry_type(child)
                child_path = child.path
                color_class, indicator = classify(
                    entry_type,
                    lambda: os.access(child_path, os.X_OK),
                )
                entries.append(
                    Entry(
                        name=name,
                        display_width=measure(name, options.show_escapes),
                        color_class=color_class,
                        indicator=indicator if options.indicators else None,
                        entry_type=entry_type,
                    )
                )
    except OSError as exc:
        raise ScanError(_os_error_message(exc)) from exc

    entries.sort(key=lambda entry: collation_key(entry.name))
    return entries


def resolve_directory(candidate: Path) -> Path:
    """Resolve ``candidate`` to a physical, enterable directory path.

    Mirrors ``chdir`` failures: missing targets, non-directories, and
    directories without search permission raise ``NavigationError``.
    """
    try:
        resolved = candidate.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise NavigationError(_os_error_message(exc)) from exc
    if len(os.fsencode(resolved)) >= PATH_MAX:
        raise PathTooLong(f"path too long: {resolved}")
    if not resolved.is_dir():
        raise NavigationError(os.strerror(errno.ENOTDIR))
    if not os.access(resolved, os.X_OK):
        raise NavigationError(os.strerror(errno.EACCES))
    return resolved


class DirectoryModel:
    """Owns the current ``DirectoryState`` and every transition between states.

    The state is replaced atomically: a failed navigation leaves the previous
    path, entries, and selection untouched.
    """

    def __init__(self, state: DirectoryState, options: ScanOptions) -> None:
        self._state = state
        self.options = options

    @classmethod
    def open(cls, start: str | Path, options: ScanOptions) -> DirectoryModel:
        """Create a model by navigating from the working directory to ``start``."""
        try:
            cwd = Path.cwd()
        except OSError as exc:
            raise NavigationError(_os_error_message(exc)) from exc
        model = cls(DirectoryState(path=cwd), options)
        model.navigate(start)
        return model

    @property
    def state(self) -> DirectoryState:
        return self._state

    def navigate(self, target: str | Path) -> DirectoryState:
        """Enter ``target`` (relative to the current path unless absolute)."""
        candidate = Path(target)
        if not candidate.is_absolute():
            candidate = self._state.path / candidate
        resolved = resolve_directory(candidate)
        try:
            entries = scan_directory(resolved, self.options)
        except ScanError as exc:
            raise NavigationError(exc.message) from exc
        self._state = DirectoryState(path=resolved, entries=tuple(entries))
        return self._state

    def reload(self) -> DirectoryState:
        """Rescan the current path, keeping the selected name when possible."""
        previous = self._state
        scan_error: str | None = None
        try:
            entries = tuple(scan_directory(previous.path, self.options))
        except ScanError:
            entries = ()
            scan_error = MSG_CANT_SCAN

        selection = previous.selection
        selected_name = previous.selected_name
        if selected_name:
            for idx, entry in enumerate(entries):
                if entry.name == selected_name:
                    selection = idx
                    break

        if entries:
            selection = max(0, min(selection, len(entries) - 1))
        else:
            selection = 0
        self._state = DirectoryState(
            path=previous.path,
            entries=entries,
            selection=selection,
            scan_error=scan_error,
        )
        return self._state

    def select(self, index: int) -> DirectoryState:
        """Move the selection to ``index`` (clamped)."""
        self._state = self._state.with_selection(index)
        return self._state

    def set_show_hidden(self, show_hidden: bool) -> DirectoryState:
        """Toggle hidden-entry visibility and rescan."""
        self.options = replace(self.options, show_hidden=show_hidden)
        return self.reload()
