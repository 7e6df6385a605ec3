"""Error taxonomy shared by the directory model, terminal session, and launcher.

Recoverable errors end up as status-line text; ``PathTooLong`` is fatal and
unwinds through the raw-mode context before ``cli.main`` reports it.
"""

from __future__ import annotations


class PeekError(Exception):
    """Base class for browser errors carrying a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ScanError(PeekError):
    """Directory exists but could not be opened or read."""


class NavigationError(PeekError):
    """Target directory could not be resolved, entered, or listed."""


class PathTooLong(PeekError):
    """Resolved directory path exceeds the supported path-length ceiling."""


class ChildLaunchFailure(PeekError):
    """External program could not be started."""


class MalformedTerminalReply(PeekError):
    """Unexpected byte while scanning a cursor-position report."""
