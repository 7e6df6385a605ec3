"""Main interactive loop and browser bootstrap.

One key is fully processed (state change, optional rescan, optional layout,
redraw) before the next is read. Reads poll with a short timeout so terminal
resizes are noticed and redrawn without waiting for a keypress.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..directory_model import DirectoryModel, DirectoryState
from ..launcher import launch, resolve_launch_commands
from ..layout import LayoutResult, compute_layout
from ..render import Renderer
from ..ui_theme import resolve_theme
from .config import BrowserConfig
from .navigation import (
    REDRAW_FULL,
    REDRAW_INCREMENTAL,
    REDRAW_NONE,
    REDRAW_STATUS,
    NavigationController,
)
from .terminal import TerminalSession

POLL_TIMEOUT_MS = 120


def layout_for(state: DirectoryState, term_rows: int, term_columns: int) -> LayoutResult:
    """Compute the layout of ``state`` for a terminal of the given size."""
    return compute_layout(
        [entry.cell_width for entry in state.entries],
        term_columns,
        term_rows,
        selection=state.selection,
    )


def run_main_loop(
    session: TerminalSession,
    renderer: Renderer,
    controller: NavigationController,
) -> None:
    """Run until a quit key, end of input, or interrupt.

    A full redraw happens whenever the listing was rescanned, the terminal
    size changed, or the selection left the visible page; otherwise selection
    moves repaint incrementally.
    """
    model = controller.model
    layout: LayoutResult | None = None
    redraw = REDRAW_FULL
    try:
        while True:
            if session.refresh_size():
                redraw = REDRAW_FULL
            state = model.state
            rows, columns = session.last_known_size

            needs_layout = (
                layout is None
                or redraw == REDRAW_FULL
                or (state.entries and not layout.contains(state.selection))
            )
            if needs_layout:
                next_layout = layout_for(state, rows, columns)
                if next_layout != layout:
                    redraw = REDRAW_FULL
                layout = next_layout

            status = controller.status_line()
            if redraw == REDRAW_FULL:
                renderer.full_redraw(state, layout, status)
            elif redraw == REDRAW_INCREMENTAL:
                renderer.incremental_redraw(state, layout, status)
            elif redraw == REDRAW_STATUS:
                renderer.draw_status(state, status)
            redraw = REDRAW_NONE

            key = session.reader.read_key(timeout_ms=POLL_TIMEOUT_MS)
            if key == "":
                continue
            if key == "EOF":
                return
            outcome = controller.handle_key(key, layout)
            if outcome.quit:
                return
            redraw = outcome.redraw
    except (KeyboardInterrupt, EOFError):
        return


def run_browser(
    config: BrowserConfig,
    start: str | Path,
    stdin_fd: int | None = None,
    stdout_fd: int | None = None,
) -> None:
    """Open ``start`` and browse it interactively until the user quits.

    Raises ``NavigationError`` before touching the terminal when ``start``
    cannot be listed.
    """
    model = DirectoryModel.open(start, config.scan_options())
    if stdin_fd is None:
        stdin_fd = sys.stdin.fileno()
    if stdout_fd is None:
        sys.stdout.flush()
        stdout_fd = sys.stdout.fileno()

    session = TerminalSession(stdin_fd, stdout_fd)
    renderer = Renderer(
        session,
        resolve_theme(no_color=not config.color),
        show_directory=config.show_directory,
        show_escapes=config.show_escapes,
    )

    def run_external(
        program: Sequence[str],
        arg_path: Path | None,
        env_overrides: Mapping[str, str],
        cwd: Path,
    ) -> int:
        renderer.clear()
        with session.suspended():
            return launch(program, arg_path, env_overrides, cwd)

    controller = NavigationController(
        model,
        resolve_launch_commands(config.editor, config.opener, config.shell),
        run_external,
    )
    with session.raw_mode():
        try:
            run_main_loop(session, renderer, controller)
        finally:
            renderer.release(clear=config.clear_on_exit)
