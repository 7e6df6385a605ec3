"""Key-driven navigation state machine.

Modes: ``browsing`` (initial), ``prompting`` (a transient message is on the
status line until the next key), and ``searching`` (typed characters jump to
the first entry whose name starts with the query). Every handled key reports
how much of the screen must be redrawn instead of setting a shared flag.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..directory_model import DirectoryModel
from ..errors import ChildLaunchFailure, NavigationError
from ..input import KeyBinding, KeyRegistry
from ..launcher import LaunchCommands, child_environment
from ..layout import LayoutResult
from ..render import StatusLine
from .selection import first_prefix_match, move_down, move_left, move_right, move_up

MODE_BROWSING = "browsing"
MODE_PROMPTING = "prompting"
MODE_SEARCHING = "searching"

REDRAW_NONE = "none"
REDRAW_STATUS = "status"
REDRAW_INCREMENTAL = "incremental"
REDRAW_FULL = "full"
_REDRAW_ORDER = {REDRAW_NONE: 0, REDRAW_STATUS: 1, REDRAW_INCREMENTAL: 2, REDRAW_FULL: 3}

ARROW_KEYS = frozenset({"UP", "DOWN", "LEFT", "RIGHT"})

RunExternal = Callable[[Sequence[str], Path | None, Mapping[str, str], Path], int]


@dataclass(frozen=True)
class KeyOutcome:
    """Result of one key: the redraw it requires and whether to quit."""

    redraw: str = REDRAW_NONE
    quit: bool = False

    def merged(self, redraw: str) -> KeyOutcome:
        if _REDRAW_ORDER[redraw] <= _REDRAW_ORDER[self.redraw]:
            return self
        return KeyOutcome(redraw=redraw, quit=self.quit)


class NavigationController:
    """Translate key tokens into directory-model mutations."""

    def __init__(
        self,
        model: DirectoryModel,
        commands: LaunchCommands,
        run_external: RunExternal,
    ) -> None:
        self.model = model
        self.commands = commands
        self._run_external = run_external
        self.mode = MODE_BROWSING
        self.message = ""
        self.message_is_error = False
        self.search_query = ""
        self._search_origin = 0
        self._layout: LayoutResult | None = None
        self._registry: KeyRegistry[KeyOutcome] = KeyRegistry().bind(
            KeyBinding(("UP", "k"), lambda: self._move(move_up)),
            KeyBinding(("DOWN", "j"), lambda: self._move(move_down)),
            KeyBinding(("LEFT", "h"), lambda: self._move_horizontal(move_left)),
            KeyBinding(("RIGHT", "l"), lambda: self._move_horizontal(move_right)),
            KeyBinding(("ENTER",), self.enter_selected),
            KeyBinding(("BACKSPACE",), self.enter_parent),
            KeyBinding(("r",), self.reload),
            KeyBinding((".",), self.toggle_hidden),
            KeyBinding(("e",), self.edit_selected),
            KeyBinding(("o",), self.open_selected),
            KeyBinding(("x",), self.execute_selected),
            KeyBinding(("s",), self.spawn_shell),
            KeyBinding(("/",), self.start_search),
            KeyBinding(("q",), lambda: KeyOutcome(quit=True)),
        )

    def status_line(self) -> StatusLine:
        if self.mode == MODE_SEARCHING:
            return StatusLine(search_query=self.search_query)
        return StatusLine(message=self.message, is_error=self.message_is_error)

    def set_message(self, message: str, error: bool = False) -> None:
        self.message = message
        self.message_is_error = error
        self.mode = MODE_PROMPTING

    def clear_message(self) -> None:
        self.message = ""
        self.message_is_error = False
        if self.mode == MODE_PROMPTING:
            self.mode = MODE_BROWSING

    def handle_key(self, key: str, layout: LayoutResult) -> KeyOutcome:
        """Process one key token against the layout currently on screen."""
        self._layout = layout
        pending = REDRAW_NONE
        if self.mode == MODE_PROMPTING:
            self.clear_message()
            pending = REDRAW_STATUS
        if key == "F10":
            return KeyOutcome(quit=True)
        if self.mode == MODE_SEARCHING:
            outcome = self._handle_search_key(key)
        else:
            outcome = self._registry.dispatch(key) or KeyOutcome()
        return outcome.merged(pending)

    def _select(self, index: int) -> KeyOutcome:
        if index == self.model.state.selection:
            return KeyOutcome()
        self.model.select(index)
        return KeyOutcome(REDRAW_INCREMENTAL)

    def _move(self, mover: Callable[[int, int, int], int]) -> KeyOutcome:
        state = self.model.state
        if not state.entries or self._layout is None:
            return KeyOutcome()
        return self._select(mover(state.selection, len(state.entries), self._layout.column_count))

    def _move_horizontal(self, mover: Callable[[int, int, int, bool], int]) -> KeyOutcome:
        state = self.model.state
        if not state.entries or self._layout is None:
            return KeyOutcome()
        layout = self._layout
        return self._select(
            mover(state.selection, len(state.entries), layout.column_count, layout.formatted)
        )

    def _navigate(self, target: str | Path) -> KeyOutcome:
        try:
            self.model.navigate(target)
        except NavigationError as exc:
            self.set_message(exc.message, error=True)
            return KeyOutcome(REDRAW_STATUS)
        return KeyOutcome(REDRAW_FULL)

    def enter_selected(self) -> KeyOutcome:
        entry = self.model.state.selected_entry
        if entry is None:
            return KeyOutcome()
        return self._navigate(entry.name)

    def enter_parent(self) -> KeyOutcome:
        return self._navigate("..")

    def reload(self) -> KeyOutcome:
        self.model.reload()
        return KeyOutcome(REDRAW_FULL)

    def toggle_hidden(self) -> KeyOutcome:
        show_hidden = not self.model.options.show_hidden
        self.model.set_show_hidden(show_hidden)
        self.set_message("showing hidden files" if show_hidden else "hiding hidden files")
        return KeyOutcome(REDRAW_FULL)

    def _launch(self, program: Sequence[str], arg_path: Path | None) -> KeyOutcome:
        state = self.model.state
        env = child_environment(state.selected_name)
        try:
            status = self._run_external(program, arg_path, env, state.path)
        except ChildLaunchFailure as exc:
            self.set_message(exc.message, error=True)
        else:
            if status != 0:
                self.set_message(f"{program[0]} exited with status {status}", error=True)
        # The child may have changed the directory as well as the terminal.
        self.model.reload()
        return KeyOutcome(REDRAW_FULL)

    def _selected_path(self) -> Path | None:
        state = self.model.state
        entry = state.selected_entry
        if entry is None:
            return None
        return state.path / entry.name

    def edit_selected(self) -> KeyOutcome:
        path = self._selected_path()
        if path is None:
            return KeyOutcome()
        return self._launch(self.commands.editor, path)

    def open_selected(self) -> KeyOutcome:
        path = self._selected_path()
        if path is None:
            return KeyOutcome()
        if self.commands.opener is None:
            self.set_message("no opener available on this platform", error=True)
            return KeyOutcome(REDRAW_STATUS)
        return self._launch(self.commands.opener, path)

    def execute_selected(self) -> KeyOutcome:
        path = self._selected_path()
        if path is None:
            return KeyOutcome()
        return self._launch((str(path),), None)

    def spawn_shell(self) -> KeyOutcome:
        return self._launch(self.commands.shell, None)

    def start_search(self) -> KeyOutcome:
        self.mode = MODE_SEARCHING
        self.search_query = ""
        self._search_origin = self.model.state.selection
        return KeyOutcome(REDRAW_STATUS)

    def _finish_search(self) -> None:
        self.mode = MODE_BROWSING
        self.search_query = ""

    def _jump_to_query(self) -> KeyOutcome:
        names = [entry.name for entry in self.model.state.entries]
        match = first_prefix_match(names, self.search_query)
        outcome = KeyOutcome() if match is None else self._select(match)
        return outcome.merged(REDRAW_STATUS)

    def _handle_search_key(self, key: str) -> KeyOutcome:
        if key == "ESC":
            self._finish_search()
            return self._select(self._search_origin).merged(REDRAW_STATUS)
        if key == "ENTER":
            self._finish_search()
            return KeyOutcome(REDRAW_STATUS)
        if key in ARROW_KEYS:
            self._finish_search()
            outcome = self._registry.dispatch(key) or KeyOutcome()
            return outcome.merged(REDRAW_STATUS)
        if key == "BACKSPACE":
            self.search_query = self.search_query[:-1]
            return self._jump_to_query()
        if len(key) == 1 and key.isprintable():
            self.search_query += key
            return self._jump_to_query()
        return KeyOutcome()
