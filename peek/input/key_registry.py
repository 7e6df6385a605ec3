"""Key-token dispatch table used by the navigation controller."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

ResultT = TypeVar("ResultT")


def fold_letter_case(key: str) -> str:
    """Treat single-character keys case-insensitively; named tokens as-is."""
    return key.lower() if len(key) == 1 else key


@dataclass(frozen=True)
class KeyBinding(Generic[ResultT]):
    """Mapping from one or more key tokens to a single action callback."""

    keys: tuple[str, ...]
    action: Callable[[], ResultT]


class KeyRegistry(Generic[ResultT]):
    """Small key-dispatch table with a key normalization strategy."""

    def __init__(self, normalize: Callable[[str], str] = fold_letter_case) -> None:
        self._normalize = normalize
        self._actions: dict[str, Callable[[], ResultT]] = {}

    def bind(self, *bindings: KeyBinding[ResultT]) -> KeyRegistry[ResultT]:
        """Register bindings, overwriting earlier actions for the same keys."""
        for binding in bindings:
            for key in binding.keys:
                self._actions[self._normalize(key)] = binding.action
        return self

    def dispatch(self, key: str) -> ResultT | None:
        """Invoke the action bound to ``key``; ``None`` when unbound."""
        action = self._actions.get(self._normalize(key))
        if action is None:
            return None
        return action()
