"""Keyed callback registry with explicit unsubscribe handles."""

from __future__ import annotations

from typing import Any, Callable, Hashable


class Registry:
    """Ordered callbacks grouped by key.

    ``watch`` returns an unwatch callable that removes exactly that
    registration; calling it again does nothing.
    """

    def __init__(self) -> None:
        self._watchers: dict[Hashable, list[Callable[..., Any]]] = {}

    def watch(self, key: Hashable, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register callback under key. Returns an unwatch callable."""
        entries = self._watchers.setdefault(key, [])
        entries.append(callback)
        removed = False

        def unwatch() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            entries = self._watchers.get(key, [])
            for i, cb in enumerate(entries):
                if cb is callback:
                    del entries[i]
                    break
            if not entries:
                self._watchers.pop(key, None)

        return unwatch

    def emit(self, key: Hashable, *args: Any) -> None:
        """Call every callback under key, in registration order."""
        for cb in list(self._watchers.get(key, ())):
            cb(*args)

    def keys(self) -> list[Hashable]:
        return list(self._watchers.keys())
