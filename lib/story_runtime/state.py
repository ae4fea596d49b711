"""
State Store

The mutable key/value bag exposed to passage templates (as `s`) and to
user scripts. Every top-level assignment notifies subscribers with
(key, value); mutating a stored value in place does not.
"""

from collections.abc import MutableMapping
from typing import Any, Callable, Dict, Iterator, List, Optional

StateListener = Callable[[str, Any], None]


class StateStore(MutableMapping):
    """Observable mapping from string keys to arbitrary values."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self._listeners: List[StateListener] = []

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store `value` under `key` and notify subscribers."""
        self._data[key] = value
        self._notify(key, value)

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        """Remove a listener; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, key: str, value: Any) -> None:
        # Listeners may subscribe/unsubscribe while being notified
        for listener in list(self._listeners):
            listener(key, value)

    # Mapping protocol, so templates can use s.key, s['key'] and s.update()

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"StateStore({self._data!r})"
