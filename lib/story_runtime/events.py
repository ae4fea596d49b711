"""
Event Bus

Synchronous publish/subscribe for the two runtime signals. Listeners run
in subscription order; an emit made from inside a listener runs to
completion before the outer emit continues.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Closed set of runtime events."""
    NAVIGATION = 'navigation'  # payload: destination passage name
    UNDO = 'undo'  # no payload


Listener = Callable[..., None]


class EventBus:
    """Synchronous dispatcher for navigation and undo events."""

    def __init__(self) -> None:
        self._listeners: Dict[EventKind, List[Listener]] = {kind: [] for kind in EventKind}

    def subscribe(self, kind: EventKind, listener: Listener) -> None:
        self._listeners[self._check(kind)].append(listener)

    def unsubscribe(self, kind: EventKind, listener: Listener) -> None:
        listeners = self._listeners[self._check(kind)]
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, kind: EventKind, payload: Any = None) -> None:
        """Call every listener for `kind`, returning once all have finished.

        NAVIGATION listeners receive the payload; UNDO listeners are called
        with no arguments.
        """
        kind = self._check(kind)
        logger.debug(f"emit {kind.value} {payload!r}")
        for listener in list(self._listeners[kind]):
            if kind is EventKind.UNDO:
                listener()
            else:
                listener(payload)

    @staticmethod
    def _check(kind: Any) -> EventKind:
        if not isinstance(kind, EventKind):
            raise TypeError(f"Unknown event kind: {kind!r}")
        return kind
