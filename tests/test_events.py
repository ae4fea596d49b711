#!/usr/bin/env python3
"""
Tests for lib/story_runtime/events.py
"""

import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lib.story_runtime.events import EventBus, EventKind


def test_emit_calls_listeners_in_order():
    """Test listeners run in subscription order with the payload."""
    bus = EventBus()
    calls = []
    bus.subscribe(EventKind.NAVIGATION, lambda name: calls.append(('a', name)))
    bus.subscribe(EventKind.NAVIGATION, lambda name: calls.append(('b', name)))

    bus.emit(EventKind.NAVIGATION, 'Next')

    assert calls == [('a', 'Next'), ('b', 'Next')]


def test_undo_listeners_take_no_payload():
    """Test undo listeners are called without arguments."""
    bus = EventBus()
    calls = []
    bus.subscribe(EventKind.UNDO, lambda: calls.append('undo'))

    bus.emit(EventKind.UNDO)

    assert calls == ['undo']


def test_events_are_separate():
    """Test emitting one kind does not reach the other kind's listeners."""
    bus = EventBus()
    calls = []
    bus.subscribe(EventKind.UNDO, lambda: calls.append('undo'))

    bus.emit(EventKind.NAVIGATION, 'Next')

    assert calls == []


def test_reentrant_emit_completes_first():
    """Test a nested emit runs to completion before remaining outer listeners."""
    bus = EventBus()
    calls = []

    def first(name):
        calls.append('first')
        bus.emit(EventKind.UNDO)

    bus.subscribe(EventKind.NAVIGATION, first)
    bus.subscribe(EventKind.NAVIGATION, lambda name: calls.append('second'))
    bus.subscribe(EventKind.UNDO, lambda: calls.append('undo'))

    bus.emit(EventKind.NAVIGATION, 'Next')

    assert calls == ['first', 'undo', 'second']


def test_unsubscribe():
    """Test an unsubscribed listener is no longer called."""
    bus = EventBus()
    calls = []

    def listener(name):
        calls.append(name)

    bus.subscribe(EventKind.NAVIGATION, listener)
    bus.emit(EventKind.NAVIGATION, 'A')
    bus.unsubscribe(EventKind.NAVIGATION, listener)
    bus.emit(EventKind.NAVIGATION, 'B')

    assert calls == ['A']


def test_unknown_event_kind():
    """Test string event names are rejected."""
    bus = EventBus()

    with pytest.raises(TypeError):
        bus.emit('navigation', 'Next')
    with pytest.raises(TypeError):
        bus.subscribe('navigaton', lambda name: None)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
