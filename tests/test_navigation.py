#!/usr/bin/env python3
"""
Tests for lib/story_runtime/navigation.py

Covers the navigation history, the undo control and the undo quirk where
only the pop that empties the history changes the page.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lib.story_runtime.errors import LookupFailure, RenderFailure, StartupFailure
from lib.story_runtime.events import EventBus, EventKind
from lib.story_runtime.navigation import NavigationController, NavigationState
from lib.story_runtime.page import Page
from lib.story_runtime.render import RenderPipeline
from lib.story_runtime.repository import PassageRepository
from lib.story_runtime.state import StateStore


ENTRIES = [
    {'pid': 1, 'name': 'Start', 'tags': None, 'source': 'Hello [[Go->Next]]'},
    {'pid': 2, 'name': 'Next', 'tags': 'chapter', 'source': 'You arrived. [[Onward->Hall]]'},
    {'pid': 3, 'name': 'Hall', 'tags': None, 'source': 'A long hall.'},
    {'pid': 4, 'name': 'Broken', 'tags': None, 'source': '{{ 1 / 0 }}'},
]


def make_controller(start_id=1):
    repository = PassageRepository.load(ENTRIES)
    pipeline = RenderPipeline(StateStore())
    events = EventBus()
    page = Page()
    controller = NavigationController(repository, pipeline, events, page, start_id)
    return controller, pipeline, events, page


def rendered(pipeline, controller, name):
    return pipeline.render(controller.repository.get_by_name(name))


def test_starts_idle_with_undo_hidden():
    """Test a new controller shows nothing and hides undo."""
    controller, _, _, page = make_controller()

    assert controller.state is NavigationState.IDLE
    assert controller.current is None
    assert page.undo_visible is False
    assert controller.history == []


def test_start_displays_start_passage():
    """Test start() renders the passage with the start id."""
    controller, pipeline, _, page = make_controller()

    controller.start()

    assert controller.state is NavigationState.SHOWING
    assert controller.current.name == 'Start'
    assert page.passage_html == rendered(pipeline, controller, 'Start')
    assert page.links() == ['Next']
    assert controller.history == []


def test_start_missing_passage():
    """Test a missing start id is a StartupFailure and stays idle."""
    controller, _, _, page = make_controller(start_id=42)

    with pytest.raises(StartupFailure):
        controller.start()

    assert controller.state is NavigationState.IDLE
    assert page.passage_html == ''


def test_navigate_updates_history_and_page():
    """Test each navigation pushes one name, shows undo and displays the passage."""
    controller, pipeline, _, page = make_controller()
    controller.start()

    controller.navigate('Next')

    assert controller.history == ['Next']
    assert page.undo_visible is True
    assert controller.current.name == 'Next'
    assert page.passage_html == rendered(pipeline, controller, 'Next')


def test_history_grows_by_one_per_navigation():
    """Test N navigations from empty history give length N."""
    controller, _, _, _ = make_controller()
    controller.start()

    names = ['Next', 'Hall', 'Start', 'Next', 'Next']
    for count, name in enumerate(names, 1):
        controller.navigate(name)
        assert len(controller.history) == count

    assert controller.history == names


def test_navigate_missing_changes_nothing():
    """Test navigating to an unknown passage raises and leaves state alone."""
    controller, _, events, page = make_controller()
    controller.start()
    emitted = []
    events.subscribe(EventKind.NAVIGATION, emitted.append)
    before = page.passage_html

    with pytest.raises(LookupFailure) as excinfo:
        controller.navigate('Missing')

    assert excinfo.value.name == 'Missing'
    assert emitted == []
    assert controller.history == []
    assert page.passage_html == before
    assert controller.current.name == 'Start'


def test_navigation_emits_before_display():
    """Test listeners see the navigation event before the page changes."""
    controller, _, events, page = make_controller()
    controller.start()
    seen = []
    events.subscribe(EventKind.NAVIGATION, lambda name: seen.append((name, page.passage_html)))
    start_html = page.passage_html

    controller.navigate('Next')

    assert seen == [('Next', start_html)]


def test_undo_to_empty_resets_to_start():
    """Test the undo that empties history shows the start passage and hides undo."""
    controller, pipeline, _, page = make_controller()
    controller.start()
    controller.navigate('Next')

    controller.undo()

    assert controller.history == []
    assert page.undo_visible is False
    assert controller.current.name == 'Start'
    assert page.passage_html == rendered(pipeline, controller, 'Start')


def test_intermediate_undo_leaves_page_unchanged():
    """Test an undo that leaves entries in the history changes nothing displayed."""
    controller, _, _, page = make_controller()
    controller.start()
    controller.navigate('Next')
    controller.navigate('Hall')
    before = page.passage_html

    controller.undo()

    assert controller.history == ['Next']
    assert page.passage_html == before
    assert page.undo_visible is True
    assert controller.current.name == 'Hall'


def test_undo_via_event_bus():
    """Test emitting undo on the bus is the same as calling undo()."""
    controller, _, events, page = make_controller()
    controller.start()
    controller.navigate('Hall')

    events.emit(EventKind.UNDO)

    assert controller.history == []
    assert controller.current.name == 'Start'


def test_undo_with_empty_history_redisplays_start():
    """Test undo with nothing to pop still resets to the start passage."""
    controller, pipeline, _, page = make_controller()
    controller.start()
    controller.show('Hall')

    controller.undo()

    assert controller.history == []
    assert page.passage_html == rendered(pipeline, controller, 'Start')


def test_show_does_not_touch_history():
    """Test show() displays a passage without recording it."""
    controller, _, _, page = make_controller()
    controller.start()

    controller.show('Hall')

    assert controller.history == []
    assert page.undo_visible is False
    assert controller.current.name == 'Hall'


def test_failed_render_keeps_previous_page():
    """Test a render failure displays no partial output."""
    controller, _, _, page = make_controller()
    controller.start()
    before = page.passage_html

    with pytest.raises(RenderFailure):
        controller.show('Broken')

    assert page.passage_html == before
    assert controller.current.name == 'Start'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
