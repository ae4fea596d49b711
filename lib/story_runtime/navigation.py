"""
Navigation Controller

State machine deciding which passage is displayed. It keeps the navigation
history (a stack of passage names) and reacts to the event bus:

- navigation(name): push name, show the undo control
- undo: pop; once the history is empty, hide the undo control and display
  the start passage again. Pops that leave entries behind change nothing
  on the page.
"""

import logging
from enum import Enum
from typing import List, Optional

from lib.story_runtime.errors import LookupFailure, StartupFailure
from lib.story_runtime.events import EventBus, EventKind
from lib.story_runtime.page import Page
from lib.story_runtime.render import RenderPipeline
from lib.story_runtime.repository import Passage, PassageRepository

logger = logging.getLogger(__name__)


class NavigationState(Enum):
    IDLE = 'idle'
    SHOWING = 'showing'


class NavigationController:
    """Owns the navigation history and the currently displayed passage."""

    def __init__(self, repository: PassageRepository, pipeline: RenderPipeline,
                 events: EventBus, page: Page, start_id: Optional[int] = None) -> None:
        self.repository = repository
        self.pipeline = pipeline
        self.events = events
        self.page = page
        self.start_id = start_id
        self.history: List[str] = []
        self.current: Optional[Passage] = None

        events.subscribe(EventKind.NAVIGATION, self._on_navigation)
        events.subscribe(EventKind.UNDO, self._on_undo)

        # Story starts with the undo control hidden
        page.hide_undo()

    @property
    def state(self) -> NavigationState:
        return NavigationState.IDLE if self.current is None else NavigationState.SHOWING

    def start(self, start_id: Optional[int] = None) -> Passage:
        """Display the start passage.

        Raises:
            StartupFailure: If no passage has the start id
        """
        if start_id is not None:
            self.start_id = start_id
        passage = self._start_passage()
        self._display(passage)
        return passage

    def show(self, name: str) -> Passage:
        """Render and display a passage without touching the history.

        Raises:
            LookupFailure: If no passage has that name
            RenderFailure: If rendering fails (display is left unchanged)
        """
        passage = self._lookup(name)
        self._display(passage)
        return passage

    def navigate(self, name: str) -> Passage:
        """Follow a link to `name`: record it in the history, then display it.

        Raises:
            LookupFailure: If no passage has that name (nothing changes)
        """
        passage = self._lookup(name)
        logger.info(f"Navigating to {name!r}")
        self.events.emit(EventKind.NAVIGATION, name)
        self._display(passage)
        return passage

    def undo(self) -> None:
        self.events.emit(EventKind.UNDO)

    # Event handlers

    def _on_navigation(self, name: str) -> None:
        self.history.append(name)
        if len(self.history) >= 1:
            self.page.show_undo()

    def _on_undo(self) -> None:
        if self.history:
            self.history.pop()
        logger.info(f"Undo, history length now {len(self.history)}")
        if len(self.history) == 0:
            self.page.hide_undo()
            self._display(self._start_passage())

    # Helpers

    def _lookup(self, name: str) -> Passage:
        passage = self.repository.get_by_name(name)
        if passage is None:
            logger.error(f"There is no passage with the name {name}")
            raise LookupFailure(name)
        return passage

    def _start_passage(self) -> Passage:
        passage = self.repository.get_by_id(self.start_id) if self.start_id is not None else None
        if passage is None:
            logger.error(f"Starting passage pid {self.start_id} does not exist")
            raise StartupFailure(f"Starting passage pid {self.start_id} does not exist!")
        return passage

    def _display(self, passage: Passage) -> None:
        html_text = self.pipeline.render(passage)
        self.page.replace_passage(html_text)
        self.current = passage
