"""
Story Runtime

StoryRuntime is the object passage templates see as `story`. It owns the
passages, the state store, the event bus and the navigation controller for
one story, and exposes the public query/render API. One runtime is created
per loaded story and lives until the process exits.
"""

import logging
from pathlib import Path
from typing import List, Optional

from lib.story_runtime.config import RuntimeConfig
from lib.story_runtime.errors import InvalidArgument, LookupFailure, UserScriptFailure
from lib.story_runtime.events import EventBus
from lib.story_runtime.navigation import NavigationController
from lib.story_runtime.page import Page
from lib.story_runtime.render import RenderPipeline, unescape_passage_name
from lib.story_runtime.repository import Passage, PassageRepository
from lib.story_runtime.state import StateStore
from lib.story_runtime.story_document import StoryDocument, load_story_file, parse_story_html

logger = logging.getLogger(__name__)


class StoryRuntime:
    """A playable story.

    Attributes:
        name: Story name
        start_passage: Id of the first passage to display
        creator: Program that created the story
        creator_version: Version of that program
        state: StateStore shared by templates and user scripts
        passages: PassageRepository in document order
        user_scripts: Script blocks evaluated by start()
        user_styles: Style blocks appended by start()
        page: Display surface the story renders into
    """

    def __init__(self, document: StoryDocument, page: Optional[Page] = None,
                 config: Optional[RuntimeConfig] = None) -> None:
        self.document = document
        self.name = document.name
        self.start_passage = document.start_passage
        self.creator = document.creator
        self.creator_version = document.creator_version

        self.config = config or RuntimeConfig()
        self.state = StateStore()
        self.passages = PassageRepository.load(document.passages)
        self.user_scripts = list(document.user_scripts)
        self.user_styles = list(document.user_styles)

        self.events = EventBus()
        self.page = page or Page()
        self.pipeline = RenderPipeline(self.state, self.config, globals={'story': self})
        self.navigation = NavigationController(
            self.passages, self.pipeline, self.events, self.page, self.start_passage
        )

        self.page.on_link_click(self.click)
        self.page.on_undo_click(self.undo)

    @classmethod
    def from_html(cls, html_content: str, **kwargs) -> 'StoryRuntime':
        return cls(parse_story_html(html_content), **kwargs)

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> 'StoryRuntime':
        return cls(load_story_file(path), **kwargs)

    @property
    def history(self) -> List[str]:
        return self.navigation.history

    @property
    def current_passage(self) -> Optional[Passage]:
        return self.navigation.current

    def start(self) -> None:
        """Begin playing the story.

        1. Append every user style block to the page
        2. Evaluate every user script against the state store
        3. Display the start passage

        Raises:
            UserScriptFailure: If a user script raises
            StartupFailure: If the start passage id does not exist
        """
        for style in self.user_styles:
            self.page.append_style(style)

        for index, script in enumerate(self.user_scripts):
            try:
                self.pipeline.run_script(script)
            except Exception as e:
                logger.error(f"User script {index} failed: {e}")
                raise UserScriptFailure(e, index) from e

        passage = self.navigation.start(self.start_passage)
        logger.info(f"Started story {self.name!r} at {passage.name!r}")

    # =========================================================================
    # Passage queries
    # =========================================================================

    def get_passages_by_tags(self, tag: str) -> List[Passage]:
        return self.passages.get_by_tag(tag)

    def get_passage_by_id(self, passage_id: int) -> Optional[Passage]:
        return self.passages.get_by_id(passage_id)

    def get_passage_by_name(self, name: str) -> Optional[Passage]:
        return self.passages.get_by_name(name)

    # =========================================================================
    # Rendering and display
    # =========================================================================

    def show(self, name: str) -> None:
        """Replace the displayed passage with the rendered passage `name`.

        Raises:
            LookupFailure: If there is no passage with that name
        """
        self.navigation.show(name)

    def render(self, name: str) -> str:
        """Return the rendered HTML of passage `name` without displaying it.

        Used from templates to embed one passage in another:
        {{ story.render('Footer') }}

        Raises:
            LookupFailure: If there is no passage with that name
        """
        passage = self._require(name)
        return self.pipeline.render(passage)

    def render_to_selector(self, name: str, selector: str) -> None:
        """Render passage `name` into the page region identified by `selector`.

        Raises:
            LookupFailure: If there is no passage with that name
        """
        passage = self._require(name)
        self.page.replace_region(selector, self.pipeline.render(passage))

    def apply_external_styles(self, files: List[str]) -> None:
        """Add one stylesheet link per entry of `files`, in order.

        Raises:
            InvalidArgument: If `files` is not a list
        """
        if not isinstance(files, list):
            raise InvalidArgument('Method only accepts a list!')
        for location in files:
            self.page.append_stylesheet(location)
        logger.debug(f"Applied {len(files)} external stylesheets")

    # =========================================================================
    # Reader input
    # =========================================================================

    def click(self, data_passage: str) -> None:
        """Handle the reader clicking a link carrying `data_passage`."""
        self.navigation.navigate(unescape_passage_name(data_passage))

    def undo(self) -> None:
        """Handle the reader clicking the undo control."""
        self.navigation.undo()

    def _require(self, name: str) -> Passage:
        passage = self.passages.get_by_name(name)
        if passage is None:
            raise LookupFailure(name)
        return passage
