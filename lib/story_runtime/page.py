"""
Page

In-memory stand-in for the story's HTML page: the passage region, the undo
control, injected style blocks and stylesheet links, and any other named
regions passages are rendered into. Reader link clicks enter the runtime
through click().
"""

import re
import logging
from typing import Callable, Dict, List, Optional

from lib.story_runtime.render import unescape_passage_name

logger = logging.getLogger(__name__)

DATA_PASSAGE_PATTERN = re.compile(r'<tw-link\b[^>]*\bdata-passage="([^"]*)"')


class Page:
    """Display state of a single story page."""

    def __init__(self) -> None:
        self.passage_html = ''
        self.undo_visible = False
        self.styles: List[str] = []
        self.stylesheets: List[str] = []
        self.regions: Dict[str, str] = {}
        self._click_handler: Optional[Callable[[str], None]] = None
        self._undo_handler: Optional[Callable[[], None]] = None

    # Passage region and named regions

    def replace_passage(self, html_text: str) -> None:
        self.passage_html = html_text

    def replace_region(self, selector: str, html_text: str) -> None:
        self.regions[selector] = html_text

    # Undo control

    def show_undo(self) -> None:
        self.undo_visible = True

    def hide_undo(self) -> None:
        self.undo_visible = False

    # Head elements

    def append_style(self, css: str) -> None:
        self.styles.append(css)

    def append_stylesheet(self, href: str) -> None:
        self.stylesheets.append(href)

    # Reader input

    def on_link_click(self, handler: Callable[[str], None]) -> None:
        self._click_handler = handler

    def on_undo_click(self, handler: Callable[[], None]) -> None:
        self._undo_handler = handler

    def links(self) -> List[str]:
        """Destination passage names of the links currently displayed, in order."""
        return [unescape_passage_name(value) for value in DATA_PASSAGE_PATTERN.findall(self.passage_html)]

    def click(self, data_passage: str) -> None:
        """Simulate the reader clicking a link with the given (escaped) data-passage value."""
        logger.debug(f"Link clicked: {data_passage!r}")
        if self._click_handler is None:
            raise RuntimeError("No link click handler is attached to this page")
        self._click_handler(data_passage)

    def click_undo(self) -> None:
        if self._undo_handler is None:
            raise RuntimeError("No undo handler is attached to this page")
        self._undo_handler()
