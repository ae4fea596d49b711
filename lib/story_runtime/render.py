"""
Render Pipeline

Turns a passage's source into HTML in three stages:

1. Expression evaluation: the source is a Jinja2 template evaluated with the
   story state (`s`), the passage being rendered (`passage`) and any runtime
   globals (normally `story`) in scope.
2. Markup transformation: Markdown to HTML with Python-Markdown. The text of
   [[...]] links is passed through untouched.
3. Link annotation: [[...]] links become <tw-link> elements whose
   data-passage attribute holds the escaped destination name.

Any failure raises RenderFailure; nothing is returned for a failed render.
"""

import re
import html
import logging
from typing import Any, Dict, Optional, Tuple

import markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from jinja2 import Environment, StrictUndefined, Undefined

from lib.story_runtime.config import RuntimeConfig
from lib.story_runtime.errors import RenderFailure
from lib.story_runtime.repository import Passage
from lib.story_runtime.state import StateStore

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r'\[\[((?:[^\]]|\](?!\]))+)\]\]')

# Runs before backtick (190) and emphasis patterns
LINK_PRIORITY = 200

STAGE_EVALUATE = 'expression evaluation'
STAGE_MARKUP = 'markup transformation'
STAGE_LINKS = 'link annotation'


# =============================================================================
# PASSAGE NAME ESCAPING
# =============================================================================

def escape_passage_name(name: str) -> str:
    """Escape a passage name for use inside an HTML attribute."""
    return html.escape(name, quote=True)


def unescape_passage_name(value: str) -> str:
    """Inverse of escape_passage_name()."""
    return html.unescape(value)


# =============================================================================
# LINK PARSING
# =============================================================================

def split_link(link_text: str) -> Tuple[str, str]:
    """Split the inside of a [[...]] link into (display, target).

    Supports the Twine link formats, checked in this order:
    - [[display|target]] (rightmost '|')
    - [[display->target]] (rightmost '->')
    - [[target<-display]] (leftmost '<-')
    - [[target]]

    Args:
        link_text: Link text without the surrounding brackets, as written

    Returns:
        Tuple of (display, target)
    """
    if '|' in link_text:
        display, target = link_text.rsplit('|', 1)
        return display, target

    arrow = link_text.rfind('->')
    if arrow != -1:
        return link_text[:arrow], link_text[arrow + 2:]

    arrow = link_text.find('<-')
    if arrow != -1:
        return link_text[arrow + 2:], link_text[:arrow]

    return link_text, link_text


def annotate_links(html_text: str) -> str:
    """Rewrite [[...]] links in rendered HTML into <tw-link> elements."""
    def replace(match):
        display, target = split_link(match.group(1))
        return (
            f'<tw-link role="link" data-passage="{escape_passage_name(target.strip())}">'
            f'{display.strip()}</tw-link>'
        )

    return LINK_PATTERN.sub(replace, html_text)


class LinkPassthroughProcessor(InlineProcessor):
    """Stash [[...]] links so Markdown leaves their text as written."""

    def handleMatch(self, m, data):
        return self.md.htmlStash.store(m.group(0)), m.start(0), m.end(0)


class LinkPassthroughExtension(Extension):
    """Keeps link text out of Markdown's inline processing."""

    def extendMarkdown(self, md):
        md.inlinePatterns.register(
            LinkPassthroughProcessor(LINK_PATTERN.pattern, md), 'passage_link', LINK_PRIORITY
        )


# =============================================================================
# PIPELINE
# =============================================================================

def _finalize(value: Any) -> Any:
    # Expressions that only write state, like {{ s.set('x', 1) }}, print nothing
    return '' if value is None else value


class StoryEnvironment(Environment):
    """Jinja2 environment where s.<key> reads a stored key before any store method."""

    def getattr(self, obj, attribute):
        if isinstance(obj, StateStore) and attribute in obj:
            return obj[attribute]
        return super().getattr(obj, attribute)


class RenderPipeline:
    """Renders passage sources against a StateStore."""

    def __init__(self, state: StateStore, config: Optional[RuntimeConfig] = None,
                 globals: Optional[Dict[str, Any]] = None) -> None:
        self.state = state
        self.config = config or RuntimeConfig()
        self.env = StoryEnvironment(
            autoescape=False,
            undefined=StrictUndefined if self.config.strict_undefined else Undefined,
            extensions=['jinja2.ext.do'],
            finalize=_finalize,
        )
        self.env.globals['s'] = state
        if globals:
            self.env.globals.update(globals)
        self._templates = {}

    def _template(self, source: str):
        template = self._templates.get(source)
        if template is None:
            template = self.env.from_string(source)
            self._templates[source] = template
        return template

    def evaluate(self, source: str, **context: Any) -> str:
        """Stage 1: evaluate embedded expressions, returning the substituted text."""
        return self._template(source).render(**context)

    def to_html(self, text: str) -> str:
        """Stage 2: convert Markdown text to HTML, leaving [[...]] links as written."""
        extensions = list(self.config.markdown_extensions) + [LinkPassthroughExtension()]
        return markdown.markdown(text, extensions=extensions)

    def render_source(self, source: str, passage_name: Optional[str] = None, **context: Any) -> str:
        """Run all three stages over `source`.

        Raises:
            RenderFailure: If any stage raises
        """
        stage = STAGE_EVALUATE
        try:
            text = self.evaluate(source, **context)
            stage = STAGE_MARKUP
            html_text = self.to_html(text)
            stage = STAGE_LINKS
            return annotate_links(html_text)
        except RenderFailure:
            # Nested render from inside a template already reported itself
            raise
        except Exception as e:
            logger.error(f"Render of {passage_name!r} failed during {stage}: {e}")
            raise RenderFailure(stage, e, passage_name) from e

    def render(self, passage: Passage) -> str:
        """Render a passage to HTML."""
        logger.debug(f"Rendering passage {passage.name!r}")
        return self.render_source(passage.source, passage_name=passage.name, passage=passage)

    def run_script(self, script: str) -> None:
        """Evaluate a user script for its effect on state; output is discarded."""
        self.evaluate(script)
