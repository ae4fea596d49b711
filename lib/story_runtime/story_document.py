#!/usr/bin/env python3
"""
Story Document Module

Parses a compiled story (Twine 2 HTML output) into a StoryDocument.

Input: compiled story HTML, or the equivalent JSON document
Output: StoryDocument (story attributes, passage descriptors, user scripts
and user styles)

Usage:
    python3 -m lib.story_runtime.story_document story.html output.json
"""

import sys
import json
import logging
import argparse
from dataclasses import dataclass, field
from html.parser import HTMLParser
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import jsonschema

from lib.story_runtime.errors import StoryFormatError

logger = logging.getLogger(__name__)

SCRIPT_TYPE = 'text/twine-javascript'
STYLE_TYPE = 'text/twine-css'

STORY_DOCUMENT_SCHEMA = {
    'type': 'object',
    'required': ['name', 'startnode', 'passages'],
    'properties': {
        'name': {'type': 'string'},
        'startnode': {'type': ['integer', 'null']},
        'creator': {'type': ['string', 'null']},
        'creator-version': {'type': ['string', 'null']},
        'ifid': {'type': ['string', 'null']},
        'format': {'type': ['string', 'null']},
        'format-version': {'type': ['string', 'null']},
        'passages': {
            'type': 'array',
            'items': {
                'type': 'object',
                'required': ['pid', 'name', 'source'],
                'properties': {
                    'pid': {'type': 'integer'},
                    'name': {'type': 'string'},
                    'tags': {'type': ['string', 'null']},
                    'source': {'type': 'string'},
                },
            },
        },
        'scripts': {'type': 'array', 'items': {'type': 'string'}},
        'styles': {'type': 'array', 'items': {'type': 'string'}},
    },
}


@dataclass
class StoryDocument:
    """Everything the runtime needs from a compiled story."""
    name: str
    start_passage: Optional[int]
    creator: Optional[str] = None
    creator_version: Optional[str] = None
    ifid: Optional[str] = None
    format: Optional[str] = None
    format_version: Optional[str] = None
    passages: List[Dict] = field(default_factory=list)
    user_scripts: List[str] = field(default_factory=list)
    user_styles: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Serialize to the JSON document form accepted by load_story_json()."""
        return {
            'name': self.name,
            'startnode': self.start_passage,
            'creator': self.creator,
            'creator-version': self.creator_version,
            'ifid': self.ifid,
            'format': self.format,
            'format-version': self.format_version,
            'passages': [dict(p) for p in self.passages],
            'scripts': list(self.user_scripts),
            'styles': list(self.user_styles),
        }


# =============================================================================
# HTML PARSING
# =============================================================================

def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class StoryDataParser(HTMLParser):
    """Parse compiled story HTML to extract story data, scripts and styles"""

    def __init__(self) -> None:
        super().__init__()
        self.story_data = None
        self.passages = []
        self.scripts = []
        self.styles = []
        self.current_passage = None
        self.current_data = []
        self.current_block = None

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, str]]) -> None:
        attrs_dict = dict(attrs)

        if self.current_passage is not None:
            # Passage text is normally escaped; keep any literal markup verbatim
            self.current_data.append(self.get_starttag_text())
            return

        if tag == 'tw-storydata':
            self.story_data = attrs_dict
        elif tag == 'tw-passagedata':
            pid = _parse_int(attrs_dict.get('pid'))
            if pid is None:
                raise StoryFormatError(f"Passage {attrs_dict.get('name')!r} has no valid pid")
            self.current_passage = {
                'pid': pid,
                'name': attrs_dict.get('name', ''),
                'tags': attrs_dict.get('tags'),
                'source': '',
            }
            self.current_data = []
        elif tag == 'script' and attrs_dict.get('type') == SCRIPT_TYPE:
            self.current_block = self.scripts
            self.current_data = []
        elif tag == 'style' and attrs_dict.get('type') == STYLE_TYPE:
            self.current_block = self.styles
            self.current_data = []

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, str]]) -> None:
        if self.current_passage is not None:
            self.current_data.append(self.get_starttag_text())
        else:
            self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        if self.current_passage is not None:
            if tag == 'tw-passagedata':
                self.current_passage['source'] = ''.join(self.current_data)
                self.passages.append(self.current_passage)
                self.current_passage = None
                self.current_data = []
            else:
                self.current_data.append(f'</{tag}>')
        elif self.current_block is not None and tag in ('script', 'style'):
            self.current_block.append(''.join(self.current_data))
            self.current_block = None
            self.current_data = []

    def handle_data(self, data: str) -> None:
        if self.current_passage is not None or self.current_block is not None:
            self.current_data.append(data)


def parse_story_html(html_content: str) -> StoryDocument:
    """Parse compiled story HTML.

    Args:
        html_content: Compiled story HTML as a string

    Returns:
        StoryDocument with passages in document order

    Raises:
        StoryFormatError: If there is no tw-storydata element
    """
    parser = StoryDataParser()
    parser.feed(html_content)
    parser.close()

    if parser.story_data is None:
        raise StoryFormatError("No tw-storydata element found in story HTML")

    data = parser.story_data
    document = StoryDocument(
        name=data.get('name', 'Untitled'),
        start_passage=_parse_int(data.get('startnode')),
        creator=data.get('creator'),
        creator_version=data.get('creator-version'),
        ifid=data.get('ifid'),
        format=data.get('format'),
        format_version=data.get('format-version'),
        passages=parser.passages,
        user_scripts=parser.scripts,
        user_styles=parser.styles,
    )

    logger.info(f"Parsed story {document.name!r}: {len(document.passages)} passages, "
                f"{len(document.user_scripts)} scripts, {len(document.user_styles)} styles")
    return document


# =============================================================================
# JSON AND FILE LOADING
# =============================================================================

def load_story_json(data: Dict) -> StoryDocument:
    """Build a StoryDocument from its JSON form.

    Raises:
        StoryFormatError: If `data` does not match STORY_DOCUMENT_SCHEMA
    """
    try:
        jsonschema.validate(data, STORY_DOCUMENT_SCHEMA)
    except jsonschema.ValidationError as e:
        raise StoryFormatError(f"Invalid story document: {e.message}") from e

    return StoryDocument(
        name=data['name'],
        start_passage=data['startnode'],
        creator=data.get('creator'),
        creator_version=data.get('creator-version'),
        ifid=data.get('ifid'),
        format=data.get('format'),
        format_version=data.get('format-version'),
        passages=[dict(p) for p in data['passages']],
        user_scripts=list(data.get('scripts', [])),
        user_styles=list(data.get('styles', [])),
    )


def load_story_file(path: Path) -> StoryDocument:
    """Load a story from a .json file or a compiled .html file."""
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()

    if path.suffix.lower() == '.json':
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StoryFormatError(f"Invalid JSON in {path}: {e}") from e
        return load_story_json(data)

    return parse_story_html(content)


# =============================================================================
# CLI INTERFACE
# =============================================================================

def main():
    """Main entry point for command-line usage."""
    parser = argparse.ArgumentParser(
        description='Convert compiled story HTML into the JSON story document form'
    )
    parser.add_argument('input_html', type=Path, help='Path to compiled story HTML file')
    parser.add_argument('output_json', type=Path, help='Path to output JSON file')

    args = parser.parse_args()

    if not args.input_html.exists():
        print(f"Error: Input file not found: {args.input_html}", file=sys.stderr)
        sys.exit(1)

    document = load_story_file(args.input_html)

    args.output_json.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output_json, 'w', encoding='utf-8') as f:
        json.dump(document.to_dict(), f, indent=2)

    print(f"✓ Parsed {len(document.passages)} passages", file=sys.stderr)
    print(f"✓ Output: {args.output_json}", file=sys.stderr)


if __name__ == '__main__':
    main()
