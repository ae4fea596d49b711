#!/usr/bin/env python3
"""
Story Runtime CLI

Renders passages of a compiled story, or plays it in the terminal.

Usage:
    story-runtime story.html                   # print the start passage
    story-runtime story.html --passage Cellar  # print one passage
    story-runtime story.html --play            # interactive reader
"""

import sys
import logging
import argparse
from html.parser import HTMLParser
from pathlib import Path
from typing import List, Optional

from lib.story_runtime.config import RuntimeConfig
from lib.story_runtime.errors import StoryRuntimeError
from lib.story_runtime.render import escape_passage_name
from lib.story_runtime.story import StoryRuntime

# Exit codes
EXIT_SUCCESS = 0
EXIT_STORY_ERROR = 1
EXIT_FILE_ERROR = 2

BLOCK_TAGS = {'p', 'div', 'br', 'li', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'tr', 'pre'}


class TextExtractor(HTMLParser):
    """Reduce rendered passage HTML to readable terminal text."""

    def __init__(self) -> None:
        super().__init__()
        self.parts = []

    def handle_starttag(self, tag, attrs):
        if tag in BLOCK_TAGS:
            self.parts.append('\n')

    def handle_endtag(self, tag):
        if tag in BLOCK_TAGS:
            self.parts.append('\n')

    def handle_data(self, data):
        self.parts.append(data)

    def text(self) -> str:
        lines = [line.strip() for line in ''.join(self.parts).splitlines()]
        return '\n'.join(line for line in lines if line)


def html_to_text(html_text: str) -> str:
    extractor = TextExtractor()
    extractor.feed(html_text)
    extractor.close()
    return extractor.text()


def play(story: StoryRuntime, input_func=input, output=sys.stdout) -> None:
    """Interactive loop: pick links by number, 'u' to undo, 'q' to quit."""
    story.start()
    while True:
        print(html_to_text(story.page.passage_html), file=output)
        links = story.page.links()
        for number, name in enumerate(links, 1):
            print(f"  {number}. {name}", file=output)
        if story.page.undo_visible:
            print("  u. Undo", file=output)

        try:
            choice = input_func('> ').strip().lower()
        except EOFError:
            return

        if choice in ('q', 'quit'):
            return
        if choice == 'u' and story.page.undo_visible:
            story.page.click_undo()
        elif choice.isdigit() and 1 <= int(choice) <= len(links):
            story.page.click(escape_passage_name(links[int(choice) - 1]))
        else:
            print("Unknown choice", file=output)
        print(file=output)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for command-line usage."""
    config = RuntimeConfig.from_env()

    parser = argparse.ArgumentParser(description='Render or play a compiled Twine story')
    parser.add_argument('story', type=Path, help='Path to compiled story HTML (or JSON) file')
    parser.add_argument('--passage', help='Print the rendered HTML of this passage')
    parser.add_argument('--play', action='store_true', help='Play the story interactively')
    parser.add_argument('--log-level', default=config.log_level, help='Logging level (default: %(default)s)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if not args.story.exists():
        print(f"Error: Story file not found: {args.story}", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        story = StoryRuntime.from_file(args.story, config=config)
        if args.play:
            play(story)
        elif args.passage:
            print(story.render(args.passage))
        else:
            story.start()
            print(story.page.passage_html)
    except StoryRuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_STORY_ERROR
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())
