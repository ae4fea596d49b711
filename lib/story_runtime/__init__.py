"""
Story Runtime Library

Runtime core for playing Twine stories compiled to HTML: loads the story
document, renders passages, tracks story state and reader navigation.

Modules:
- story_document: Parse compiled story HTML (or JSON) into a StoryDocument
- repository: Passage records and lookup by id, name and tag
- config: RuntimeConfig and STORY_RUNTIME_* environment settings
- errors: Exception hierarchy
- state: Observable key/value store shared by templates and user scripts
- events: Synchronous event bus for navigation and undo
- render: Template -> Markdown -> link annotation pipeline
- page: In-memory display surface (passage region, undo control, styles)
- navigation: Navigation history and undo state machine
- story: StoryRuntime, the public API tying everything together
- cli: Command-line reader
"""

__version__ = "1.0.0"
