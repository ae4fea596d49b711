"""Exceptions raised by the story runtime."""

from typing import Optional


class StoryRuntimeError(Exception):
    """Base class for all story runtime errors."""


class LookupFailure(StoryRuntimeError, LookupError):
    """A requested passage does not exist."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"There is no passage with the name {name}")


class StartupFailure(StoryRuntimeError):
    """The configured start passage could not be resolved."""


class UserScriptFailure(StoryRuntimeError):
    """A user script raised while being evaluated at startup."""

    def __init__(self, error: Exception, index: int = 0):
        self.index = index
        super().__init__(f"User script error: {error}")


class RenderFailure(StoryRuntimeError):
    """A render pipeline stage failed; no output was produced."""

    def __init__(self, stage: str, error: Exception, passage_name: Optional[str] = None):
        self.stage = stage
        self.passage_name = passage_name
        where = f" in passage {passage_name!r}" if passage_name is not None else ""
        super().__init__(f"Render failed during {stage}{where}: {error}")


class InvalidArgument(StoryRuntimeError, TypeError):
    """A public API method was called with an argument of the wrong type."""


class StoryFormatError(StoryRuntimeError, ValueError):
    """The story document is malformed."""
