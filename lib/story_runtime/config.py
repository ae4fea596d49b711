"""
Runtime configuration.

Values can be set directly or read from the environment:
- STORY_RUNTIME_MARKDOWN_EXTENSIONS: comma-separated Python-Markdown extensions
- STORY_RUNTIME_STRICT: 1/true/yes to fail on undefined template names
- STORY_RUNTIME_LOG_LEVEL: logging level name for the CLI
"""

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_MARKDOWN_EXTENSIONS = ['extra']
DEFAULT_LOG_LEVEL = 'WARNING'

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class RuntimeConfig:
    """Settings shared by the render pipeline and the CLI."""
    markdown_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_MARKDOWN_EXTENSIONS))
    strict_undefined: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> 'RuntimeConfig':
        """Build a config from STORY_RUNTIME_* environment variables."""
        extensions = os.getenv('STORY_RUNTIME_MARKDOWN_EXTENSIONS')
        if extensions is not None:
            markdown_extensions = [e.strip() for e in extensions.split(',') if e.strip()]
        else:
            markdown_extensions = list(DEFAULT_MARKDOWN_EXTENSIONS)

        strict = os.getenv('STORY_RUNTIME_STRICT', '').strip().lower() in TRUE_VALUES
        log_level = os.getenv('STORY_RUNTIME_LOG_LEVEL', DEFAULT_LOG_LEVEL).upper()

        return cls(
            markdown_extensions=markdown_extensions,
            strict_undefined=strict,
            log_level=log_level,
        )
