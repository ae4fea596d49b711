"""
Passage Repository

Holds the passages of a story in document order and answers lookups by
id, name and tag. Lookups return the first match; duplicate ids or names
are accepted as-is.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Passage:
    """A single passage: immutable once loaded."""
    id: int
    name: str
    tags: FrozenSet[str]
    source: str


def split_tags(tags: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    """Turn a whitespace-separated tags attribute into a tag set.

    Args:
        tags: Tags string as found in the story document, a list of tags,
            or None when the attribute is absent

    Returns:
        Frozen set of tag names (empty for None or an empty string)
    """
    if not tags:
        return frozenset()
    if isinstance(tags, str):
        return frozenset(tags.split())
    return frozenset(tags)


class PassageRepository:
    """Ordered, read-only collection of passages."""

    def __init__(self) -> None:
        self._passages: List[Passage] = []
        self._by_id: Dict[int, Passage] = {}
        self._by_name: Dict[str, Passage] = {}

    @classmethod
    def load(cls, entries: Iterable[Dict]) -> 'PassageRepository':
        """Build a repository from raw passage descriptors.

        Args:
            entries: Iterable of dicts with 'pid', 'name', optional 'tags'
                and 'source' keys, in document order

        Returns:
            A populated PassageRepository
        """
        repository = cls()
        for entry in entries:
            passage = Passage(
                id=int(entry['pid']),
                name=entry['name'],
                tags=split_tags(entry.get('tags')),
                source=entry.get('source', ''),
            )
            repository._passages.append(passage)
            # First occurrence wins for both indexes
            repository._by_id.setdefault(passage.id, passage)
            repository._by_name.setdefault(passage.name, passage)

        logger.debug(f"Loaded {len(repository._passages)} passages")
        return repository

    def get_by_id(self, passage_id: int) -> Optional[Passage]:
        return self._by_id.get(passage_id)

    def get_by_name(self, name: str) -> Optional[Passage]:
        return self._by_name.get(name)

    def get_by_tag(self, tag: str) -> List[Passage]:
        """Return every passage carrying `tag`, in repository order."""
        return [p for p in self._passages if tag in p.tags]

    def __iter__(self) -> Iterator[Passage]:
        return iter(self._passages)

    def __len__(self) -> int:
        return len(self._passages)
