#!/usr/bin/env python3
"""
Tests for lib/story_runtime/repository.py
"""

import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lib.story_runtime.repository import PassageRepository, split_tags


ENTRIES = [
    {'pid': 1, 'name': 'Start', 'tags': None, 'source': 'Hello [[Go->Next]]'},
    {'pid': 2, 'name': 'Next', 'tags': 'chapter', 'source': 'You arrived.'},
    {'pid': 3, 'name': 'Cellar', 'tags': 'dark chapter', 'source': 'It is dark.'},
    {'pid': 4, 'name': 'Attic', 'tags': '', 'source': 'Dusty.'},
]


def test_split_tags():
    """Test tag strings split on any whitespace, absent/empty gives no tags."""
    assert split_tags(None) == frozenset()
    assert split_tags('') == frozenset()
    assert split_tags('a  b\tc') == frozenset({'a', 'b', 'c'})
    assert split_tags(['x', 'y']) == frozenset({'x', 'y'})


def test_load_builds_passages_in_order():
    """Test one passage per entry, in document order."""
    repository = PassageRepository.load(ENTRIES)

    assert len(repository) == 4
    assert [p.name for p in repository] == ['Start', 'Next', 'Cellar', 'Attic']
    assert repository.get_by_name('Cellar').tags == frozenset({'dark', 'chapter'})
    assert repository.get_by_name('Start').tags == frozenset()


def test_get_by_id():
    """Test lookup by id returns the passage, or None when absent."""
    repository = PassageRepository.load(ENTRIES)

    for entry in ENTRIES:
        assert repository.get_by_id(entry['pid']).name == entry['name']
    assert repository.get_by_id(99) is None


def test_get_by_name():
    """Test lookup by name returns the passage, or None when absent."""
    repository = PassageRepository.load(ENTRIES)

    assert repository.get_by_name('Next').id == 2
    assert repository.get_by_name('Missing') is None
    assert repository.get_by_name('next') is None


def test_get_by_tag_is_ordered_subsequence():
    """Test tag lookup returns exactly the tagged passages in repository order."""
    repository = PassageRepository.load(ENTRIES)

    assert [p.name for p in repository.get_by_tag('chapter')] == ['Next', 'Cellar']
    assert [p.name for p in repository.get_by_tag('dark')] == ['Cellar']
    assert repository.get_by_tag('missing') == []


def test_duplicates_resolve_to_first_match():
    """Test duplicate names and ids are accepted and the first one wins."""
    repository = PassageRepository.load([
        {'pid': 1, 'name': 'Start', 'source': 'first'},
        {'pid': 1, 'name': 'Other', 'source': 'second'},
        {'pid': 2, 'name': 'Start', 'source': 'third'},
    ])

    assert len(repository) == 3
    assert repository.get_by_id(1).source == 'first'
    assert repository.get_by_name('Start').source == 'first'


def test_passages_are_immutable():
    """Test passages cannot be modified after load."""
    passage = PassageRepository.load(ENTRIES).get_by_id(1)

    with pytest.raises(AttributeError):
        passage.source = 'changed'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
