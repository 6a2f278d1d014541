#!/usr/bin/env python3
"""
Element model for parsed filenames.

An element is a categorized piece of information extracted from a filename,
such as the anime title or an episode number. A filename may yield several
elements of the same category (e.g. two episode numbers for a range).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


class ElementCategory(str, Enum):
    """Categories an element can belong to."""
    ANIME_SEASON = "anime_season"
    ANIME_SEASON_PREFIX = "anime_season_prefix"
    ANIME_TITLE = "anime_title"
    ANIME_TYPE = "anime_type"
    ANIME_YEAR = "anime_year"
    AUDIO_TERM = "audio_term"
    DEVICE_COMPATIBILITY = "device_compatibility"
    EPISODE_NUMBER = "episode_number"
    EPISODE_NUMBER_ALT = "episode_number_alt"
    EPISODE_PREFIX = "episode_prefix"
    EPISODE_TITLE = "episode_title"
    FILE_CHECKSUM = "file_checksum"
    FILE_EXTENSION = "file_extension"
    FILE_NAME = "file_name"
    LANGUAGE = "language"
    OTHER = "other"
    RELEASE_GROUP = "release_group"
    RELEASE_INFORMATION = "release_information"
    RELEASE_VERSION = "release_version"
    SOURCE = "source"
    SUBTITLES = "subtitles"
    VIDEO_RESOLUTION = "video_resolution"
    VIDEO_TERM = "video_term"
    VOLUME_NUMBER = "volume_number"
    VOLUME_PREFIX = "volume_prefix"
    UNKNOWN = "unknown"


# Categories the keyword pass may look for at all
SEARCHABLE_CATEGORIES = frozenset({
    ElementCategory.ANIME_SEASON_PREFIX,
    ElementCategory.ANIME_TYPE,
    ElementCategory.AUDIO_TERM,
    ElementCategory.DEVICE_COMPATIBILITY,
    ElementCategory.EPISODE_PREFIX,
    ElementCategory.FILE_CHECKSUM,
    ElementCategory.LANGUAGE,
    ElementCategory.OTHER,
    ElementCategory.RELEASE_GROUP,
    ElementCategory.RELEASE_INFORMATION,
    ElementCategory.RELEASE_VERSION,
    ElementCategory.SOURCE,
    ElementCategory.SUBTITLES,
    ElementCategory.VIDEO_RESOLUTION,
    ElementCategory.VIDEO_TERM,
    ElementCategory.VOLUME_PREFIX,
})

# Categories that may legitimately occur more than once in a filename.
# Everything else is singular.
REPEATABLE_CATEGORIES = frozenset({
    ElementCategory.ANIME_SEASON,
    ElementCategory.ANIME_TYPE,
    ElementCategory.AUDIO_TERM,
    ElementCategory.DEVICE_COMPATIBILITY,
    ElementCategory.EPISODE_NUMBER,
    ElementCategory.LANGUAGE,
    ElementCategory.OTHER,
    ElementCategory.RELEASE_INFORMATION,
    ElementCategory.SOURCE,
    ElementCategory.VIDEO_TERM,
})


def is_category_searchable(category: ElementCategory) -> bool:
    return category in SEARCHABLE_CATEGORIES


def is_category_singular(category: ElementCategory) -> bool:
    return category not in REPEATABLE_CATEGORIES


@dataclass
class Element:
    """A single identified piece of a filename."""
    category: ElementCategory
    value: str


class ElementList:
    """
    Ordered collection of elements produced by one parse.

    Removal and lookup go by category: the first element of a category is the
    one returned or erased.
    """

    def __init__(self, elements: Optional[List[Element]] = None):
        self._elements: List[Element] = list(elements or [])

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __getitem__(self, index: int) -> Element:
        return self._elements[index]

    def add(self, category: ElementCategory, value: str) -> Element:
        element = Element(category, value)
        self._elements.append(element)
        return element

    def empty(self, category: ElementCategory) -> bool:
        """Check that no element of the category exists."""
        return not any(e.category == category for e in self._elements)

    def get(self, category: ElementCategory) -> Optional[str]:
        """Return the value of the first element of the category, if any."""
        for element in self._elements:
            if element.category == category:
                return element.value
        return None

    def get_all(self, category: ElementCategory) -> List[str]:
        return [e.value for e in self._elements if e.category == category]

    def index_of(self, category: ElementCategory) -> int:
        """Position of the first element of the category, or -1."""
        for idx, element in enumerate(self._elements):
            if element.category == category:
                return idx
        return -1

    def erase(self, category: ElementCategory) -> Optional[Element]:
        """Remove the first element of the category and return it."""
        for idx, element in enumerate(self._elements):
            if element.category == category:
                return self._elements.pop(idx)
        return None

    def remove_all(self, category: ElementCategory) -> int:
        """Remove every element of the category and return how many went."""
        before = len(self._elements)
        self._elements = [e for e in self._elements if e.category != category]
        return before - len(self._elements)

    def to_list(self) -> List[Element]:
        return list(self._elements)
