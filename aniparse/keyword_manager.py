#!/usr/bin/env python3
"""
Keyword manager holding the known anime keywords.

Keywords are loaded once from the keyword dictionary and mapped to an element
category plus behavioural options. A short list of literal phrases (which may
contain delimiter characters, e.g. "Dual Audio") is used by the tokenizer to
pre-identify tokens before delimiter splitting.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .dictionary_loader import DEFAULT_DICTIONARY, DictionaryLoader
from .elements import ElementCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordOptions:
    """
    Behavioural flags of a keyword.

    Attributes:
        identifiable: A match promotes the token to an identifier.
        searchable: The keyword pass considers the keyword at all.
        valid: The keyword may stand as a token on its own (e.g. bare "E" may not).
    """
    identifiable: bool = True
    searchable: bool = True
    valid: bool = True


@dataclass(frozen=True)
class Keyword:
    category: ElementCategory
    options: KeywordOptions


@dataclass(frozen=True)
class PhraseMatch:
    """A literal phrase found inside a filename range."""
    category: ElementCategory
    phrase: str
    offset: int

    @property
    def size(self) -> int:
        return len(self.phrase)


class KeywordManager:
    """Read-only lookup table of normalized keyword text to category and options."""

    def __init__(self, dictionary: Optional[Mapping[str, Any]] = None):
        """
        Build the keyword tables.

        Args:
            dictionary: Parsed keyword dictionary. If None, the bundled
                        keywords.json is loaded through DictionaryLoader.
        """
        if dictionary is None:
            dictionary = DictionaryLoader.load_dictionary(DEFAULT_DICTIONARY) or {}
            if not dictionary:
                logger.warning("Keyword dictionary is empty; only heuristics will apply")

        self._keywords: Dict[str, Keyword] = {}
        self._file_extensions: Dict[str, Keyword] = {}
        self._phrases: List[Tuple[ElementCategory, List[str]]] = []
        self._ordinals: Dict[str, str] = dict(dictionary.get('ordinals') or {})

        for entry in dictionary.get('keywords') or []:
            options = KeywordOptions(
                identifiable=entry.get('identifiable', True),
                searchable=entry.get('searchable', True),
                valid=entry.get('valid', True),
            )
            self._add(ElementCategory(entry['category']), options, entry.get('values') or [])

        for entry in dictionary.get('phrases') or []:
            values = [v for v in entry.get('values') or [] if v]
            self._phrases.append((ElementCategory(entry['category']), values))

        logger.debug(
            "Loaded %d keywords, %d file extensions, %d phrase groups",
            len(self._keywords), len(self._file_extensions), len(self._phrases)
        )

    @staticmethod
    def normalize(word: str) -> str:
        """Uppercase ASCII letters only; empty input is returned unchanged."""
        if not word:
            return word
        return ''.join(chr(ord(c) - 32) if 'a' <= c <= 'z' else c for c in word)

    def lookup(
        self,
        keyword: str,
        category: ElementCategory = ElementCategory.UNKNOWN
    ) -> Optional[Tuple[ElementCategory, KeywordOptions]]:
        """
        Find a normalized keyword.

        Args:
            keyword: Normalized keyword text
            category: Expected category, or UNKNOWN to accept any category

        Returns:
            (category, options) of the keyword, or None if it is unknown or
            belongs to a different category than the one requested
        """
        entry = self._container(category).get(keyword)
        if entry is None:
            return None
        if category != ElementCategory.UNKNOWN and entry.category != category:
            return None
        return entry.category, entry.options

    def contains(self, category: ElementCategory, keyword: str) -> bool:
        entry = self._container(category).get(keyword)
        return entry is not None and entry.category == category

    def find_phrases(self, filename: str, offset: int, size: int) -> List[PhraseMatch]:
        """
        Look for known literal phrases inside a range of the filename.

        Only the first occurrence of each phrase is reported. Matching is
        case-sensitive.

        Args:
            filename: The whole filename
            offset: Start of the range
            size: Length of the range

        Returns:
            Phrase matches with absolute offsets, in dictionary order
        """
        search = filename[offset:offset + size]
        matches = []
        for category, phrases in self._phrases:
            for phrase in phrases:
                found = search.find(phrase)
                if found != -1:
                    matches.append(PhraseMatch(category, phrase, offset + found))
        return matches

    def get_number_from_ordinal(self, word: str) -> str:
        """Return the digit for an ordinal word ("2nd", "Second"), or ''."""
        if not word:
            return ""
        return self._ordinals.get(word, "")

    def _container(self, category: ElementCategory) -> Dict[str, Keyword]:
        if category == ElementCategory.FILE_EXTENSION:
            return self._file_extensions
        return self._keywords

    def _add(self, category: ElementCategory, options: KeywordOptions, keywords: List[str]) -> None:
        container = self._container(category)
        for keyword in keywords:
            # First definition wins
            if keyword and keyword not in container:
                container[keyword] = Keyword(category, options)


@lru_cache(maxsize=1)
def get_keyword_manager() -> KeywordManager:
    """Return the process-wide keyword manager built from the bundled dictionary."""
    return KeywordManager()
