#!/usr/bin/env python3
"""
Dictionary loader utility for centralized dictionary loading and caching.

Provides a single point of access for loading the keyword dictionaries shipped
with the package, with error handling and caching to avoid redundant file reads.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY = "keywords.json"


class DictionaryLoader:
    """Centralized dictionary loader with caching support."""

    # Cache for loaded dictionaries to avoid redundant file reads
    _cache: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def get_dictionary_path(dictionary_name: str = DEFAULT_DICTIONARY) -> Path:
        """
        Get the absolute path to a dictionary file.

        Args:
            dictionary_name: Name of the dictionary file

        Returns:
            Absolute path to the dictionary file
        """
        return Path(__file__).resolve().parent / "dictionaries" / dictionary_name

    @staticmethod
    def get_schema_path(dictionary_name: str = DEFAULT_DICTIONARY) -> Path:
        """Get the JSON Schema path that belongs to a dictionary file."""
        stem = Path(dictionary_name).stem
        return Path(__file__).resolve().parent / "schemas" / f"{stem}.schema.json"

    @classmethod
    def load_dictionary(
        cls,
        dictionary_name: str = DEFAULT_DICTIONARY,
        use_cache: bool = True
    ) -> Optional[Any]:
        """
        Load a dictionary from the dictionaries folder.

        Args:
            dictionary_name: Name of the dictionary file to load
            use_cache: Whether to use cached version if available

        Returns:
            Dictionary contents, or None if loading fails
        """
        if use_cache and dictionary_name in cls._cache:
            return cls._cache[dictionary_name]

        dictionary_path = cls.get_dictionary_path(dictionary_name)

        try:
            with open(dictionary_path, 'r', encoding='utf-8') as f:
                dictionary = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, IOError) as exc:
            logger.warning("Could not load dictionary %s: %s", dictionary_path, exc)
            return None

        if use_cache:
            cls._cache[dictionary_name] = dictionary

        return dictionary
