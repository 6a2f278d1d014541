#!/usr/bin/env python3
"""Validate keyword dictionaries against their JSON Schema and custom rules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from .dictionary_loader import DEFAULT_DICTIONARY, DictionaryLoader
from .keyword_manager import KeywordManager


def load_json(path: Path):
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_with_schema(data, schema_path: Path, label: str) -> List[str]:
    schema = load_json(schema_path)
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))

    messages = []
    for error in errors:
        location = " > ".join(str(p) for p in error.absolute_path) or "root"
        messages.append(f"{label}: {location}: {error.message}")
    return messages


def check_keywords(keywords) -> List[str]:
    """
    Check keyword groups for values the parser could never match.

    Keywords are looked up after uppercase normalization, so lowercase values
    are dead entries. A value defined twice in the same lookup table keeps its
    first definition; a later one with a different category is reported.
    """
    errors: List[str] = []
    seen: Dict[str, Dict[str, str]] = {"file_extension": {}, "keyword": {}}

    for idx, group in enumerate(keywords or []):
        if not isinstance(group, dict):
            continue
        category = group.get("category", "")
        table = seen["file_extension" if category == "file_extension" else "keyword"]
        for value in group.get("values") or []:
            if not isinstance(value, str) or not value:
                continue
            if KeywordManager.normalize(value) != value:
                errors.append(f"keywords[{idx}]: '{value}' is not normalized (expected '{KeywordManager.normalize(value)}')")
            previous = table.get(value)
            if previous is None:
                table[value] = category
            elif previous != category:
                errors.append(
                    f"keywords[{idx}]: '{value}' ({category}) is shadowed by an earlier '{previous}' entry"
                )
    return errors


def check_phrases(phrases) -> List[str]:
    errors: List[str] = []
    seen: Dict[str, int] = {}
    for idx, group in enumerate(phrases or []):
        if not isinstance(group, dict):
            continue
        for value in group.get("values") or []:
            if not isinstance(value, str) or not value:
                continue
            if value in seen:
                errors.append(f"phrases[{idx}]: duplicate phrase '{value}' also in phrases[{seen[value]}]")
            else:
                seen[value] = idx
    return errors


def validate_dictionary(
    data: Optional[Any] = None,
    dictionary_name: str = DEFAULT_DICTIONARY
) -> List[str]:
    """
    Validate a keyword dictionary.

    Args:
        data: Parsed dictionary; loaded from the package when omitted
        dictionary_name: Dictionary file name, used for loading and to find its schema

    Returns:
        List of human-readable problems, empty when the dictionary is valid
    """
    if data is None:
        data = DictionaryLoader.load_dictionary(dictionary_name, use_cache=False)
        if data is None:
            return [f"{dictionary_name} is missing or unreadable"]

    label = Path(dictionary_name).stem
    failures = validate_with_schema(data, DictionaryLoader.get_schema_path(dictionary_name), label)
    if not isinstance(data, dict):
        return failures

    failures.extend(check_keywords(data.get("keywords")))
    failures.extend(check_phrases(data.get("phrases")))
    return failures
