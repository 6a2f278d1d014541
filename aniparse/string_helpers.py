#!/usr/bin/env python3
"""
Character and string classification helpers shared by the tokenizer and parser.

All checks are lexical: no locale handling beyond ASCII case mapping.
"""

import re
from typing import Optional

DASHES = "-‐‑‒–—―"
DASHES_WITH_SPACE = " " + DASHES

# Latin script ends with the Latin Extended-B block for our purposes
LATIN_MAX_CODEPOINT = 0x024F

_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def is_alphanumeric_char(c: str) -> bool:
    """Check for an ASCII letter or digit."""
    return ("0" <= c <= "9") or ("A" <= c <= "Z") or ("a" <= c <= "z")


def is_hexadecimal_char(c: str) -> bool:
    return ("0" <= c <= "9") or ("A" <= c <= "F") or ("a" <= c <= "f")


def is_latin_char(c: str) -> bool:
    return ord(c) <= LATIN_MAX_CODEPOINT


def is_dash_character(c: str) -> bool:
    return len(c) == 1 and c in DASHES


def is_alphanumeric_string(text: Optional[str]) -> bool:
    """Non-empty string made of letters or digits (any script)."""
    return bool(text) and text.isalnum()


def is_hexadecimal_string(text: Optional[str]) -> bool:
    return bool(text) and all(is_hexadecimal_char(c) for c in text)


def is_numeric_string(text: Optional[str]) -> bool:
    """Non-empty string made only of decimal digits."""
    return bool(text) and text.isdecimal()


def is_mostly_latin_string(text: Optional[str]) -> bool:
    """
    Check whether at least half of the characters are Latin.

    Args:
        text: String to check

    Returns:
        True if the Latin characters make up half of the string or more.
        An empty string is never mostly Latin.
    """
    if not text:
        return False
    latin = sum(1 for c in text if is_latin_char(c))
    return latin / len(text) >= 0.5


def index_of_first_digit(text: Optional[str]) -> int:
    """Return the index of the first digit in text, or -1."""
    for idx, c in enumerate(text or ""):
        if c.isdecimal():
            return idx
    return -1


def string_to_int(text: Optional[str]) -> int:
    """Parse an integer, returning 0 for anything unparsable."""
    try:
        return int(text)
    except (TypeError, ValueError):
        return 0


def leading_number(text: Optional[str]) -> Optional[float]:
    """
    Read the numeric value at the start of a string.

    "07.5" -> 7.5, "4a" -> 4.0, "abc" -> None.
    """
    match = _LEADING_NUMBER_RE.match(text or "")
    if not match:
        return None
    return float(match.group())


def is_crc32(text: Optional[str]) -> bool:
    """Eight hexadecimal characters, e.g. "1234ABCD"."""
    return text is not None and len(text) == 8 and is_hexadecimal_string(text)


def is_resolution(text: Optional[str]) -> bool:
    """
    Check for a video resolution shape.

    Accepts "1280x720" style (at least 3 digits on each side of x, X or the
    multiplication sign) and "1080p" style (at least 3 digits then p).
    """
    if not text:
        return False
    min_width = 3
    min_height = 3

    if len(text) >= min_width + 1 + min_height:
        pos = next((idx for idx, c in enumerate(text) if c in "xX×"), -1)
        if pos != -1 and min_width <= pos <= len(text) - (min_height + 1):
            return all(c.isdecimal() for idx, c in enumerate(text) if idx != pos)
    elif len(text) >= min_height + 1:
        if text[-1] in "pP":
            return all(c.isdecimal() for c in text[:-1])

    return False
