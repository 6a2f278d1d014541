#!/usr/bin/env python3
"""
Trimmer module for stripping fringe characters from token and element text.
Used by the parser when assembling titles and when classifying keywords.
"""

from typing import Optional


def trim_any(text: Optional[str], trim_chars: str) -> str:
    """
    Remove any of trim_chars from both ends of text.

    Returns an empty string when nothing but trim characters remain.

    Example:
        >>> trim_any(" - Tiger and Dragon -", " -")
        'Tiger and Dragon'
        >>> trim_any("--", " -")
        ''
    """
    if not text or not trim_chars:
        return ""
    return text.strip(trim_chars)
