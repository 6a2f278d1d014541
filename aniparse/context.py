#!/usr/bin/env python3
"""Mutable state shared by the passes of a single parse."""

from dataclasses import dataclass, field
from typing import List

from .elements import ElementCategory, ElementList
from .keyword_manager import KeywordManager
from .options import Options
from .tokens import Token


@dataclass
class ParseContext:
    """
    Tokens and elements owned by one parse invocation.

    Passes mutate both in place: tokens get promoted to identifiers and
    elements get appended or removed.
    """
    tokens: List[Token]
    elements: ElementList
    options: Options
    keyword_manager: KeywordManager
    episode_keywords_found: bool = field(default=False)

    def empty(self, category: ElementCategory) -> bool:
        return self.elements.empty(category)
