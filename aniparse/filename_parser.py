#!/usr/bin/env python3
"""
Anime filename parser entry point.

Usage:
    from aniparse import FilenameParser
    parser = FilenameParser()
    result = parser.parse("[TaigaSubs]_Toradora!_(2008)_-_01v2_-_Tiger_and_Dragon_[1280x720_H.264_FLAC][1234ABCD].mkv")
    result.get(ElementCategory.ANIME_TITLE)  # "Toradora!"

Pipeline order:
1. Strip a known video extension
2. Tokenize
3. Run the parser passes
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .context import ParseContext
from .elements import Element, ElementCategory, ElementList
from .keyword_manager import KeywordManager, get_keyword_manager
from .options import Options
from .parser import Parser
from .string_helpers import is_alphanumeric_string
from .tokenizer import Tokenizer
from .tokens import Token

logger = logging.getLogger(__name__)

MAX_EXTENSION_LENGTH = 4


@dataclass
class ParseResult:
    """Outcome of parsing one filename."""
    filename: str
    elements: ElementList = field(default_factory=ElementList)
    tokens: List[Token] = field(default_factory=list)
    title_found: bool = False

    def get(self, category: ElementCategory) -> Optional[str]:
        return self.elements.get(category)

    def get_all(self, category: ElementCategory) -> List[str]:
        return self.elements.get_all(category)

    def to_dict(self) -> Dict[str, Any]:
        """
        Group element values by category name.

        Categories that occur once map to a string, repeated ones to a list.
        """
        grouped: Dict[str, Any] = {}
        for element in self.elements:
            key = element.category.value
            if key not in grouped:
                grouped[key] = element.value
            elif isinstance(grouped[key], list):
                grouped[key].append(element.value)
            else:
                grouped[key] = [grouped[key], element.value]
        return grouped

    def to_json(self) -> str:
        """Convert result to JSON format."""
        return json.dumps({
            "filename": self.filename,
            "title_found": self.title_found,
            "elements": self.to_dict(),
        }, ensure_ascii=False)


class FilenameParser:
    """Parser for extracting anime metadata from release filenames."""

    def __init__(self, options: Optional[Options] = None, keyword_manager: Optional[KeywordManager] = None):
        """
        Initialize the filename parser.

        Args:
            options: Parser options; defaults when omitted
            keyword_manager: Keyword table; the shared bundled one when omitted
        """
        self.options = options or Options()
        self.keyword_manager = keyword_manager or get_keyword_manager()

    def remove_extension(self, filename: str) -> Tuple[str, Optional[str]]:
        """
        Split a known video extension off the filename.

        The suffix after the last dot counts only when it is short,
        alphanumeric and a valid file extension keyword.

        Returns:
            (name without extension, extension) or (filename, None)
        """
        if not filename:
            return filename, None
        position = filename.rfind(".")
        if position == -1:
            return filename, None

        extension = filename[position + 1:]
        if len(extension) > MAX_EXTENSION_LENGTH or not is_alphanumeric_string(extension):
            return filename, None

        found = self.keyword_manager.lookup(
            self.keyword_manager.normalize(extension), ElementCategory.FILE_EXTENSION
        )
        if found is None or not found[1].valid:
            return filename, None

        return filename[:position], extension

    def parse(self, filename: str) -> ParseResult:
        """
        Full parsing pipeline.

        Args:
            filename: Release filename, with or without extension

        Returns:
            ParseResult holding every element found; never raises for odd input
        """
        filename = filename or ""
        result = ParseResult(filename=filename)
        name = filename

        if self.options.parse_file_extension:
            name, extension = self.remove_extension(filename)
            if extension is not None:
                result.elements.add(ElementCategory.FILE_EXTENSION, extension)

        if not name:
            return result
        result.elements.add(ElementCategory.FILE_NAME, name)

        tokenization = Tokenizer(name, self.options, self.keyword_manager, result.elements).tokenize()
        result.tokens = tokenization.tokens
        if not tokenization.success:
            return result

        context = ParseContext(
            tokens=result.tokens,
            elements=result.elements,
            options=self.options,
            keyword_manager=self.keyword_manager,
        )
        result.title_found = Parser(context).parse()
        result.tokens = context.tokens

        logger.debug("Parsed %r into %d elements", filename, len(result.elements))
        return result


def parse(filename: str, options: Optional[Options] = None) -> List[Element]:
    """Parse a filename and return its elements in the order they were found."""
    return FilenameParser(options).parse(filename).elements.to_list()
