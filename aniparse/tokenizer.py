#!/usr/bin/env python3
"""
Tokenizer module for splitting a filename into typed tokens.

The filename is first cut at bracket boundaries, then known literal phrases
are pre-identified inside each span, and the remaining gaps are split on the
allowed delimiter characters. A repair step glues back pieces that delimiter
splitting shredded, e.g. "Vol.4" or "A.C.E".

Concatenating the content of the resulting tokens always gives back the
original filename.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .elements import ElementList
from .keyword_manager import KeywordManager, get_keyword_manager
from .options import Options
from .string_helpers import is_alphanumeric_char
from .tokens import (
    VALID,
    Token,
    TokenCategory,
    TokenMatch,
    TokenRange,
    find_next_token,
    find_prev_token,
)

logger = logging.getLogger(__name__)

# Opening and closing bracket characters
BRACKET_PAIRS = [
    ("(", ")"),
    ("[", "]"),
    ("{", "}"),
    ("「", "」"),  # corner bracket
    ("『", "』"),  # white corner bracket
    ("【", "】"),  # black lenticular bracket
    ("（", "）"),  # fullwidth parenthesis
]
_CLOSER_FOR = dict(BRACKET_PAIRS)


@dataclass
class TokenizationResult:
    """Tokens of a filename plus the elements found while tokenizing."""
    filename: str
    tokens: List[Token] = field(default_factory=list)
    elements: ElementList = field(default_factory=ElementList)

    @property
    def success(self) -> bool:
        return bool(self.tokens)

    def to_json(self) -> str:
        """Convert result to JSON format."""
        return json.dumps({
            "filename": self.filename,
            "tokens": [
                {
                    "category": token.category.value,
                    "content": token.content,
                    "enclosed": token.enclosed,
                }
                for token in self.tokens
            ],
            "elements": [
                {"category": e.category.value, "value": e.value} for e in self.elements
            ],
        }, ensure_ascii=False)


class Tokenizer:
    """Tokenizer for a single filename."""

    def __init__(
        self,
        filename: str,
        options: Optional[Options] = None,
        keyword_manager: Optional[KeywordManager] = None,
        elements: Optional[ElementList] = None
    ):
        """
        Initialize tokenizer.

        Args:
            filename: Filename to tokenize, without extension
            options: Parser options; defaults are used when omitted
            keyword_manager: Keyword table; the shared one is used when omitted
            elements: Element list that receives pre-identified phrases
        """
        self.filename = filename or ""
        self.options = options or Options()
        self.keyword_manager = keyword_manager or get_keyword_manager()
        self.elements = elements if elements is not None else ElementList()
        self.tokens: List[Token] = []

    def tokenize(self) -> TokenizationResult:
        """
        Split the filename into tokens.

        Returns:
            TokenizationResult; its token list is empty only for an empty filename
        """
        self.tokens = []
        self._tokenize_by_brackets()
        logger.debug("Tokenized %r into %d tokens", self.filename, len(self.tokens))
        return TokenizationResult(self.filename, self.tokens, self.elements)

    def _add_token(self, category: TokenCategory, enclosed: bool, token_range: TokenRange) -> None:
        content = self.filename[token_range.offset:token_range.end]
        self.tokens.append(Token(category, content, enclosed))

    def _find_first_bracket(self, start: int) -> Tuple[int, Optional[str]]:
        for idx in range(start, len(self.filename)):
            closer = _CLOSER_FOR.get(self.filename[idx])
            if closer is not None:
                return idx, closer
        return -1, None

    def _tokenize_by_brackets(self) -> None:
        """
        Cut the filename at bracket characters.

        Outside a group any opening bracket starts a group; inside a group only
        the closer of that opener ends it. A group that never closes runs to
        the end of the filename.
        """
        is_bracket_open = False
        matching_bracket: Optional[str] = None
        length = len(self.filename)
        i = 0
        while i < length:
            if not is_bracket_open:
                found, matching_bracket = self._find_first_bracket(i)
            else:
                found = self.filename.find(matching_bracket, i)

            token_range = TokenRange(i, (length if found == -1 else found) - i)
            if token_range.size > 0:
                self._tokenize_by_preidentified(is_bracket_open, token_range)

            if found == -1:
                break

            # Bracket tokens are always flagged enclosed
            self._add_token(TokenCategory.BRACKET, True, TokenRange(found, 1))
            is_bracket_open = not is_bracket_open
            i = found + 1

    def _tokenize_by_preidentified(self, enclosed: bool, token_range: TokenRange) -> None:
        """Emit known phrases as identifiers and delimiter-split the gaps around them."""
        matches = self.keyword_manager.find_phrases(self.filename, token_range.offset, token_range.size)
        starts = {}
        for match in matches:
            self.elements.add(match.category, match.phrase)
            starts.setdefault(match.offset, TokenRange(match.offset, match.size))

        subrange_offset = token_range.offset
        offset = token_range.offset
        while offset < token_range.end:
            preidentified = starts.get(offset)
            if preidentified is not None:
                if offset > subrange_offset:
                    self._tokenize_by_delimiters(enclosed, TokenRange(subrange_offset, offset - subrange_offset))
                self._add_token(TokenCategory.IDENTIFIER, enclosed, preidentified)
                subrange_offset = preidentified.end
                offset = subrange_offset
                continue
            offset += 1

        if token_range.end > subrange_offset:
            self._tokenize_by_delimiters(enclosed, TokenRange(subrange_offset, token_range.end - subrange_offset))

    def _get_delimiters(self, token_range: TokenRange) -> str:
        """Return the allowed delimiters present in the range, in order of appearance."""
        delimiters = ""
        for c in self.filename[token_range.offset:token_range.end]:
            if is_alphanumeric_char(c) or c not in self.options.allowed_delimiters:
                continue
            if c not in delimiters:
                delimiters += c
        return delimiters

    def _tokenize_by_delimiters(self, enclosed: bool, token_range: TokenRange) -> None:
        delimiters = self._get_delimiters(token_range)
        if not delimiters:
            self._add_token(TokenCategory.UNKNOWN, enclosed, token_range)
            return

        start = token_range.offset
        for idx in range(token_range.offset, token_range.end):
            if self.filename[idx] in delimiters:
                if idx > start:
                    self._add_token(TokenCategory.UNKNOWN, enclosed, TokenRange(start, idx - start))
                self._add_token(TokenCategory.DELIMITER, enclosed, TokenRange(idx, 1))
                start = idx + 1
        if token_range.end > start:
            self._add_token(TokenCategory.UNKNOWN, enclosed, TokenRange(start, token_range.end - start))

        self._validate_delimiter_tokens()

    @staticmethod
    def _is_delimiter_token(match: TokenMatch) -> bool:
        return bool(match) and match.token.category == TokenCategory.DELIMITER

    @staticmethod
    def _is_unknown_token(match: TokenMatch) -> bool:
        return bool(match) and match.token.category == TokenCategory.UNKNOWN

    @classmethod
    def _is_single_character_token(cls, match: TokenMatch) -> bool:
        return cls._is_unknown_token(match) and len(match.token.content) == 1 and match.token.content != "-"

    @staticmethod
    def _append_token_to(source: Token, dest: Token) -> None:
        dest.content += source.content
        source.category = TokenCategory.INVALID

    def _validate_delimiter_tokens(self) -> None:
        """
        Undo over-splitting around delimiters.

        Single-character tokens next to a delimiter other than space or
        underscore pull the delimiter and their neighbours into one token, so
        group names and keywords such as "Vol.4" survive. A delimiter followed
        by a different space-like delimiter is folded into the token before it.
        Absorbed tokens are marked invalid and dropped at the end.
        """
        tokens = self.tokens
        for idx, token in enumerate(tokens):
            if token.category != TokenCategory.DELIMITER:
                continue
            delimiter = token.content[0]

            prev_match = find_prev_token(tokens, idx, VALID)
            next_match = find_next_token(tokens, idx, VALID)

            if delimiter not in " _":
                if self._is_single_character_token(prev_match):
                    self._append_token_to(token, prev_match.token)
                    while self._is_unknown_token(next_match):
                        self._append_token_to(next_match.token, prev_match.token)
                        next_match = find_next_token(tokens, idx, VALID)
                        if self._is_delimiter_token(next_match) and next_match.token.content[0] == delimiter:
                            self._append_token_to(next_match.token, prev_match.token)
                            next_match = find_next_token(tokens, next_match.pos, VALID)
                    continue

                if self._is_single_character_token(next_match) and prev_match:
                    self._append_token_to(token, prev_match.token)
                    self._append_token_to(next_match.token, prev_match.token)
                    continue

            if self._is_unknown_token(prev_match) and self._is_delimiter_token(next_match):
                next_delimiter = next_match.token.content[0]
                if delimiter != next_delimiter and delimiter != ",":
                    if next_delimiter in " _":
                        self._append_token_to(token, prev_match.token)

        self.tokens[:] = [t for t in tokens if t.category != TokenCategory.INVALID]


def tokenize(
    filename: str,
    options: Optional[Options] = None,
    keyword_manager: Optional[KeywordManager] = None
) -> TokenizationResult:
    """Convenience wrapper around Tokenizer."""
    return Tokenizer(filename, options, keyword_manager).tokenize()
