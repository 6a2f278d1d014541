#!/usr/bin/env python3
"""
Token model and directional token search.

Tokens are produced by the tokenizer and then consumed in place by the parser
passes, which promote Unknown tokens to Identifier as they classify them.
Searches take a predicate over the token category plus an optional enclosure
filter and return an empty TokenMatch instead of raising when nothing matches.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional


class TokenCategory(str, Enum):
    UNKNOWN = "unknown"
    BRACKET = "bracket"
    DELIMITER = "delimiter"
    IDENTIFIER = "identifier"
    INVALID = "invalid"


@dataclass(eq=False)
class Token:
    """
    A piece of the filename.

    Tokens compare by identity: two tokens with the same text at different
    positions are different tokens.
    """
    category: TokenCategory
    content: str
    enclosed: bool

    def __repr__(self) -> str:
        return f"Token({self.category.value}, {self.content!r}, enclosed={self.enclosed})"


@dataclass(frozen=True)
class TokenRange:
    """A view into the filename: offset and size, no text copied."""
    offset: int
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class TokenMatch:
    """Result of a token search. Falsy when nothing matched."""
    token: Optional[Token] = None
    pos: Optional[int] = None

    def __bool__(self) -> bool:
        return self.token is not None


EMPTY_MATCH = TokenMatch()

TokenPredicate = Callable[[Token], bool]


def category_is(*categories: TokenCategory) -> TokenPredicate:
    """Match tokens of any of the given categories."""
    allowed = frozenset(categories)
    return lambda token: token.category in allowed


def category_is_not(category: TokenCategory) -> TokenPredicate:
    return lambda token: token.category != category


def any_of(*predicates: TokenPredicate) -> TokenPredicate:
    """Combine predicates so that a token matching any one of them matches."""
    return lambda token: any(p(token) for p in predicates)


VALID = category_is_not(TokenCategory.INVALID)
NOT_DELIMITER = category_is_not(TokenCategory.DELIMITER)
UNKNOWN = category_is(TokenCategory.UNKNOWN)
BRACKET = category_is(TokenCategory.BRACKET)
IDENTIFIER = category_is(TokenCategory.IDENTIFIER)


def _matches(token: Token, predicate: Optional[TokenPredicate], enclosed: Optional[bool]) -> bool:
    if enclosed is not None and token.enclosed != enclosed:
        return False
    return predicate is None or predicate(token)


def _search(
    tokens: List[Token],
    start: Optional[int],
    step: int,
    predicate: Optional[TokenPredicate],
    enclosed: Optional[bool]
) -> TokenMatch:
    if start is None:
        return EMPTY_MATCH
    pos = start
    while 0 <= pos < len(tokens):
        token = tokens[pos]
        if _matches(token, predicate, enclosed):
            return TokenMatch(token, pos)
        pos += step
    return EMPTY_MATCH


def find_token(
    tokens: List[Token],
    start: Optional[int] = 0,
    predicate: Optional[TokenPredicate] = None,
    enclosed: Optional[bool] = None
) -> TokenMatch:
    """
    Find the first matching token at or after start.

    Args:
        tokens: Token list to search
        start: First position to examine (inclusive); None gives no match
        predicate: Category predicate, or None to accept any category
        enclosed: Required enclosure flag, or None for either

    Returns:
        TokenMatch of the token and its position, empty if nothing matched
    """
    return _search(tokens, start, 1, predicate, enclosed)


def find_next_token(
    tokens: List[Token],
    position: Optional[int],
    predicate: Optional[TokenPredicate] = None,
    enclosed: Optional[bool] = None
) -> TokenMatch:
    """Find the first matching token after position (exclusive)."""
    if position is None:
        return EMPTY_MATCH
    return _search(tokens, position + 1, 1, predicate, enclosed)


def find_prev_token(
    tokens: List[Token],
    position: Optional[int],
    predicate: Optional[TokenPredicate] = None,
    enclosed: Optional[bool] = None
) -> TokenMatch:
    """Find the closest matching token before position (exclusive)."""
    if position is None:
        return EMPTY_MATCH
    return _search(tokens, position - 1, -1, predicate, enclosed)
