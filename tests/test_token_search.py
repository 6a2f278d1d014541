#!/usr/bin/env python3
"""
Pytest tests for directional token search.
"""

import pytest

from aniparse.tokens import (
    NOT_DELIMITER,
    UNKNOWN,
    Token,
    TokenCategory,
    TokenRange,
    any_of,
    category_is,
    find_next_token,
    find_prev_token,
    find_token,
)


@pytest.fixture
def tokens():
    # "[Group] Title"
    return [
        Token(TokenCategory.BRACKET, "[", True),
        Token(TokenCategory.UNKNOWN, "Group", True),
        Token(TokenCategory.BRACKET, "]", True),
        Token(TokenCategory.DELIMITER, " ", False),
        Token(TokenCategory.UNKNOWN, "Title", False),
    ]


def test_find_token_is_inclusive(tokens):
    match = find_token(tokens, 1, UNKNOWN)
    assert match.pos == 1
    assert match.token is tokens[1]


def test_find_next_token_is_exclusive(tokens):
    match = find_next_token(tokens, 1, UNKNOWN)
    assert match.pos == 4


def test_find_prev_token(tokens):
    match = find_prev_token(tokens, 4, NOT_DELIMITER)
    assert match.pos == 2


def test_enclosure_filter(tokens):
    assert find_token(tokens, 0, UNKNOWN, enclosed=False).pos == 4
    assert find_token(tokens, 0, UNKNOWN, enclosed=True).pos == 1


def test_no_match_is_falsy(tokens):
    match = find_next_token(tokens, 4, category_is(TokenCategory.DELIMITER))
    assert not match
    assert match.pos is None


@pytest.mark.parametrize("start", [None, -1, 5, 100])
def test_out_of_range_start(tokens, start):
    assert not find_token(tokens, start)


def test_none_position(tokens):
    assert not find_next_token(tokens, None)
    assert not find_prev_token(tokens, None)


def test_any_of_combines_predicates(tokens):
    predicate = any_of(category_is(TokenCategory.DELIMITER), category_is(TokenCategory.BRACKET))
    assert find_next_token(tokens, 0, predicate).pos == 2


def test_tokens_compare_by_identity():
    a = Token(TokenCategory.UNKNOWN, "01", False)
    b = Token(TokenCategory.UNKNOWN, "01", False)
    assert a != b
    assert [a, b].index(b) == 1


def test_token_range_end():
    assert TokenRange(3, 4).end == 7
