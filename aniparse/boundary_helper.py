#!/usr/bin/env python3
"""
Boundary helper for locating token runs and assembling element text.

The anime title, release group and episode title are all found the same way:
pick a starting Unknown token, walk to the next Identifier or Bracket, then
glue the run back into a string.
"""

import logging
from typing import List, Optional

from .context import ParseContext
from .elements import ElementCategory
from .string_helpers import DASHES_WITH_SPACE, is_dash_character, is_mostly_latin_string, is_numeric_string
from .tokens import (
    BRACKET,
    IDENTIFIER,
    NOT_DELIMITER,
    UNKNOWN,
    Token,
    TokenCategory,
    TokenMatch,
    any_of,
    find_next_token,
    find_prev_token,
    find_token,
)
from .trimmer import trim_any

logger = logging.getLogger(__name__)

BRACKET_OR_IDENTIFIER = any_of(BRACKET, IDENTIFIER)


def is_token_category(match: TokenMatch, category: TokenCategory) -> bool:
    return bool(match) and match.token.category == category


class BoundaryHelper:
    """Token-run lookups and element assembly over a parse context."""

    def __init__(self, context: ParseContext):
        self.context = context

    @property
    def tokens(self) -> List[Token]:
        return self.context.tokens

    def is_token_isolated(self, pos: int) -> bool:
        """Check whether the token at pos sits directly between two brackets."""
        prev_match = find_prev_token(self.tokens, pos, NOT_DELIMITER)
        if not is_token_category(prev_match, TokenCategory.BRACKET):
            return False
        next_match = find_next_token(self.tokens, pos, NOT_DELIMITER)
        return is_token_category(next_match, TokenCategory.BRACKET)

    def check_and_set_anime_season_keyword(self, token: Token, pos: int) -> bool:
        """
        Read the season number next to a season keyword.

        "2nd Season" takes the ordinal before the keyword, "Season 2" takes
        the number after it. Both tokens become identifiers on success.

        Args:
            token: The season keyword token
            pos: Position of the keyword token

        Returns:
            True if a season element was added
        """
        prev_match = find_prev_token(self.tokens, pos, NOT_DELIMITER)
        if prev_match:
            number = self.context.keyword_manager.get_number_from_ordinal(prev_match.token.content)
            if number:
                self._set_anime_season(prev_match.token, token, number)
                return True

        next_match = find_next_token(self.tokens, pos, NOT_DELIMITER)
        if next_match and is_numeric_string(next_match.token.content):
            self._set_anime_season(token, next_match.token, next_match.token.content)
            return True

        return False

    def _set_anime_season(self, first: Token, second: Token, number: str) -> None:
        self.context.elements.add(ElementCategory.ANIME_SEASON, number)
        first.category = TokenCategory.IDENTIFIER
        second.category = TokenCategory.IDENTIFIER

    def build_element(self, category: ElementCategory, keep_delimiters: bool, tokens: List[Token]) -> Optional[str]:
        """
        Join a run of tokens into an element value and add it.

        Unknown tokens are promoted to identifiers. Delimiters are kept as-is
        when keep_delimiters is set; otherwise commas and ampersands stay,
        other delimiters turn into spaces, and a delimiter at either end of
        the run is dropped. Without kept delimiters the result is trimmed of
        dashes and spaces.

        Args:
            category: Category of the element to add
            keep_delimiters: Keep delimiter characters verbatim
            tokens: The token run

        Returns:
            The element value, or None if nothing was left to add
        """
        parts = []
        last = len(tokens) - 1
        for idx, token in enumerate(tokens):
            if token.category == TokenCategory.UNKNOWN:
                parts.append(token.content)
                token.category = TokenCategory.IDENTIFIER
            elif token.category == TokenCategory.BRACKET:
                parts.append(token.content)
            elif token.category == TokenCategory.DELIMITER:
                delimiter = token.content[:1]
                if keep_delimiters:
                    parts.append(delimiter)
                elif 0 < idx < last:
                    parts.append(delimiter if delimiter in ",&" else " ")

        value = "".join(parts)
        if not keep_delimiters:
            value = trim_any(value, DASHES_WITH_SPACE)

        if not value:
            return None
        self.context.elements.add(category, value)
        return value

    def search_for_anime_title(self) -> bool:
        """
        Locate and add the anime title.

        The title starts at the first Unknown token outside brackets. When every
        Unknown token is enclosed, the first bracket group is assumed to be the
        release group and the title is taken from the next group, unless the
        first group is mostly non-Latin text.

        Returns:
            True if a title element was added
        """
        tokens = self.tokens
        enclosed_title = False

        token_begin = find_token(tokens, 0, UNKNOWN, enclosed=False)

        if not token_begin:
            token_begin = TokenMatch(None, 0)
            enclosed_title = True
            skipped_previous_group = False

            while True:
                token_begin = find_token(tokens, token_begin.pos, UNKNOWN)
                if not token_begin:
                    break
                # Ignore groups that are composed of non-Latin characters
                if is_mostly_latin_string(token_begin.token.content) and skipped_previous_group:
                    break
                # Get the first unknown token of the next group
                token_begin = find_token(tokens, token_begin.pos, BRACKET)
                token_begin = find_token(tokens, token_begin.pos, UNKNOWN)
                skipped_previous_group = True
                if not token_begin:
                    break

        if not token_begin:
            return False

        # Continue until an identifier (or a bracket, if the title is enclosed)
        end_predicate = BRACKET_OR_IDENTIFIER if enclosed_title else IDENTIFIER
        token_end = find_token(tokens, token_begin.pos, end_predicate)

        if not enclosed_title:
            token_end = self._pull_back_to_unmatched_bracket(token_begin, token_end)
            token_end = self._pull_back_before_trailing_groups(token_end)

        end = len(tokens) if token_end.pos is None else min(token_end.pos, len(tokens))
        return self.build_element(ElementCategory.ANIME_TITLE, False, tokens[token_begin.pos:end]) is not None

    def _pull_back_to_unmatched_bracket(self, token_begin: TokenMatch, token_end: TokenMatch) -> TokenMatch:
        """Move the end back to an open bracket inside the range that never closes."""
        end = len(self.tokens) if token_end.pos is None else token_end.pos
        last_bracket = token_end
        bracket_open = False
        for idx in range(token_begin.pos, end):
            token = self.tokens[idx]
            if token.category == TokenCategory.BRACKET:
                last_bracket = TokenMatch(token, idx)
                bracket_open = not bracket_open
        return last_bracket if bracket_open else token_end

    def _pull_back_before_trailing_groups(self, token_end: TokenMatch) -> TokenMatch:
        """
        Move the end back before bracket groups that close the range, as in
        "Anime Title [Fansub]". Parenthesized groups such as "(TV)" stay.
        """
        end = len(self.tokens) if token_end.pos is None else token_end.pos
        match = find_prev_token(self.tokens, end, NOT_DELIMITER)

        while is_token_category(match, TokenCategory.BRACKET) and match.token.content[0] != ")":
            match = find_prev_token(self.tokens, match.pos, BRACKET)
            if match:
                token_end = match
                match = find_prev_token(self.tokens, token_end.pos, NOT_DELIMITER)

        return token_end

    def search_for_release_group(self) -> bool:
        """
        Locate the release group: the first enclosed Unknown token that opens its
        bracket group, up to the closing bracket. Delimiters are kept verbatim.
        """
        tokens = self.tokens
        token_end = TokenMatch(None, 0)

        while token_end.pos is not None and token_end.pos < len(tokens):
            token_begin = find_token(tokens, token_end.pos, UNKNOWN, enclosed=True)
            if not token_begin:
                return False

            token_end = find_token(tokens, token_begin.pos, BRACKET_OR_IDENTIFIER)
            if not is_token_category(token_end, TokenCategory.BRACKET):
                continue

            # Ignore if it's not the first non-delimiter token in group
            prev_match = find_prev_token(tokens, token_begin.pos, NOT_DELIMITER)
            if prev_match and prev_match.token.category != TokenCategory.BRACKET:
                continue

            return self.build_element(
                ElementCategory.RELEASE_GROUP, True, tokens[token_begin.pos:token_end.pos]
            ) is not None

        return False

    def search_for_episode_title(self) -> bool:
        """
        Locate the episode title: the first run of Unknown tokens outside
        brackets, up to the next bracket or identifier. A run made of a lone
        dash is only a separator and is skipped.
        """
        tokens = self.tokens
        token_end = TokenMatch(None, 0)

        while token_end.pos is not None and token_end.pos < len(tokens):
            token_begin = find_token(tokens, token_end.pos, UNKNOWN, enclosed=False)
            if not token_begin:
                return False

            token_end = find_token(tokens, token_begin.pos, BRACKET_OR_IDENTIFIER)
            end = len(tokens) if token_end.pos is None else token_end.pos

            if end - token_begin.pos <= 2 and is_dash_character(token_begin.token.content[0]):
                continue

            return self.build_element(ElementCategory.EPISODE_TITLE, False, tokens[token_begin.pos:end]) is not None

        return False
