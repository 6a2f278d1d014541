#!/usr/bin/env python3
"""
Number resolver for episode, volume and season numbers.

Numbers in anime filenames are ambiguous: "01" may be an episode, "2008" a
year, "1080" a resolution. The resolver tries structural patterns first
("01v2", "S01E03", "OVA2", "#05") and falls back to positional heuristics
(bracketed pairs, a number after a dash, an isolated number, the last number).
The first strategy that succeeds wins.
"""

import logging
import re
from typing import List

from .boundary_helper import BoundaryHelper, is_token_category
from .context import ParseContext
from .elements import ElementCategory
from .string_helpers import (
    index_of_first_digit,
    is_dash_character,
    is_numeric_string,
    leading_number,
    string_to_int,
)
from .tokens import NOT_DELIMITER, Token, TokenCategory, TokenMatch, find_next_token, find_prev_token
from .trimmer import trim_any

logger = logging.getLogger(__name__)

ANIME_YEAR_MIN = 1900
ANIME_YEAR_MAX = 2050
EPISODE_NUMBER_MAX = ANIME_YEAR_MIN - 1
VOLUME_NUMBER_MAX = 20

# Episode patterns, matched against the whole word
SINGLE_EPISODE_RE = re.compile(r"(\d{1,3})[vV](\d)")
MULTI_EPISODE_RE = re.compile(r"(\d{1,3})(?:[vV](\d))?[-~&+](\d{1,3})(?:[vV](\d))?")
SEASON_AND_EPISODE_RE = re.compile(
    r"S?(\d{1,2})(?:-S?(\d{1,2}))?(?:x|[ ._-x]?E)(\d{1,3})(?:-E?(\d{1,3}))?",
    re.IGNORECASE
)
FRACTIONAL_EPISODE_RE = re.compile(r"\d+\.5")
NUMBER_SIGN_RE = re.compile(r"#(\d{1,3})(?:[-~&+](\d{1,3}))?(?:[vV](\d))?")
# 話 is the counter for stories and episodes
JAPANESE_COUNTER_RE = re.compile(r"(\d{1,3})話")

# Volume patterns
SINGLE_VOLUME_RE = re.compile(r"(\d{1,2})[vV](\d)")
MULTI_VOLUME_RE = re.compile(r"(\d{1,2})[-~&+](\d{1,2})(?:[vV](\d))?")

PARTIAL_EPISODE_SUFFIXES = "ABCabc"


def is_valid_episode_number(number: str) -> bool:
    """An episode number is valid below the earliest anime year."""
    value = leading_number(number)
    return value is not None and value <= EPISODE_NUMBER_MAX


def is_valid_volume_number(number: str) -> bool:
    return string_to_int(number) <= VOLUME_NUMBER_MAX


class NumberResolver:
    """Episode and volume number search over a parse context."""

    def __init__(self, context: ParseContext, helper: BoundaryHelper):
        self.context = context
        self.helper = helper

    @property
    def tokens(self) -> List[Token]:
        return self.context.tokens

    def _add(self, category: ElementCategory, value: str) -> None:
        self.context.elements.add(category, value)

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_episode_number(self, number: str, token: Token, validate: bool) -> bool:
        """
        Add an episode number and mark its token as identified.

        When an episode number was already found through a keyword, the two are
        compared: the larger one becomes the alternative episode number and an
        equal one is not added again.

        Args:
            number: Episode number text
            token: Token the number was read from
            validate: Reject numbers that fall into the year range

        Returns:
            True if the number was accepted
        """
        if validate and not is_valid_episode_number(number):
            return False

        token.category = TokenCategory.IDENTIFIER
        category = ElementCategory.EPISODE_NUMBER

        if self.context.episode_keywords_found:
            for element in self.context.elements:
                if element.category != ElementCategory.EPISODE_NUMBER:
                    continue
                comparison = string_to_int(number) - string_to_int(element.value)
                if comparison > 0:
                    category = ElementCategory.EPISODE_NUMBER_ALT
                elif comparison < 0:
                    element.category = ElementCategory.EPISODE_NUMBER_ALT
                else:
                    return False
                break

        self._add(category, number)
        return True

    def set_alternative_episode_number(self, number: str, token: Token) -> bool:
        self._add(ElementCategory.EPISODE_NUMBER_ALT, number)
        token.category = TokenCategory.IDENTIFIER
        return True

    def set_volume_number(self, number: str, token: Token, validate: bool) -> bool:
        if validate and not is_valid_volume_number(number):
            return False
        self._add(ElementCategory.VOLUME_NUMBER, number)
        token.category = TokenCategory.IDENTIFIER
        return True

    # ------------------------------------------------------------------
    # Keyword lookahead
    # ------------------------------------------------------------------

    def check_extent_keyword(self, category: ElementCategory, pos: int, token: Token) -> bool:
        """
        Read the number that follows an episode or volume keyword ("Episode 5").

        Args:
            category: EPISODE_NUMBER or VOLUME_NUMBER
            pos: Position of the keyword token
            token: The keyword token; promoted to identifier on success

        Returns:
            True if the next token started with a digit and was consumed
        """
        next_match = find_next_token(self.tokens, pos, NOT_DELIMITER)
        if not is_token_category(next_match, TokenCategory.UNKNOWN):
            return False
        next_token = next_match.token
        if index_of_first_digit(next_token.content) != 0:
            return False

        if category == ElementCategory.EPISODE_NUMBER:
            if not self.match_episode_patterns(next_token.content, next_token):
                self.set_episode_number(next_token.content, next_token, False)
        elif category == ElementCategory.VOLUME_NUMBER:
            if not self.match_volume_patterns(next_token.content, next_token):
                self.set_volume_number(next_token.content, next_token, False)
        else:
            return False

        token.category = TokenCategory.IDENTIFIER
        return True

    def number_comes_after_prefix(self, category: ElementCategory, token: Token) -> bool:
        """Handle a keyword glued to its number, e.g. "EP.1" or "Vol.4"."""
        number_begin = index_of_first_digit(token.content)
        prefix = self.context.keyword_manager.normalize(token.content[:max(number_begin, 0)])
        if not self.context.keyword_manager.contains(category, prefix):
            return False

        number = token.content[number_begin:]
        if category == ElementCategory.EPISODE_PREFIX:
            if not self.match_episode_patterns(number, token):
                self.set_episode_number(number, token, False)
            return True
        if category == ElementCategory.VOLUME_PREFIX:
            if not self.match_volume_patterns(number, token):
                self.set_volume_number(number, token, False)
            return True
        return False

    def number_comes_before_total_number(self, token: Token, pos: int) -> bool:
        """Handle "8 of 12": the first number is the episode."""
        next_match = find_next_token(self.tokens, pos, NOT_DELIMITER)
        if not next_match or next_match.token.content.lower() != "of":
            return False

        other_match = find_next_token(self.tokens, next_match.pos, NOT_DELIMITER)
        if not other_match or not is_numeric_string(other_match.token.content):
            return False

        self.set_episode_number(token.content, token, False)
        next_match.token.category = TokenCategory.IDENTIFIER
        other_match.token.category = TokenCategory.IDENTIFIER
        return True

    # ------------------------------------------------------------------
    # Episode patterns
    # ------------------------------------------------------------------

    def match_episode_patterns(self, word: str, token: Token) -> bool:
        """
        Try the structural episode patterns on a word, in priority order.

        Args:
            word: Text to match; purely numeric words never match
            token: Token the word belongs to

        Returns:
            True on the first pattern that matched and was accepted
        """
        if is_numeric_string(word):
            return False

        word = trim_any(word, " -")
        if not word:
            return False

        numeric_front = word[0].isdecimal()
        numeric_back = word[-1].isdecimal()

        # e.g. "01v2"
        if numeric_front and numeric_back and self.match_single_episode_pattern(word, token):
            return True
        # e.g. "01-02", "03-05v2"
        if numeric_front and numeric_back and self.match_multi_episode_pattern(word, token):
            return True
        # e.g. "2x01", "S01E03", "S01-02xE001-150"
        if numeric_back and self.match_season_and_episode_pattern(word, token):
            return True
        # e.g. "ED1", "OP4a", "OVA2"
        if not numeric_front and self.match_type_and_episode_pattern(word, token):
            return True
        # e.g. "07.5"
        if numeric_front and numeric_back and self.match_fractional_episode_pattern(word, token):
            return True
        # e.g. "4a", "111C"
        if numeric_front and not numeric_back and self.match_partial_episode_pattern(word, token):
            return True
        # e.g. "#01", "#02-03v2"
        if numeric_back and self.match_number_sign_pattern(word, token):
            return True
        # e.g. "7話"
        if numeric_front and self.match_japanese_counter_pattern(word, token):
            return True

        return False

    def match_single_episode_pattern(self, word: str, token: Token) -> bool:
        match = SINGLE_EPISODE_RE.fullmatch(word)
        if not match:
            return False
        self.set_episode_number(match.group(1), token, False)
        self._add(ElementCategory.RELEASE_VERSION, match.group(2))
        return True

    def match_multi_episode_pattern(self, word: str, token: Token) -> bool:
        """Episode range; the lower bound must be below the upper bound."""
        match = MULTI_EPISODE_RE.fullmatch(word)
        if not match:
            return False

        lower_bound, upper_bound = match.group(1), match.group(3)
        if string_to_int(lower_bound) >= string_to_int(upper_bound):
            return False
        if not self.set_episode_number(lower_bound, token, True):
            return False

        self.set_episode_number(upper_bound, token, True)
        if match.group(2):
            self._add(ElementCategory.RELEASE_VERSION, match.group(2))
        if match.group(4):
            self._add(ElementCategory.RELEASE_VERSION, match.group(4))
        return True

    def match_season_and_episode_pattern(self, word: str, token: Token) -> bool:
        match = SEASON_AND_EPISODE_RE.fullmatch(word)
        if not match:
            return False

        self._add(ElementCategory.ANIME_SEASON, match.group(1))
        if match.group(2):
            self._add(ElementCategory.ANIME_SEASON, match.group(2))
        self.set_episode_number(match.group(3), token, False)
        if match.group(4):
            self.set_episode_number(match.group(4), token, False)
        return True

    def match_type_and_episode_pattern(self, word: str, token: Token) -> bool:
        """
        Handle an anime type glued to a number, e.g. "OVA2".

        On success the token keeps only the number and a new token holding the
        type prefix is inserted before it.
        """
        number_begin = index_of_first_digit(word)
        if number_begin == -1:
            return False
        prefix = word[:number_begin]

        found = self.context.keyword_manager.lookup(
            self.context.keyword_manager.normalize(prefix), ElementCategory.ANIME_TYPE
        )
        if found is None:
            return False
        _, options = found

        self._add(ElementCategory.ANIME_TYPE, prefix)
        number = word[number_begin:]
        if not (self.match_episode_patterns(number, token) or self.set_episode_number(number, token, True)):
            return False

        pos = next((idx for idx, t in enumerate(self.tokens) if t is token), -1)
        if pos != -1:
            token.content = number
            category = TokenCategory.IDENTIFIER if options.identifiable else TokenCategory.UNKNOWN
            self.tokens.insert(pos, Token(category, prefix, token.enclosed))
        return True

    def match_fractional_episode_pattern(self, word: str, token: Token) -> bool:
        return bool(FRACTIONAL_EPISODE_RE.fullmatch(word)) and self.set_episode_number(word, token, True)

    def match_partial_episode_pattern(self, word: str, token: Token) -> bool:
        """Digits followed by a single part letter A to C, e.g. "4a"."""
        if not word:
            return False
        suffix_begin = next((idx for idx, c in enumerate(word) if not c.isdecimal()), len(word))
        if len(word) - suffix_begin != 1 or word[suffix_begin] not in PARTIAL_EPISODE_SUFFIXES:
            return False
        return self.set_episode_number(word, token, True)

    def match_number_sign_pattern(self, word: str, token: Token) -> bool:
        match = NUMBER_SIGN_RE.fullmatch(word)
        if not match:
            return False
        if not self.set_episode_number(match.group(1), token, True):
            return False
        if match.group(2):
            self.set_episode_number(match.group(2), token, False)
        if match.group(3):
            self._add(ElementCategory.RELEASE_VERSION, match.group(3))
        return True

    def match_japanese_counter_pattern(self, word: str, token: Token) -> bool:
        match = JAPANESE_COUNTER_RE.fullmatch(word)
        if not match:
            return False
        self.set_episode_number(match.group(1), token, False)
        return True

    # ------------------------------------------------------------------
    # Volume patterns
    # ------------------------------------------------------------------

    def match_volume_patterns(self, word: str, token: Token) -> bool:
        if is_numeric_string(word):
            return False

        word = trim_any(word, " -")
        if not word:
            return False

        if word[0].isdecimal() and word[-1].isdecimal():
            # e.g. "01v2"
            if self.match_single_volume_pattern(word, token):
                return True
            # e.g. "01-02", "03-05v2"
            if self.match_multi_volume_pattern(word, token):
                return True
        return False

    def match_single_volume_pattern(self, word: str, token: Token) -> bool:
        match = SINGLE_VOLUME_RE.fullmatch(word)
        if not match:
            return False
        self.set_volume_number(match.group(1), token, False)
        self._add(ElementCategory.RELEASE_VERSION, match.group(2))
        return True

    def match_multi_volume_pattern(self, word: str, token: Token) -> bool:
        match = MULTI_VOLUME_RE.fullmatch(word)
        if not match:
            return False

        lower_bound, upper_bound = match.group(1), match.group(2)
        if string_to_int(lower_bound) >= string_to_int(upper_bound):
            return False
        if not self.set_volume_number(lower_bound, token, True):
            return False

        self.set_volume_number(upper_bound, token, False)
        if match.group(3):
            self._add(ElementCategory.RELEASE_VERSION, match.group(3))
        return True

    # ------------------------------------------------------------------
    # Cascade
    # ------------------------------------------------------------------

    def search_for_episode_number(self) -> bool:
        """
        Run the episode number cascade.

        Returns:
            True if an episode number was found by any strategy
        """
        candidates = [
            TokenMatch(token, pos) for pos, token in enumerate(self.tokens)
            if token.category == TokenCategory.UNKNOWN and index_of_first_digit(token.content) != -1
        ]
        if not candidates:
            return False

        self.context.episode_keywords_found = not self.context.empty(ElementCategory.EPISODE_NUMBER)

        # A token matching a known episode pattern has to be the episode number
        if self.search_for_episode_patterns(candidates):
            return True

        # Found previously through a keyword
        if not self.context.empty(ElementCategory.EPISODE_NUMBER):
            return True

        # From here on only plain numbers are considered
        candidates = [c for c in candidates if is_numeric_string(c.token.content)]

        # e.g. "01 (176)", "29 (04)"
        if self.search_for_equivalent_numbers(candidates):
            return True
        # e.g. " - 08"
        if self.search_for_separated_numbers(candidates):
            return True
        # e.g. "[12]", "(2006)"
        if self.search_for_isolated_numbers(candidates):
            return True
        # Last resort
        return self.search_for_last_number(candidates)

    def search_for_episode_patterns(self, candidates: List[TokenMatch]) -> bool:
        for candidate in candidates:
            token = candidate.token
            numeric_front = bool(token.content) and token.content[0].isdecimal()

            if not numeric_front:
                # e.g. "EP.1", "Vol.1"
                if self.number_comes_after_prefix(ElementCategory.EPISODE_PREFIX, token):
                    return True
                if self.number_comes_after_prefix(ElementCategory.VOLUME_PREFIX, token):
                    continue
            elif self.number_comes_before_total_number(token, candidate.pos):
                # e.g. "8 of 12"
                return True

            if self.match_episode_patterns(token.content, token):
                return True

        return False

    def search_for_equivalent_numbers(self, candidates: List[TokenMatch]) -> bool:
        """Pair a number with a bracketed number right after it; the smaller is the episode."""
        for candidate in candidates:
            if self.helper.is_token_isolated(candidate.pos) or not is_valid_episode_number(candidate.token.content):
                continue

            next_match = find_next_token(self.tokens, candidate.pos, NOT_DELIMITER)
            if not is_token_category(next_match, TokenCategory.BRACKET):
                continue
            next_match = find_next_token(self.tokens, next_match.pos, NOT_DELIMITER, enclosed=True)
            if not is_token_category(next_match, TokenCategory.UNKNOWN):
                continue

            if (not self.helper.is_token_isolated(next_match.pos)
                    or not is_numeric_string(next_match.token.content)
                    or not is_valid_episode_number(next_match.token.content)):
                continue

            first, second = sorted(
                (candidate.token, next_match.token), key=lambda t: string_to_int(t.content)
            )
            self.set_episode_number(first.content, first, False)
            self.set_alternative_episode_number(second.content, second)
            return True

        return False

    def search_for_separated_numbers(self, candidates: List[TokenMatch]) -> bool:
        for candidate in candidates:
            prev_match = find_prev_token(self.tokens, candidate.pos, NOT_DELIMITER)

            # See if the number has a preceding "-" separator
            if is_token_category(prev_match, TokenCategory.UNKNOWN) and is_dash_character(prev_match.token.content[0]):
                if self.set_episode_number(candidate.token.content, candidate.token, True):
                    prev_match.token.category = TokenCategory.IDENTIFIER
                    return True

        return False

    def search_for_isolated_numbers(self, candidates: List[TokenMatch]) -> bool:
        for candidate in candidates:
            if not candidate.token.enclosed or not self.helper.is_token_isolated(candidate.pos):
                continue
            if self.set_episode_number(candidate.token.content, candidate.token, True):
                return True
        return False

    def search_for_last_number(self, candidates: List[TokenMatch]) -> bool:
        for candidate in reversed(candidates):
            # The episode number comes after the title, so never the first token
            if candidate.pos == 0 or candidate.token.enclosed:
                continue

            # Ignore if it's the first non-enclosed, non-delimiter token
            if all(t.enclosed or t.category == TokenCategory.DELIMITER for t in self.tokens[:candidate.pos]):
                continue

            # Ignore if the previous token is "Movie" or "Part"
            prev_match = find_prev_token(self.tokens, candidate.pos, NOT_DELIMITER)
            if is_token_category(prev_match, TokenCategory.UNKNOWN):
                if prev_match.token.content.lower() in ("movie", "part"):
                    continue

            if self.set_episode_number(candidate.token.content, candidate.token, True):
                return True

        return False
