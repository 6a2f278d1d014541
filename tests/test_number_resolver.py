#!/usr/bin/env python3
"""
Pytest tests for episode and volume number resolution.
"""

import pytest

from aniparse.boundary_helper import BoundaryHelper
from aniparse.context import ParseContext
from aniparse.elements import ElementCategory
from aniparse.filename_parser import FilenameParser
from aniparse.keyword_manager import get_keyword_manager
from aniparse.number_resolver import NumberResolver, is_valid_episode_number, is_valid_volume_number
from aniparse.options import Options
from aniparse.string_helpers import is_numeric_string, string_to_int
from aniparse.tokenizer import tokenize
from aniparse.tokens import Token, TokenCategory


def make_resolver(filename):
    """Tokenize a filename and wrap it in a resolver."""
    result = tokenize(filename)
    context = ParseContext(
        tokens=result.tokens,
        elements=result.elements,
        options=Options(),
        keyword_manager=get_keyword_manager(),
    )
    return NumberResolver(context, BoundaryHelper(context)), context


def single_token(word):
    return Token(TokenCategory.UNKNOWN, word, False)


class TestValidation:
    @pytest.mark.parametrize("number,expected", [
        ("01", True),
        ("1899", True),
        ("1900", False),
        ("07.5", True),
        ("4a", True),
        ("abc", False),
    ])
    def test_episode_number_range(self, number, expected):
        assert is_valid_episode_number(number) is expected

    @pytest.mark.parametrize("number", ["１２", "１９００", "０７"])
    def test_fullwidth_digits_agree_with_numeric_value(self, number):
        assert is_numeric_string(number)
        assert is_valid_episode_number(number) == (string_to_int(number) < 1900)

    def test_volume_number_range(self):
        assert is_valid_volume_number("20")
        assert not is_valid_volume_number("21")


class TestEpisodePatterns:
    @pytest.fixture
    def resolver(self):
        return make_resolver("x")

    def test_single_episode_with_version(self, resolver):
        numbers, context = resolver
        token = single_token("01v2")
        assert numbers.match_episode_patterns("01v2", token)
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "01"
        assert context.elements.get(ElementCategory.RELEASE_VERSION) == "2"
        assert token.category == TokenCategory.IDENTIFIER

    def test_multi_episode(self, resolver):
        numbers, context = resolver
        assert numbers.match_episode_patterns("01-02", single_token("01-02"))
        assert context.elements.get_all(ElementCategory.EPISODE_NUMBER) == ["01", "02"]

    def test_multi_episode_needs_ascending_range(self, resolver):
        numbers, context = resolver
        assert not numbers.match_multi_episode_pattern("05-03", single_token("05-03"))
        assert context.elements.empty(ElementCategory.EPISODE_NUMBER)

    def test_season_and_episode(self, resolver):
        numbers, context = resolver
        assert numbers.match_episode_patterns("S02E05", single_token("S02E05"))
        assert context.elements.get(ElementCategory.ANIME_SEASON) == "02"
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "05"

    def test_season_cross_episode(self, resolver):
        numbers, context = resolver
        assert numbers.match_episode_patterns("2x01", single_token("2x01"))
        assert context.elements.get(ElementCategory.ANIME_SEASON) == "2"
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "01"

    @pytest.mark.parametrize("word,expected", [
        ("07.5", "07.5"),
        ("4a", "4a"),
        ("#05", "05"),
        ("7話", "7"),
    ])
    def test_other_shapes(self, resolver, word, expected):
        numbers, context = resolver
        assert numbers.match_episode_patterns(word, single_token(word))
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == expected

    def test_plain_number_is_not_a_pattern(self, resolver):
        numbers, _ = resolver
        assert not numbers.match_episode_patterns("05", single_token("05"))

    def test_partial_episode_rejects_other_letters(self, resolver):
        numbers, _ = resolver
        assert not numbers.match_partial_episode_pattern("4d", single_token("4d"))


class TestTypeAndEpisode:
    def test_token_is_split(self):
        numbers, context = make_resolver("Title OVA2")
        token = context.tokens[-1]
        assert numbers.match_type_and_episode_pattern("OVA2", token)
        assert [t.content for t in context.tokens] == ["Title", " ", "OVA", "2"]
        # Type keywords are not identifiable, so the prefix stays unknown
        assert context.tokens[2].category == TokenCategory.UNKNOWN
        assert context.tokens[3].category == TokenCategory.IDENTIFIER
        assert context.elements.get(ElementCategory.ANIME_TYPE) == "OVA"
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "2"

    def test_unknown_prefix(self):
        numbers, context = make_resolver("Title ABC2")
        assert not numbers.match_type_and_episode_pattern("ABC2", context.tokens[-1])
        assert len(context.tokens) == 3


class TestVolumePatterns:
    def test_single_volume(self):
        numbers, context = make_resolver("x")
        assert numbers.match_volume_patterns("01v2", single_token("01v2"))
        assert context.elements.get(ElementCategory.VOLUME_NUMBER) == "01"
        assert context.elements.get(ElementCategory.RELEASE_VERSION) == "2"

    def test_multi_volume(self):
        numbers, context = make_resolver("x")
        assert numbers.match_volume_patterns("01-03", single_token("01-03"))
        assert context.elements.get_all(ElementCategory.VOLUME_NUMBER) == ["01", "03"]


class TestKeywordComparison:
    """Numbers found after an episode keyword are compared to later ones."""

    def test_larger_number_becomes_alternative(self):
        numbers, context = make_resolver("x")
        context.elements.add(ElementCategory.EPISODE_NUMBER, "5")
        context.episode_keywords_found = True
        assert numbers.set_episode_number("06", single_token("06"), True)
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "5"
        assert context.elements.get(ElementCategory.EPISODE_NUMBER_ALT) == "06"

    def test_smaller_number_demotes_existing(self):
        numbers, context = make_resolver("x")
        context.elements.add(ElementCategory.EPISODE_NUMBER, "7")
        context.episode_keywords_found = True
        assert numbers.set_episode_number("03", single_token("03"), True)
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "03"
        assert context.elements.get(ElementCategory.EPISODE_NUMBER_ALT) == "7"

    def test_equal_number_is_not_added(self):
        numbers, context = make_resolver("x")
        context.elements.add(ElementCategory.EPISODE_NUMBER, "3")
        context.episode_keywords_found = True
        assert not numbers.set_episode_number("03", single_token("03"), True)
        assert context.elements.get_all(ElementCategory.EPISODE_NUMBER) == ["3"]

    def test_year_range_rejected_when_validating(self):
        numbers, context = make_resolver("x")
        assert not numbers.set_episode_number("2008", single_token("2008"), True)
        assert context.elements.empty(ElementCategory.EPISODE_NUMBER)


class TestCascade:
    def test_total_number_form(self):
        numbers, context = make_resolver("Title 8 of 12")
        assert numbers.search_for_episode_number()
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "8"

    def test_equivalent_numbers(self):
        numbers, context = make_resolver("Anime - 08 (114)")
        assert numbers.search_for_episode_number()
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "08"
        assert context.elements.get(ElementCategory.EPISODE_NUMBER_ALT) == "114"

    def test_separated_number(self):
        numbers, context = make_resolver("Title - 05")
        assert numbers.search_for_episode_number()
        assert context.elements.get(ElementCategory.EPISODE_NUMBER) == "05"

    def test_fullwidth_separated_number(self):
        result = FilenameParser().parse("Title - １２")
        assert result.get(ElementCategory.EPISODE_NUMBER) == "１２"
        assert result.get(ElementCategory.ANIME_TITLE) == "Title"

    def test_no_candidates(self):
        numbers, context = make_resolver("Just Words")
        assert not numbers.search_for_episode_number()
        assert context.elements.empty(ElementCategory.EPISODE_NUMBER)
