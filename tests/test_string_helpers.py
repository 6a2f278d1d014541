#!/usr/bin/env python3
"""
Pytest tests for string classification helpers and the trimmer.
"""

import pytest

from aniparse.string_helpers import (
    DASHES_WITH_SPACE,
    index_of_first_digit,
    is_crc32,
    is_dash_character,
    is_hexadecimal_string,
    is_mostly_latin_string,
    is_numeric_string,
    is_resolution,
    leading_number,
    string_to_int,
)
from aniparse.trimmer import trim_any


class TestClassification:
    """Tests for character class checks."""

    def test_numeric_string(self):
        assert is_numeric_string("0123")
        assert not is_numeric_string("12a")
        assert not is_numeric_string("")
        assert not is_numeric_string(None)

    def test_hexadecimal_string(self):
        assert is_hexadecimal_string("1234ABCD")
        assert is_hexadecimal_string("deadbeef")
        assert not is_hexadecimal_string("12G4")

    def test_dash_characters(self):
        assert is_dash_character("-")
        assert is_dash_character("—")
        assert not is_dash_character("_")

    def test_mostly_latin(self):
        assert is_mostly_latin_string("Toradora")
        assert not is_mostly_latin_string("とらドラ")
        # Exactly half counts as mostly Latin
        assert is_mostly_latin_string("abとら")
        assert not is_mostly_latin_string("")


class TestNumericParsing:
    """Tests for numeric parsing with defaults."""

    def test_index_of_first_digit(self):
        assert index_of_first_digit("EP08") == 2
        assert index_of_first_digit("01") == 0
        assert index_of_first_digit("abc") == -1
        assert index_of_first_digit("") == -1

    def test_string_to_int_defaults_to_zero(self):
        assert string_to_int("42") == 42
        assert string_to_int("abc") == 0
        assert string_to_int("") == 0
        assert string_to_int(None) == 0

    def test_leading_number(self):
        assert leading_number("07.5") == 7.5
        assert leading_number("4a") == 4.0
        assert leading_number("abc") is None

    def test_leading_number_fullwidth_digits(self):
        assert leading_number("１２") == 12.0
        assert string_to_int("１２") == 12


class TestShapes:
    """Tests for checksum and resolution shape detection."""

    def test_crc32(self):
        assert is_crc32("1234ABCD")
        assert not is_crc32("1234ABC")
        assert not is_crc32("1234ABCG")

    @pytest.mark.parametrize("text", ["1280x720", "1920X1080", "1920×1080", "1080p", "720P", "480p"])
    def test_resolution_accepts(self, text):
        assert is_resolution(text)

    @pytest.mark.parametrize("text", ["12x720", "abcx1234", "1080", "10bit", "p", "", "1280x72a"])
    def test_resolution_rejects(self, text):
        assert not is_resolution(text)


class TestTrimAny:
    """Tests for trimming fringe characters."""

    def test_trim_dashes_and_spaces(self):
        assert trim_any(" - Tiger and Dragon -", DASHES_WITH_SPACE) == "Tiger and Dragon"

    def test_trim_to_empty(self):
        assert trim_any("--", DASHES_WITH_SPACE) == ""

    def test_trim_keeps_inner_characters(self):
        assert trim_any("Re-Zero", DASHES_WITH_SPACE) == "Re-Zero"

    def test_trim_unicode_dashes(self):
        assert trim_any("— Title –", DASHES_WITH_SPACE) == "Title"

    def test_trim_any_empty_charset(self):
        assert trim_any(" x ", "") == ""
        assert trim_any(None, " ") == ""
