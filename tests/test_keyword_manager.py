#!/usr/bin/env python3
"""
Pytest tests for the keyword manager.
"""

import pytest

from aniparse.elements import ElementCategory
from aniparse.keyword_manager import KeywordManager, KeywordOptions, get_keyword_manager


@pytest.fixture
def manager():
    return get_keyword_manager()


@pytest.fixture
def small_manager():
    """Keyword manager over a tiny in-memory dictionary."""
    return KeywordManager({
        "keywords": [
            {"category": "anime_type", "values": ["OVA", "TV"]},
            {"category": "source", "values": ["TV", "BD"]},
            {"category": "episode_prefix", "values": ["E"], "valid": False},
            {"category": "file_extension", "values": ["MKV"]},
        ],
        "phrases": [
            {"category": "audio_term", "values": ["Dual Audio"]},
        ],
        "ordinals": {"2nd": "2"},
    })


class TestNormalize:
    def test_uppercases_ascii(self):
        assert KeywordManager.normalize("Bd") == "BD"
        assert KeywordManager.normalize("h.264") == "H.264"

    def test_leaves_other_scripts(self):
        assert KeywordManager.normalize("第") == "第"
        assert KeywordManager.normalize("é") == "é"

    def test_empty(self):
        assert KeywordManager.normalize("") == ""


class TestLookup:
    def test_lookup_any_category(self, small_manager):
        category, options = small_manager.lookup("OVA")
        assert category == ElementCategory.ANIME_TYPE
        assert options == KeywordOptions()

    def test_first_definition_wins(self, small_manager):
        category, _ = small_manager.lookup("TV")
        assert category == ElementCategory.ANIME_TYPE

    def test_lookup_with_category_mismatch(self, small_manager):
        assert small_manager.lookup("OVA", ElementCategory.SOURCE) is None

    def test_unknown_keyword(self, small_manager):
        assert small_manager.lookup("NOPE") is None

    def test_options_carried(self, small_manager):
        _, options = small_manager.lookup("E")
        assert options.valid is False
        assert options.identifiable is True

    def test_file_extensions_are_separate(self, small_manager):
        assert small_manager.lookup("MKV") is None
        category, _ = small_manager.lookup("MKV", ElementCategory.FILE_EXTENSION)
        assert category == ElementCategory.FILE_EXTENSION
        assert small_manager.contains(ElementCategory.FILE_EXTENSION, "MKV")

    def test_contains(self, small_manager):
        assert small_manager.contains(ElementCategory.SOURCE, "BD")
        assert not small_manager.contains(ElementCategory.SOURCE, "OVA")


class TestPhrasesAndOrdinals:
    def test_find_phrase_absolute_offset(self, small_manager):
        filename = "Show [Dual Audio]"
        matches = small_manager.find_phrases(filename, 6, 10)
        assert len(matches) == 1
        assert matches[0].offset == 6
        assert matches[0].size == len("Dual Audio")
        assert matches[0].category == ElementCategory.AUDIO_TERM

    def test_find_phrase_outside_range(self, small_manager):
        assert small_manager.find_phrases("Dual Audio Show", 5, 10) == []

    def test_phrase_is_case_sensitive(self, small_manager):
        assert small_manager.find_phrases("dual audio", 0, 10) == []

    def test_ordinals(self, small_manager):
        assert small_manager.get_number_from_ordinal("2nd") == "2"
        assert small_manager.get_number_from_ordinal("3rd") == ""
        assert small_manager.get_number_from_ordinal("") == ""


class TestBundledDictionary:
    @pytest.mark.parametrize("keyword,category", [
        ("BD", ElementCategory.SOURCE),
        ("OVA", ElementCategory.ANIME_TYPE),
        ("EP", ElementCategory.EPISODE_PREFIX),
        ("FLAC", ElementCategory.AUDIO_TERM),
    ])
    def test_known_keywords(self, manager, keyword, category):
        found = manager.lookup(keyword)
        assert found is not None
        assert found[0] == category

    def test_ordinal_words(self, manager):
        assert manager.get_number_from_ordinal("Second") == "2"

    def test_singleton(self):
        assert get_keyword_manager() is get_keyword_manager()
