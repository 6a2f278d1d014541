#!/usr/bin/env python3
"""
Parser that classifies the tokens of a filename into elements.

The passes run in a fixed order and each one only sees tokens the earlier
passes left as Unknown:
1. Keywords (plus CRC32 and resolution shapes)
2. Isolated numbers (year, resolution)
3. Episode number cascade
4. Anime title
5. Release group
6. Episode title
7. Validation of overlapping type and episode title
"""

import logging

from .boundary_helper import BoundaryHelper
from .context import ParseContext
from .elements import ElementCategory, is_category_searchable, is_category_singular
from .keyword_manager import KeywordOptions
from .number_resolver import ANIME_YEAR_MAX, ANIME_YEAR_MIN, NumberResolver
from .string_helpers import DASHES, is_crc32, is_numeric_string, is_resolution, string_to_int
from .tokens import TokenCategory
from .trimmer import trim_any

logger = logging.getLogger(__name__)

ISOLATED_RESOLUTIONS = (480, 720, 1080)

__all__ = ["Parser", "ParseContext"]


class Parser:
    """Runs the classification passes over one parse context."""

    def __init__(self, context: ParseContext):
        self.context = context
        self.helper = BoundaryHelper(context)
        self.numbers = NumberResolver(context, self.helper)

    @property
    def tokens(self):
        return self.context.tokens

    @property
    def elements(self):
        return self.context.elements

    def parse(self) -> bool:
        """
        Run all passes.

        Returns:
            True if an anime title was found. The elements collected in the
            context are meaningful either way.
        """
        options = self.context.options

        self.search_for_keywords()
        logger.debug("Keyword pass: %d elements", len(self.elements))
        self.search_for_isolated_numbers()

        if options.parse_episode_number:
            found = self.numbers.search_for_episode_number()
            logger.debug("Episode number %s", "found" if found else "not found")

        self.helper.search_for_anime_title()

        if options.parse_release_group and self.context.empty(ElementCategory.RELEASE_GROUP):
            self.helper.search_for_release_group()

        if options.parse_episode_title and not self.context.empty(ElementCategory.EPISODE_NUMBER):
            self.helper.search_for_episode_title()

        self.validate_elements()
        logger.debug("Parse finished with %d elements", len(self.elements))

        title_found = bool(self.elements.get(ElementCategory.ANIME_TITLE))
        if not title_found:
            logger.debug("No anime title found among %d tokens", len(self.tokens))
        return title_found

    def search_for_keywords(self) -> None:
        """Classify Unknown tokens that are known keywords, checksums or resolutions."""
        keyword_manager = self.context.keyword_manager
        options = self.context.options

        for pos, token in enumerate(self.tokens):
            if token.category != TokenCategory.UNKNOWN:
                continue

            word = trim_any(token.content, " " + DASHES)
            if not word:
                continue
            # Don't bother if the word is a number that cannot be CRC
            if len(word) != 8 and is_numeric_string(word):
                continue

            category = ElementCategory.UNKNOWN
            keyword_options = KeywordOptions()
            found = keyword_manager.lookup(keyword_manager.normalize(word))

            if found is not None:
                category, keyword_options = found
                if not options.parse_release_group and category == ElementCategory.RELEASE_GROUP:
                    continue
                if not is_category_searchable(category) or not keyword_options.searchable:
                    continue
                if is_category_singular(category) and not self.context.empty(category):
                    continue

                if category == ElementCategory.ANIME_SEASON_PREFIX:
                    self.helper.check_and_set_anime_season_keyword(token, pos)
                    continue
                if category == ElementCategory.EPISODE_PREFIX:
                    # Prefixes such as a bare "E" never stand alone
                    if keyword_options.valid:
                        self.numbers.check_extent_keyword(ElementCategory.EPISODE_NUMBER, pos, token)
                    continue
                if category == ElementCategory.VOLUME_PREFIX:
                    self.numbers.check_extent_keyword(ElementCategory.VOLUME_NUMBER, pos, token)
                    continue
                if category == ElementCategory.RELEASE_VERSION:
                    word = word[1:]
            elif self.context.empty(ElementCategory.FILE_CHECKSUM) and is_crc32(word):
                category = ElementCategory.FILE_CHECKSUM
            elif self.context.empty(ElementCategory.VIDEO_RESOLUTION) and is_resolution(word):
                category = ElementCategory.VIDEO_RESOLUTION

            if category != ElementCategory.UNKNOWN:
                self.elements.add(category, word)
                if keyword_options.identifiable:
                    token.category = TokenCategory.IDENTIFIER

    def search_for_isolated_numbers(self) -> None:
        """Bracketed numbers are more likely a year or a resolution than an episode."""
        for pos, token in enumerate(self.tokens):
            if (token.category != TokenCategory.UNKNOWN
                    or not is_numeric_string(token.content)
                    or not self.helper.is_token_isolated(pos)):
                continue

            number = string_to_int(token.content)

            if ANIME_YEAR_MIN <= number <= ANIME_YEAR_MAX:
                if self.context.empty(ElementCategory.ANIME_YEAR):
                    self.elements.add(ElementCategory.ANIME_YEAR, token.content)
                    token.category = TokenCategory.IDENTIFIER
                    continue

            # Some groups write the resolution without the "p" suffix
            if number in ISOLATED_RESOLUTIONS:
                if self.context.empty(ElementCategory.VIDEO_RESOLUTION):
                    self.elements.add(ElementCategory.VIDEO_RESOLUTION, token.content)
                    token.category = TokenCategory.IDENTIFIER

    def validate_elements(self) -> None:
        """
        Resolve an anime type that also shows up in the episode title.

        If the type is the whole episode title, the episode title was a false
        capture and goes. Otherwise a type keyword found inside running title
        text is dropped.
        """
        if self.context.empty(ElementCategory.ANIME_TYPE) or self.context.empty(ElementCategory.EPISODE_TITLE):
            return

        episode_title = self.elements.get(ElementCategory.EPISODE_TITLE)
        keyword_manager = self.context.keyword_manager

        idx = 0
        while idx < len(self.elements):
            element = self.elements[idx]
            if element.category == ElementCategory.ANIME_TYPE and element.value in episode_title:
                if len(episode_title) == len(element.value):
                    self.elements.remove_all(ElementCategory.EPISODE_TITLE)
                elif keyword_manager.contains(ElementCategory.ANIME_TYPE, keyword_manager.normalize(element.value)):
                    removed_at = self.elements.index_of(ElementCategory.ANIME_TYPE)
                    self.elements.erase(ElementCategory.ANIME_TYPE)
                    idx = removed_at
                    continue
            idx += 1
