"""
Anime filename parser package.

This package contains the parsing modules:
- string_helpers: Character and string classification
- trimmer: String trimming utilities
- elements: Element categories and the per-parse element list
- dictionary_loader: Cached loading of the bundled keyword dictionary
- keyword_manager: Keyword and phrase lookup
- tokens: Token model and directional token search
- tokenizer: Bracket, phrase and delimiter tokenization
- options: Parser options and config loading
- context: Shared state of a single parse
- boundary_helper: Title, release group and episode title boundaries
- number_resolver: Episode, volume and season number cascade
- parser: Ordered classification passes
- filename_parser: Extension stripping and the public entry point
- dictionary_validator: Schema and consistency checks for the keyword dictionary
- excel_writer: Excel report helpers
- evaluation: Blind and reference evaluation metrics
"""

# Explicit imports make the public API clear and prevent namespace pollution
from .elements import Element, ElementCategory, ElementList
from .keyword_manager import KeywordManager, KeywordOptions, get_keyword_manager
from .options import Options, load_options
from .tokens import Token, TokenCategory
from .tokenizer import Tokenizer, TokenizationResult
from .context import ParseContext
from .parser import Parser
from .filename_parser import FilenameParser, ParseResult, parse

__all__ = [
    'Element',
    'ElementCategory',
    'ElementList',
    'KeywordManager',
    'KeywordOptions',
    'get_keyword_manager',
    'Options',
    'load_options',
    'Token',
    'TokenCategory',
    'Tokenizer',
    'TokenizationResult',
    'ParseContext',
    'Parser',
    'FilenameParser',
    'ParseResult',
    'parse',
]
