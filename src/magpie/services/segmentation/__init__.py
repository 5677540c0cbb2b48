"""
Segmentation Package.

Turns article text into the syllable units revealed during paced reading:

- hyphenation: Dictionary-backed and rule-based syllable splitters
- parser: Punctuation normalization, word tokenizing and the word map

    text ──▶ SyllableParser.parse() ──▶ ParsedDocument ──▶ PacingEngine
                     │
                     ▼
               Hyphenator (pyphen dictionary │ vowel-grouping rules)
"""

from .hyphenation import (
    DictionaryHyphenator,
    Hyphenator,
    RuleBasedHyphenator,
    build_hyphenator,
)
from .parser import (
    ParsedDocument,
    SyllableParser,
    WordMapEntry,
    apply_original_case,
    normalize_punctuation,
)

__all__ = [
    "DictionaryHyphenator",
    "Hyphenator",
    "ParsedDocument",
    "RuleBasedHyphenator",
    "SyllableParser",
    "WordMapEntry",
    "apply_original_case",
    "build_hyphenator",
    "normalize_punctuation",
]
