"""Hyphenation capabilities used to split words into syllables.

Two variants share the ``Hyphenator`` protocol:

- ``DictionaryHyphenator`` wraps a pyphen (Hunspell-pattern) dictionary.
- ``RuleBasedHyphenator`` groups consonants around vowel runs and needs no data.

The variant is chosen once, when the parser is built; see ``build_hyphenator``.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

import pyphen

logger = logging.getLogger(__name__)

# Leading consonants, a vowel run (y counts as a vowel), then either the rest
# of the word when it has no more vowels, or the first consonant of a cluster.
_VOWEL_GROUP_PATTERN = re.compile(
    r"[^aeiouy]*[aeiouy]+(?:[^aeiouy]*$|[^aeiouy](?=[^aeiouy]))?",
    re.IGNORECASE,
)


class Hyphenator(Protocol):
    """Split a lowercase word into candidate syllables."""

    def hyphenate(self, word: str) -> list[str]: ...


class RuleBasedHyphenator:
    """Vowel-grouping syllabifier used when no dictionary is available."""

    def hyphenate(self, word: str) -> list[str]:
        matches = _VOWEL_GROUP_PATTERN.findall(word)
        return matches if matches else [word]


class DictionaryHyphenator:
    """Dictionary-backed syllabifier built on pyphen."""

    def __init__(self, language: str = "en_US"):
        self.language = language
        self._dictionary = pyphen.Pyphen(lang=language)

    def hyphenate(self, word: str) -> list[str]:
        if not word:
            return [word]
        parts = self._dictionary.inserted(word, hyphen="-").split("-")
        return [part for part in parts if part] or [word]


def build_hyphenator(language: str = "en_US", use_dictionary: bool = True) -> Hyphenator:
    """Select the hyphenation variant for a parser."""
    if not use_dictionary:
        return RuleBasedHyphenator()

    try:
        return DictionaryHyphenator(language)
    except KeyError:
        logger.warning(
            f"No hyphenation dictionary for '{language}', using fallback syllable parsing"
        )
        return RuleBasedHyphenator()


__all__ = [
    "DictionaryHyphenator",
    "Hyphenator",
    "RuleBasedHyphenator",
    "build_hyphenator",
]
