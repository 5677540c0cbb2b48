"""
Syllable Parser for Paced Reading.

This module turns arbitrary prose into the ordered syllable sequence that the
pacing engine reveals one unit at a time, plus a word map that binds runs of
syllables back to their source word and the punctuation/spacing after it.

Pipeline:
    text → normalize_punctuation() → word tokens → classify → hyphenate → re-case

Guarantees:
    - Syllables of a word, concatenated, equal the original word exactly
      (case included).
    - ``ParsedDocument.reconstruct()`` returns the punctuation-normalized input.
    - Word map indices are contiguous and cover every syllable.

Usage:
    parser = SyllableParser()
    document = parser.parse("Running 42 NASA missions.")
    document.syllables   # ('Run', 'ning', '4', '2', 'N', 'A', 'S', 'A', 'mis', 'sions')
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .hyphenation import Hyphenator, RuleBasedHyphenator, build_hyphenator

logger = logging.getLogger(__name__)

# Runs of 2+ identical marks collapse to one, applied in this order
_REPEATED_PUNCTUATION = (
    re.compile(r"([,;!?])\1+"),
    re.compile(r"([—-])\1+"),
    re.compile(r"(['\"])\1+"),
)

# A word followed by the non-alphanumeric run that separates it from the next
_WORD_PATTERN = re.compile(r"(\w+)(\W*)")
_LEADING_PATTERN = re.compile(r"\W*")


@dataclass(frozen=True)
class WordMapEntry:
    """A source word and the syllable indices it occupies."""

    word: str
    following: str
    start_index: int
    end_index: int
    syllables: tuple[str, ...]


@dataclass(frozen=True)
class ParsedDocument:
    """Syllable sequence and word map derived from one body of text."""

    syllables: tuple[str, ...] = ()
    word_map: tuple[WordMapEntry, ...] = ()
    leading: str = ""  # non-word text before the first word

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to pace through."""
        return not self.syllables

    def reconstruct(self) -> str:
        """Rebuild the normalized source text from the word map."""
        parts = [self.leading]
        for entry in self.word_map:
            parts.extend(entry.syllables)
            parts.append(entry.following)
        return "".join(parts)


def normalize_punctuation(text: str) -> str:
    """Collapse repeated punctuation runs (``!!!`` → ``!``, ``--`` → ``-``)."""
    for pattern in _REPEATED_PUNCTUATION:
        text = pattern.sub(r"\1", text)
    return text


def apply_original_case(original: str, syllables: list[str]) -> list[str]:
    """
    Map lowercase syllable candidates back onto the original word.

    Each candidate consumes exactly ``len(candidate)`` characters of the
    original word, so the result always concatenates to ``original``.
    Characters left over when the candidates are too short are appended to
    the last syllable; candidates that would run past the end of the word
    are cut short and dropped once they become empty.
    """
    result: list[str] = []
    position = 0

    for syllable in syllables:
        piece = original[position : position + len(syllable)]
        position += len(piece)
        if piece:
            result.append(piece)

    if position < len(original):
        if result:
            result[-1] += original[position:]
        else:
            result.append(original[position:])

    return result


class SyllableParser:
    """
    Deterministic text → ``ParsedDocument`` segmenter.

    Numbers are revealed digit by digit and all-caps acronyms letter by
    letter; every other word goes through the hyphenation capability, falling
    back to the rule-based splitter if the capability raises.

    Attributes:
        hyphenator: Capability used for ordinary words
    """

    def __init__(self, hyphenator: Optional[Hyphenator] = None):
        self.hyphenator = hyphenator if hyphenator is not None else build_hyphenator()
        self._fallback = RuleBasedHyphenator()

    def parse(self, text: str) -> ParsedDocument:
        """
        Segment ``text`` into syllables and a word map.

        Args:
            text: Arbitrary prose; may be empty

        Returns:
            ParsedDocument. An empty ``syllables`` tuple means there is no
            content to display.
        """
        cleaned = normalize_punctuation(text)

        leading_match = _LEADING_PATTERN.match(cleaned)
        leading = leading_match.group(0) if leading_match else ""

        syllables: list[str] = []
        word_map: list[WordMapEntry] = []

        for match in _WORD_PATTERN.finditer(cleaned):
            word, following = match.group(1), match.group(2)
            if not word:
                continue

            word_syllables = self.split_word(word)
            start = len(syllables)
            syllables.extend(word_syllables)
            word_map.append(
                WordMapEntry(
                    word=word,
                    following=following,
                    start_index=start,
                    end_index=start + len(word_syllables) - 1,
                    syllables=tuple(word_syllables),
                )
            )

        return ParsedDocument(
            syllables=tuple(syllables),
            word_map=tuple(word_map),
            leading=leading,
        )

    def split_word(self, word: str) -> list[str]:
        """Split a single word into syllable units."""
        if word.isdecimal():
            return list(word)
        if len(word) >= 2 and word.isalpha() and word.isupper():
            return list(word)
        return self.syllabify(word)

    def syllabify(self, word: str) -> list[str]:
        """Hyphenate ``word`` case-insensitively, then restore its case."""
        lower_word = word.lower()
        try:
            candidates = self.hyphenator.hyphenate(lower_word)
        except Exception as exc:
            logger.debug(f"Hyphenation failed for '{word}', using fallback: {exc}")
            candidates = self._fallback.hyphenate(lower_word)

        return apply_original_case(word, candidates)


__all__ = [
    "ParsedDocument",
    "SyllableParser",
    "WordMapEntry",
    "apply_original_case",
    "normalize_punctuation",
]
