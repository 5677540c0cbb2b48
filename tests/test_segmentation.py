"""Tests for syllable segmentation."""

from __future__ import annotations

import pytest

from magpie.services.segmentation import (
    DictionaryHyphenator,
    RuleBasedHyphenator,
    SyllableParser,
    apply_original_case,
    build_hyphenator,
    normalize_punctuation,
)


@pytest.fixture()
def parser() -> SyllableParser:
    return SyllableParser(RuleBasedHyphenator())


SAMPLES = [
    "",
    "Hello",
    "Running 42 NASA missions.",
    '"Hello,,  world!!!" she said -- twice.',
    "  leading space and trailing punctuation...",
    "Tabs\tand\nnewlines\n\nkept",
    "Café naïve résumé — accents",
    "snake_case_words and U2 and x86",
    "...",
]


class TestRuleBasedHyphenator:
    """Tests for the vowel-grouping fallback."""

    def test_consonant_cluster_splits_after_first_member(self):
        assert RuleBasedHyphenator().hyphenate("running") == ["run", "ning"]

    def test_single_consonant_starts_next_syllable(self):
        assert RuleBasedHyphenator().hyphenate("lemon") == ["le", "mon"]

    def test_trailing_consonants_stay_with_last_vowel_group(self):
        assert RuleBasedHyphenator().hyphenate("strengths") == ["strengths"]

    def test_y_counts_as_vowel(self):
        assert RuleBasedHyphenator().hyphenate("rhythm") == ["rhythm"]

    def test_no_vowels_is_one_syllable(self):
        assert RuleBasedHyphenator().hyphenate("brr") == ["brr"]


class TestDictionaryHyphenator:
    """Tests for the pyphen-backed capability."""

    def test_segments_rejoin_to_word(self):
        hyphenator = DictionaryHyphenator("en_US")
        parts = hyphenator.hyphenate("hyphenation")
        assert len(parts) > 1
        assert "".join(parts) == "hyphenation"

    def test_unknown_language_falls_back(self):
        hyphenator = build_hyphenator("xx_NOPE")
        assert isinstance(hyphenator, RuleBasedHyphenator)

    def test_dictionary_can_be_disabled(self):
        assert isinstance(build_hyphenator(use_dictionary=False), RuleBasedHyphenator)


class TestNormalizePunctuation:
    """Tests for repeated punctuation collapsing."""

    def test_collapses_identical_runs(self):
        assert normalize_punctuation("Wait!!! What?? Yes,, no;;") == "Wait! What? Yes, no;"

    def test_collapses_dashes_and_quotes(self):
        assert normalize_punctuation("a--b —— ''c'' \"\"d\"\"") == "a-b — 'c' \"d\""

    def test_mixed_marks_are_kept(self):
        assert normalize_punctuation("Really?! Yes...") == "Really?! Yes..."

    def test_idempotent(self):
        once = normalize_punctuation("Hey!!! -- ok??")
        assert normalize_punctuation(once) == once


class TestApplyOriginalCase:
    """Tests for re-casing lowercase syllable candidates."""

    def test_restores_case(self):
        assert apply_original_case("Running", ["run", "ning"]) == ["Run", "ning"]

    def test_overlong_candidates_are_truncated(self):
        assert apply_original_case("Abc", ["ab", "cde"]) == ["Ab", "c"]

    def test_empty_trailing_candidates_are_dropped(self):
        assert apply_original_case("Ab", ["abcd", "ef"]) == ["Ab"]

    def test_short_candidates_keep_remaining_characters(self):
        assert apply_original_case("Abcdef", ["ab", "cd"]) == ["Ab", "cdef"]


class TestSyllableParser:
    """Tests for SyllableParser.parse."""

    def test_empty_input(self, parser):
        document = parser.parse("")
        assert document.syllables == ()
        assert document.word_map == ()
        assert document.is_empty

    def test_digits_split_individually(self, parser):
        assert parser.parse("42").syllables == ("4", "2")

    def test_acronyms_split_into_letters(self, parser):
        assert parser.parse("NASA").syllables == ("N", "A", "S", "A")

    def test_single_capital_is_not_an_acronym(self, parser):
        assert parser.parse("I").syllables == ("I",)

    def test_word_is_syllabified_with_original_case(self, parser):
        assert parser.parse("Running").syllables == ("Run", "ning")

    def test_dictionary_syllables_rejoin_to_word(self):
        parser = SyllableParser(DictionaryHyphenator("en_US"))
        syllables = parser.parse("running").syllables
        assert len(syllables) > 1
        assert "".join(syllables) == "running"

    def test_word_map_entries(self, parser):
        document = parser.parse("Hello, 42 NASA.")
        entries = document.word_map

        assert [e.word for e in entries] == ["Hello", "42", "NASA"]
        assert [e.following for e in entries] == [", ", " ", "."]
        assert entries[0].syllables == ("Hel", "lo")
        assert (entries[1].start_index, entries[1].end_index) == (2, 3)
        assert (entries[2].start_index, entries[2].end_index) == (4, 7)

    def test_leading_text_is_kept(self, parser):
        document = parser.parse('"Quoted" text')
        assert document.leading == '"'
        assert document.word_map[0].word == "Quoted"

    def test_punctuation_only_has_no_syllables(self, parser):
        document = parser.parse("...")
        assert document.is_empty
        assert document.reconstruct() == "..."

    @pytest.mark.parametrize("text", SAMPLES)
    def test_round_trip(self, parser, text):
        document = parser.parse(text)
        assert document.reconstruct() == normalize_punctuation(text)

    @pytest.mark.parametrize("text", SAMPLES)
    def test_round_trip_with_dictionary(self, text):
        document = SyllableParser(DictionaryHyphenator("en_US")).parse(text)
        assert document.reconstruct() == normalize_punctuation(text)

    @pytest.mark.parametrize("text", SAMPLES)
    def test_index_contiguity(self, parser, text):
        document = parser.parse(text)
        entries = document.word_map

        for current, following in zip(entries, entries[1:]):
            assert current.end_index + 1 == following.start_index
        for entry in entries:
            assert entry.end_index - entry.start_index + 1 == len(entry.syllables)
        if entries:
            assert entries[0].start_index == 0
            assert entries[-1].end_index == len(document.syllables) - 1

        flattened = tuple(s for entry in entries for s in entry.syllables)
        assert flattened == document.syllables

    def test_normalized_input_parses_identically(self, parser):
        text = "Wow!!! It's -- really ''odd'', isn't it??"
        assert parser.parse(normalize_punctuation(text)) == parser.parse(text)

    def test_hyphenator_failure_uses_fallback(self):
        class BrokenHyphenator:
            def hyphenate(self, word: str) -> list[str]:
                raise RuntimeError("dictionary unavailable")

        parser = SyllableParser(BrokenHyphenator())
        assert parser.split_word("Running") == ["Run", "ning"]

    def test_mismatched_hyphenation_keeps_every_character(self):
        class SloppyHyphenator:
            def hyphenate(self, word: str) -> list[str]:
                return [word[:2], word]

        parser = SyllableParser(SloppyHyphenator())
        syllables = parser.split_word("Parsing")
        assert "".join(syllables) == "Parsing"
