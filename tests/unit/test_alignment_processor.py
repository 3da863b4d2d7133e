"""Unit tests for character-to-word alignment processing."""

import logging
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from dailyvoice.alignment import (
    CharacterAlignment,
    WordAlignment,
    find_active_words,
    find_display_words_at_time,
    get_word_at_time,
    map_display_words,
    process_alignment,
    progress_through_words,
    simple_highlight,
    validate_alignment,
    word_highlight_effects,
)


def make_alignment(text: str, char_ms: int = 100) -> CharacterAlignment:
    """Build evenly spaced character timings for text."""
    chars = list(text)
    return CharacterAlignment(
        chars=chars,
        start_times_ms=[i * char_ms for i in range(len(chars))],
        durations_ms=[char_ms] * len(chars),
    )


def make_words(*spans: tuple[str, int, int]) -> list[WordAlignment]:
    return [WordAlignment(word=w, start_time=s, end_time=e, characters=()) for w, s, e in spans]


class TestProcessAlignment:
    """Test grouping of character timings into words."""

    def test_go_now_example(self) -> None:
        """Test the two-word example produces the documented timings."""
        alignment = CharacterAlignment(
            chars=["G", "O", " ", "N", "O", "W"],
            start_times_ms=[0, 100, 200, 300, 400, 500],
            durations_ms=[100, 100, 100, 100, 100, 100],
        )

        words = process_alignment("GO NOW", alignment)

        assert [w.word for w in words] == ["GO", "NOW"]
        assert (words[0].start_time, words[0].end_time) == (0, 200)
        assert (words[1].start_time, words[1].end_time) == (300, 600)
        assert [c.char for c in words[1].characters] == ["N", "O", "W"]

    def test_accepts_camel_case_payload(self) -> None:
        """Test a raw JSON payload is processed like an alignment object."""
        payload = {
            "chars": ["H", "i"],
            "charStartTimesMs": [0, 50],
            "charsDurationsMs": [50, 60],
        }

        words = process_alignment("Hi", payload)

        assert len(words) == 1
        assert words[0].word == "Hi"
        assert words[0].end_time == 110

    def test_consecutive_whitespace_never_yields_empty_words(self) -> None:
        """Test runs of boundary characters are skipped."""
        words = process_alignment("a  b", make_alignment("  a \n\t b  "))

        assert [w.word for w in words] == ["a", "b"]

    def test_punctuation_stays_attached(self) -> None:
        """Test punctuation is part of the word it follows."""
        words = process_alignment("Stay hungry.", make_alignment("Stay hungry."))

        assert [w.word for w in words] == ["Stay", "hungry."]

    def test_missing_field_returns_empty_and_warns(self, caplog) -> None:
        """Test a missing sequence is rejected with a warning."""
        alignment = CharacterAlignment(chars=["a"], start_times_ms=None, durations_ms=[1])

        with caplog.at_level(logging.WARNING):
            assert process_alignment("a", alignment) == []

        assert "Invalid alignment data provided" in caplog.text

    def test_mismatched_lengths_returns_empty_and_warns(self, caplog) -> None:
        """Test sequences of different lengths are rejected with a warning."""
        alignment = CharacterAlignment(
            chars=["a", "b"], start_times_ms=[0], durations_ms=[10, 10]
        )

        with caplog.at_level(logging.WARNING):
            assert process_alignment("ab", alignment) == []

        assert "mismatched lengths" in caplog.text

    def test_none_alignment_returns_empty(self) -> None:
        """Test narration without alignment yields no words."""
        assert process_alignment("text", None) == []

    def test_empty_alignment_returns_empty(self) -> None:
        """Test empty but valid sequences yield no words."""
        assert process_alignment("", CharacterAlignment([], [], [])) == []


class TestValidateAlignment:
    """Test the alignment shape guard."""

    def test_valid_alignment(self) -> None:
        assert validate_alignment(make_alignment("abc")) is True

    def test_valid_mapping(self) -> None:
        payload = {"chars": ["a"], "charStartTimesMs": [0], "charsDurationsMs": [5]}
        assert validate_alignment(payload) is True

    @pytest.mark.parametrize(
        "candidate",
        [
            None,
            "not an alignment",
            {"chars": ["a"], "charStartTimesMs": [0]},
            {"chars": ["a"], "charStartTimesMs": [0, 1], "charsDurationsMs": [5]},
            {"chars": "abc", "charStartTimesMs": [0, 1, 2], "charsDurationsMs": [1, 1, 1]},
        ],
    )
    def test_invalid_shapes(self, candidate) -> None:
        """Test malformed payloads are rejected."""
        assert validate_alignment(candidate) is False


class TestFindActiveWords:
    """Test the highlight window around the spoken word."""

    def setup_method(self) -> None:
        self.words = make_words(
            ("one", 0, 100),
            ("two", 150, 250),
            ("three", 300, 400),
            ("four", 450, 550),
            ("five", 600, 700),
        )

    def test_zero_range_inside_word(self) -> None:
        """Test the GO NOW example at 350 ms with no neighbours."""
        words = make_words(("GO", 0, 200), ("NOW", 300, 600))

        assert find_active_words(words, 350, highlight_range=0) == [1]

    def test_gap_between_words_is_empty(self) -> None:
        """Test a time between words highlights nothing."""
        words = make_words(("GO", 0, 200), ("NOW", 300, 600))

        assert find_active_words(words, 250, highlight_range=0) == []

    def test_before_first_word_is_empty(self) -> None:
        words = make_words(("GO", 100, 200), ("NOW", 300, 600))

        assert find_active_words(words, 99, highlight_range=2) == []
        assert find_active_words(words, 0, highlight_range=2) == []

    def test_after_last_word_is_empty(self) -> None:
        assert find_active_words(self.words, 701, highlight_range=2) == []
        assert find_active_words(self.words, 10_000, highlight_range=0) == []

    def test_window_is_centered(self) -> None:
        assert find_active_words(self.words, 320, highlight_range=1) == [1, 2, 3]

    def test_window_clipped_at_start(self) -> None:
        assert find_active_words(self.words, 50, highlight_range=2) == [0, 1, 2]

    def test_window_clipped_at_end(self) -> None:
        assert find_active_words(self.words, 650, highlight_range=2) == [2, 3, 4]

    def test_bounds_are_inclusive(self) -> None:
        """Test both the start and end times count as inside the word."""
        assert find_active_words(self.words, 150, highlight_range=0) == [1]
        assert find_active_words(self.words, 250, highlight_range=0) == [1]

    def test_first_overlapping_word_wins(self) -> None:
        """Test overlapping intervals resolve to the earliest word."""
        words = make_words(("a", 0, 200), ("b", 100, 300))

        assert find_active_words(words, 150, highlight_range=0) == [0]

    def test_empty_words(self) -> None:
        assert find_active_words([], 100) == []


class TestTimeQueries:
    """Test point-in-time helpers built on word timings."""

    def setup_method(self) -> None:
        self.words = make_words(("GO", 0, 200), ("NOW", 300, 600))

    def test_get_word_at_time(self) -> None:
        index, word = get_word_at_time(self.words, 400)

        assert index == 1
        assert word.word == "NOW"

    def test_get_word_at_time_in_gap(self) -> None:
        assert get_word_at_time(self.words, 250) is None

    def test_progress_is_clamped(self) -> None:
        assert progress_through_words(self.words, -100) == 0.0
        assert progress_through_words(self.words, 10_000) == 1.0
        assert progress_through_words([], 100) == 0.0

    def test_progress_midway(self) -> None:
        assert 0.0 < progress_through_words(self.words, 300) < 1.0


class TestHighlightEffects:
    """Test fade effects around the spoken word."""

    def test_active_word_has_full_intensity(self) -> None:
        words = make_words(("a", 0, 100), ("b", 100, 200), ("c", 200, 300), ("d", 300, 400))

        effects = {e.index: e for e in word_highlight_effects(words, 150)}

        assert effects[1].is_active is True
        assert effects[1].intensity == 1.0
        assert all(e.intensity <= 1.0 for e in effects.values())

    def test_no_effects_in_gap(self) -> None:
        words = make_words(("a", 0, 100), ("b", 300, 400))

        assert word_highlight_effects(words, 200) == []

    def test_simple_highlight_without_alignment(self) -> None:
        """Test the proportional fallback highlights around the estimated word."""
        display = ["one", "two", "three", "four", "five"]

        active = simple_highlight(display, current_time_s=0.0, total_duration_s=5.0, highlight_range=1)

        assert 0 in active
        assert all(0 <= i < len(display) for i in active)

    def test_simple_highlight_no_duration(self) -> None:
        assert simple_highlight(["a"], 1.0, 0.0) == []


class TestDisplayMapping:
    """Test mapping alignment words onto displayed words."""

    def test_positional_mapping(self) -> None:
        words = make_words(("Don't", 0, 100), ("stop.", 200, 300))

        assert map_display_words(["Don't", "stop"], words) == [0, 1]

    def test_extra_alignment_words_map_to_minus_one(self) -> None:
        words = make_words(("a", 0, 100), ("b", 200, 300))

        assert map_display_words(["a"], words) == [0, -1]

    def test_display_words_at_time(self) -> None:
        words = make_words(("a", 0, 100), ("b", 200, 300), ("c", 400, 500))

        assert find_display_words_at_time(words, ["a", "b"], 450, highlight_range=1) == [1]
        assert find_display_words_at_time([], ["a"], 0) == []
