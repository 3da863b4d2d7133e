"""Character-to-word alignment processing for synchronized text highlighting.

Speech synthesis returns one timing entry per character. The functions here
group those entries into words and answer point-in-time queries used to
highlight words while the narration plays. Every function is pure and
synchronous, so it is safe to call once per playback tick.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from .models import CharacterAlignment, CharTiming, HighlightEffect, WordAlignment

logger = logging.getLogger(__name__)

_TRAILING_PUNCTUATION = re.compile(r"[.,!?;:]$")


def _alignment_fields(candidate: Any) -> tuple[Any, Any, Any] | None:
    if isinstance(candidate, CharacterAlignment):
        return candidate.chars, candidate.start_times_ms, candidate.durations_ms
    if isinstance(candidate, Mapping):
        parsed = CharacterAlignment.from_dict(candidate)
        return parsed.chars, parsed.start_times_ms, parsed.durations_ms
    return None


def validate_alignment(candidate: Any) -> bool:
    """Check that externally sourced data has the alignment shape.

    Args:
        candidate: Mapping (JSON payload) or CharacterAlignment

    Returns:
        True only when characters, start times and durations are all
        sequences of identical length
    """
    fields = _alignment_fields(candidate)
    if fields is None:
        return False

    if not all(isinstance(f, (list, tuple)) for f in fields):
        return False

    chars, starts, durations = fields
    return len(chars) == len(starts) == len(durations)


def _make_word(chars: list[CharTiming]) -> WordAlignment:
    last = chars[-1]
    return WordAlignment(
        word="".join(c.char for c in chars).strip(),
        start_time=chars[0].start_time,
        end_time=last.start_time + last.duration,
        characters=tuple(chars),
    )


def process_alignment(
    text: str, alignment: CharacterAlignment | Mapping[str, Any]
) -> list[WordAlignment]:
    """Group character timings into word timings.

    Word boundaries come from the character sequence, not from splitting
    ``text``. Any character that is empty after stripping ends the current
    word. Runs of boundary characters never produce empty words.

    Args:
        text: Original text, used only for a consistency check in the logs
        alignment: Character alignment (object or JSON payload)

    Returns:
        Words in source order, or an empty list when the alignment is
        missing a sequence or the sequences differ in length
    """
    fields = _alignment_fields(alignment)
    if fields is None or any(f is None for f in fields):
        logger.warning("Invalid alignment data provided")
        return []

    chars, starts, durations = fields
    if not (len(chars) == len(starts) == len(durations)):
        logger.warning("Alignment data arrays have mismatched lengths")
        return []

    words: list[WordAlignment] = []
    current: list[CharTiming] = []

    for char, start, duration in zip(chars, starts, durations):
        if char.strip() == "":
            if current:
                words.append(_make_word(current))
                current = []
            continue
        current.append(CharTiming(char=char, start_time=int(start), duration=int(duration)))

    if current:
        words.append(_make_word(current))

    if text and " ".join(w.word for w in words) != " ".join(text.split()):
        logger.debug("Aligned words do not reproduce the source text exactly")

    logger.debug(f"Processed {len(words)} words from alignment data")
    return words


def find_active_words(
    words: Sequence[WordAlignment], current_time_ms: float, highlight_range: int = 2
) -> list[int]:
    """Find the indices to highlight at a playback position.

    The first word whose [start, end] interval contains the time is the
    centre of the window. Later overlapping words are ignored.

    Args:
        words: Word alignment from ``process_alignment``
        current_time_ms: Playback position in milliseconds
        highlight_range: Number of neighbours highlighted on each side

    Returns:
        Sorted contiguous indices clipped to the sequence bounds, or an
        empty list when no word is being spoken at that time
    """
    for i, word in enumerate(words):
        if word.start_time <= current_time_ms <= word.end_time:
            start = max(0, i - highlight_range)
            end = min(len(words), i + highlight_range + 1)
            return list(range(start, end))

    return []


def get_word_at_time(
    words: Sequence[WordAlignment], current_time_ms: float
) -> tuple[int, WordAlignment] | None:
    """Return the index and word being spoken at a playback position."""
    for i, word in enumerate(words):
        if word.start_time <= current_time_ms <= word.end_time:
            return i, word
    return None


def progress_through_words(
    words: Sequence[WordAlignment], current_time_ms: float
) -> float:
    """Fraction of the words spoken so far, clamped to [0, 1].

    Finished words count fully, the word in progress counts by the share
    of its duration already elapsed.
    """
    if not words:
        return 0.0

    completed = 0
    partial = 0.0

    for i, word in enumerate(words):
        if current_time_ms >= word.end_time:
            completed = i + 1
        elif current_time_ms >= word.start_time:
            duration = word.end_time - word.start_time
            partial = (current_time_ms - word.start_time) / duration if duration > 0 else 0.0
            break
        else:
            break

    return min(max((completed + partial) / len(words), 0.0), 1.0)


def word_highlight_effects(
    words: Sequence[WordAlignment],
    current_time_ms: float,
    active_range: int = 1,
    fade_range: int = 2,
    intensity: float = 1.0,
) -> list[HighlightEffect]:
    """Compute a fading highlight around the active word.

    Words within ``active_range`` of the active word get full intensity.
    The next ``fade_range`` words on each side fade out linearly from 60%.
    """
    current = get_word_at_time(words, current_time_ms)
    if current is None:
        return []

    index, _ = current
    total_range = active_range + fade_range
    effects: list[HighlightEffect] = []

    for i in range(max(0, index - total_range), min(len(words), index + total_range + 1)):
        distance = abs(i - index)
        if distance <= active_range:
            effects.append(HighlightEffect(index=i, intensity=intensity, is_active=True))
            continue

        fade_distance = distance - active_range
        value = (1 - fade_distance / fade_range) * 0.6 * intensity
        if value > 0:
            effects.append(HighlightEffect(index=i, intensity=value, is_active=False))

    return effects


def simple_highlight(
    words: Sequence[str],
    current_time_s: float,
    total_duration_s: float,
    highlight_range: int = 3,
) -> list[int]:
    """Proportional highlighting for narrations without alignment data."""
    if not words or total_duration_s <= 0:
        return []

    progress = min(current_time_s / total_duration_s, 1.0)
    current = int(progress * len(words))

    start = max(0, current - highlight_range)
    end = min(len(words), current + highlight_range + 1)
    return list(range(start, end))


def map_display_words(
    display_words: Sequence[str], alignment_words: Sequence[WordAlignment]
) -> list[int]:
    """Map alignment word indices to display word indices.

    The display text may split punctuation or contractions differently from
    the synthesis engine. Words are paired in order; -1 marks an alignment
    word with no display word left.
    """
    mapping: list[int] = []
    display_index = 0

    for aligned in alignment_words:
        if display_index >= len(display_words):
            mapping.append(-1)
            continue

        # Exact, punctuation-stripped, contraction and mismatched words
        # all advance one display position.
        mapping.append(display_index)
        display_index += 1

        word = aligned.word
        shown = display_words[mapping[-1]]
        if word != shown and _TRAILING_PUNCTUATION.sub("", word) != shown:
            if not ("'" in word and "'" in shown):
                logger.debug(f"Display word mismatch: {word!r} vs {shown!r}")

    return mapping


def find_display_words_at_time(
    words: Sequence[WordAlignment],
    display_words: Sequence[str],
    current_time_ms: float,
    highlight_range: int = 2,
) -> list[int]:
    """Like ``find_active_words`` but returns display word indices."""
    if not words:
        return []

    mapping = map_display_words(display_words, words)
    indices = (
        mapping[i] for i in find_active_words(words, current_time_ms, highlight_range)
    )
    return sorted(i for i in indices if 0 <= i < len(display_words))
