"""Speech alignment package for dailyvoice.

Converts character-level synthesis timings into word timings and answers
playback-time highlighting queries.
"""

from .models import CharacterAlignment, CharTiming, HighlightEffect, WordAlignment
from .processor import (
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

__all__ = [
    "CharTiming",
    "CharacterAlignment",
    "HighlightEffect",
    "WordAlignment",
    "find_active_words",
    "find_display_words_at_time",
    "get_word_at_time",
    "map_display_words",
    "process_alignment",
    "progress_through_words",
    "simple_highlight",
    "validate_alignment",
    "word_highlight_effects",
]
