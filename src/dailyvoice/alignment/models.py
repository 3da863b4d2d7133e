"""Data models for character and word level speech alignment."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CharTiming:
    """Timing of a single synthesized character.

    Attributes:
        char: Character glyph
        start_time: Start of the character in milliseconds
        duration: Duration of the character in milliseconds
    """

    char: str
    start_time: int
    duration: int

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def to_dict(self) -> dict[str, Any]:
        return {"char": self.char, "startTime": self.start_time, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CharTiming":
        return cls(
            char=data["char"],
            start_time=int(data["startTime"]),
            duration=int(data["duration"]),
        )


@dataclass
class CharacterAlignment:
    """Character-level alignment as returned by a speech synthesis engine.

    The three sequences are parallel: position ``i`` of each one describes
    the same character. Lengths are not validated here so that malformed
    payloads can reach ``process_alignment`` and fail soft there.

    Attributes:
        chars: Character glyphs
        start_times_ms: Start time of each character in milliseconds
        durations_ms: Duration of each character in milliseconds
    """

    chars: list[str] | None
    start_times_ms: list[int] | None
    durations_ms: list[int] | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CharacterAlignment":
        """Build from a JSON payload.

        Accepts both the websocket field names (``chars``,
        ``charStartTimesMs``, ``charsDurationsMs``) and their snake_case
        equivalents. Missing fields become None.
        """
        return cls(
            chars=data.get("chars"),
            start_times_ms=data.get("charStartTimesMs", data.get("char_start_times_ms")),
            durations_ms=data.get("charsDurationsMs", data.get("chars_durations_ms")),
        )

    @classmethod
    def from_elevenlabs(cls, alignment: Any) -> "CharacterAlignment":
        """Convert an ElevenLabs SDK alignment object to millisecond timings.

        The SDK reports ``characters``, ``character_start_times_seconds`` and
        ``character_end_times_seconds``; durations are derived from the
        start/end pairs.
        """
        chars = list(alignment.characters)
        starts = [round(s * 1000) for s in alignment.character_start_times_seconds]
        ends = [round(e * 1000) for e in alignment.character_end_times_seconds]
        durations = [max(0, end - start) for start, end in zip(starts, ends)]
        return cls(chars=chars, start_times_ms=starts, durations_ms=durations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "chars": self.chars,
            "charStartTimesMs": self.start_times_ms,
            "charsDurationsMs": self.durations_ms,
        }


@dataclass(frozen=True)
class WordAlignment:
    """Timing of one word derived from its characters.

    Attributes:
        word: Word text (no whitespace)
        start_time: Start time of the first character in milliseconds
        end_time: start + duration of the last character in milliseconds
        characters: Constituent character timings in source order
    """

    word: str
    start_time: int
    end_time: int
    characters: tuple[CharTiming, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "characters": [c.to_dict() for c in self.characters],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WordAlignment":
        return cls(
            word=data["word"],
            start_time=int(data["startTime"]),
            end_time=int(data["endTime"]),
            characters=tuple(CharTiming.from_dict(c) for c in data.get("characters", [])),
        )


@dataclass(frozen=True)
class HighlightEffect:
    """Highlight intensity for one word around the active position."""

    index: int
    intensity: float
    is_active: bool
