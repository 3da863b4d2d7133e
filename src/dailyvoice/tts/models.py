"""TTS data models with validation."""

from dataclasses import dataclass
from typing import Any

from ..alignment.models import CharacterAlignment


@dataclass
class VoiceSettings:
    """Voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.75
    similarity_boost: float = 0.75
    style: float = 0.5
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
        }


@dataclass
class SpeechResult:
    """Synthesized narration with its character timings.

    Args:
        audio: Encoded audio bytes
        alignment: Character alignment, None if the engine returned none
        output_format: Engine output format (e.g. "mp3_44100_192")
        voice_id: Voice that produced the audio
    """

    audio: bytes
    alignment: CharacterAlignment | None
    output_format: str
    voice_id: str

    def __post_init__(self) -> None:
        if not self.audio:
            raise ValueError("audio cannot be empty")

    @property
    def format(self) -> str:
        return self.output_format.split("_")[0]

    @property
    def sample_rate(self) -> int | None:
        parts = self.output_format.split("_")
        return int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else None

    @property
    def bitrate(self) -> int | None:
        parts = self.output_format.split("_")
        return int(parts[2]) if len(parts) > 2 and parts[2].isdigit() else None
