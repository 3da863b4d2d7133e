"""Abstract base class for narration providers.

This module defines the interface that all narration providers must
implement, ensuring consistent behavior across different TTS backends.
"""

from abc import ABC, abstractmethod

from ..tts.models import SpeechResult


class NarrationProvider(ABC):
    """Abstract base class for narration providers.

    A narration provider turns text into audio together with the
    character-level timings needed to highlight words during playback.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "elevenlabs")
        }
    """

    name: str = ""

    @abstractmethod
    async def synthesize_with_alignment(
        self, text: str, voice: str | None = None
    ) -> SpeechResult:
        """Convert text to audio with character timings.

        Args:
            text: The text to narrate
            voice: Voice ID to use, or None for the provider default

        Returns:
            SpeechResult carrying audio bytes and character alignment

        Raises:
            ValueError: If text is empty or too long
            TTSError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Returns:
            List of voice dictionaries, each containing:
            - id: Unique voice identifier
            - name: Human-readable voice name
            - provider: Provider name

        Raises:
            TTSError: If voice listing fails
        """
        pass
