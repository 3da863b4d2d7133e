"""ElevenLabs narration provider with character timestamps."""

import asyncio
import base64
import logging
import os

from elevenlabs import VoiceSettings as ElevenLabsVoiceSettings
from elevenlabs.client import ElevenLabs

from ..alignment.models import CharacterAlignment
from ..tts.errors import TTSAPIError, TTSAuthError, TTSError, TTSVoiceError
from ..tts.models import SpeechResult, VoiceSettings
from ..tts.retry import is_retryable_error, is_voice_error, with_retry
from .base import NarrationProvider

logger = logging.getLogger(__name__)

DEFAULT_VOICE_ID = "tTZ0TVc9Q1bbWngiduLK"
DEFAULT_MODEL_ID = "eleven_monolingual_v1"
DEFAULT_OUTPUT_FORMAT = "mp3_44100_192"
MAX_TEXT_LENGTH = 500

FALLBACK_VOICES = {
    "primary": "pNInz6obpgDQGcFmaJgB",  # Adam
    "fallback": "EXAVITQu4vr4xnSDxMaL",  # Bella
    "emergency": "21m00Tcm4TlvDq8ikWAM",  # Rachel
}


def _map_error(e: Exception, action: str) -> TTSError:
    """Translate an SDK exception into the TTS error hierarchy."""
    message = str(e)
    status = getattr(e, "status_code", None)

    if "unauthorized" in message.lower() or "401" in message or status == 401:
        return TTSAuthError(f"Authentication failed: {e}", e)
    if is_voice_error(e):
        return TTSVoiceError(f"Voice unavailable: {e}", status, e)
    if "429" in message or status == 429:
        return TTSAPIError(f"Rate limit exceeded: {e}", 429, e)
    if status is not None and 500 <= status < 600:
        return TTSAPIError(f"Server error: {e}", status, e)
    if is_retryable_error(e):
        return TTSAPIError(f"Network error: {e}", status, e)
    return TTSAPIError(f"{action}: {e}", status, e)


class ElevenLabsProvider(NarrationProvider):
    """ElevenLabs narration provider.

    Synthesizes speech together with per-character timings, falling back
    through FALLBACK_VOICES when a voice is unusable and retrying
    transient API failures with backoff.
    """

    name = "elevenlabs"

    def __init__(
        self,
        api_key: str | None = None,
        model_id: str = DEFAULT_MODEL_ID,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        voice_settings: VoiceSettings | None = None,
        max_retries: int = 3,
        base_delay_ms: float = 1000,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            model_id: ElevenLabs model ID
            output_format: Output format string (e.g. "mp3_44100_192")
            voice_settings: Generation settings, defaults when omitted
            max_retries: Attempts per narration for transient failures
            base_delay_ms: Initial retry backoff

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        self.model_id = model_id
        self.output_format = output_format
        self.voice_settings = voice_settings or VoiceSettings()
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

    def voice_candidates(self, voice: str | None) -> list[str]:
        """Voices to try in order: the requested one, then the fallbacks."""
        candidates = [voice or DEFAULT_VOICE_ID, *FALLBACK_VOICES.values()]
        return list(dict.fromkeys(candidates))

    async def _convert(self, text: str, voice_id: str) -> SpeechResult:
        settings = ElevenLabsVoiceSettings(**self.voice_settings.to_dict())

        def _sync_convert():
            return self._client.text_to_speech.convert_with_timestamps(
                voice_id=voice_id,
                text=text,
                model_id=self.model_id,
                output_format=self.output_format,
                voice_settings=settings,
            )

        try:
            response = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise _map_error(e, "API call failed") from e

        if not response or not response.audio_base_64:
            raise TTSAPIError("No audio data received from API")

        audio = base64.b64decode(response.audio_base_64)
        alignment = (
            CharacterAlignment.from_elevenlabs(response.alignment)
            if response.alignment is not None
            else None
        )
        if alignment is None:
            logger.warning(f"No alignment returned for voice {voice_id}")

        return SpeechResult(
            audio=audio,
            alignment=alignment,
            output_format=self.output_format,
            voice_id=voice_id,
        )

    async def _convert_with_fallbacks(
        self, text: str, voice: str | None
    ) -> SpeechResult:
        last_error: TTSVoiceError | None = None
        for voice_id in self.voice_candidates(voice):
            try:
                logger.debug(f"Narrating with voice {voice_id}")
                return await self._convert(text, voice_id)
            except TTSVoiceError as e:
                logger.warning(f"Voice {voice_id} failed, trying next: {e}")
                last_error = e

        raise TTSVoiceError(
            f"All voices failed. Last error: {last_error}",
            getattr(last_error, "status_code", None),
            last_error,
        )

    async def synthesize_with_alignment(
        self, text: str, voice: str | None = None
    ) -> SpeechResult:
        """Narrate text, returning audio with character timings.

        Args:
            text: Text to narrate (at most 500 characters)
            voice: Voice ID, defaults to DEFAULT_VOICE_ID

        Returns:
            SpeechResult with decoded audio and millisecond alignment

        Raises:
            ValueError: If text is empty or too long
            TTSAuthError: If authentication fails
            TTSVoiceError: If every candidate voice is unusable
            TTSAPIError: If the API keeps failing
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if len(text) > MAX_TEXT_LENGTH:
            raise ValueError(
                f"Text is too long (max {MAX_TEXT_LENGTH} characters)"
            )

        stripped = text.strip()
        return await with_retry(
            lambda: self._convert_with_fallbacks(stripped, voice),
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
            retry_if=lambda e: not is_voice_error(e) and is_retryable_error(e),
        )

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Returns:
            List of voice dictionaries with id, name, and provider fields

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """

        def _sync_get_voices():
            response = self._client.voices.get_all()
            return [
                {"id": voice.voice_id, "name": voice.name, "provider": self.name}
                for voice in response.voices
            ]

        try:
            return await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise _map_error(e, "Failed to list voices") from e
