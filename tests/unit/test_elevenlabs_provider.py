"""Unit tests for ElevenLabsProvider error handling and logic."""

import base64
import os
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from dailyvoice.providers.elevenlabs import (
    DEFAULT_VOICE_ID,
    FALLBACK_VOICES,
    ElevenLabsProvider,
)
from dailyvoice.tts.errors import TTSAPIError, TTSAuthError, TTSVoiceError


def make_response(audio: bytes = b"mp3-bytes", with_alignment: bool = True):
    alignment = (
        SimpleNamespace(
            characters=["G", "O"],
            character_start_times_seconds=[0.0, 0.1],
            character_end_times_seconds=[0.1, 0.25],
        )
        if with_alignment
        else None
    )
    return SimpleNamespace(
        audio_base_64=base64.b64encode(audio).decode("ascii"),
        alignment=alignment,
    )


class APIError(Exception):
    """Stand-in for an SDK error carrying an HTTP status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class TestElevenLabsProviderInitialization:
    """Test ElevenLabsProvider initialization and authentication error handling."""

    def test_initialization_with_provided_api_key(self) -> None:
        """Test ElevenLabsProvider initializes successfully with provided API key."""
        with patch("dailyvoice.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            mock_client = MagicMock()
            mock_elevenlabs.return_value = mock_client

            provider = ElevenLabsProvider(api_key="test_key")

            assert provider._api_key == "test_key"
            mock_elevenlabs.assert_called_once_with(api_key="test_key")
            assert provider._client == mock_client

    def test_initialization_with_env_var_api_key(self) -> None:
        """Test ElevenLabsProvider reads API key from environment variable."""
        with patch.dict(os.environ, {"ELEVENLABS_API_KEY": "env_test_key"}):
            with patch("dailyvoice.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
                provider = ElevenLabsProvider()

                assert provider._api_key == "env_test_key"
                mock_elevenlabs.assert_called_once_with(api_key="env_test_key")

    def test_initialization_no_api_key_raises_auth_error(self) -> None:
        """Test ElevenLabsProvider raises TTSAuthError when no API key provided."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(TTSAuthError, match="ElevenLabs API key not found"):
                ElevenLabsProvider()

    def test_initialization_client_failure_raises_auth_error(self) -> None:
        """Test client construction failures surface as TTSAuthError."""
        with patch("dailyvoice.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            mock_elevenlabs.side_effect = Exception("Invalid API key")

            with pytest.raises(TTSAuthError, match="Failed to initialize ElevenLabs client"):
                ElevenLabsProvider(api_key="invalid_key")


class TestSynthesizeWithAlignment:
    """Test narration with character timestamps."""

    def setup_method(self) -> None:
        """Set up test provider with mocked ElevenLabs client."""
        with patch("dailyvoice.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.client = MagicMock()
            mock_elevenlabs.return_value = self.client
            self.provider = ElevenLabsProvider(api_key="test_key", base_delay_ms=1)
        self.convert = self.client.text_to_speech.convert_with_timestamps

    @pytest.mark.asyncio
    async def test_empty_text_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Text cannot be empty"):
            await self.provider.synthesize_with_alignment("   ")

    @pytest.mark.asyncio
    async def test_text_over_limit_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="too long"):
            await self.provider.synthesize_with_alignment("x" * 501)

        self.convert.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_decodes_audio_and_alignment(self) -> None:
        self.convert.return_value = make_response(b"audio!")

        result = await self.provider.synthesize_with_alignment("  GO  ", "voice-1")

        assert result.audio == b"audio!"
        assert result.voice_id == "voice-1"
        assert result.output_format == "mp3_44100_192"
        assert result.alignment.start_times_ms == [0, 100]
        assert result.alignment.durations_ms == [100, 150]

        kwargs = self.convert.call_args.kwargs
        assert kwargs["text"] == "GO"
        assert kwargs["voice_id"] == "voice-1"
        assert kwargs["model_id"] == "eleven_monolingual_v1"

    @pytest.mark.asyncio
    async def test_default_voice_used_when_none_given(self) -> None:
        self.convert.return_value = make_response()

        result = await self.provider.synthesize_with_alignment("GO")

        assert result.voice_id == DEFAULT_VOICE_ID

    @pytest.mark.asyncio
    async def test_missing_alignment_is_allowed(self) -> None:
        self.convert.return_value = make_response(with_alignment=False)

        result = await self.provider.synthesize_with_alignment("GO")

        assert result.alignment is None

    @pytest.mark.asyncio
    async def test_voice_error_falls_back_to_next_voice(self) -> None:
        """Test an unusable voice moves on to the primary fallback."""
        self.convert.side_effect = [Exception("Voice not found"), make_response()]

        result = await self.provider.synthesize_with_alignment("GO", "missing-voice")

        assert result.voice_id == FALLBACK_VOICES["primary"]
        tried = [c.kwargs["voice_id"] for c in self.convert.call_args_list]
        assert tried == ["missing-voice", FALLBACK_VOICES["primary"]]

    @pytest.mark.asyncio
    async def test_all_voices_failing_raises_voice_error(self) -> None:
        self.convert.side_effect = Exception("voice unavailable")

        with pytest.raises(TTSVoiceError, match="All voices failed"):
            await self.provider.synthesize_with_alignment("GO", "missing-voice")

        # Requested voice plus three fallbacks, never retried
        assert self.convert.call_count == 4

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self) -> None:
        self.convert.side_effect = [APIError("Service unavailable", 503), make_response()]

        result = await self.provider.synthesize_with_alignment("GO", "voice-1")

        assert result.voice_id == "voice-1"
        assert self.convert.call_count == 2

    @pytest.mark.asyncio
    async def test_auth_error_is_not_retried(self) -> None:
        self.convert.side_effect = Exception("401 Unauthorized")

        with pytest.raises(TTSAuthError, match="Authentication failed"):
            await self.provider.synthesize_with_alignment("GO", "voice-1")

        assert self.convert.call_count == 1

    @pytest.mark.asyncio
    async def test_rate_limit_maps_to_429(self) -> None:
        self.convert.side_effect = APIError("Too many requests", 429)

        with pytest.raises(TTSAPIError) as exc_info:
            await self.provider.synthesize_with_alignment("GO", "voice-1")

        assert exc_info.value.status_code == 429
        assert self.convert.call_count == 3

    @pytest.mark.asyncio
    async def test_generic_failure_maps_to_api_error(self) -> None:
        self.convert.side_effect = Exception("bad payload")

        with pytest.raises(TTSAPIError, match="API call failed"):
            await self.provider.synthesize_with_alignment("GO", "voice-1")

    @pytest.mark.asyncio
    async def test_message_starting_with_digit_is_not_server_error(self) -> None:
        self.convert.side_effect = APIError("50 characters over the limit", 400)

        with pytest.raises(TTSAPIError, match="API call failed") as exc_info:
            await self.provider.synthesize_with_alignment("GO", "voice-1")

        assert exc_info.value.status_code == 400
        assert self.convert.call_count == 1

    @pytest.mark.asyncio
    async def test_server_status_maps_to_server_error(self) -> None:
        self.convert.side_effect = APIError("Bad gateway", 502)

        with pytest.raises(TTSAPIError, match="Server error"):
            await self.provider.synthesize_with_alignment("GO", "voice-1")

        assert self.convert.call_count == 3

    @pytest.mark.asyncio
    async def test_empty_audio_raises_api_error(self) -> None:
        self.convert.return_value = SimpleNamespace(audio_base_64="", alignment=None)

        with pytest.raises(TTSAPIError, match="No audio data"):
            await self.provider.synthesize_with_alignment("GO", "voice-1")


class TestVoiceCandidates:
    """Test the voice fallback order."""

    def test_requested_voice_first_without_duplicates(self) -> None:
        with patch("dailyvoice.providers.elevenlabs.ElevenLabs"):
            provider = ElevenLabsProvider(api_key="k")

        candidates = provider.voice_candidates(FALLBACK_VOICES["fallback"])

        assert candidates[0] == FALLBACK_VOICES["fallback"]
        assert len(candidates) == len(set(candidates)) == 3


class TestListVoices:
    """Test voice listing."""

    def setup_method(self) -> None:
        with patch("dailyvoice.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.client = MagicMock()
            mock_elevenlabs.return_value = self.client
            self.provider = ElevenLabsProvider(api_key="test_key")

    @pytest.mark.asyncio
    async def test_list_voices_returns_dicts(self) -> None:
        self.client.voices.get_all.return_value = SimpleNamespace(
            voices=[SimpleNamespace(voice_id="v1", name="Adam")]
        )

        voices = await self.provider.list_voices()

        assert voices == [{"id": "v1", "name": "Adam", "provider": "elevenlabs"}]

    @pytest.mark.asyncio
    async def test_list_voices_failure_maps_error(self) -> None:
        self.client.voices.get_all.side_effect = Exception("unauthorized")

        with pytest.raises(TTSAuthError):
            await self.provider.list_voices()
