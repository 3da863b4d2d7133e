"""Unit tests for TTS data models and errors."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from dailyvoice.tts import (
    SpeechResult,
    TTSAPIError,
    TTSError,
    TTSVoiceError,
    VoiceSettings,
)


class TestVoiceSettings:
    """Test voice settings validation."""

    def test_defaults(self) -> None:
        assert VoiceSettings().to_dict() == {
            "stability": 0.75,
            "similarity_boost": 0.75,
            "style": 0.5,
            "use_speaker_boost": True,
        }

    @pytest.mark.parametrize(
        "kwargs",
        [{"stability": -0.1}, {"similarity_boost": 1.5}, {"style": 2.0}],
    )
    def test_out_of_range_values_rejected(self, kwargs) -> None:
        with pytest.raises(ValueError, match="must be between 0.0 and 1.0"):
            VoiceSettings(**kwargs)


class TestSpeechResult:
    """Test speech result validation and format parsing."""

    def test_empty_audio_rejected(self) -> None:
        with pytest.raises(ValueError, match="audio cannot be empty"):
            SpeechResult(audio=b"", alignment=None, output_format="mp3_44100_192", voice_id="v")

    def test_pcm_format_has_no_bitrate(self) -> None:
        result = SpeechResult(audio=b"x", alignment=None, output_format="pcm_22050", voice_id="v")

        assert result.format == "pcm"
        assert result.sample_rate == 22050
        assert result.bitrate is None


class TestErrors:
    """Test the error hierarchy."""

    def test_voice_error_is_api_error(self) -> None:
        error = TTSVoiceError("voice not found", 404)

        assert isinstance(error, TTSAPIError)
        assert isinstance(error, TTSError)
        assert error.status_code == 404

    def test_original_error_kept(self) -> None:
        cause = ConnectionError("reset")

        assert TTSAPIError("failed", None, cause).original_error is cause
