"""TTS (Text-to-Speech) package for dailyvoice.

Errors, models and retry helpers shared by the narration providers.
"""

from .errors import TTSAPIError, TTSAuthError, TTSError, TTSVoiceError
from .models import SpeechResult, VoiceSettings
from .retry import calculate_delay, is_retryable_error, is_voice_error, with_retry

__all__ = [
    "SpeechResult",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "TTSVoiceError",
    "VoiceSettings",
    "calculate_delay",
    "is_retryable_error",
    "is_voice_error",
    "with_retry",
]
