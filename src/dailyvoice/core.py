"""Core functionality for dailyvoice - orchestrates narration, alignment and playback."""

import base64
import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer

from .alignment import (
    CharacterAlignment,
    WordAlignment,
    find_active_words,
    process_alignment,
)
from .audio.player import AudioPlayer
from .cache import CACHE_TTL, LayeredCache, StoreKind, narration_key, voices_key
from .providers import ProviderRegistry
from .tts.errors import TTSAPIError, TTSAuthError
from .tts.models import SpeechResult

logger = logging.getLogger(__name__)


@dataclass
class Narration:
    """A narrated text with its word timings.

    Attributes:
        text: The narrated text
        speech: Synthesized audio and character alignment
        words: Word alignment built from the character timings
        audio_path: Where the audio was saved, if it was saved
        alignment_path: Where the alignment JSON was saved, if it was saved
    """

    text: str
    speech: SpeechResult
    words: list[WordAlignment]
    audio_path: Path | None = None
    alignment_path: Path | None = None


def alignment_path_for(output: str | Path) -> Path:
    """Sidecar path for an audio file: ``<output>.alignment.json``."""
    output = Path(output)
    return output.with_name(f"{output.name}.alignment.json")


def _speech_to_cache(speech: SpeechResult) -> dict[str, Any]:
    return {
        "audio": base64.b64encode(speech.audio).decode("ascii"),
        "alignment": speech.alignment.to_dict() if speech.alignment else None,
        "outputFormat": speech.output_format,
        "voiceId": speech.voice_id,
    }


def _speech_from_cache(data: dict[str, Any]) -> SpeechResult:
    alignment = data.get("alignment")
    return SpeechResult(
        audio=base64.b64decode(data["audio"]),
        alignment=CharacterAlignment.from_dict(alignment) if alignment else None,
        output_format=data["outputFormat"],
        voice_id=data["voiceId"],
    )


async def synthesize(
    text: str,
    provider: str = "elevenlabs",
    voice: str | None = None,
    cache: LayeredCache | None = None,
    provider_options: dict[str, Any] | None = None,
) -> SpeechResult:
    """Synthesize text, reusing a cached narration for the same voice and text.

    The provider is only constructed on a cache miss, so cached narrations
    can be read without provider credentials.

    Args:
        text: Text to narrate
        provider: Provider name to use for synthesis
        voice: Voice ID, provider default if omitted
        cache: Application cache; None disables caching
        provider_options: Keyword arguments for the provider constructor,
            e.g. ``model_id`` and ``output_format``

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If synthesis fails
        ValueError: If text is empty or too long
        KeyError: If provider not found
    """
    provider_class = ProviderRegistry.get(provider)
    options = provider_options or {}

    if cache is None:
        return await provider_class(**options).synthesize_with_alignment(text, voice)

    async def _fetch() -> dict[str, Any]:
        logger.debug(f"Calling {provider} for synthesis")
        speech = await provider_class(**options).synthesize_with_alignment(text, voice)
        return _speech_to_cache(speech)

    data = await cache.with_cache(
        narration_key(provider, voice or "default", text, options.get("output_format")),
        _fetch,
        ttl=CACHE_TTL.AUDIO_METADATA,
        store=StoreKind.PERSISTENT,
    )
    return _speech_from_cache(data)


def save_narration(narration: Narration, output: str | Path) -> Narration:
    """Write the audio and its ``.alignment.json`` sidecar next to it."""
    audio_path = AudioPlayer.save_to_file(narration.speech.audio, output)
    sidecar = alignment_path_for(audio_path)

    speech = narration.speech
    payload = {
        "text": narration.text,
        "voiceId": speech.voice_id,
        "outputFormat": speech.output_format,
        "alignment": speech.alignment.to_dict() if speech.alignment else None,
        "words": [word.to_dict() for word in narration.words],
    }
    try:
        sidecar.write_text(json.dumps(payload, indent=2))
    except OSError as e:
        raise OSError(f"Failed to save alignment to {sidecar}: {e}") from e

    narration.audio_path = audio_path
    narration.alignment_path = sidecar
    return narration


def load_alignment(
    path: str | Path, text: str | None = None
) -> tuple[str, list[WordAlignment]]:
    """Read word timings from an alignment JSON file.

    Accepts the sidecar written by ``save_narration`` or a bare character
    alignment payload. Character alignments are grouped into words.

    Args:
        path: JSON file to read
        text: Source text, overrides the text stored in the file

    Returns:
        Tuple of (text, words)

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not valid JSON
    """
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Alignment file {path} must contain a JSON object")

    source_text = text if text is not None else data.get("text", "")

    if data.get("words") and text is None:
        return source_text, [WordAlignment.from_dict(w) for w in data["words"]]

    alignment = data.get("alignment", data)
    if not isinstance(alignment, dict):
        return source_text, []
    return source_text, process_alignment(
        source_text, CharacterAlignment.from_dict(alignment)
    )


def render_highlight(
    words: Sequence[WordAlignment | str], active: Sequence[int]
) -> str:
    """Join words into one line with the active ones styled.

    Args:
        words: Words or word alignments in display order
        active: Indices to highlight; out-of-range indices are ignored

    Returns:
        A line of text with ANSI styling on the active words
    """
    active_set = set(active)
    rendered = []
    for i, word in enumerate(words):
        label = word.word if isinstance(word, WordAlignment) else word
        if i in active_set:
            label = typer.style(label, fg=typer.colors.BRIGHT_YELLOW, bold=True)
        rendered.append(label)
    return " ".join(rendered)


async def narrate(
    text: str,
    provider: str = "elevenlabs",
    voice: str | None = None,
    output: str | Path | None = None,
    highlight_range: int = 2,
    cache: LayeredCache | None = None,
    on_frame: Callable[[list[int]], None] | None = None,
    player: AudioPlayer | None = None,
    provider_options: dict[str, Any] | None = None,
) -> Narration:
    """Narrate text and either save it or play it with live highlighting.

    Args:
        text: Text to narrate
        provider: Provider name to use for synthesis
        voice: Voice ID, provider default if omitted
        output: Save audio here (plus ``<output>.alignment.json``) instead
            of playing it
        highlight_range: Words highlighted on each side of the spoken word
        cache: Application cache; None disables caching
        on_frame: Called with the active word indices whenever they change
            during playback
        player: Audio player, created on demand for playback
        provider_options: Keyword arguments for the provider constructor

    Returns:
        The narration with its word alignment

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If synthesis fails
        RuntimeError: If audio playback fails
        OSError: If file save fails
        ValueError: If text is empty or too long
        KeyError: If provider not found
    """
    speech = await synthesize(
        text,
        provider=provider,
        voice=voice,
        cache=cache,
        provider_options=provider_options,
    )
    narration = Narration(
        text=text,
        speech=speech,
        words=process_alignment(text.strip(), speech.alignment),
    )
    logger.debug(
        f"Narrated {len(narration.words)} words with voice {speech.voice_id}"
    )

    if output:
        return save_narration(narration, output)

    last_frame: list[int] | None = None

    def _on_tick(position_ms: int) -> None:
        nonlocal last_frame
        frame = find_active_words(narration.words, position_ms, highlight_range)
        if frame != last_frame:
            last_frame = frame
            if on_frame is not None:
                on_frame(frame)

    player = player or AudioPlayer()
    await player.play_with_progress_async(speech.audio, _on_tick)
    return narration


async def list_available_voices(
    provider: str = "elevenlabs", cache: LayeredCache | None = None
) -> list[dict]:
    """List voices from a provider, cached for an hour in the persistent store.

    Args:
        provider: Provider name to list voices from
        cache: Application cache; None always asks the provider

    Returns:
        List of voice dictionaries with id, name and provider fields

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If API call fails
        KeyError: If provider not found
    """
    try:
        provider_class = ProviderRegistry.get(provider)

        async def _fetch() -> list[dict]:
            return await provider_class().list_voices()

        if cache is None:
            return await _fetch()

        return await cache.with_cache(
            voices_key(provider),
            _fetch,
            ttl=CACHE_TTL.AUDIO_METADATA,
            store=StoreKind.PERSISTENT,
        )

    except (TTSAuthError, TTSAPIError, KeyError):
        raise
    except Exception as e:
        raise TTSAPIError(f"Failed to list voices: {e}", None, e) from e
