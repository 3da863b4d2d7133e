"""Narration playback through pygame with position callbacks."""

# ruff: noqa: E402
import os

# Suppress pygame's welcome message before any pygame import
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"

import warnings

warnings.filterwarnings("ignore", category=UserWarning, module="pygame.pkgdata")

import asyncio
import io
import logging
from collections.abc import Callable
from pathlib import Path

import pygame

logger = logging.getLogger(__name__)

TICK_RATE = 30


class AudioPlayer:
    """Plays narration audio and reports playback position.

    Position is reported in milliseconds since playback started, which is
    the same clock as the word alignment timings.
    """

    def __init__(self, tick_rate: int = TICK_RATE) -> None:
        """Initialize the pygame mixer.

        Args:
            tick_rate: Position callbacks per second during playback

        Raises:
            RuntimeError: If pygame mixer fails to initialize.
        """
        self.tick_rate = tick_rate
        try:
            pygame.mixer.init()
        except pygame.error as e:
            raise RuntimeError(f"Failed to initialize pygame audio mixer: {e}") from e

    def _start(self, audio_data: bytes) -> None:
        if not audio_data:
            raise ValueError("No audio data provided")
        pygame.mixer.music.load(io.BytesIO(audio_data))
        pygame.mixer.music.play()

    def play_bytes(self, audio_data: bytes) -> None:
        """Play audio bytes to completion (blocking).

        Raises:
            ValueError: If no audio data provided.
            RuntimeError: If audio playback fails.
        """
        self.play_with_progress(audio_data, None)

    def play_with_progress(
        self,
        audio_data: bytes,
        on_tick: Callable[[int], None] | None,
    ) -> None:
        """Play audio bytes, calling on_tick with the position in ms.

        Blocks until playback ends. on_tick is called roughly tick_rate
        times per second while the mixer is busy.

        Args:
            audio_data: Audio data in MP3 or WAV format.
            on_tick: Callback receiving the playback position in ms.

        Raises:
            ValueError: If no audio data provided.
            RuntimeError: If audio playback fails.
        """
        try:
            self._start(audio_data)
            clock = pygame.time.Clock()
            while pygame.mixer.music.get_busy():
                if on_tick is not None:
                    # get_pos is -1 before the stream actually starts
                    on_tick(max(0, pygame.mixer.music.get_pos()))
                clock.tick(self.tick_rate)
        except pygame.error as e:
            raise RuntimeError(f"Failed to play audio: {e}") from e
        logger.debug("Playback finished")

    async def play_with_progress_async(
        self,
        audio_data: bytes,
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        """Run play_with_progress in a worker thread."""
        await asyncio.to_thread(self.play_with_progress, audio_data, on_tick)

    def stop(self) -> None:
        pygame.mixer.music.stop()

    @staticmethod
    def save_to_file(audio_data: bytes, filepath: str | Path) -> Path:
        """Save audio bytes to a file.

        Args:
            audio_data: Audio data to save.
            filepath: Path where the audio file should be saved.

        Returns:
            The written path.

        Raises:
            ValueError: If no audio data provided.
            OSError: If file cannot be written.
        """
        if not audio_data:
            raise ValueError("No audio data provided")

        filepath = Path(filepath)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(audio_data)
        except OSError as e:
            raise OSError(f"Failed to save audio to {filepath}: {e}") from e
        return filepath
