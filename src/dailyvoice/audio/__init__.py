"""Audio playback package for dailyvoice.

Plays narration through pygame and reports the playback position so
words can be highlighted in step with the audio.
"""

from .player import AudioPlayer

__all__ = ["AudioPlayer"]
