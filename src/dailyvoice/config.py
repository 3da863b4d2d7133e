"""Configuration management for dailyvoice.

Loads configuration from ~/.config/dailyvoice/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .paths import get_config_dir

DEFAULT_CONFIG = """\
# dailyvoice configuration

[tts]
# Narration provider
provider = "elevenlabs"

# ElevenLabs voice ID; list voices with `dailyvoice voices`
voice = "tTZ0TVc9Q1bbWngiduLK"

# ElevenLabs model and output format
model = "eleven_monolingual_v1"
output_format = "mp3_44100_192"

[highlight]
# Words highlighted on each side of the spoken word
range = 2

[cache]
# Layered cache for voice listings and quote reads
enabled = true

# API keys are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - ElevenLabs provider
"""


@dataclass(frozen=True)
class TTSConfig:
    """Narration provider configuration."""

    provider: str
    voice: str
    model: str
    output_format: str


@dataclass(frozen=True)
class HighlightConfig:
    """Live word highlighting configuration."""

    range: int


@dataclass(frozen=True)
class CacheConfig:
    """Layered cache configuration."""

    enabled: bool


@dataclass(frozen=True)
class DailyVoiceConfig:
    """Top-level dailyvoice configuration."""

    tts: TTSConfig
    highlight: HighlightConfig
    cache: CacheConfig


_cached_config: DailyVoiceConfig | None = None


def config_path() -> Path:
    return get_config_dir() / "config.toml"


def generate_config() -> Path:
    """Generate default config file at ~/.config/dailyvoice/config.toml."""
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def load_config() -> DailyVoiceConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Returns:
        Loaded and validated DailyVoiceConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    path = config_path()
    if not path.exists():
        generate_config()
        print(
            f"No config found. Generated {path}. Review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Invalid config file {path}: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    tts = data.get("tts", {})
    highlight = data.get("highlight", {})
    cache = data.get("cache", {})

    # Validate required fields
    missing = []
    if "provider" not in tts:
        missing.append("tts.provider")
    if "voice" not in tts:
        missing.append("tts.voice")
    if "enabled" not in cache:
        missing.append("cache.enabled")

    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(f"Edit {path} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    highlight_range = highlight.get("range", 2)
    if not isinstance(highlight_range, int) or highlight_range < 0:
        print("highlight.range must be a non-negative integer", file=sys.stderr)
        raise SystemExit(1)

    # Env vars override config file values
    _cached_config = DailyVoiceConfig(
        tts=TTSConfig(
            provider=os.getenv("DAILYVOICE_PROVIDER", tts["provider"]),
            voice=os.getenv("DAILYVOICE_VOICE", tts["voice"]),
            model=os.getenv(
                "DAILYVOICE_MODEL", tts.get("model", "eleven_monolingual_v1")
            ),
            output_format=tts.get("output_format", "mp3_44100_192"),
        ),
        highlight=HighlightConfig(range=highlight_range),
        cache=CacheConfig(enabled=bool(cache["enabled"])),
    )

    return _cached_config
