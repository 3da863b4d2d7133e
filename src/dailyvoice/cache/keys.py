"""Cache key builders and default TTLs.

Keys are deterministic so that every call site asking for the same logical
query shares one entry.
"""

import hashlib
from datetime import date, datetime, timezone


class CACHE_TTL:
    """Default time-to-live values in milliseconds."""

    TODAY_QUOTE = 5 * 60 * 1000  # today's quote can be regenerated
    ARCHIVE_PAGE = 10 * 60 * 1000
    QUOTE_COUNT = 15 * 60 * 1000
    AUDIO_METADATA = 60 * 60 * 1000


def today_iso(today: date | None = None) -> str:
    """Return the date as YYYY-MM-DD, defaulting to the current UTC date."""
    return (today or datetime.now(timezone.utc).date()).isoformat()


def today_quote_key(today: date | None = None) -> str:
    return f"cache:today_quote_{today_iso(today)}"


def archive_key(page: int = 1, category: str | None = None, limit: int = 12) -> str:
    category_part = f"_cat-{category}" if category else ""
    return f"cache:archive_p{page}_l{limit}{category_part}"


def category_key(category: str) -> str:
    return f"cache:category_{category}"


def quote_count_key() -> str:
    return "cache:quote_count"


def voices_key(provider: str) -> str:
    return f"cache:voices_{provider}"


def narration_key(
    provider: str, voice: str, text: str, output_format: str | None = None
) -> str:
    """Key for a synthesized narration, stable across whitespace differences."""
    digest = hashlib.sha256(" ".join(text.split()).encode("utf-8")).hexdigest()[:16]
    format_part = f"_{output_format}" if output_format else ""
    return f"cache:narration_{provider}_{voice}{format_part}_{digest}"
