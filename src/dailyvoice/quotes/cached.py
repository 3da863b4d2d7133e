"""Read-through cached access to the quote archive.

The archive itself is reached through a caller-supplied QuoteSource; this
module only decides keys, TTLs and store tiers. Values are cached as
plain dicts so they survive the persisted stores' JSON round trip.
"""

import logging
from typing import Protocol

from ..cache import (
    CACHE_TTL,
    LayeredCache,
    StoreKind,
    archive_key,
    category_key,
    quote_count_key,
    today_quote_key,
)
from .models import Quote

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12


class QuoteSource(Protocol):
    """Upstream quote archive (database or HTTP API)."""

    async def get_todays_quote(self) -> Quote | None: ...

    async def get_all_quotes(self, limit: int, offset: int) -> list[Quote]: ...

    async def get_quotes_by_category(self, category: str) -> list[Quote]: ...

    async def get_quote_count(self) -> int: ...


async def get_cached_todays_quote(cache: LayeredCache, source: QuoteSource) -> Quote | None:
    """Today's quote, cached in the session store for five minutes.

    A missing quote is not cached, so the next call asks the source again.
    """

    async def fetch() -> dict | None:
        quote = await source.get_todays_quote()
        return quote.to_dict() if quote else None

    data = await cache.with_cache(
        today_quote_key(), fetch, ttl=CACHE_TTL.TODAY_QUOTE, store=StoreKind.SESSION
    )
    return Quote.from_dict(data) if data else None


async def get_cached_all_quotes(
    cache: LayeredCache,
    source: QuoteSource,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[Quote]:
    """One archive page, cached in the persistent store for ten minutes."""
    limit = limit or DEFAULT_PAGE_SIZE
    page = offset // limit + 1 if offset else 1

    async def fetch() -> list[dict]:
        return [q.to_dict() for q in await source.get_all_quotes(limit, offset)]

    data = await cache.with_cache(
        archive_key(page, None, limit),
        fetch,
        ttl=CACHE_TTL.ARCHIVE_PAGE,
        store=StoreKind.PERSISTENT,
    )
    return [Quote.from_dict(d) for d in data]


async def get_cached_quotes_by_category(
    cache: LayeredCache, source: QuoteSource, category: str
) -> list[Quote]:
    async def fetch() -> list[dict]:
        return [q.to_dict() for q in await source.get_quotes_by_category(category)]

    data = await cache.with_cache(
        category_key(category),
        fetch,
        ttl=CACHE_TTL.ARCHIVE_PAGE,
        store=StoreKind.PERSISTENT,
    )
    return [Quote.from_dict(d) for d in data]


async def get_cached_quote_count(cache: LayeredCache, source: QuoteSource) -> int:
    return await cache.with_cache(
        quote_count_key(),
        source.get_quote_count,
        ttl=CACHE_TTL.QUOTE_COUNT,
        store=StoreKind.PERSISTENT,
    )


async def preload(cache: LayeredCache, source: QuoteSource) -> None:
    """Warm the cache with the data the home and archive pages need first.

    Failures are logged and ignored; preloading is purely an optimization.
    """
    try:
        await get_cached_todays_quote(cache, source)
        await get_cached_all_quotes(cache, source, DEFAULT_PAGE_SIZE, 0)
        await get_cached_quote_count(cache, source)
    except Exception as e:
        logger.warning(f"Cache preload failed: {e}")


def invalidate_published(cache: LayeredCache) -> None:
    """Drop cached reads made stale by publishing a new quote."""
    cache.invalidate(["today_quote", "archive", "category", "quote_count"])
