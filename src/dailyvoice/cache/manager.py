"""Layered cache manager with TTL expiry across three storage tiers.

Provides one get/set/remove/clear interface over an in-process store, a
persistent store and a session-scoped store. Caching is a best-effort
optimization: every storage failure is logged and absorbed, so callers
behave correctly even when every cache write is dropped.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from ..paths import get_cache_dir, get_runtime_dir
from .errors import CacheStorageError
from .keys import CACHE_TTL
from .models import CacheEntry, StoreKind
from .storage import SQLiteNamespace
from .stores import CacheStore, MemoryStore, NamespaceStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CacheStats:
    """Number of cache-owned entries in each store."""

    memory_entries: int
    persistent_entries: int
    session_entries: int


class LayeredCache:
    """Expiring key-value cache over ephemeral, persistent and session stores.

    One instance is meant to live for the whole application and be passed
    to every caller that needs caching. A tier that is None (e.g. no
    writable cache directory) behaves as an always-empty store.

    Example:
        cache = LayeredCache.open()

        quote = await cache.with_cache(
            today_quote_key(),
            source.get_todays_quote,
            ttl=CACHE_TTL.TODAY_QUOTE,
            store=StoreKind.SESSION,
        )

        # After publishing a new quote
        cache.invalidate(["today_quote", "archive", "quote_count"])
    """

    def __init__(
        self,
        memory: CacheStore | None = None,
        persistent: CacheStore | None = None,
        session: CacheStore | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the cache with explicit stores.

        Args:
            memory: Ephemeral store (defaults to a new MemoryStore)
            persistent: Store surviving across sessions
            session: Store surviving until the session ends
            clock: Returns the current time in milliseconds since the epoch
        """
        self.stores: dict[StoreKind, CacheStore | None] = {
            StoreKind.EPHEMERAL: memory if memory is not None else MemoryStore(),
            StoreKind.PERSISTENT: persistent,
            StoreKind.SESSION: session,
        }
        self._clock = clock or _now_ms

    @classmethod
    def open(
        cls,
        cache_dir: Path | None = None,
        runtime_dir: Path | None = None,
        clock: Callable[[], float] | None = None,
    ) -> "LayeredCache":
        """Create a cache with the default on-disk layout.

        The persistent namespace lives in the XDG cache directory and the
        session namespace in the XDG runtime directory, which the system
        clears at logout. A namespace that cannot be opened is left out and
        its tier degrades to a no-op.

        Args:
            cache_dir: Directory for the persistent namespace
            runtime_dir: Directory for the session namespace
            clock: Returns the current time in milliseconds since the epoch
        """
        persistent = cls._open_namespace(lambda: (cache_dir or get_cache_dir()) / "cache.db")
        session = cls._open_namespace(lambda: (runtime_dir or get_runtime_dir()) / "session.db")
        return cls(persistent=persistent, session=session, clock=clock)

    @staticmethod
    def _open_namespace(resolve_path: Callable[[], Path]) -> NamespaceStore | None:
        try:
            db_path = resolve_path()
            store = NamespaceStore(SQLiteNamespace(db_path))
            logger.debug(f"Opened cache namespace at {db_path}")
            return store
        except (CacheStorageError, OSError) as e:
            logger.warning(f"Cache namespace unavailable, continuing without it: {e}")
            return None

    def _backend(self, store: StoreKind | str) -> CacheStore | None:
        return self.stores[StoreKind(store)]

    def get(self, key: str, store: StoreKind | str = StoreKind.EPHEMERAL) -> Any | None:
        """Return the cached value for key, or None if absent or expired.

        Expired entries are deleted on the read that observes them.
        Undecodable entries are treated as misses.
        """
        backend = self._backend(store)
        if backend is None:
            return None

        try:
            entry = backend.get_entry(key)
        except (ValueError, CacheStorageError) as e:
            logger.warning(f"Cache get error for key {key!r}: {e}")
            return None

        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            logger.debug(f"Cache entry expired: {key}")
            self.remove(key, store)
            return None

        return entry.data

    def set(
        self,
        key: str,
        value: Any,
        ttl: float = CACHE_TTL.ARCHIVE_PAGE,
        store: StoreKind | str = StoreKind.EPHEMERAL,
    ) -> None:
        """Cache value under key for ttl milliseconds.

        Write failures (quota, unavailable storage, unserializable value)
        are logged as warnings and dropped.
        """
        backend = self._backend(store)
        if backend is None:
            return

        entry = CacheEntry(data=value, timestamp=self._clock(), ttl=ttl)
        try:
            backend.set_entry(key, entry)
        except (TypeError, ValueError, CacheStorageError) as e:
            logger.warning(f"Cache set error for key {key!r}: {e}")

    def remove(self, key: str, store: StoreKind | str = StoreKind.EPHEMERAL) -> None:
        """Delete one entry."""
        backend = self._backend(store)
        if backend is None:
            return

        try:
            backend.remove(key)
        except CacheStorageError as e:
            logger.warning(f"Cache remove error for key {key!r}: {e}")

    def clear(self, store: StoreKind | str = StoreKind.EPHEMERAL) -> None:
        """Delete every entry this cache owns in the given store.

        Persisted namespaces keep any keys without the ``cache:`` prefix.
        """
        backend = self._backend(store)
        if backend is None:
            return

        try:
            backend.clear()
        except CacheStorageError as e:
            logger.warning(f"Cache clear error: {e}")

    def invalidate(self, patterns: Iterable[str]) -> None:
        """Delete every entry, in every store, whose key contains a pattern.

        Args:
            patterns: Substrings to match against cache keys
        """
        for pattern in patterns:
            for kind, backend in self.stores.items():
                if backend is None:
                    continue
                try:
                    for key in backend.keys():
                        if pattern in key:
                            backend.remove(key)
                            logger.debug(f"Invalidated {kind.value} cache entry: {key}")
                except CacheStorageError as e:
                    logger.warning(f"Cache invalidate error for pattern {pattern!r}: {e}")

    async def with_cache(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        ttl: float = CACHE_TTL.ARCHIVE_PAGE,
        store: StoreKind | str = StoreKind.EPHEMERAL,
    ) -> T:
        """Return the cached value for key, fetching and caching it on a miss.

        Errors raised by fetch_fn propagate unchanged and nothing is cached.
        Concurrent misses for the same key each call fetch_fn.

        Args:
            key: Cache key
            fetch_fn: Zero-argument coroutine function producing the value
            ttl: Time to live in milliseconds
            store: Store to read from and write to

        Returns:
            Cached or freshly fetched value
        """
        cached = self.get(key, store)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        logger.debug(f"Cache miss: {key}")
        fresh = await fetch_fn()
        self.set(key, fresh, ttl=ttl, store=store)
        return fresh

    def sweep_expired(self, store: StoreKind | str | None = None) -> int:
        """Actively delete expired and undecodable entries.

        Reads only expire lazily, so keys that are never read again stay
        in the ephemeral store until swept.

        Args:
            store: Store to sweep (None sweeps every store)

        Returns:
            Number of entries deleted
        """
        kinds = [StoreKind(store)] if store is not None else list(self.stores)
        now = self._clock()
        removed = 0

        for kind in kinds:
            backend = self.stores[kind]
            if backend is None:
                continue
            try:
                for key in backend.keys():
                    try:
                        entry = backend.get_entry(key)
                    except ValueError:
                        entry = None
                    if entry is None or entry.is_expired(now):
                        backend.remove(key)
                        removed += 1
            except CacheStorageError as e:
                logger.warning(f"Cache sweep error in {kind.value} store: {e}")

        if removed:
            logger.info(f"Swept {removed} expired cache entries")
        return removed

    def stats(self) -> CacheStats:
        """Count cache-owned entries per store for diagnostics."""

        def count(kind: StoreKind) -> int:
            backend = self.stores[kind]
            if backend is None:
                return 0
            try:
                return len(backend.keys())
            except CacheStorageError as e:
                logger.warning(f"Cache stats error in {kind.value} store: {e}")
                return 0

        return CacheStats(
            memory_entries=count(StoreKind.EPHEMERAL),
            persistent_entries=count(StoreKind.PERSISTENT),
            session_entries=count(StoreKind.SESSION),
        )
