"""Layered TTL cache for dailyvoice.

Uniform get/set/remove/clear over an in-process store, a persistent store
and a session-scoped store, with pattern invalidation and a read-through
helper.
"""

from .errors import CacheStorageError, StorageQuotaExceededError
from .keys import (
    CACHE_TTL,
    archive_key,
    category_key,
    narration_key,
    quote_count_key,
    today_quote_key,
    voices_key,
)
from .manager import CacheStats, LayeredCache
from .models import CacheEntry, StoreKind
from .storage import SQLiteNamespace
from .stores import CACHE_KEY_PREFIX, CacheStore, MemoryStore, NamespaceStore

__all__ = [
    "CACHE_KEY_PREFIX",
    "CACHE_TTL",
    "CacheEntry",
    "CacheStats",
    "CacheStorageError",
    "CacheStore",
    "LayeredCache",
    "MemoryStore",
    "NamespaceStore",
    "SQLiteNamespace",
    "StorageQuotaExceededError",
    "StoreKind",
    "archive_key",
    "category_key",
    "narration_key",
    "quote_count_key",
    "today_quote_key",
    "voices_key",
]
