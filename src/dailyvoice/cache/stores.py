"""Cache store backends sharing one entry-based interface."""

from abc import ABC, abstractmethod

from .models import CacheEntry
from .storage import SQLiteNamespace

CACHE_KEY_PREFIX = "cache:"


class CacheStore(ABC):
    """Abstract base class for cache stores.

    Stores hold CacheEntry objects and know nothing about expiry; the
    LayeredCache evaluates TTLs on top of them.
    """

    @abstractmethod
    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the entry stored under key, or None if absent.

        Raises:
            ValueError: If the stored entry cannot be decoded
            CacheStorageError: If the backing storage fails
        """

    @abstractmethod
    def set_entry(self, key: str, entry: CacheEntry) -> None:
        """Store entry under key.

        Raises:
            TypeError: If the entry cannot be serialized
            CacheStorageError: If the backing storage fails
        """

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the entry under key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every entry this store owns."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return the keys of every entry this store owns."""


class MemoryStore(CacheStore):
    """Process-lifetime store keeping entries in a dict.

    The store owns its whole namespace, so ``clear`` drops everything.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get_entry(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def set_entry(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class NamespaceStore(CacheStore):
    """Store serializing entries into a shared string namespace.

    Used for both the persistent and the session tier; only the lifetime
    of the underlying namespace differs. Every key is stored under the
    ``cache:`` prefix, and ``clear`` and ``keys`` only touch those.
    """

    def __init__(self, namespace: SQLiteNamespace) -> None:
        self.namespace = namespace

    @staticmethod
    def owned_key(key: str) -> str:
        """Return key with the ``cache:`` prefix added if it lacks one."""
        return key if key.startswith(CACHE_KEY_PREFIX) else CACHE_KEY_PREFIX + key

    def get_entry(self, key: str) -> CacheEntry | None:
        raw = self.namespace.get_item(self.owned_key(key))
        if raw is None:
            return None
        return CacheEntry.from_json(raw)

    def set_entry(self, key: str, entry: CacheEntry) -> None:
        self.namespace.set_item(self.owned_key(key), entry.to_json())

    def remove(self, key: str) -> None:
        self.namespace.remove_item(self.owned_key(key))

    def clear(self) -> None:
        for key in self.keys():
            self.namespace.remove_item(key)

    def keys(self) -> list[str]:
        return [k for k in self.namespace.keys() if k.startswith(CACHE_KEY_PREFIX)]
