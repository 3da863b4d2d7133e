"""Data models for cache storage."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class StoreKind(str, Enum):
    """Backing store selected per cache call."""

    EPHEMERAL = "ephemeral"
    PERSISTENT = "persistent"
    SESSION = "session"


@dataclass
class CacheEntry:
    """Cached value with its creation time and time-to-live.

    Attributes:
        data: Cached value (must be JSON-serializable for persisted stores)
        timestamp: Creation time in milliseconds since the epoch
        ttl: Time to live in milliseconds
    """

    data: Any
    timestamp: float
    ttl: float

    def is_expired(self, now_ms: float) -> bool:
        """An entry is live up to and including ``timestamp + ttl``."""
        return now_ms > self.timestamp + self.ttl

    def to_json(self) -> str:
        """Serialize for a string-valued namespace.

        Raises:
            TypeError: If data is not JSON-serializable
            ValueError: If data contains circular references
        """
        return json.dumps({"data": self.data, "timestamp": self.timestamp, "ttl": self.ttl})

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntry":
        """Deserialize a stored entry.

        Raises:
            ValueError: If the payload is not a well-formed cache entry
        """
        try:
            payload = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise ValueError(f"Malformed cache entry: {e}") from e

        if not isinstance(payload, dict) or not {"data", "timestamp", "ttl"} <= payload.keys():
            raise ValueError("Malformed cache entry: missing fields")

        timestamp, ttl = payload["timestamp"], payload["ttl"]
        if isinstance(timestamp, bool) or isinstance(ttl, bool):
            raise ValueError("Malformed cache entry: non-numeric timing")
        if not isinstance(timestamp, (int, float)) or not isinstance(ttl, (int, float)):
            raise ValueError("Malformed cache entry: non-numeric timing")

        return cls(data=payload["data"], timestamp=timestamp, ttl=ttl)
