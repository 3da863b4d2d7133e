"""SQLite key-value namespace backing the persisted cache stores."""

import sqlite3
from pathlib import Path

from .errors import CacheStorageError, StorageQuotaExceededError


class SQLiteNamespace:
    """String key to string value namespace stored in a SQLite database.

    Plays the role of a browser's localStorage/sessionStorage: the
    namespace is shared, so other code may keep unrelated keys in it.
    Every operation opens its own connection so the namespace can be used
    from several processes at once.
    """

    def __init__(self, db_path: Path, quota_bytes: int | None = None):
        """Initialize namespace storage at the given database path.

        Args:
            db_path: Path to the SQLite database file
            quota_bytes: Optional limit on the total size of keys and values
        """
        self.db_path = db_path
        self.quota_bytes = quota_bytes

        # Create parent directory if it doesn't exist
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise CacheStorageError(f"Failed to initialize {db_path}: {e}", e) from e
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection with WAL mode for concurrency."""
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,  # 30 second timeout if locked
                check_same_thread=False,
            )
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=30000")
            conn.execute("PRAGMA synchronous=NORMAL")
        except sqlite3.Error as e:
            raise CacheStorageError(f"Failed to open {self.db_path}: {e}", e) from e
        return conn

    def get_item(self, key: str) -> str | None:
        """Return the stored value for key, or None if absent.

        Raises:
            CacheStorageError: If the database cannot be read
        """
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise CacheStorageError(f"Failed to read key {key!r}: {e}", e) from e
        finally:
            conn.close()

        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value.

        Raises:
            StorageQuotaExceededError: If the write would exceed quota_bytes
            CacheStorageError: If the database cannot be written
        """
        conn = self._get_connection()
        try:
            if self.quota_bytes is not None:
                (used,) = conn.execute(
                    "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) FROM kv WHERE key != ?",
                    (key,),
                ).fetchone()
                required = used + len(key) + len(value)
                if required > self.quota_bytes:
                    raise StorageQuotaExceededError(
                        f"Storage quota exceeded writing {key!r} "
                        f"({required} > {self.quota_bytes} bytes)",
                        self.quota_bytes,
                        required,
                    )

            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value)
            )
            conn.commit()
        except sqlite3.Error as e:
            raise CacheStorageError(f"Failed to write key {key!r}: {e}", e) from e
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        """Delete key if present.

        Raises:
            CacheStorageError: If the database cannot be written
        """
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise CacheStorageError(f"Failed to remove key {key!r}: {e}", e) from e
        finally:
            conn.close()

    def keys(self) -> list[str]:
        """Return every key in the namespace, including foreign ones.

        Raises:
            CacheStorageError: If the database cannot be read
        """
        conn = self._get_connection()
        try:
            rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        except sqlite3.Error as e:
            raise CacheStorageError(f"Failed to list keys: {e}", e) from e
        finally:
            conn.close()

        return [row[0] for row in rows]
