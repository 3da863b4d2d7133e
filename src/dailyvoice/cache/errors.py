"""Custom cache storage exceptions."""


class CacheStorageError(Exception):
    """Base exception for failures of a backing key-value namespace."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class StorageQuotaExceededError(CacheStorageError):
    """Exception raised when a write would exceed the namespace quota.

    This mirrors browser storage behaviour, where writes fail once the
    origin's storage budget is used up.
    """

    def __init__(self, message: str, quota_bytes: int, required_bytes: int) -> None:
        super().__init__(message)
        self.quota_bytes = quota_bytes
        self.required_bytes = required_bytes
