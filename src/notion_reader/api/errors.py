"""Exception hierarchy for the Notion reader.

Transient remote failures never surface directly: the retry layer either
recovers from them or raises RetryExhaustedError. Everything else that
escapes an operation is fatal and derives from NotionReaderError.
"""

from typing import Optional


class NotionReaderError(Exception):
    """Base exception for all notion_reader errors."""

    pass


class RetryExhaustedError(NotionReaderError):
    """Raised when a retryable failure persists through every attempt."""

    def __init__(self, label: str, attempts: int, original: Exception):
        super().__init__(f"{label} failed ({attempts} attempts): {original}")
        self.label = label
        self.attempts = attempts
        self.original = original


class ObjectTypeMismatchError(NotionReaderError):
    """Raised when a fetched object is not of the requested kind."""

    def __init__(self, expected: str, actual: Optional[str], object_id: str = ""):
        message = f"Fetched object is not a {expected}: {actual}"
        if object_id:
            message += f" (id: {object_id})"
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.object_id = object_id


class ResponseValidationError(NotionReaderError):
    """Raised when a response does not match the expected schema."""

    def __init__(self, label: str, detail: str):
        super().__init__(f"{label}: unexpected response shape: {detail}")
        self.label = label
        self.detail = detail


class ConfigError(NotionReaderError):
    """Raised when Notion credentials cannot be resolved."""

    pass


class RemoteCallError(NotionReaderError):
    """Raised when a remote call fails with an error that is not retried."""

    def __init__(self, label: str, original: Exception):
        super().__init__(f"{label} failed: {original}")
        self.label = label
        self.original = original
        self.status = getattr(original, "status", None)
