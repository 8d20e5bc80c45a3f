"""
Catalog error taxonomy.

``CatalogUnavailable`` aborts the current user action and is reported
once. ``MalformedField`` never escapes the contract layer: the field
falls back to its absent value instead.
"""

from datetime import datetime, timezone


class CatalogError(Exception):
    """Base exception for catalog errors."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class CatalogUnavailable(CatalogError):
    """Raised on a non-2xx response, transport failure, timeout or unusable body."""

    def __init__(self, message: str, *, detail: str | None = None, **kwargs: object) -> None:
        super().__init__(message, **kwargs)  # type: ignore[arg-type]
        self.detail = detail


class MalformedField(CatalogError):
    """Raised when a single upstream field cannot be parsed."""

    def __init__(self, field_name: str, value: object) -> None:
        super().__init__(f"Malformed value for '{field_name}': {value!r}")
        self.field_name = field_name
        self.value = value
