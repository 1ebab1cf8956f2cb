"""Application exception hierarchy."""


class TenderSearchError(Exception):
    """Base exception for all tender search errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class QueryValidationError(TenderSearchError):
    """Search query violates an input invariant. Raised before any I/O."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field


class SourceError(TenderSearchError):
    """Error raised by a source adapter."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        url: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.source = source
        self.url = url


class SourceUnavailableError(SourceError):
    """Source cannot be queried: disabled, unregistered or missing a credential."""


class SourceRequestError(SourceError):
    """Remote call failed (transport error or non-success HTTP status)."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, source=source, url=url, details=details)
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        """Transport failures, rate limiting and server errors may succeed later."""
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class SourceTimeoutError(SourceRequestError):
    """Remote call did not complete within the adapter's time budget."""


class SourcePayloadError(SourceError):
    """Remote call succeeded but the payload could not be interpreted."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        url: str | None = None,
        payload_preview: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, source=source, url=url, details=details)
        self.payload_preview = payload_preview[:200] if payload_preview else None


class DatabaseError(TenderSearchError):
    """Error during database operations."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        table: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.operation = operation
        self.table = table


class SavedSearchNotFoundError(DatabaseError):
    """No saved search with the requested id."""

    def __init__(self, search_id: int):
        super().__init__(
            f"Saved search {search_id} not found",
            operation="select",
            table="saved_searches",
        )
        self.search_id = search_id
