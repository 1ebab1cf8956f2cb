"""Core module - logging, exceptions, and application infrastructure."""

from tender_search.core.logging import setup_logging, get_logger
from tender_search.core.exceptions import (
    TenderSearchError,
    QueryValidationError,
    SourceError,
    SourceUnavailableError,
    SourceRequestError,
    SourceTimeoutError,
    SourcePayloadError,
    DatabaseError,
    SavedSearchNotFoundError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "TenderSearchError",
    "QueryValidationError",
    "SourceError",
    "SourceUnavailableError",
    "SourceRequestError",
    "SourceTimeoutError",
    "SourcePayloadError",
    "DatabaseError",
    "SavedSearchNotFoundError",
]
