"""Sourcing module - source adapters, fan-out, deduplication and ranking."""

from tender_search.sourcing.base import (
    CanonicalTenderRecord,
    RecordType,
    SourceAdapter,
    TenderStatus,
)
from tender_search.sourcing.query import SearchQuery, parse_query
from tender_search.sourcing.registry import (
    SourceDescriptor,
    SourceRegistry,
    build_default_registry,
)
from tender_search.sourcing.fanout import FanOutOrchestrator, SourceOutcome
from tender_search.sourcing.dedup import deduplicate
from tender_search.sourcing.ranking import paginate, rank

__all__ = [
    "CanonicalTenderRecord",
    "RecordType",
    "SourceAdapter",
    "TenderStatus",
    "SearchQuery",
    "parse_query",
    "SourceDescriptor",
    "SourceRegistry",
    "build_default_registry",
    "FanOutOrchestrator",
    "SourceOutcome",
    "deduplicate",
    "paginate",
    "rank",
]
