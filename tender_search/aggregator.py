"""Aggregated tender search across all configured sources.

Flow:
1. Validate → reject invariant violations before any I/O
2. Resolve → requested sources, or every enabled source
3. Fan-out → query sources concurrently, one outcome per source
4. Flatten → records of successful sources, in requested-source order
5. Dedupe → merge the same tender published on several sources
6. Rank → soonest deadline first, then paginate
"""

import asyncio
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from tender_search.core.constants import SEPARATOR_LINE, SEPARATOR_LINE_THIN
from tender_search.core.logging import get_logger
from tender_search.settings import Settings, settings as default_settings
from tender_search.sourcing.base import CanonicalTenderRecord
from tender_search.sourcing.dedup import deduplicate
from tender_search.sourcing.fanout import FanOutOrchestrator, SourceOutcome
from tender_search.sourcing.query import SearchQuery, parse_query
from tender_search.sourcing.ranking import paginate, rank
from tender_search.sourcing.registry import SourceRegistry, build_default_registry

logger = get_logger("aggregator")

QueryInput = Union[SearchQuery, Mapping[str, Any], None]


def _run_async(coro):
    """Run async coroutine with proper event loop handling for Windows."""
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()
    else:
        return asyncio.run(coro)


@dataclass
class AggregatedResult:
    """Ranked page of tenders plus per-source diagnostics."""

    tenders: List[CanonicalTenderRecord] = field(default_factory=list)
    total: int = 0
    sources: Dict[str, SourceOutcome] = field(default_factory=dict)
    execution_time_ms: int = 0

    @property
    def failed_sources(self) -> List[str]:
        return [source for source, outcome in self.sources.items() if not outcome.ok]

    @property
    def all_sources_failed(self) -> bool:
        """True when no requested source answered; callers show this as degraded."""
        return bool(self.sources) and len(self.failed_sources) == len(self.sources)

    def to_dict(self) -> dict:
        return {
            "tenders": [t.to_dict() for t in self.tenders],
            "total": self.total,
            "sources": {source: o.to_dict() for source, o in self.sources.items()},
            "execution_time_ms": self.execution_time_ms,
        }

    def log_summary(self) -> None:
        """Log summary statistics."""
        logger.info(SEPARATOR_LINE)
        logger.info("SEARCH SUMMARY")
        logger.info(SEPARATOR_LINE)
        for source, outcome in self.sources.items():
            if outcome.ok:
                logger.info("  %-18s %4d records  (%dms)", source, outcome.count, outcome.latency_ms)
            else:
                logger.info("  %-18s %s: %s", source, outcome.status, outcome.error)
        logger.info(SEPARATOR_LINE_THIN)
        logger.info("  Total:             %d", self.total)
        logger.info("  Page:              %d", len(self.tenders))
        logger.info("  Execution time:    %dms", self.execution_time_ms)
        logger.info(SEPARATOR_LINE)


class TenderAggregator:
    """Single entry point of the search engine."""

    def __init__(
        self,
        registry: Optional[SourceRegistry] = None,
        config: Optional[Settings] = None,
    ):
        self._settings = config or default_settings
        if registry is None:
            registry = build_default_registry(self._settings)
        self._registry = registry
        self._orchestrator = FanOutOrchestrator(self._registry, self._settings)

    @property
    def registry(self) -> SourceRegistry:
        return self._registry

    async def search_all_sources(
        self,
        query: QueryInput,
        deadline: Optional[float] = None,
    ) -> AggregatedResult:
        """Search every requested source and merge the results.

        Args:
            query: SearchQuery or mapping of its fields
            deadline: Optional overall deadline in seconds (defaults to
                ``search_deadline_seconds``)

        Returns:
            AggregatedResult; source failures are reported in ``sources``

        Raises:
            QueryValidationError: If the query violates an invariant
        """
        search_query = parse_query(query)
        source_ids = self._registry.resolve(search_query.sources)
        if deadline is None:
            deadline = self._settings.search_deadline_seconds

        started = time.monotonic()
        logger.info(
            "Searching %d sources (%s) query=%r",
            len(source_ids),
            ", ".join(source_ids),
            search_query.query,
        )

        slots = await self._orchestrator.run(search_query, source_ids, deadline=deadline)

        records: List[CanonicalTenderRecord] = []
        outcomes: Dict[str, SourceOutcome] = {}
        for source_id, slot in slots.items():
            outcomes[source_id] = slot.outcome
            records.extend(slot.records)

        unique = deduplicate(records)
        ranked = rank(unique)
        page = paginate(ranked, search_query.offset, search_query.limit)

        result = AggregatedResult(
            tenders=page,
            total=len(ranked),
            sources=outcomes,
            execution_time_ms=int((time.monotonic() - started) * 1000),
        )
        if result.all_sources_failed:
            logger.warning("All %d requested sources failed", len(outcomes))
        result.log_summary()
        return result


def search_all_sources(
    query: QueryInput,
    aggregator: Optional[TenderAggregator] = None,
    deadline: Optional[float] = None,
) -> AggregatedResult:
    """Blocking variant of ``TenderAggregator.search_all_sources``."""
    aggregator = aggregator or TenderAggregator()
    return _run_async(aggregator.search_all_sources(query, deadline=deadline))
