"""Concurrent fan-out of one query to several sources.

Every requested source runs in its own asyncio task under its own timeout.
Each task fills exactly one result slot; failures are turned into
``SourceOutcome`` data and never cancel the other sources.
"""

import asyncio
import time
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from tender_search.core.constants import (
    OUTCOME_CANCELLED,
    OUTCOME_ERROR,
    OUTCOME_OK,
    OUTCOME_TIMEOUT,
    OUTCOME_UNAVAILABLE,
)
from tender_search.core.exceptions import (
    SourceError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from tender_search.core.logging import get_logger
from tender_search.settings import Settings, settings as default_settings
from tender_search.sourcing.base import CanonicalTenderRecord, SourceAdapter
from tender_search.sourcing.query import SearchQuery
from tender_search.sourcing.registry import SourceDescriptor, SourceRegistry

logger = get_logger("sourcing.fanout")


@dataclass
class SourceOutcome:
    """Per-source diagnostics attached to a response."""

    source: str
    count: int = 0
    available: bool = True
    error: Optional[str] = None
    status: str = OUTCOME_OK
    latency_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == OUTCOME_OK

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SourceResult:
    """Content of one result slot: the outcome and the records it produced."""

    outcome: SourceOutcome
    records: List[CanonicalTenderRecord] = field(default_factory=list)


def _unavailable(source_id: str, reason: str) -> SourceResult:
    return SourceResult(
        SourceOutcome(source=source_id, available=False, error=reason, status=OUTCOME_UNAVAILABLE)
    )


class FanOutOrchestrator:
    """Runs a query against several sources concurrently and collects all outcomes."""

    def __init__(self, registry: SourceRegistry, config: Optional[Settings] = None):
        self._registry = registry
        self._settings = config or default_settings

    async def run(
        self,
        query: SearchQuery,
        source_ids: List[str],
        deadline: Optional[float] = None,
    ) -> Dict[str, SourceResult]:
        """Query every source and return one slot per source, in request order.

        Args:
            query: Validated search query
            source_ids: Sources to query (already resolved against the registry)
            deadline: Optional overall deadline in seconds; sources still
                running when it elapses are cancelled

        Returns:
            Mapping source id -> SourceResult
        """
        slots: Dict[str, Optional[SourceResult]] = {source_id: None for source_id in source_ids}
        tasks: Dict[asyncio.Task, str] = {}

        for source_id in slots:
            if source_id not in self._registry:
                slots[source_id] = _unavailable(source_id, "unknown source")
                continue
            descriptor = self._registry.describe(source_id)
            if not descriptor.enabled:
                slots[source_id] = _unavailable(source_id, "source disabled")
                continue
            adapter = self._registry.adapter_for(source_id)
            if adapter is None:
                slots[source_id] = _unavailable(source_id, "no adapter registered")
                continue
            task = asyncio.create_task(
                self._run_source(descriptor, adapter, query), name=f"source:{source_id}"
            )
            tasks[task] = source_id

        if tasks:
            done, pending = await asyncio.wait(list(tasks), timeout=deadline)
            for task in done:
                slots[tasks[task]] = task.result()
            for task in pending:
                task.cancel()
                source_id = tasks[task]
                logger.warning("[%s] Cancelled at overall deadline (%.1fs)", source_id, deadline)
                slots[source_id] = SourceResult(
                    SourceOutcome(
                        source=source_id,
                        error=f"cancelled at overall deadline ({deadline:.1f}s)",
                        status=OUTCOME_CANCELLED,
                        latency_ms=int(deadline * 1000),
                    )
                )

        return {source_id: slots[source_id] for source_id in source_ids}

    async def _run_source(
        self,
        descriptor: SourceDescriptor,
        adapter: SourceAdapter,
        query: SearchQuery,
    ) -> SourceResult:
        """Run one adapter; every failure becomes an outcome."""
        source_id = descriptor.id
        timeout = descriptor.timeout_seconds(self._settings)
        started = time.monotonic()

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        try:
            records = await asyncio.wait_for(adapter.search(query, timeout), timeout=timeout)
        except (asyncio.TimeoutError, SourceTimeoutError):
            logger.warning("[%s] Timed out after %.1fs", source_id, timeout)
            return SourceResult(
                SourceOutcome(
                    source=source_id,
                    error=f"timed out after {timeout:.1f}s",
                    status=OUTCOME_TIMEOUT,
                    latency_ms=elapsed_ms(),
                )
            )
        except SourceUnavailableError as e:
            logger.info("[%s] Unavailable: %s", source_id, e.message)
            result = _unavailable(source_id, e.message)
            result.outcome.latency_ms = elapsed_ms()
            return result
        except SourceError as e:
            logger.warning("[%s] Search failed: %s", source_id, e.message)
            return SourceResult(
                SourceOutcome(
                    source=source_id, error=e.message, status=OUTCOME_ERROR, latency_ms=elapsed_ms()
                )
            )
        except Exception as e:
            logger.error("[%s] Unexpected adapter error: %s: %s", source_id, type(e).__name__, e)
            return SourceResult(
                SourceOutcome(
                    source=source_id,
                    error=f"{type(e).__name__}: {e}",
                    status=OUTCOME_ERROR,
                    latency_ms=elapsed_ms(),
                )
            )

        own = [r for r in records if r.source == source_id]
        if len(own) != len(records):
            logger.warning(
                "[%s] Dropped %d records tagged with another source",
                source_id,
                len(records) - len(own),
            )

        # First occurrence of a record id wins
        seen = set()
        unique = []
        for record in own:
            if record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)
        if len(unique) != len(own):
            logger.warning(
                "[%s] Dropped %d records with a repeated id", source_id, len(own) - len(unique)
            )
        own = unique

        logger.info("[%s] %d records in %dms", source_id, len(own), elapsed_ms())
        return SourceResult(
            SourceOutcome(source=source_id, count=len(own), latency_ms=elapsed_ms()),
            records=own,
        )
