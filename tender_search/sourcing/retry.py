"""Opt-in retry policy around source adapters.

Adapters never retry on their own. Callers that want retries wrap an
adapter in ``RetryingAdapter``; the registry does so when
``source_retry_attempts`` is greater than one.
"""

import logging
from typing import List

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from tender_search.core.exceptions import SourceRequestError
from tender_search.core.logging import get_logger
from tender_search.sourcing.base import CanonicalTenderRecord, SourceAdapter
from tender_search.sourcing.query import SearchQuery

logger = get_logger("sourcing.retry")


def is_transient_error(error: BaseException) -> bool:
    """Transport failures, 429 and 5xx are worth another attempt."""
    return isinstance(error, SourceRequestError) and error.is_transient


class RetryingAdapter(SourceAdapter):
    """Adapter decorator retrying transient request errors.

    - Exponential backoff: 0.5s, 1s, 2s... (max ``max_wait`` seconds)
    - Unavailable sources and malformed payloads are never retried
    - The last error is re-raised once attempts are exhausted
    """

    def __init__(
        self,
        adapter: SourceAdapter,
        attempts: int = 3,
        min_wait: float = 0.5,
        max_wait: float = 4.0,
    ):
        self.wrapped = adapter
        self.source_id = adapter.source_id
        self._attempts = attempts
        self._min_wait = min_wait
        self._max_wait = max_wait

    async def search(self, query: SearchQuery, timeout: float) -> List[CanonicalTenderRecord]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=self._min_wait, min=self._min_wait, max=self._max_wait),
            retry=retry_if_exception(is_transient_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.wrapped.search(query, timeout)
        return []  # pragma: no cover

    def __repr__(self) -> str:
        return f"RetryingAdapter({self.wrapped!r}, attempts={self._attempts})"
