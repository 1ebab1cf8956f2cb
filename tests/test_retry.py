"""Tests for the opt-in retry wrapper."""

import pytest

from tender_search.core.exceptions import (
    SourcePayloadError,
    SourceRequestError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from tender_search.sourcing.base import SourceAdapter
from tender_search.sourcing.query import SearchQuery
from tender_search.sourcing.retry import RetryingAdapter, is_transient_error


class FlakyAdapter(SourceAdapter):
    """Fails a given number of times before answering."""

    source_id = "flaky"

    def __init__(self, error, failures, records=None):
        self.error = error
        self.failures = failures
        self.records = records or []
        self.calls = 0

    async def search(self, query, timeout):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.records


def _retrying(adapter, attempts=3):
    return RetryingAdapter(adapter, attempts=attempts, min_wait=0, max_wait=0)


class TestIsTransientError:
    """Tests for retry classification."""

    def test_transient(self):
        """Test transport errors, 429 and 5xx are transient."""
        assert is_transient_error(SourceRequestError("reset"))
        assert is_transient_error(SourceRequestError("slow down", status_code=429))
        assert is_transient_error(SourceRequestError("bad gateway", status_code=502))
        assert is_transient_error(SourceTimeoutError("timeout"))

    def test_permanent(self):
        """Test client errors and configuration problems are not retried."""
        assert not is_transient_error(SourceRequestError("forbidden", status_code=403))
        assert not is_transient_error(SourceUnavailableError("no key"))
        assert not is_transient_error(SourcePayloadError("bad json"))
        assert not is_transient_error(RuntimeError("boom"))


class TestRetryingAdapter:
    """Tests for RetryingAdapter."""

    @pytest.mark.asyncio
    async def test_recovers_from_transient_error(self):
        """Test a transient failure is retried until success."""
        flaky = FlakyAdapter(SourceRequestError("HTTP 503", status_code=503), failures=2, records=["ok"])

        result = await _retrying(flaky).search(SearchQuery(), 1.0)

        assert result == ["ok"]
        assert flaky.calls == 3

    @pytest.mark.asyncio
    async def test_gives_up(self):
        """Test the last error is raised once attempts are exhausted."""
        flaky = FlakyAdapter(SourceRequestError("HTTP 503", status_code=503), failures=5)

        with pytest.raises(SourceRequestError):
            await _retrying(flaky, attempts=2).search(SearchQuery(), 1.0)

        assert flaky.calls == 2

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self):
        """Test a 404 is raised immediately."""
        flaky = FlakyAdapter(SourceRequestError("HTTP 404", status_code=404), failures=1)

        with pytest.raises(SourceRequestError):
            await _retrying(flaky).search(SearchQuery(), 1.0)

        assert flaky.calls == 1

    @pytest.mark.asyncio
    async def test_unavailable_not_retried(self):
        """Test a missing credential is raised immediately."""
        flaky = FlakyAdapter(SourceUnavailableError("no key"), failures=1)

        with pytest.raises(SourceUnavailableError):
            await _retrying(flaky).search(SearchQuery(), 1.0)

        assert flaky.calls == 1

    def test_keeps_source_id(self):
        """Test the wrapper answers for the wrapped source."""
        adapter = _retrying(FlakyAdapter(SourceRequestError("x"), failures=0))
        assert adapter.source_id == "flaky"
