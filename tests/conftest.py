"""Shared fixtures for the tender search tests."""

import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tender_search.db.models import Base
from tender_search.db.session import make_session_factory
from tender_search.settings import Settings
from tender_search.sourcing.base import CanonicalTenderRecord, SourceAdapter
from tender_search.sourcing.registry import SourceDescriptor, SourceRegistry


class FakeAdapter(SourceAdapter):
    """In-memory adapter that counts calls and can fail or stall on demand."""

    def __init__(self, source_id, records=None, error=None, delay=0.0):
        self.source_id = source_id
        self.records = list(records or [])
        self.error = error
        self.delay = delay
        self.calls = 0
        self.queries = []

    async def search(self, query, timeout):
        self.calls += 1
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def config():
    """Settings with short timeouts and both credentials configured."""
    return Settings(
        boamp_api_key="boamp-test-key",
        ted_api_key="ted-test-key",
        source_timeout_base_seconds=0.5,
        source_timeout_min_seconds=0.1,
        source_timeout_max_seconds=1.0,
        search_deadline_seconds=None,
        source_retry_attempts=1,
        disabled_sources=[],
    )


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def make_record():
    """Factory for canonical records with sensible defaults."""

    def _make(source="alpha", local_id="1", **fields):
        fields.setdefault("title", f"Tender {source} {local_id}")
        fields.setdefault("url", f"https://{source}.test/{local_id}")
        return CanonicalTenderRecord.create(source, local_id, **fields)

    return _make


@pytest.fixture
def fake_adapter():
    """Factory for FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def make_registry():
    """Build a registry around fake adapters.

    Adapters listed in ``disabled`` are registered but their source is off.
    """

    def _make(*adapters, disabled=(), extra=(), rate_limit=60):
        descriptors = [
            SourceDescriptor(
                id=adapter.source_id,
                name=adapter.source_id.upper(),
                base_url=f"https://{adapter.source_id}.test",
                enabled=adapter.source_id not in disabled,
                rate_limit=rate_limit,
            )
            for adapter in adapters
        ]
        descriptors.extend(extra)
        return SourceRegistry(descriptors, {a.source_id: a for a in adapters})

    return _make
