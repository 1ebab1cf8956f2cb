"""Tests for saved search persistence and replay."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tender_search.aggregator import TenderAggregator
from tender_search.core.exceptions import (
    DatabaseError,
    QueryValidationError,
    SavedSearchNotFoundError,
)
from tender_search.db.models import SavedSearch
from tender_search.db.session import make_session_factory
from tender_search.saved_searches import SavedSearchService
from tender_search.sourcing.base import RecordType
from tender_search.sourcing.query import SearchQuery


@pytest.fixture
def service(session_factory):
    return SavedSearchService(session_factory=session_factory)


class TestSavedSearchService:
    """Tests for storing and listing saved searches."""

    def test_save_and_get(self, service):
        """Test a saved query is loaded back unchanged."""
        query = SearchQuery(query="voirie", cpv_codes=["45233140"], types=["works"], limit=10)

        search_id = service.save("Voirie Bretagne", query, notify=True)
        entry = service.get(search_id)

        assert entry.id == search_id
        assert entry.name == "Voirie Bretagne"
        assert entry.notify is True
        assert entry.query == query
        assert entry.query.types == [RecordType.WORKS]
        assert entry.last_used is None
        assert entry.created_at is not None

    def test_save_mapping(self, service):
        """Test a plain mapping is validated before saving."""
        search_id = service.save("Nettoyage", {"query": "nettoyage"})
        assert service.get(search_id).query.query == "nettoyage"

    def test_denormalized_text(self, service, session_factory):
        """Test the free text is stored for listing."""
        search_id = service.save("Audit", SearchQuery(query="audit"))

        db = session_factory()
        row = db.get(SavedSearch, search_id)
        assert row.query_text == "audit"
        assert row.filters["query"] == "audit"
        db.close()

    def test_list_newest_first(self, service):
        """Test listing returns the most recent search first."""
        first = service.save("Premier", SearchQuery())
        second = service.save("Second", SearchQuery(query="x"))

        assert [entry.id for entry in service.list()] == [second, first]

    def test_list_empty(self, service):
        """Test an empty store lists nothing."""
        assert service.list() == []

    def test_empty_name_rejected(self, service):
        """Test a saved search needs a name."""
        with pytest.raises(QueryValidationError) as exc_info:
            service.save("   ", SearchQuery())
        assert exc_info.value.field == "name"

    def test_invalid_query_rejected(self, service):
        """Test invalid queries are not stored."""
        with pytest.raises(QueryValidationError):
            service.save("Bad", {"min_value": 10, "max_value": 1})
        assert service.list() == []

    def test_get_missing(self, service):
        """Test loading an unknown id raises."""
        with pytest.raises(SavedSearchNotFoundError) as exc_info:
            service.get(999)
        assert exc_info.value.search_id == 999

    def test_delete(self, service):
        """Test a deleted search is gone."""
        search_id = service.save("Temporaire", SearchQuery())
        service.delete(search_id)

        with pytest.raises(SavedSearchNotFoundError):
            service.get(search_id)

    def test_delete_missing(self, service):
        """Test deleting an unknown id raises."""
        with pytest.raises(SavedSearchNotFoundError):
            service.delete(42)


class TestReplay:
    """Tests for running a saved search again."""

    @pytest.mark.asyncio
    async def test_replay(self, service, config, fake_adapter, make_registry, make_record):
        """Test replay runs the stored query and records its use."""
        adapter = fake_adapter("alpha", records=[make_record("alpha", "1")])
        aggregator = TenderAggregator(make_registry(adapter), config)
        search_id = service.save("Audit", SearchQuery(query="audit"))

        result = await service.replay(search_id, aggregator)

        assert result.total == 1
        assert adapter.queries[0].query == "audit"
        assert service.get(search_id).last_used is not None

    @pytest.mark.asyncio
    async def test_replay_missing(self, service, config, fake_adapter, make_registry):
        """Test replaying an unknown id raises without searching."""
        adapter = fake_adapter("alpha")
        aggregator = TenderAggregator(make_registry(adapter), config)

        with pytest.raises(SavedSearchNotFoundError):
            await service.replay(7, aggregator)

        assert adapter.calls == 0


@pytest.fixture
def broken_service():
    """Service over a database whose tables were never created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield SavedSearchService(session_factory=make_session_factory(engine))
    engine.dispose()


class TestDatabaseFailures:
    """Tests for persistence errors surfacing as DatabaseError."""

    def test_get(self, broken_service):
        """Test a failing select is wrapped."""
        with pytest.raises(DatabaseError) as exc_info:
            broken_service.get(1)
        assert exc_info.value.operation == "select"
        assert exc_info.value.table == "saved_searches"

    def test_delete(self, broken_service):
        """Test a failing delete is wrapped."""
        with pytest.raises(DatabaseError) as exc_info:
            broken_service.delete(1)
        assert exc_info.value.table == "saved_searches"

    def test_mark_used(self, broken_service):
        """Test a failing update is wrapped."""
        with pytest.raises(DatabaseError) as exc_info:
            broken_service.mark_used(1)
        assert exc_info.value.table == "saved_searches"

    def test_save(self, broken_service):
        """Test a failing insert is wrapped."""
        with pytest.raises(DatabaseError) as exc_info:
            broken_service.save("Audit", SearchQuery())
        assert exc_info.value.operation == "insert"
