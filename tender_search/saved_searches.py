"""Saved searches: persisted queries that can be replayed later.

The search engine itself is unaware of persistence; this service stores a
SearchQuery with its metadata and replays it through the aggregator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from tender_search.core.exceptions import (
    DatabaseError,
    QueryValidationError,
    SavedSearchNotFoundError,
)
from tender_search.core.logging import get_logger
from tender_search.db.models import SavedSearch
from tender_search.db.session import SessionFactory, SessionLocal, get_session
from tender_search.sourcing.query import SearchQuery, parse_query

if TYPE_CHECKING:
    from tender_search.aggregator import AggregatedResult, TenderAggregator

logger = get_logger("saved_searches")


@dataclass
class SavedSearchEntry:
    """A saved search as returned to callers."""

    id: int
    name: str
    query: SearchQuery
    notify: bool
    created_at: datetime
    last_used: Optional[datetime] = None


def _to_entry(row: SavedSearch) -> SavedSearchEntry:
    return SavedSearchEntry(
        id=row.id,
        name=row.name,
        query=SearchQuery.model_validate(row.filters or {}),
        notify=bool(row.notify_new_results),
        created_at=row.created_at,
        last_used=row.last_used_at,
    )


class SavedSearchService:
    """Store, list and replay saved searches."""

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self._session_factory = session_factory or SessionLocal

    def save(self, name: str, query: SearchQuery, notify: bool = False) -> int:
        """Persist a search.

        Args:
            name: Display name
            query: Query to store (validated before saving)
            notify: Whether the caller wants notifications for new results

        Returns:
            Id of the saved search

        Raises:
            QueryValidationError: Empty name or invalid query
            DatabaseError: On persistence failure
        """
        name = (name or "").strip()
        if not name:
            raise QueryValidationError("Saved search needs a name", field="name")
        query = parse_query(query)

        try:
            with get_session(self._session_factory) as db:
                row = SavedSearch(
                    name=name,
                    query_text=query.query,
                    filters=query.to_payload(),
                    notify_new_results=notify,
                    created_at=datetime.utcnow(),
                )
                db.add(row)
                db.flush()
                search_id = row.id
        except SQLAlchemyError as e:
            raise DatabaseError(str(e), operation="insert", table="saved_searches") from e

        logger.info("Saved search %d: %s", search_id, name)
        return search_id

    def list(self) -> List[SavedSearchEntry]:
        """All saved searches, newest first."""
        try:
            with get_session(self._session_factory) as db:
                rows = (
                    db.query(SavedSearch)
                    .order_by(SavedSearch.created_at.desc(), SavedSearch.id.desc())
                    .all()
                )
                return [_to_entry(row) for row in rows]
        except SQLAlchemyError as e:
            raise DatabaseError(str(e), operation="select", table="saved_searches") from e

    def get(self, search_id: int) -> SavedSearchEntry:
        """Load one saved search.

        Raises:
            SavedSearchNotFoundError: If the id does not exist
        """
        try:
            with get_session(self._session_factory) as db:
                row = db.get(SavedSearch, search_id)
                if row is None:
                    raise SavedSearchNotFoundError(search_id)
                return _to_entry(row)
        except SQLAlchemyError as e:
            raise DatabaseError(str(e), operation="select", table="saved_searches") from e

    def delete(self, search_id: int) -> None:
        try:
            with get_session(self._session_factory) as db:
                row = db.get(SavedSearch, search_id)
                if row is None:
                    raise SavedSearchNotFoundError(search_id)
                db.delete(row)
        except SQLAlchemyError as e:
            raise DatabaseError(str(e), operation="delete", table="saved_searches") from e
        logger.info("Deleted saved search %d", search_id)

    def mark_used(self, search_id: int) -> None:
        try:
            with get_session(self._session_factory) as db:
                row = db.get(SavedSearch, search_id)
                if row is None:
                    raise SavedSearchNotFoundError(search_id)
                row.last_used_at = datetime.utcnow()
        except SQLAlchemyError as e:
            raise DatabaseError(str(e), operation="update", table="saved_searches") from e

    async def replay(
        self, search_id: int, aggregator: "TenderAggregator"
    ) -> "AggregatedResult":
        """Run a saved search again and record when it was last used."""
        entry = self.get(search_id)
        result = await aggregator.search_all_sources(entry.query)
        self.mark_used(search_id)
        return result
