"""Adapter exposing the product's own tender catalogue as a source."""

import asyncio
from datetime import datetime, time
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tender_search.core.constants import DEFAULT_CURRENCY, SOURCE_INTERNAL
from tender_search.core.exceptions import SourceRequestError
from tender_search.core.logging import get_logger
from tender_search.db.models import CatalogueTender
from tender_search.db.session import SessionFactory, SessionLocal, get_session
from tender_search.settings import settings
from tender_search.sourcing.base import (
    CanonicalTenderRecord,
    RecordType,
    SourceAdapter,
    TenderStatus,
    normalize_country,
)
from tender_search.sourcing.query import SearchQuery

logger = get_logger("sourcing.internal")


def _shares_cpv(row_codes: Optional[List[str]], wanted: List[str]) -> bool:
    codes = [str(c)[:8] for c in row_codes or []]
    return any(code in wanted for code in codes)


def catalogue_to_record(row: CatalogueTender) -> CanonicalTenderRecord:
    """Convert a catalogue row into a canonical record."""
    try:
        status = TenderStatus(row.status or TenderStatus.OPEN.value)
    except ValueError:
        status = TenderStatus.OPEN

    return CanonicalTenderRecord.create(
        SOURCE_INTERNAL,
        row.tender_id,
        reference=row.reference or row.tender_id,
        title=row.title or "",
        description=row.description or "",
        buyer=row.organization or "",
        location=row.location or "",
        country=normalize_country(row.country or "France"),
        estimated_value=row.budget,
        currency=row.currency or DEFAULT_CURRENCY,
        deadline=row.deadline,
        publication_date=row.created_at,
        cpv_codes=[str(c)[:8] for c in row.cpv_codes or []],
        record_type=RecordType.parse(row.tender_type or RecordType.SERVICE.value),
        url=f"/tenders/{row.tender_id}",
        status=status,
    )


class InternalCatalogueAdapter(SourceAdapter):
    """Queries the ``catalogue_tenders`` table like any other source.

    The database call is blocking, so it runs in a worker thread; the
    orchestrator's timeout still bounds how long the search waits for it.
    """

    source_id = SOURCE_INTERNAL

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        max_results: Optional[int] = None,
    ):
        self._session_factory = session_factory or SessionLocal
        self._max_results = max_results or settings.max_results_per_source

    async def search(self, query: SearchQuery, timeout: float) -> List[CanonicalTenderRecord]:
        return await asyncio.to_thread(self._search_sync, query)

    def _search_sync(self, query: SearchQuery) -> List[CanonicalTenderRecord]:
        fetch = min(query.offset + query.limit, self._max_results)
        try:
            with get_session(self._session_factory) as db:
                rows = self._filtered(db, query, fetch)
                records = [catalogue_to_record(row) for row in rows]
        except SQLAlchemyError as e:
            raise SourceRequestError(
                f"Catalogue query failed: {type(e).__name__}",
                source=self.source_id,
                url="catalogue_tenders",
            ) from e

        logger.info("Catalogue returned %d tenders", len(records))
        return records

    def _filtered(self, db: Session, query: SearchQuery, fetch: int) -> List[CatalogueTender]:
        q = db.query(CatalogueTender)

        if query.query:
            pattern = f"%{query.query}%"
            q = q.filter(
                or_(
                    CatalogueTender.title.ilike(pattern),
                    CatalogueTender.description.ilike(pattern),
                    CatalogueTender.organization.ilike(pattern),
                )
            )
        if query.countries:
            q = q.filter(
                CatalogueTender.country.in_([normalize_country(c) for c in query.countries])
            )
        if query.regions:
            q = q.filter(or_(*[CatalogueTender.location.ilike(f"%{r}%") for r in query.regions]))
        if query.min_value is not None:
            q = q.filter(CatalogueTender.budget >= query.min_value)
        if query.max_value is not None:
            q = q.filter(CatalogueTender.budget <= query.max_value)
        if query.deadline_from:
            q = q.filter(CatalogueTender.deadline >= datetime.combine(query.deadline_from, time.min))
        if query.deadline_to:
            q = q.filter(CatalogueTender.deadline <= datetime.combine(query.deadline_to, time.max))
        if query.types:
            q = q.filter(CatalogueTender.tender_type.in_([t.value for t in query.types]))

        # Open-ended tenders last, as in the merged ranking
        q = q.order_by(
            CatalogueTender.deadline.is_(None),
            CatalogueTender.deadline.asc(),
            CatalogueTender.id.asc(),
        )

        # CPV codes live in a JSON column, matched after loading
        if query.cpv_codes:
            rows = [row for row in q.all() if _shares_cpv(row.cpv_codes, query.cpv_codes)]
            return rows[:fetch]
        return q.limit(fetch).all()
