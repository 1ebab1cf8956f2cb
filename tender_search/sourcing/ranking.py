"""Fixed ordering and pagination of aggregated tenders."""

from datetime import datetime
from typing import List, Tuple

from tender_search.sourcing.base import CanonicalTenderRecord


def _deadline_key(record: CanonicalTenderRecord) -> Tuple[bool, datetime, str]:
    # Missing deadlines sort last; id breaks ties deterministically
    return (record.deadline is None, record.deadline or datetime.min, record.id)


def rank(records: List[CanonicalTenderRecord]) -> List[CanonicalTenderRecord]:
    """Soonest-expiring tenders first, records without deadline last."""
    return sorted(records, key=_deadline_key)


def paginate(
    records: List[CanonicalTenderRecord], offset: int, limit: int
) -> List[CanonicalTenderRecord]:
    """Return ``records[offset:offset + limit]``."""
    if offset < 0 or limit < 0:
        raise ValueError("offset and limit must be non-negative")
    return records[offset:offset + limit]
