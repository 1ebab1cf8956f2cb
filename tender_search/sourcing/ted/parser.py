"""Mapping of TED (Tenders Electronic Daily) notices to canonical records."""

from typing import Any, Dict, List

from tender_search.core.constants import DEFAULT_CURRENCY, SOURCE_TED
from tender_search.sourcing.base import (
    CanonicalTenderRecord,
    RecordType,
    TenderStatus,
    extract_localized_text,
    normalize_country,
    parse_amount,
    parse_datetime,
)

TED_NOTICE_URL = "https://ted.europa.eu/udl?uri=TED:NOTICE:{doc_id}"

TED_TYPE_MAP = {
    "SUPPLIES": RecordType.SUPPLY,
    "SERVICES": RecordType.SERVICE,
    "WORKS": RecordType.WORKS,
}

# Reverse mapping used to express the type filter in requests
TED_CONTRACT_TYPES = {record_type: name for name, record_type in TED_TYPE_MAP.items()}

TED_STATUS_MAP = {
    "ACTIVE": TenderStatus.OPEN,
    "AWARDED": TenderStatus.AWARDED,
}


def map_ted_type(value: Any) -> RecordType:
    """Map a TED notice type to the record type, unknown values to MIXED."""
    if not value:
        return RecordType.MIXED
    return TED_TYPE_MAP.get(str(value).strip().upper(), RecordType.MIXED)


def map_ted_status(value: Any) -> TenderStatus:
    if not value:
        return TenderStatus.CLOSED
    return TED_STATUS_MAP.get(str(value).strip().upper(), TenderStatus.CLOSED)


def _cpv_list(raw: Any) -> List[str]:
    """CPV codes arrive as strings, {code} objects or a comma list."""
    if isinstance(raw, str):
        return [c.strip()[:8] for c in raw.split(",") if c.strip()]
    codes = []
    for c in raw or []:
        code = str(c.get("code") if isinstance(c, dict) else c).strip()
        if code and code != "None":
            codes.append(code[:8])
    return codes


def parse_notice(notice: Dict[str, Any]) -> CanonicalTenderRecord:
    """Convert one TED notice into a canonical record.

    Raises:
        ValueError: If the notice has no document id
    """
    doc_id = notice.get("docId") or notice.get("publication-number")

    buyer = notice.get("buyer")
    buyer_name = (
        extract_localized_text(buyer.get("name")) if isinstance(buyer, dict)
        else extract_localized_text(notice.get("buyer-name"))
    )

    place = notice.get("placeOfPerformance")
    location = extract_localized_text(place.get("address")) if isinstance(place, dict) else ""

    value = notice.get("value")
    currency = value.get("currency") if isinstance(value, dict) else None

    return CanonicalTenderRecord.create(
        SOURCE_TED,
        doc_id,
        reference=str(doc_id or ""),
        title=extract_localized_text(notice.get("title")),
        description=extract_localized_text(notice.get("description")),
        buyer=buyer_name,
        location=location,
        country=normalize_country(notice.get("countryCode")),
        estimated_value=parse_amount(value),
        currency=currency or DEFAULT_CURRENCY,
        deadline=parse_datetime(notice.get("tenderDeadline")),
        publication_date=parse_datetime(notice.get("publicationDate")),
        cpv_codes=_cpv_list(notice.get("cpvCodes")),
        record_type=map_ted_type(notice.get("noticeType")),
        url=TED_NOTICE_URL.format(doc_id=doc_id),
        status=map_ted_status(notice.get("status")),
    )
