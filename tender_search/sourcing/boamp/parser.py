"""Mapping of BOAMP publications to canonical records."""

from typing import Any, Dict

from tender_search.core.constants import DEFAULT_CURRENCY, SOURCE_BOAMP
from tender_search.sourcing.base import (
    CanonicalTenderRecord,
    RecordType,
    TenderStatus,
    parse_amount,
    parse_datetime,
)
from tender_search.sourcing.cpv import normalize_cpv_codes

BOAMP_DETAIL_URL = "https://www.boamp.fr/avis/detail/{id}"

# Keyed on the first three letters so "travaux" and "TRA" map alike
BOAMP_TYPE_MAP = {
    "fou": RecordType.SUPPLY,  # fournitures
    "ser": RecordType.SERVICE,  # services
    "tra": RecordType.WORKS,  # travaux
}

BOAMP_STATUS_MAP = {
    "ouvert": TenderStatus.OPEN,
    "attribue": TenderStatus.AWARDED,
    "attribué": TenderStatus.AWARDED,
}


def map_boamp_type(value: Any) -> RecordType:
    """Map a BOAMP contract type to the record type, unknown values to MIXED."""
    if not value:
        return RecordType.MIXED
    return BOAMP_TYPE_MAP.get(str(value).strip().lower()[:3], RecordType.MIXED)


def map_boamp_status(value: Any) -> TenderStatus:
    if not value:
        return TenderStatus.CLOSED
    return BOAMP_STATUS_MAP.get(str(value).strip().lower(), TenderStatus.CLOSED)


def _safe_cpv(codes: Any) -> list:
    if isinstance(codes, str):
        codes = codes.split(",")
    try:
        return normalize_cpv_codes(codes if isinstance(codes, list) else [])
    except ValueError:
        return []


def parse_publication(pub: Dict[str, Any]) -> CanonicalTenderRecord:
    """Convert one BOAMP publication into a canonical record.

    Raises:
        ValueError: If the publication has no identifier
    """
    pub_id = pub.get("id")
    buyer = pub.get("acheteur") if isinstance(pub.get("acheteur"), dict) else {}

    return CanonicalTenderRecord.create(
        SOURCE_BOAMP,
        pub_id,
        reference=str(pub.get("reference") or pub_id),
        title=str(pub.get("objet") or pub.get("title") or "").strip(),
        description=str(pub.get("description") or ""),
        buyer=str(buyer.get("nom") or pub.get("buyer_name") or ""),
        location=str(pub.get("lieu_execution") or ""),
        country="France",
        estimated_value=parse_amount(pub.get("montant_estime")),
        currency=DEFAULT_CURRENCY,
        deadline=parse_datetime(pub.get("date_limite_reponse")),
        publication_date=parse_datetime(pub.get("date_publication")),
        cpv_codes=_safe_cpv(pub.get("codes_cpv")),
        record_type=map_boamp_type(pub.get("type_marche")),
        url=pub.get("url") or BOAMP_DETAIL_URL.format(id=pub_id),
        status=map_boamp_status(pub.get("statut")),
    )
