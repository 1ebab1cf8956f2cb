"""Canonical tender model and base class for source adapters."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from tender_search.sourcing.query import SearchQuery

_AMOUNT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")

# Canonical records carry country names; sources may publish ISO codes
COUNTRY_NAMES = {
    "FRA": "France", "DEU": "Germany", "AUT": "Austria", "CHE": "Switzerland",
    "NLD": "Netherlands", "BEL": "Belgium", "ITA": "Italy", "ESP": "Spain",
    "POL": "Poland", "CZE": "Czechia", "LUX": "Luxembourg", "PRT": "Portugal",
}

# ISO alpha-2 to alpha-3
COUNTRY_ALPHA3 = {
    "FR": "FRA", "DE": "DEU", "AT": "AUT", "CH": "CHE", "NL": "NLD", "BE": "BEL",
    "IT": "ITA", "ES": "ESP", "PL": "POL", "CZ": "CZE", "LU": "LUX", "PT": "PRT",
}


class RecordType(str, Enum):
    """Nature of the procured contract."""

    SUPPLY = "supply"
    SERVICE = "service"
    WORKS = "works"
    MIXED = "mixed"

    @classmethod
    def parse(cls, value: Any) -> "RecordType":
        """Map a canonical value to the enum, anything else to MIXED."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MIXED


class TenderStatus(str, Enum):
    """Lifecycle state of a tender at its source."""

    OPEN = "open"
    CLOSED = "closed"
    AWARDED = "awarded"


@dataclass
class CanonicalTenderRecord:
    """Normalized tender, independent of the originating source's schema.

    Build instances through ``create`` so that ``id`` is always
    ``"<source>_<source-local-id>"``.
    """

    id: str
    source: str
    reference: str
    title: str
    url: str
    description: str = ""
    buyer: str = ""
    location: str = ""
    country: str = ""
    estimated_value: Optional[float] = None
    currency: Optional[str] = None
    deadline: Optional[datetime] = None
    publication_date: Optional[datetime] = None
    cpv_codes: List[str] = field(default_factory=list)
    record_type: RecordType = RecordType.MIXED
    status: TenderStatus = TenderStatus.OPEN

    def __post_init__(self):
        # Keep timestamps comparable across sources: naive UTC only
        self.deadline = _naive_utc(self.deadline)
        self.publication_date = _naive_utc(self.publication_date)

    @classmethod
    def create(cls, source: str, local_id: Any, **fields: Any) -> "CanonicalTenderRecord":
        """Create a record with a source-prefixed identifier.

        Raises:
            ValueError: If the source-local id is empty
        """
        local = str(local_id).strip() if local_id is not None else ""
        if not local:
            raise ValueError(f"{source}: record without identifier")
        fields.setdefault("reference", local)
        return cls(id=f"{source}_{local}", source=source, **fields)

    @property
    def local_id(self) -> str:
        return self.id[len(self.source) + 1:]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation for the calling layer."""
        data = asdict(self)
        data["record_type"] = self.record_type.value
        data["status"] = self.status.value
        data["deadline"] = self.deadline.isoformat() if self.deadline else None
        data["publication_date"] = (
            self.publication_date.isoformat() if self.publication_date else None
        )
        return data


class SourceAdapter(ABC):
    """Abstract base class for tender sources.

    An adapter translates a ``SearchQuery`` into its source's request shape,
    calls the source and maps the response into canonical records. It never
    retries; an empty list is a valid answer.
    """

    source_id: str = "unknown"

    @abstractmethod
    async def search(
        self, query: "SearchQuery", timeout: float
    ) -> List[CanonicalTenderRecord]:
        """Search the source.

        Args:
            query: Validated search query
            timeout: Seconds the adapter may spend on its remote call

        Returns:
            List of canonical records

        Raises:
            SourceUnavailableError: Required configuration is missing
            SourceRequestError: The remote call failed
            SourcePayloadError: The response could not be interpreted
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source_id={self.source_id!r})"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a date or timestamp from the formats sources publish.

    Handles datetime/date objects, YYYYMMDD, YYYY-MM-DD and ISO 8601 with or
    without offset. Aware values are converted to naive UTC; lists yield
    their first element.

    Returns:
        Parsed datetime or None
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if len(text) == 8 and text.isdigit():
            try:
                return datetime.strptime(text, "%Y%m%d")
            except ValueError:
                return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                return datetime.strptime(text[:10], "%Y-%m-%d")
            except ValueError:
                return None
    else:
        return None

    return _naive_utc(parsed)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _normalize_number(text: str) -> str:
    """Rewrite "1.234.567,89" or "1,234,567.89" as "1234567.89"."""
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if text.count(",") > 1:
        return text.replace(",", "")
    if text.count(".") > 1:
        return text.replace(".", "")
    return text.replace(",", ".")


def parse_amount(value: Any) -> Optional[float]:
    """Parse a monetary amount from a number, numeric string or {amount} dict."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, dict):
        amount = value.get("amount")
        if amount is None:
            amount = value.get("value")
        return parse_amount(amount)
    if isinstance(value, str):
        text = value.replace("\u00a0", "").replace("\u202f", "").replace(" ", "")
        match = _AMOUNT_PATTERN.search(_normalize_number(text))
        if match:
            return float(match.group(1))
    return None


def normalize_country(value: Any) -> str:
    """Map an ISO alpha-2/alpha-3 code to the country name records carry.

    Names and unknown codes are returned unchanged (stripped).
    """
    text = str(value or "").strip()
    code = text.upper()
    code = COUNTRY_ALPHA3.get(code, code)
    return COUNTRY_NAMES.get(code, text)


def country_alpha3(value: Any) -> str:
    """Map a country name or ISO code to its alpha-3 code."""
    text = str(value or "").strip()
    code = text.upper()
    if code in COUNTRY_ALPHA3:
        return COUNTRY_ALPHA3[code]
    for alpha3, name in COUNTRY_NAMES.items():
        if name.lower() == text.lower():
            return alpha3
    return code


def extract_localized_text(data: Any, prefer_langs: tuple = ("fra", "eng")) -> str:
    """Extract text from a localized field (dict keyed by language code).

    Args:
        data: Localized field data (dict, list, or string)
        prefer_langs: Language codes tried in order before any other

    Returns:
        Extracted text string
    """
    if not data:
        return ""
    if isinstance(data, str):
        return data.strip()
    if isinstance(data, dict):
        text = None
        for lang in prefer_langs:
            text = data.get(lang)
            if text:
                break
        if not text:
            text = next((v for v in data.values() if v), "")
        # Handle nested lists
        if isinstance(text, list):
            text = text[0] if text else ""
        return str(text).strip() if text else ""
    if isinstance(data, list):
        return extract_localized_text(data[0], prefer_langs)
    return str(data).strip()
