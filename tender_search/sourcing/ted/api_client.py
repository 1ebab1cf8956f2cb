"""TED API v3 adapter for EU public procurement notices.

API Docs: https://api.ted.europa.eu/docs

Note: The TED API v3 uses POST requests with JSON body for search.
"""

from typing import Any, Dict, List

from tender_search.core.logging import get_logger
from tender_search.sourcing.base import CanonicalTenderRecord, country_alpha3
from tender_search.sourcing.http_client import HttpSourceAdapter
from tender_search.sourcing.query import SearchQuery
from tender_search.sourcing.ted.parser import TED_CONTRACT_TYPES, parse_notice

logger = get_logger("sourcing.ted.api")

SEARCH_ENDPOINT = "/notices/search"

DEFAULT_COUNTRIES = ["FRA"]

SEARCH_FIELDS = ["title", "description", "cpv_codes", "buyer_name"]


class TedAdapter(HttpSourceAdapter):
    """Client for the TED notice search API.

    Authenticates with a bearer token (``TED_API_KEY``). Supports text,
    country, CPV, deadline window, value range and contract type filters.
    """

    def build_body(self, query: SearchQuery) -> Dict[str, Any]:
        countries = [country_alpha3(c) for c in query.countries] or list(DEFAULT_COUNTRIES)

        filters: Dict[str, Any] = {"countries": countries}
        if query.cpv_codes:
            filters["cpvCodes"] = list(query.cpv_codes)
        if query.deadline_from or query.deadline_to:
            filters["deadlineRange"] = {
                "from": query.deadline_from.isoformat() if query.deadline_from else None,
                "to": query.deadline_to.isoformat() if query.deadline_to else None,
            }
        if query.min_value is not None or query.max_value is not None:
            filters["valueRange"] = {"min": query.min_value, "max": query.max_value}
        contract_types = [TED_CONTRACT_TYPES[t] for t in query.types if t in TED_CONTRACT_TYPES]
        if contract_types:
            filters["contractTypes"] = contract_types

        return {
            "query": query.query,
            "fields": SEARCH_FIELDS,
            "page": 1,
            "pageSize": self.fetch_size(query),
            "filters": filters,
        }

    async def search(self, query: SearchQuery, timeout: float) -> List[CanonicalTenderRecord]:
        body = self.build_body(query)
        logger.debug("TED API search body: %s", body)

        data = await self._request_json("POST", SEARCH_ENDPOINT, timeout, json=body)
        items = self._items(data, "notices", url=SEARCH_ENDPOINT)
        records = self._transform_all(items, parse_notice)
        logger.info("TED API returned %d notices", len(records))
        return records
