"""Adapter for BOAMP (Bulletin Officiel des Annonces de Marchés Publics)."""

from typing import Any, Dict, List

from tender_search.core.logging import get_logger
from tender_search.sourcing.base import CanonicalTenderRecord
from tender_search.sourcing.boamp.parser import parse_publication
from tender_search.sourcing.http_client import HttpSourceAdapter
from tender_search.sourcing.query import SearchQuery

logger = get_logger("sourcing.boamp")

PUBLICATIONS_ENDPOINT = "/publications"


class BoampAdapter(HttpSourceAdapter):
    """Client for the BOAMP publications API.

    Authenticates with a bearer token (``BOAMP_API_KEY``). The API filters
    on text, CPV codes, regions and a date window; value range and record
    types are not supported server-side.
    """

    def build_params(self, query: SearchQuery) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if query.query:
            params["q"] = query.query
        if query.cpv_codes:
            params["cpv"] = ",".join(query.cpv_codes)
        if query.regions:
            params["region"] = ",".join(query.regions)
        if query.deadline_from:
            params["date_from"] = query.deadline_from.isoformat()
        if query.deadline_to:
            params["date_to"] = query.deadline_to.isoformat()
        params["limit"] = self.fetch_size(query)
        params["offset"] = 0
        return params

    async def search(self, query: SearchQuery, timeout: float) -> List[CanonicalTenderRecord]:
        data = await self._request_json(
            "GET", PUBLICATIONS_ENDPOINT, timeout, params=self.build_params(query)
        )
        items = self._items(data, "publications", url=PUBLICATIONS_ENDPOINT)
        records = self._transform_all(items, parse_publication)
        logger.info("BOAMP returned %d publications", len(records))
        return records
