"""Shared HTTP plumbing for remote source adapters."""

from typing import Any, Dict, List, Optional

import httpx

from tender_search.core.exceptions import (
    SourcePayloadError,
    SourceRequestError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from tender_search.core.logging import get_logger
from tender_search.settings import Settings
from tender_search.sourcing.base import CanonicalTenderRecord, SourceAdapter
from tender_search.sourcing.query import SearchQuery
from tender_search.sourcing.registry import SourceDescriptor

logger = get_logger("sourcing.http")


class HttpSourceAdapter(SourceAdapter):
    """Base class for adapters backed by a JSON HTTP API.

    A fresh ``httpx.AsyncClient`` is opened per call, so concurrent requests
    never share connection state. Subclasses build the request and map the
    payload; this class owns credentials, error translation and the result
    window.
    """

    def __init__(
        self,
        descriptor: SourceDescriptor,
        config: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.descriptor = descriptor
        self.source_id = descriptor.id
        self._api_key = descriptor.credential(config)
        self._max_results = config.max_results_per_source
        self._user_agent = config.http_user_agent
        self._transport = transport

    def fetch_size(self, query: SearchQuery) -> int:
        """Records to request so the merged set covers the requested page."""
        return min(query.offset + query.limit, self._max_results)

    def _auth_headers(self) -> Dict[str, str]:
        if not self.descriptor.requires_credential:
            return {}
        if not self._api_key:
            raise SourceUnavailableError(
                f"{self.descriptor.name}: credential '{self.descriptor.credential_setting}' not configured",
                source=self.source_id,
            )
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _request_json(
        self,
        method: str,
        path: str,
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform one request and decode its JSON body.

        Raises:
            SourceUnavailableError: Credential missing (no request is sent)
            SourceTimeoutError: The call exceeded ``timeout``
            SourceRequestError: Transport failure or non-2xx status
            SourcePayloadError: Body is not JSON
        """
        headers = {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
            **self._auth_headers(),
        }
        url = f"{self.descriptor.base_url}{path}"

        logger.debug("[%s] %s %s params=%s", self.source_id, method, url, params)

        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            try:
                response = await client.request(
                    method, url, params=params, json=json, headers=headers
                )
                response.raise_for_status()
            except httpx.TimeoutException as e:
                raise SourceTimeoutError(
                    f"{self.descriptor.name}: request timed out after {timeout:.1f}s",
                    source=self.source_id,
                    url=url,
                ) from e
            except httpx.HTTPStatusError as e:
                raise SourceRequestError(
                    f"{self.descriptor.name}: HTTP {e.response.status_code}",
                    source=self.source_id,
                    url=url,
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise SourceRequestError(
                    f"{self.descriptor.name}: {type(e).__name__}: {e}",
                    source=self.source_id,
                    url=url,
                ) from e

        try:
            return response.json()
        except ValueError as e:
            raise SourcePayloadError(
                f"{self.descriptor.name}: response is not valid JSON",
                source=self.source_id,
                url=url,
                payload_preview=response.text,
            ) from e

    def _items(self, data: Any, key: str, url: str = "") -> List[Dict[str, Any]]:
        """Extract the record list from a response envelope.

        A missing or null list means zero results; anything else that is
        not a list of objects is a malformed payload.
        """
        if not isinstance(data, dict):
            raise SourcePayloadError(
                f"{self.descriptor.name}: unexpected response type {type(data).__name__}",
                source=self.source_id,
                url=url,
            )
        items = data.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            raise SourcePayloadError(
                f"{self.descriptor.name}: '{key}' is not a list",
                source=self.source_id,
                url=url,
            )
        return [item for item in items if isinstance(item, dict)]

    def _transform_all(self, items: List[Dict[str, Any]], transform) -> List[CanonicalTenderRecord]:
        """Map raw items, skipping the ones that cannot be normalized."""
        records = []
        for item in items:
            try:
                records.append(transform(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("[%s] Skipping malformed record: %s", self.source_id, e)
        return records
