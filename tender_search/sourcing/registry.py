"""Static configuration of the known tender sources.

The registry is built once at start-up and is read-only afterwards: a
request can look sources up but never enable, disable or replace one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional

from tender_search.core.constants import (
    SOURCE_AWS,
    SOURCE_BOAMP,
    SOURCE_E_MARCHESPUBLICS,
    SOURCE_INTERNAL,
    SOURCE_KLEKOON,
    SOURCE_MEGALIS,
    SOURCE_PLACE_MARCHE,
    SOURCE_TED,
)
from tender_search.core.logging import get_logger
from tender_search.settings import Settings, settings as default_settings
from tender_search.sourcing.base import SourceAdapter

if TYPE_CHECKING:
    from tender_search.db.session import SessionFactory

logger = get_logger("sourcing.registry")


@dataclass(frozen=True)
class SourceDescriptor:
    """Configuration for a single tender source."""

    id: str
    name: str
    base_url: str
    enabled: bool = True
    # Name of the Settings field holding the credential, None if not needed
    credential_setting: Optional[str] = None
    rate_limit: int = 30  # requests per minute

    @property
    def requires_credential(self) -> bool:
        return self.credential_setting is not None

    def credential(self, config: Settings) -> str:
        """Configured credential, empty string when absent."""
        if not self.credential_setting:
            return ""
        return getattr(config, self.credential_setting, "") or ""

    def timeout_seconds(self, config: Settings) -> float:
        """Time budget for one call, derived from the rate limit.

        A source allowed 60 requests/minute gets the base timeout; stricter
        sources get proportionally more, bounded by the configured min/max.
        """
        raw = config.source_timeout_base_seconds * 60.0 / max(self.rate_limit, 1)
        return max(config.source_timeout_min_seconds, min(config.source_timeout_max_seconds, raw))


# Known sources
SOURCE_DESCRIPTORS: Dict[str, SourceDescriptor] = {
    SOURCE_BOAMP: SourceDescriptor(
        id=SOURCE_BOAMP,
        name="BOAMP",
        base_url="https://api.boamp.fr/api/v1",
        credential_setting="boamp_api_key",
        rate_limit=60,
    ),
    SOURCE_TED: SourceDescriptor(
        id=SOURCE_TED,
        name="TED Europa",
        base_url="https://api.ted.europa.eu/v3",
        credential_setting="ted_api_key",
        rate_limit=100,
    ),
    SOURCE_PLACE_MARCHE: SourceDescriptor(
        id=SOURCE_PLACE_MARCHE,
        name="PLACE",
        base_url="https://www.marches-publics.gouv.fr/api",
        rate_limit=30,
    ),
    SOURCE_AWS: SourceDescriptor(
        id=SOURCE_AWS,
        name="AWS Achat-Public",
        base_url="https://www.achatpublic.com/api",
        enabled=False,
    ),
    SOURCE_E_MARCHESPUBLICS: SourceDescriptor(
        id=SOURCE_E_MARCHESPUBLICS,
        name="e-marchespublics",
        base_url="https://www.e-marchespublics.com/api",
        enabled=False,
    ),
    SOURCE_MEGALIS: SourceDescriptor(
        id=SOURCE_MEGALIS,
        name="Mégalis Bretagne",
        base_url="https://marches.megalis.bretagne.bzh/api",
        enabled=False,
    ),
    SOURCE_KLEKOON: SourceDescriptor(
        id=SOURCE_KLEKOON,
        name="Klekoon",
        base_url="https://www.klekoon.com/api",
        enabled=False,
    ),
    SOURCE_INTERNAL: SourceDescriptor(
        id=SOURCE_INTERNAL,
        name="Catalogue interne",
        base_url="catalogue_tenders",
        rate_limit=1000,
    ),
}


class SourceRegistry:
    """Read-only mapping from source id to descriptor and adapter."""

    def __init__(
        self,
        descriptors: Iterable[SourceDescriptor],
        adapters: Optional[Mapping[str, SourceAdapter]] = None,
    ):
        self._descriptors = MappingProxyType({d.id: d for d in descriptors})
        self._adapters = MappingProxyType(dict(adapters or {}))

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def source_ids(self) -> List[str]:
        return list(self._descriptors)

    def list_enabled(self) -> List[SourceDescriptor]:
        """Enabled sources in declaration order."""
        return [d for d in self._descriptors.values() if d.enabled]

    def describe(self, source_id: str) -> SourceDescriptor:
        """Get a source descriptor.

        Raises:
            KeyError: If the source is unknown
        """
        return self._descriptors[source_id]

    def adapter_for(self, source_id: str) -> Optional[SourceAdapter]:
        """Adapter registered for a source, None if there is none."""
        return self._adapters.get(source_id)

    def resolve(self, requested: Optional[List[str]]) -> List[str]:
        """Source ids to report on: the requested ones, or every known source.

        Only enabled sources are actually queried. Unknown and disabled ids
        are kept so that the orchestrator can report them as unavailable.
        """
        if requested is None:
            return self.source_ids
        resolved: List[str] = []
        for source_id in requested:
            if source_id not in resolved:
                resolved.append(source_id)
        return resolved


def build_default_registry(
    config: Optional[Settings] = None,
    session_factory: Optional["SessionFactory"] = None,
    transport=None,
) -> SourceRegistry:
    """Build the process-wide registry with the built-in adapters.

    Args:
        config: Settings (credentials, limits, disabled sources)
        session_factory: Session factory for the internal catalogue
        transport: Optional httpx transport for the HTTP adapters

    Returns:
        Configured SourceRegistry
    """
    from tender_search.sourcing.boamp.client import BoampAdapter
    from tender_search.sourcing.internal.adapter import InternalCatalogueAdapter
    from tender_search.sourcing.retry import RetryingAdapter
    from tender_search.sourcing.ted.api_client import TedAdapter

    config = config or default_settings
    disabled = {s.strip().lower() for s in config.disabled_sources}

    descriptors = []
    for descriptor in SOURCE_DESCRIPTORS.values():
        if descriptor.id in disabled and descriptor.enabled:
            logger.info("[%s] Disabled by configuration", descriptor.id)
            descriptor = replace(descriptor, enabled=False)
        descriptors.append(descriptor)
    by_id = {d.id: d for d in descriptors}

    adapters: Dict[str, SourceAdapter] = {
        SOURCE_BOAMP: BoampAdapter(by_id[SOURCE_BOAMP], config, transport=transport),
        SOURCE_TED: TedAdapter(by_id[SOURCE_TED], config, transport=transport),
        SOURCE_INTERNAL: InternalCatalogueAdapter(session_factory=session_factory),
    }

    if config.source_retry_attempts > 1:
        adapters = {
            source_id: RetryingAdapter(adapter, attempts=config.source_retry_attempts)
            for source_id, adapter in adapters.items()
        }

    return SourceRegistry(descriptors, adapters)
