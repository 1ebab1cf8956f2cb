"""Internal catalogue source adapter."""

from tender_search.sourcing.internal.adapter import InternalCatalogueAdapter

__all__ = ["InternalCatalogueAdapter"]
