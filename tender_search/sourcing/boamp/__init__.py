"""BOAMP source adapter."""

from tender_search.sourcing.boamp.client import BoampAdapter

__all__ = ["BoampAdapter"]
