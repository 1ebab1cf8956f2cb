"""TED Europa source adapter."""

from tender_search.sourcing.ted.api_client import TedAdapter

__all__ = ["TedAdapter"]
