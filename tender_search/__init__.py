"""Tender aggregation search engine."""

__version__ = "1.0.0"
