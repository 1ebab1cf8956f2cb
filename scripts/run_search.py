#!/usr/bin/env python
"""
Entry point for running one aggregated tender search.

Queries every enabled source (or the ones given with --source), merges
and ranks the results, and prints the page together with per-source
diagnostics.

Usage:
    python scripts/run_search.py "maintenance informatique" --cpv 72000000 --limit 10
    python scripts/run_search.py --source ted --source boamp --deadline-to 2026-12-31
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tender_search.aggregator import search_all_sources
from tender_search.core.constants import SEPARATOR_LINE
from tender_search.core.exceptions import QueryValidationError
from tender_search.core.logging import setup_logging
from tender_search.settings import settings


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search tenders across all sources")
    parser.add_argument("query", nargs="?", default=None, help="Free-text query")
    parser.add_argument("--cpv", action="append", default=[], help="CPV code (repeatable)")
    parser.add_argument("--country", action="append", default=[], help="Country (repeatable)")
    parser.add_argument("--region", action="append", default=[], help="Region (repeatable)")
    parser.add_argument("--type", dest="types", action="append", default=[],
                        choices=["supply", "service", "works", "mixed"])
    parser.add_argument("--source", dest="sources", action="append", default=None,
                        help="Source id (repeatable, default: all enabled)")
    parser.add_argument("--min-value", type=float, default=None)
    parser.add_argument("--max-value", type=float, default=None)
    parser.add_argument("--deadline-from", default=None, help="YYYY-MM-DD")
    parser.add_argument("--deadline-to", default=None, help="YYYY-MM-DD")
    parser.add_argument("--limit", type=int, default=settings.default_page_size)
    parser.add_argument("--offset", type=int, default=0)
    return parser.parse_args(argv)


def main(argv=None):
    """Run the search and print the result."""
    args = parse_args(argv)
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    query = {
        "query": args.query,
        "cpv_codes": args.cpv,
        "countries": args.country,
        "regions": args.region,
        "types": args.types,
        "sources": args.sources,
        "min_value": args.min_value,
        "max_value": args.max_value,
        "deadline_from": args.deadline_from,
        "deadline_to": args.deadline_to,
        "limit": args.limit,
        "offset": args.offset,
    }

    try:
        result = search_all_sources(query)
    except QueryValidationError as e:
        print(f"Invalid query: {e.message}")
        return 2

    print(SEPARATOR_LINE)
    print(f"TENDERS ({len(result.tenders)} of {result.total})")
    print(SEPARATOR_LINE)
    for tender in result.tenders:
        deadline = tender.deadline.strftime("%Y-%m-%d") if tender.deadline else "----------"
        value = f"{tender.estimated_value:,.0f} {tender.currency}" if tender.estimated_value else ""
        print(f"  {deadline}  [{tender.source}] {tender.title[:60]}")
        print(f"              {tender.buyer[:40]}  {value}")
        print(f"              {tender.url}")
    print()
    print(SEPARATOR_LINE)
    print("SOURCES")
    print(SEPARATOR_LINE)
    for source, outcome in result.sources.items():
        detail = f"{outcome.count} records" if outcome.ok else f"{outcome.status}: {outcome.error}"
        print(f"  {source:<18} {detail}")
    print(f"\n  Execution time: {result.execution_time_ms}ms")

    return 1 if result.all_sources_failed else 0


if __name__ == "__main__":
    sys.exit(main())
