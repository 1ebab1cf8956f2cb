"""Cross-source deduplication for tenders appearing on several sources.

The same tender is often published on BOAMP, TED and the internal
catalogue under different ids. Records are grouped by a composite key
built from the normalized title and the buyer prefix; from each group the
most informative record is kept.

This is a best-effort heuristic: distinct tenders with near-identical
titles and buyers can be merged, and reworded duplicates stay apart.
"""

import re
import unicodedata
from typing import Dict, List, Optional, Tuple

from tender_search.core.logging import get_logger
from tender_search.sourcing.base import CanonicalTenderRecord

logger = get_logger("sourcing.dedup")

# Characters of the normalized title used in the key
TITLE_KEY_LENGTH = 50

# Characters of the lower-cased buyer name used in the key
BUYER_KEY_LENGTH = 20

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_title(text: str) -> str:
    """Lowercase, fold accents and strip every non-alphanumeric character."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(c for c in text if not unicodedata.combining(c))
    return _NON_ALNUM.sub("", text)


def dedup_key(record: CanonicalTenderRecord) -> Optional[str]:
    """Composite key of a record, None when its title normalizes to nothing."""
    title = normalize_title(record.title)[:TITLE_KEY_LENGTH]
    if not title:
        return None
    buyer = (record.buyer or "").lower()[:BUYER_KEY_LENGTH]
    return f"{title}_{buyer}"


def informativeness(record: CanonicalTenderRecord) -> Tuple[bool, int]:
    """Ordering used to pick the survivor of a collision.

    A known estimated value beats a missing one; otherwise the longer
    description wins.
    """
    return (record.estimated_value is not None, len(record.description or ""))


def deduplicate(records: List[CanonicalTenderRecord]) -> List[CanonicalTenderRecord]:
    """Merge records judged to describe the same tender.

    Output order follows the first appearance of each key. On equal
    informativeness the first record seen is kept, so running the function
    on its own output changes nothing.

    Args:
        records: Records from all successful sources

    Returns:
        Deduplicated records
    """
    kept: Dict[str, CanonicalTenderRecord] = {}
    result: List[CanonicalTenderRecord] = []
    positions: Dict[str, int] = {}
    merged = 0

    for record in records:
        key = dedup_key(record)
        if key is None:
            result.append(record)
            continue
        existing = kept.get(key)
        if existing is None:
            kept[key] = record
            positions[key] = len(result)
            result.append(record)
            continue

        merged += 1
        if informativeness(record) > informativeness(existing):
            logger.debug("Duplicate %s replaces %s", record.id, existing.id)
            kept[key] = record
            result[positions[key]] = record
        else:
            logger.debug("Duplicate %s merged into %s", record.id, existing.id)

    if merged:
        logger.info("Deduplication merged %d of %d records", merged, len(records))
    return result
