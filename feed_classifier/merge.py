"""
merge.py — Write validated classifier results back onto feed records.

apply_classifications() is the only place a record's classification field is
written.  A result only lands on a record when its label is one of the known
categories; anything else leaves the record exactly as it was.
"""

import logging
import math
from collections.abc import Hashable
from datetime import datetime, timezone

from feed_classifier.prompts import LABELS

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-10-16T09:30:00.123Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_label(value):
    if not isinstance(value, str):
        return None
    label = value.lower()
    return label if label in LABELS else None


def clamp_confidence(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return None
    return max(0.0, min(1.0, float(value)))


def build_lookup(results):
    """Map result id -> result.  A later duplicate id replaces an earlier one."""
    lookup = {}
    for entry in results:
        if not isinstance(entry, dict):
            continue
        key = entry.get("id")
        if key is None or not isinstance(key, Hashable):
            continue
        lookup[key] = entry
    return lookup


def apply_classifications(records, results, label_field, classified_at=None) -> int:
    """
    Merge *results* into *records* in place and return how many were updated.

    Records are matched by ``id``.  Every merged record gets the same
    ``classifiedAt`` (*classified_at* or the current time).
    """
    lookup = build_lookup(results)
    classified_at = classified_at or utc_timestamp()
    updated = 0
    rejected = 0

    for record in records:
        match = lookup.get(record.get("id")) if isinstance(record.get("id"), Hashable) else None
        if match is None:
            continue
        label = normalize_label(match.get("label"))
        if label is None:
            rejected += 1
            logger.debug("Ignoring result for id=%r with label %r", record.get("id"), match.get("label"))
            continue
        reason = match.get("reason")
        record[label_field] = {
            "label": label,
            "confidence": clamp_confidence(match.get("confidence")),
            "reason": reason if isinstance(reason, str) and reason else "",
            "classifiedAt": classified_at,
        }
        updated += 1

    if rejected:
        logger.warning("%d result(s) had an invalid or missing label and were skipped", rejected)
    return updated
