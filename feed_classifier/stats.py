"""
stats.py — Label counts over the full feed.

compute_stats(records, label_field) returns the StatsReport written to
classification-stats.json:

  {
    "generatedAt":  "2026-10-16T09:30:00.123Z",
    "total":        12,
    "counts":       {"bug": 3, "love": 2, "other": 1, "unlabeled": 6},
    "percentOther": 8.33
  }

Records without a label are counted under "unlabeled", so the counts always
sum to total.
"""

from decimal import ROUND_HALF_UP, Decimal

from feed_classifier.merge import utc_timestamp

UNLABELED = "unlabeled"


def round_half_up(value, places=2):
    """Round to *places* decimals, exact halves away from zero (0.125 -> 0.13)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def record_label(record, label_field):
    value = record.get(label_field)
    if isinstance(value, dict) and value.get("label"):
        label = value["label"]
        return label if isinstance(label, str) else str(label)
    return UNLABELED


def compute_stats(records, label_field, generated_at=None):
    counts = {}
    total = 0
    for record in records:
        label = record_label(record, label_field)
        counts[label] = counts.get(label, 0) + 1
        total += 1

    other = counts.get("other", 0)
    percent_other = round_half_up(other / total * 100) if total > 0 and other else 0

    return {
        "generatedAt": generated_at or utc_timestamp(),
        "total": total,
        "counts": counts,
        "percentOther": percent_other,
    }
