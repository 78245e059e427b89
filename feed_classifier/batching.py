"""
batching.py — Pending-record selection and fixed-size batching.

Both functions are pure: they never mutate their input and preserve order.
"""

from feed_classifier.errors import ConfigurationError


def has_label(record, label_field) -> bool:
    value = record.get(label_field)
    return isinstance(value, dict) and bool(value.get("label"))


def select_pending(records, label_field):
    """Return the records (original order) that have no label under *label_field*."""
    return [record for record in records if not has_label(record, label_field)]


def batch(items, size):
    """
    Split *items* into contiguous slices of at most *size* elements.

    Returns a lazy iterator; call again to start over.  The size is checked
    eagerly so a bad value fails before any batch is consumed.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ConfigurationError(f"Batch size must be a positive integer, got {size!r}")
    return (items[i : i + size] for i in range(0, len(items), size))
