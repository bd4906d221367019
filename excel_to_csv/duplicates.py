"""Duplicate detection on final output rows."""

from collections import Counter, namedtuple

from .models import as_mapping

# U+241F SYMBOL FOR UNIT SEPARATOR; does not occur in ordinary cell text
KEY_SEPARATOR = "␟"

DuplicateReport = namedtuple(
    "DuplicateReport", ["group_count", "duplicate_row_count", "duplicate_rows"])


def row_key(row, headers) -> str:
    """Composite key of trimmed values in *headers* order."""
    values = as_mapping(row)
    return KEY_SEPARATOR.join(str(values.get(h, "") or "").strip() for h in headers)


def find_duplicates(rows, headers) -> DuplicateReport:
    """Return every row whose key occurs more than once, in input order."""
    keys = [row_key(r, headers) for r in rows]
    counts = Counter(keys)
    duplicate_rows = [r for r, k in zip(rows, keys) if counts[k] > 1]
    groups = sum(1 for n in counts.values() if n > 1)
    return DuplicateReport(groups, len(duplicate_rows), duplicate_rows)
