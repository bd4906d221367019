"""
Filter evaluation over derived records.

A condition reads its left-hand values either from an output field or
from a sheet range (auto-aligned to the record's origin cell).  Positive
operators pass when *any* value qualifies; negated operators pass only
when *every* value does.
"""

import math
import warnings

import pandas as pd

from .alignment import resolve_sheet_values
from .models import (
    NEGATED_OPERATORS,
    OP_EQ,
    OP_GT,
    OP_IS_EMPTY,
    OP_IS_NOT_EMPTY,
    OP_LIKE,
    OP_LT,
    OP_NEQ,
    OP_NOT_LIKE,
    SOURCE_OUTPUT,
)


# ---------------------------------------------------------------------------
# Typed comparison for < / >
# ---------------------------------------------------------------------------

def parse_number(text):
    """Parse *text* as a number, ignoring thousands separators."""
    t = (text or "").strip().replace(",", "")
    if not t or "_" in t:
        return None
    try:
        n = float(t)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def parse_date(text):
    """Parse *text* as a timestamp; ``None`` when it is not a date."""
    t = (text or "").strip()
    if not t:
        return None
    with warnings.catch_warnings():
        # pandas warns when it cannot infer a single format
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(t, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


def _sign(a, b):
    if a == b:
        return 0
    return -1 if a < b else 1


def compare_values(left, right):
    """Order two cell texts: numbers, then dates, then plain text.

    Returns -1, 0 or 1, or ``None`` when either side is empty.
    """
    a = (left or "").strip()
    b = (right or "").strip()
    if not a or not b:
        return None

    an, bn = parse_number(a), parse_number(b)
    if an is not None and bn is not None:
        return _sign(an, bn)

    ad, bd = parse_date(a), parse_date(b)
    if ad is not None and bd is not None:
        return _sign(ad, bd)

    return _sign(a, b)


def evaluate_op(left, op, right) -> bool:
    """Apply one operator to a single left value."""
    L = left or ""
    R = right or ""

    if op == OP_IS_EMPTY:
        return not L.strip()
    if op == OP_IS_NOT_EMPTY:
        return bool(L.strip())
    if op == OP_EQ:
        return L.strip() == R.strip()
    if op == OP_NEQ:
        return L.strip() != R.strip()
    if op == OP_LIKE:
        return R.lower() in L.lower()
    if op == OP_NOT_LIKE:
        return R.lower() not in L.lower()
    if op in (OP_LT, OP_GT):
        cmp = compare_values(L, R)
        if cmp is None:
            return False
        return cmp < 0 if op == OP_LT else cmp > 0
    return False


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

def left_values(record, condition, grid) -> list:
    if condition.source == SOURCE_OUTPUT:
        return [str(record.get(condition.field, ""))]
    return resolve_sheet_values(grid, record.provenance, condition.sheet_range)


def condition_passes(record, condition, grid) -> bool:
    values = left_values(record, condition, grid)
    negated = condition.op in NEGATED_OPERATORS

    if not values:
        return negated

    if condition.op in (OP_IS_EMPTY, OP_IS_NOT_EMPTY):
        return any(evaluate_op(v, condition.op, "") for v in values)

    if negated:
        return all(evaluate_op(v, condition.op, condition.value) for v in values)
    return any(evaluate_op(v, condition.op, condition.value) for v in values)


def passes(record, conditions, grid) -> bool:
    """True when *record* satisfies every condition."""
    return all(condition_passes(record, c, grid) for c in conditions)


def apply_filters(records, conditions, grid) -> list:
    if not conditions:
        return list(records)
    return [r for r in records if passes(r, conditions, grid)]
