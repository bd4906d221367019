"""
"Auto" alignment of a sheet range against a record's origin cell.

The lookup narrows from the most specific match to the broadest:
exact cell, then a single row/column hit, then a row or column slice,
and finally every cell of the range.
"""

import logging

from .coordinates import CellRange, normalize_range, parse_range
from .grid import cell_value, extract_block

logger = logging.getLogger(__name__)


def resolve_sheet_values(grid, provenance, range_ref) -> list:
    """Return the comparison values of *range_ref* for *provenance*.

    Parameters
    ----------
    grid : list[list[str]]
    provenance : Provenance
        Origin ``(row, col)`` of the record; either side may be ``None``.
    range_ref : str or CellRange
        An A1 reference; invalid text resolves to no values.
    """
    if isinstance(range_ref, CellRange):
        parsed = range_ref
    else:
        parsed = parse_range(range_ref)
    if parsed is None:
        return []

    rng = normalize_range(parsed, grid)
    row = provenance.row
    col = provenance.col

    # single cell: must align exactly
    if rng.is_single_cell:
        if rng.contains(row, col):
            return [cell_value(grid, row, col)]
        return []

    if rng.contains(row, col):
        return [cell_value(grid, row, col)]

    if rng.is_single_col and rng.contains_row(row):
        return [cell_value(grid, row, rng.c0)]

    if rng.is_single_row and rng.contains_col(col):
        return [cell_value(grid, rng.r0, col)]

    if rng.contains_row(row):
        return [cell_value(grid, row, c) for c in range(rng.c0, rng.c1 + 1)]

    if rng.contains_col(col):
        return [cell_value(grid, r, col) for r in range(rng.r0, rng.r1 + 1)]

    logger.debug(f"No alignment for {provenance} in {range_ref}; "
                 f"comparing all cells")
    return [v for line in extract_block(grid, rng) for v in line]


def auto_value(grid, provenance, ranges) -> str:
    """Resolve an extra-column value from one or more ranges.

    Non-empty trimmed values of each range are joined with a space, and
    the per-range results are joined the same way.
    """
    parts = []
    for ref in ranges:
        text = (ref or "").strip()
        if not text:
            continue
        vals = [v.strip() for v in resolve_sheet_values(grid, provenance, text)]
        joined = " ".join(v for v in vals if v)
        if joined:
            parts.append(joined)
    return " ".join(parts)
