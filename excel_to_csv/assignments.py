"""
Assignments mode: expand a marked matrix into (Object A, Object B) pairs.

Object A and Object B are label vectors (one column or one row each).
Every matrix cell holding a mark token relates the A label on its row
(or column) to the B label on its column (or row).  Extra output columns
are looked up per pair with auto alignment against the marked cell.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .alignment import auto_value
from .coordinates import normalize_range, parse_range
from .grid import extract_block, extract_vector
from .models import Provenance, Record, make_unique_headers

logger = logging.getLogger(__name__)


class StructuralError(ValueError):
    """The configured ranges cannot produce assignments at all."""

    def __init__(self, messages):
        super().__init__("; ".join(messages))
        self.messages = list(messages)


@dataclass
class MarkStats:
    marked: int = 0
    emitted: int = 0
    skipped_out_of_bounds: int = 0
    skipped_missing_a: int = 0
    skipped_missing_b: int = 0

    def summary(self) -> str:
        return (
            f"Marks found: {self.marked}, emitted: {self.emitted}, "
            f"skippedOutOfBounds: {self.skipped_out_of_bounds}, "
            f"skippedMissingA: {self.skipped_missing_a}, "
            f"skippedMissingB: {self.skipped_missing_b}"
        )


def assignment_headers(config) -> list:
    """Unique output headers: A, B, then every named extra column."""
    base = [config.a_header.strip() or "ObjectA",
            config.b_header.strip() or "ObjectB"]
    extras = [c.header.strip() for c in config.extra_columns if c.header.strip()]
    return make_unique_headers(base + extras)


def _mark_positions(block, mark_values):
    """Return ``(i, j)`` offsets of marked cells, row-major."""
    marks = [m.strip().lower() for m in mark_values if m.strip()]
    if not marks or not block:
        return []
    cells = np.char.lower(np.char.strip(np.array(block, dtype=str)))
    mask = np.isin(cells, marks)
    return [(int(i), int(j)) for i, j in np.argwhere(mask)]


def expand_pairs(grid, config):
    """Expand the configured matrix into assignment records.

    Parameters
    ----------
    grid : list[list[str]]
    config : AssignmentsConfig

    Returns
    -------
    tuple[list[str], list[Record], MarkStats]

    Raises
    ------
    StructuralError
        When a range is invalid or Object A / B is not one-dimensional.
    """
    a_parsed = parse_range(config.object_a_range)
    b_parsed = parse_range(config.object_b_range)
    m_parsed = parse_range(config.matrix_range)
    if a_parsed is None or b_parsed is None or m_parsed is None:
        raise StructuralError(
            ["Please provide valid ranges for Object A, Object B, and Matrix."])

    a_rng = normalize_range(a_parsed, grid)
    b_rng = normalize_range(b_parsed, grid)
    m_rng = normalize_range(m_parsed, grid)

    problems = []
    if not (a_rng.is_single_col or a_rng.is_single_row):
        problems.append("Object A range must be a single column or single row.")
    if not (b_rng.is_single_col or b_rng.is_single_row):
        problems.append("Object B range must be a single column or single row.")
    if problems:
        raise StructuralError(problems)

    labels_a = [v.strip() for v in extract_vector(grid, a_rng)]
    labels_b = [v.strip() for v in extract_vector(grid, b_rng)]

    headers = assignment_headers(config)
    a_header, b_header = headers[0], headers[1]
    named_extras = [c for c in config.extra_columns if c.header.strip()]
    extras = list(zip(headers[2:], named_extras))

    stats = MarkStats()
    records = []
    for i, j in _mark_positions(extract_block(grid, m_rng), config.mark_values):
        stats.marked += 1
        abs_row = m_rng.r0 + i
        abs_col = m_rng.c0 + j

        # labels index by offset inside the matrix; a single-cell A counts
        # as a column, a single-cell B as a row
        idx_a = i if a_rng.is_single_col else j
        idx_b = j if b_rng.is_single_row else i

        if not (0 <= idx_a < len(labels_a) and 0 <= idx_b < len(labels_b)):
            stats.skipped_out_of_bounds += 1
            continue
        label_a = labels_a[idx_a]
        label_b = labels_b[idx_b]
        if not label_a:
            stats.skipped_missing_a += 1
            continue
        if not label_b:
            stats.skipped_missing_b += 1
            continue

        provenance = Provenance(row=abs_row, col=abs_col)
        values = {a_header: label_a, b_header: label_b}
        for out_header, column in extras:
            values[out_header] = auto_value(grid, provenance, column.ranges)
        records.append(Record(values=values, provenance=provenance))
        stats.emitted += 1

    logger.info(stats.summary())
    return headers, records, stats
