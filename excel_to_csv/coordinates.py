"""
A1 range references → 0-based rectangular index ranges.

``parse_range`` never raises: malformed text yields ``None`` and the caller
decides whether that is a warning or a structural failure.
"""

import re
from dataclasses import dataclass
from typing import Optional

from openpyxl.utils import column_index_from_string, get_column_letter

_CELL_RE = re.compile(r"^([A-Z]+)([0-9]+)$")


# ---------------------------------------------------------------------------
# Column letters
# ---------------------------------------------------------------------------

def column_letter_to_index(letters: str) -> int:
    """Convert column letter(s) to a 0-based index. A=0, Z=25, AA=26.

    Columns past XFD are still converted; bounds are left to
    :func:`normalize_range`.
    """
    letters = letters.upper()
    try:
        return column_index_from_string(letters) - 1
    except ValueError:
        # openpyxl stops at XFD
        n = 0
        for ch in letters:
            n = n * 26 + (ord(ch) - ord("A") + 1)
        return n - 1


def index_to_column_letter(index: int) -> str:
    """Convert a 0-based column index to letter(s). 0=A, 25=Z, 26=AA."""
    return get_column_letter(index + 1)


# ---------------------------------------------------------------------------
# CellRange
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CellRange:
    """Inclusive rectangle of 0-based grid indices."""
    r0: int
    c0: int
    r1: int
    c1: int

    @property
    def height(self) -> int:
        return self.r1 - self.r0 + 1

    @property
    def width(self) -> int:
        return self.c1 - self.c0 + 1

    @property
    def is_single_row(self) -> bool:
        return self.r0 == self.r1

    @property
    def is_single_col(self) -> bool:
        return self.c0 == self.c1

    @property
    def is_single_cell(self) -> bool:
        return self.is_single_row and self.is_single_col

    def contains_row(self, row) -> bool:
        return row is not None and self.r0 <= row <= self.r1

    def contains_col(self, col) -> bool:
        return col is not None and self.c0 <= col <= self.c1

    def contains(self, row, col) -> bool:
        return self.contains_row(row) and self.contains_col(col)


def _parse_cell(text: str):
    m = _CELL_RE.match(text)
    if not m:
        return None
    row = int(m.group(2)) - 1
    if row < 0:
        return None
    return row, column_letter_to_index(m.group(1))


def parse_range(ref) -> Optional[CellRange]:
    """Parse ``"B2"`` or ``"B2:D10"`` into a :class:`CellRange`.

    Letters are case-insensitive and surrounding whitespace is ignored.
    The start/end order is kept as written; see :func:`normalize_range`.

    Returns ``None`` for anything that is not a valid reference.
    """
    cleaned = (ref or "").strip().upper()
    if not cleaned:
        return None

    parts = cleaned.split(":")
    if len(parts) > 2:
        return None

    start = _parse_cell(parts[0].strip())
    if start is None:
        return None
    if len(parts) == 1:
        return CellRange(start[0], start[1], start[0], start[1])

    end = _parse_cell(parts[1].strip())
    if end is None:
        return None
    return CellRange(start[0], start[1], end[0], end[1])


def grid_shape(grid) -> tuple:
    """Return ``(rows, cols)``; the widest row defines the column count."""
    rows = len(grid)
    cols = max((len(r) for r in grid), default=0)
    return rows, cols


def _clamp(n, lo, hi):
    return max(lo, min(hi, n))


def normalize_range(rng: CellRange, grid) -> CellRange:
    """Reorder *rng* so start <= end and clamp it to the bounds of *grid*."""
    rows, cols = grid_shape(grid)
    max_r = max(0, rows - 1)
    max_c = max(0, cols - 1)
    return CellRange(
        r0=_clamp(min(rng.r0, rng.r1), 0, max_r),
        c0=_clamp(min(rng.c0, rng.c1), 0, max_c),
        r1=_clamp(max(rng.r0, rng.r1), 0, max_r),
        c1=_clamp(max(rng.c0, rng.c1), 0, max_c),
    )


def format_range(rng: CellRange) -> str:
    """Render *rng* back to A1 notation."""
    start = f"{index_to_column_letter(rng.c0)}{rng.r0 + 1}"
    if rng.is_single_cell:
        return start
    return f"{start}:{index_to_column_letter(rng.c1)}{rng.r1 + 1}"
