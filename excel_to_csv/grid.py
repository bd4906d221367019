"""
Range extraction over a Grid (``list[list[str]]``, 0-indexed).

Reads tolerate jagged rows: a missing cell reads as ``""``.
"""

from .coordinates import CellRange, grid_shape, normalize_range


def normalize_grid(rows) -> list:
    """Return a rectangular string grid from arbitrary row sequences."""
    width = max((len(r) for r in rows), default=0)
    grid = []
    for r in rows:
        out = ["" if v is None else str(v) for v in r]
        out.extend([""] * (width - len(out)))
        grid.append(out)
    return grid


def cell_value(grid, row: int, col: int) -> str:
    """Return the cell at ``(row, col)`` or ``""`` when it does not exist."""
    if row < 0 or col < 0 or row >= len(grid):
        return ""
    line = grid[row]
    if col >= len(line):
        return ""
    value = line[col]
    return "" if value is None else str(value)


def extract_block(grid, rng: CellRange) -> list:
    """Inclusive rectangular slice of *grid* covered by *rng*."""
    n = normalize_range(rng, grid)
    return [
        [cell_value(grid, r, c) for c in range(n.c0, n.c1 + 1)]
        for r in range(n.r0, n.r1 + 1)
    ]


def extract_vector(grid, rng: CellRange) -> list:
    """Return a 1-D slice: a column top-to-bottom or a row left-to-right.

    Blocks are flattened row-major.
    """
    n = normalize_range(rng, grid)
    block = extract_block(grid, n)
    if n.is_single_col:
        return [row[0] for row in block]
    if n.is_single_row:
        return list(block[0])
    return [v for row in block for v in row]


def fill_merged(grid, merges) -> list:
    """Copy each merge region's top-left value into its empty cells.

    Parameters
    ----------
    grid : list[list[str]]
        Source grid; it is not modified.
    merges : iterable of CellRange
        Merge regions in 0-based coordinates.

    Returns
    -------
    list[list[str]]
        A new grid with merged regions filled.
    """
    out = [list(row) for row in grid]
    rows, cols = grid_shape(out)
    for m in merges:
        value = cell_value(out, m.r0, m.c0)
        for r in range(m.r0, min(m.r1, rows - 1) + 1):
            line = out[r]
            for c in range(m.c0, min(m.c1, cols - 1) + 1):
                if c >= len(line):
                    line.extend([""] * (c + 1 - len(line)))
                if line[c] == "":
                    line[c] = value
    return out
