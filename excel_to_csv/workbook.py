"""
Workbook loading: turns one worksheet into a string Grid.

Cached values are read (``data_only=True``), so formula cells contribute
their last computed result, not the formula text.  Merged regions are
filled from their top-left cell once per load.
"""

import datetime
import logging
import warnings

from openpyxl import load_workbook

from .coordinates import CellRange
from .grid import fill_merged, normalize_grid

logger = logging.getLogger(__name__)


def _open(path):
    with warnings.catch_warnings():
        # openpyxl warns about unsupported extensions (data validation etc.)
        warnings.filterwarnings("ignore", category=UserWarning)
        return load_workbook(path, data_only=True)


def sheet_names(path: str) -> list:
    """Return the list of sheet names in a workbook."""
    wb = _open(path)
    names = list(wb.sheetnames)
    wb.close()
    return names


def choose_sheet(names, preferred=None):
    """Pick *preferred* when the workbook has it, else the first sheet."""
    desired = (preferred or "").strip()
    if desired and desired in names:
        return desired
    return names[0] if names else None


def cell_to_text(value) -> str:
    """Render an openpyxl cell value the way it reads in the sheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _merge_ranges(ws):
    merges = []
    for m in ws.merged_cells.ranges:
        merges.append(CellRange(m.min_row - 1, m.min_col - 1,
                                m.max_row - 1, m.max_col - 1))
    return merges


def load_grid(path: str, sheet_name: str = None):
    """Load *sheet_name* (default: first sheet) as a string grid.

    The grid always starts at A1 so that A1 references line up with
    grid indices.

    Returns
    -------
    tuple[str, list[list[str]]]
        The resolved sheet name and its grid.
    """
    wb = _open(path)
    try:
        name = sheet_name if sheet_name is not None else choose_sheet(wb.sheetnames)
        if name is None or name not in wb.sheetnames:
            raise KeyError(f"Sheet not found: {sheet_name!r}")
        ws = wb[name]

        max_row = ws.max_row or 0
        max_col = ws.max_column or 0
        rows = []
        for row in ws.iter_rows(min_row=1, max_row=max_row,
                                min_col=1, max_col=max_col,
                                values_only=True):
            rows.append([cell_to_text(v) for v in row])

        grid = fill_merged(normalize_grid(rows), _merge_ranges(ws))
    finally:
        wb.close()

    logger.info(f"Loaded sheet '{name}': {len(grid)} rows x "
                f"{len(grid[0]) if grid else 0} cols")
    return name, grid
