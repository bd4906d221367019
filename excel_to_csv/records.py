"""
Records mode: one output row per sheet row (or sheet column).

Orientation is inferred from each range's shape:

  * single column → keyed **by row**
  * single row    → keyed **by column**
  * block         → keyed by row, non-empty cells joined with a space

Every output column collects its ranges into one map keyed by
:class:`RoleKey`; records are then assembled over the union of keys.
"""

import logging
from collections import namedtuple

from .coordinates import normalize_range, parse_range
from .grid import cell_value
from .models import Provenance, Record, make_unique_headers

logger = logging.getLogger(__name__)

ROW = "row"
COL = "col"

BLOCK_WARNING = "Range is a block; values are joined per row."

RoleKey = namedtuple("RoleKey", ["kind", "index"])


def role_key_sort_key(key):
    """Rows before columns, each ascending by index."""
    return (0 if key.kind == ROW else 1, key.index)


# ---------------------------------------------------------------------------
# Single range → keyed values
# ---------------------------------------------------------------------------

def map_range(grid, rng):
    """Map one range into ``{RoleKey: value}``.

    Returns
    -------
    tuple[dict, str, str | None]
        The map, the key kind (``"row"`` / ``"col"``) and an optional
        warning.
    """
    n = normalize_range(rng, grid)

    if n.is_single_col:
        values = {RoleKey(ROW, r): cell_value(grid, r, n.c0).strip()
                  for r in range(n.r0, n.r1 + 1)}
        return values, ROW, None

    if n.is_single_row:
        values = {RoleKey(COL, c): cell_value(grid, n.r0, c).strip()
                  for c in range(n.c0, n.c1 + 1)}
        return values, COL, None

    values = {}
    for r in range(n.r0, n.r1 + 1):
        parts = [cell_value(grid, r, c).strip() for c in range(n.c0, n.c1 + 1)]
        values[RoleKey(ROW, r)] = " ".join(p for p in parts if p)
    return values, ROW, BLOCK_WARNING


def _merge_column(grid, header, ranges, warnings):
    """Merge every range of one output column; later ranges win."""
    merged = {}
    first_kind = None
    mixed_reported = False

    for ref in ranges:
        text = (ref or "").strip()
        if not text:
            continue
        rng = parse_range(text)
        if rng is None:
            warnings.append(f'Invalid range for "{header}": "{text}"')
            continue

        values, kind, warning = map_range(grid, rng)
        if warning:
            warnings.append(f'"{header}" ({text}): {warning}')

        if first_kind is not None and kind != first_kind and not mixed_reported:
            warnings.append(
                f'"{header}": mixed orientations across ranges '
                f"(row-based + col-based). Results will be combined."
            )
            mixed_reported = True
        if first_kind is None:
            first_kind = kind

        merged.update(values)
    return merged


# ---------------------------------------------------------------------------
# Record assembly
# ---------------------------------------------------------------------------

def header_mapping(columns):
    """Return ``(unique_headers, {raw_header: unique_header})``.

    Columns with a blank header are ignored.  A repeated raw header maps
    to its first occurrence.
    """
    raw = [c.header.strip() for c in columns if c.header.strip()]
    unique = make_unique_headers(raw)
    mapping = {}
    for r, u in zip(raw, unique):
        mapping.setdefault(r, u)
    return unique, mapping


def resolve_header(name, headers, mapping):
    """Resolve a user header reference against the unique output headers."""
    name = (name or "").strip()
    if name in headers:
        return name
    return mapping.get(name, name)


def build_records(grid, config):
    """Assemble keyed records for a :class:`~excel_to_csv.models.RecordsConfig`.

    Returns
    -------
    tuple[list[str], list[Record], list[str], list[RoleKey]]
        Output headers, records (before filtering), warnings and every
        key the ranges produced, including keys whose row was dropped.
        An empty header list means nothing could be generated.
    """
    warnings = []
    headers, mapping = header_mapping(config.columns)
    if not headers:
        return [], [], ["No headers defined."], []

    named = [c for c in config.columns if c.header.strip()]
    column_maps = {}
    all_keys = set()
    for column, out_header in zip(named, headers):
        merged = _merge_column(grid, out_header, column.ranges, warnings)
        column_maps[out_header] = merged
        all_keys.update(merged)

    required = resolve_header(config.required_header, headers, mapping)
    use_required = bool(required) and required in headers

    keys = sorted(all_keys, key=role_key_sort_key)
    records = []
    for key in keys:
        values = {h: column_maps[h].get(key, "") for h in headers}
        if not any(v.strip() for v in values.values()):
            continue
        if use_required and not values[required].strip():
            continue
        if key.kind == ROW:
            provenance = Provenance(row=key.index)
        else:
            provenance = Provenance(col=key.index)
        records.append(Record(values=values, provenance=provenance))

    logger.info(f"Records: {len(all_keys)} keys, {len(records)} records kept")
    return headers, records, warnings, keys


def is_column_based(keys):
    """True when the ranges produced at least as many column keys as row keys."""
    cols = sum(1 for k in keys if k.kind == COL)
    rows = sum(1 for k in keys if k.kind == ROW)
    return cols > 0 and cols >= rows
