"""
Configuration and record types shared by the pipeline stages.

Configuration objects are frozen; a new mapping is a new object.
"""

from dataclasses import dataclass, field
from typing import Optional

# Filter sources
SOURCE_OUTPUT = "output"
SOURCE_SHEET = "sheet"

# Filter operators (wire names kept from saved templates)
OP_EQ = "eq"
OP_NEQ = "neq"
OP_LT = "lt"
OP_GT = "gt"
OP_LIKE = "like"
OP_NOT_LIKE = "notLike"
OP_IS_EMPTY = "isEmpty"
OP_IS_NOT_EMPTY = "isNotEmpty"

OPERATORS = (OP_EQ, OP_NEQ, OP_LT, OP_GT, OP_LIKE, OP_NOT_LIKE,
             OP_IS_EMPTY, OP_IS_NOT_EMPTY)
NEGATED_OPERATORS = frozenset({OP_NEQ, OP_NOT_LIKE})

OP_LABELS = {
    OP_EQ: "=",
    OP_NEQ: "!=",
    OP_LT: "<",
    OP_GT: ">",
    OP_LIKE: "like",
    OP_NOT_LIKE: "not like",
    OP_IS_EMPTY: "is empty",
    OP_IS_NOT_EMPTY: "is not empty",
}

MODE_RECORDS = "roles"
MODE_ASSIGNMENTS = "assignments"
MODES = (MODE_RECORDS, MODE_ASSIGNMENTS)


@dataclass(frozen=True)
class ColumnSpec:
    """One output column fed by one or more A1 ranges."""
    header: str
    ranges: tuple = ()


@dataclass(frozen=True)
class FilterCondition:
    source: str = SOURCE_OUTPUT
    op: str = OP_LIKE
    value: str = ""
    field: str = ""
    sheet_range: str = ""
    id: str = ""


@dataclass(frozen=True)
class RecordsConfig:
    columns: tuple = ()
    required_header: str = ""
    filters: tuple = ()


@dataclass(frozen=True)
class AssignmentsConfig:
    a_header: str = "ObjectA"
    b_header: str = "ObjectB"
    object_a_range: str = ""
    object_b_range: str = ""
    matrix_range: str = ""
    mark_values: tuple = ()
    extra_columns: tuple = ()
    filters: tuple = ()


@dataclass(frozen=True)
class Provenance:
    """Origin cell of a derived record; either axis may be unknown."""
    row: Optional[int] = None
    col: Optional[int] = None


@dataclass
class Record:
    """Public output values plus the hidden origin used for alignment."""
    values: dict
    provenance: Provenance = field(default_factory=Provenance)

    def get(self, header, default=""):
        return self.values.get(header, default)


def parse_mark_values(text) -> tuple:
    """Split a comma-separated mark list, dropping blanks."""
    return tuple(s.strip() for s in (text or "").split(",") if s.strip())


def make_unique_headers(headers) -> list:
    """Suffix repeated headers with ``_2``, ``_3``… in first-seen order.

    Blank headers become ``Column``.  A generated name never collides with
    a header that is already taken.
    """
    seen = {}
    taken = set()
    out = []
    for h in headers:
        base = (h or "").strip() or "Column"
        n = seen.get(base, 0) + 1
        name = base if n == 1 else f"{base}_{n}"
        while name in taken:
            n += 1
            name = f"{base}_{n}"
        seen[base] = n
        taken.add(name)
        out.append(name)
    return out


def as_mapping(row) -> dict:
    """Public values of a :class:`Record`, or *row* itself for plain dicts."""
    return row.values if isinstance(row, Record) else row
