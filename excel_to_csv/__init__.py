"""Excel-to-CSV Mapper.

Turns semi-structured sheet data into normalized CSV using A1 range
mappings, in one of two modes:

  * **Records** – each output column is fed by one or more ranges; a
    single-column range yields one record per row, a single-row range one
    record per column.
  * **Assignments** – a marked matrix is expanded against two label
    vectors into (Object A, Object B) pairs, with optional extra columns.

Results can be filtered (by output field or by sheet range, auto-aligned
to each record's origin cell), checked for duplicates, and compared with
another CSV.  A mapping is saved and replayed as a JSON template.
"""

from .coordinates import CellRange, format_range, normalize_range, parse_range
from .csv_codec import compare_csv, comparison_report, parse_csv, to_csv
from .duplicates import find_duplicates
from .filters import apply_filters, passes
from .models import (
    AssignmentsConfig,
    ColumnSpec,
    FilterCondition,
    Provenance,
    Record,
    RecordsConfig,
)
from .pipeline import GenerationResult, Session, generate, generate_assignments, generate_records
from .template import Template, TemplateError, load_template, save_template

__all__ = [
    "CellRange",
    "parse_range",
    "normalize_range",
    "format_range",
    "to_csv",
    "parse_csv",
    "compare_csv",
    "comparison_report",
    "find_duplicates",
    "passes",
    "apply_filters",
    "ColumnSpec",
    "FilterCondition",
    "RecordsConfig",
    "AssignmentsConfig",
    "Provenance",
    "Record",
    "GenerationResult",
    "Session",
    "generate",
    "generate_records",
    "generate_assignments",
    "Template",
    "TemplateError",
    "load_template",
    "save_template",
]
