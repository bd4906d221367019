"""
Generation pipeline and the interactive session around it.

``generate_records`` / ``generate_assignments`` are pure functions of
``(grid, config)``.  They never raise for configuration problems: a run
that cannot produce output comes back with ``ok=False`` and the reasons
in ``warnings``.

:class:`Session` holds what a user works with between runs: the loaded
sheet, the current template and the last result.
"""

import dataclasses
import logging
from dataclasses import dataclass, field

from . import workbook
from .assignments import StructuralError, expand_pairs
from .csv_codec import compare_csv, to_csv
from .duplicates import find_duplicates
from .filters import apply_filters
from .models import MODE_ASSIGNMENTS, SOURCE_OUTPUT
from .records import build_records, header_mapping, is_column_based, resolve_header
from .template import Template, load_template

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    ok: bool
    headers: list = field(default_factory=list)
    records: list = field(default_factory=list)
    csv: str = ""
    duplicates_csv: str = ""
    warnings: list = field(default_factory=list)
    stats: dict = field(default_factory=dict)


def _failure(warnings, stats=None):
    for w in warnings:
        logger.warning(w)
    return GenerationResult(ok=False, warnings=list(warnings), stats=stats or {})


def _resolve_filter_fields(filters, headers, mapping):
    resolved = []
    for f in filters:
        if f.source == SOURCE_OUTPUT:
            f = dataclasses.replace(f, field=resolve_header(f.field, headers, mapping))
        resolved.append(f)
    return resolved


def _finish(grid, headers, records, filters, warnings, unit, stats):
    """Filter, de-duplicate and encode; shared tail of both modes."""
    kept = apply_filters(records, filters, grid)
    if filters:
        warnings.append(f"Filters applied: kept {len(kept)}/{len(records)} {unit}.")

    dups = find_duplicates(kept, headers)
    if dups.duplicate_row_count:
        warnings.append(f"Duplicates found: {dups.duplicate_row_count} rows in "
                        f"{dups.group_count} duplicate group(s).")
        duplicates_csv = to_csv(headers, dups.duplicate_rows)
    else:
        warnings.append("Duplicates found: 0")
        duplicates_csv = ""

    stats.update({
        "candidates": len(records),
        "kept": len(kept),
        "duplicate_groups": dups.group_count,
        "duplicate_rows": dups.duplicate_row_count,
    })
    for w in warnings:
        logger.warning(w)
    return GenerationResult(
        ok=True,
        headers=headers,
        records=kept,
        csv=to_csv(headers, kept),
        duplicates_csv=duplicates_csv,
        warnings=warnings,
        stats=stats,
    )


def generate_records(grid, config) -> GenerationResult:
    """Records mode: mapped columns → filtered, de-duplicated CSV."""
    headers, records, warnings, keys = build_records(grid, config)
    if not headers:
        return _failure(warnings)
    _, mapping = header_mapping(config.columns)
    filters = _resolve_filter_fields(config.filters, headers, mapping)
    unit = "columns" if is_column_based(keys) else "rows"
    return _finish(grid, headers, records, filters, warnings, unit, {})


def generate_assignments(grid, config) -> GenerationResult:
    """Assignments mode: marked matrix → filtered, de-duplicated pair CSV."""
    try:
        headers, records, stats = expand_pairs(grid, config)
    except StructuralError as exc:
        return _failure(exc.messages)

    warnings = [stats.summary()]
    if not records:
        warnings.append("No assignments found. Check mark values and ranges.")
    return _finish(grid, headers, records, list(config.filters), warnings,
                   "rows", dataclasses.asdict(stats))


def generate(grid, template: Template) -> GenerationResult:
    if not grid:
        return _failure(["No sheet data loaded."])
    if template.mode == MODE_ASSIGNMENTS:
        return generate_assignments(grid, template.assignments)
    return generate_records(grid, template.records)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class SessionError(RuntimeError):
    """The session is not in a state that allows the requested action."""


class GenerationInProgressError(SessionError):
    pass


class Session:
    """Mutable state between runs; each run sees an immutable template."""

    def __init__(self, template: Template = None):
        self.template = template or Template()
        self.workbook_path = None
        self.sheet_names = []
        self.sheet_name = ""
        self.grid = []
        self.result = None
        self._running = False

    def _clear_outputs(self):
        self.result = None

    def load_workbook(self, path, sheet_name=None):
        """Open *path* and load *sheet_name*, the template's sheet, or the first."""
        names = workbook.sheet_names(path)
        wanted = sheet_name or workbook.choose_sheet(names, self.template.sheet_name)
        self.sheet_name, self.grid = workbook.load_grid(path, wanted)
        self.workbook_path = path
        self.sheet_names = names
        self._clear_outputs()
        return self.sheet_name

    def select_sheet(self, sheet_name):
        if self.workbook_path is None:
            raise SessionError("Load a workbook first.")
        self.sheet_name, self.grid = workbook.load_grid(self.workbook_path, sheet_name)
        self._clear_outputs()
        return self.sheet_name

    def apply_template(self, template: Template):
        """Replace the mapping; the loaded grid is kept."""
        self.template = template
        if (template.sheet_name and template.sheet_name in self.sheet_names
                and template.sheet_name != self.sheet_name):
            self.select_sheet(template.sheet_name)
        self._clear_outputs()

    def import_template(self, path):
        """Load and apply a template file; state is untouched if it is invalid."""
        template = load_template(path)
        self.apply_template(template)
        return template

    def generate(self) -> GenerationResult:
        if self._running:
            raise GenerationInProgressError("A generation run is already in progress.")
        self._running = True
        try:
            self.result = generate(self.grid, self.template)
        finally:
            self._running = False
        return self.result

    def compare(self, other_csv_text):
        if self.result is None or not self.result.csv:
            raise SessionError("Generate a CSV first, then compare.")
        return compare_csv(self.result.csv, other_csv_text)
