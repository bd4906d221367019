"""
Versioned JSON templates: a saved mapping replayable on a new workbook.

The wire format keeps the original camelCase keys so templates saved by
earlier versions of the tool load unchanged.  Unknown keys are ignored
and missing or mistyped ones fall back to defaults.
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass, field

from .models import (
    MODE_ASSIGNMENTS,
    MODE_RECORDS,
    MODES,
    OP_LIKE,
    OPERATORS,
    SOURCE_OUTPUT,
    SOURCE_SHEET,
    AssignmentsConfig,
    ColumnSpec,
    FilterCondition,
    RecordsConfig,
    parse_mark_values,
)

logger = logging.getLogger(__name__)

TEMPLATE_VERSION = 1
DEFAULT_MARK_VALUES = "1,X,x,YES,yes"


class TemplateError(ValueError):
    """A template document could not be read."""


@dataclass(frozen=True)
class Template:
    mode: str = MODE_RECORDS
    records: RecordsConfig = field(default_factory=RecordsConfig)
    assignments: AssignmentsConfig = field(default_factory=AssignmentsConfig)
    sheet_name: str = ""
    version: int = TEMPLATE_VERSION


def new_filter(source=SOURCE_OUTPUT, op=OP_LIKE, value="", field="",
               sheet_range="") -> FilterCondition:
    """Create a filter condition with a fresh id."""
    return FilterCondition(source=source, op=op, value=value, field=field,
                           sheet_range=sheet_range, id=uuid.uuid4().hex)


def default_template(mode=MODE_RECORDS, config=None) -> Template:
    """Starter template seeded from the tool configuration."""
    config = config or {}
    records = RecordsConfig(
        columns=(ColumnSpec(config.get("records_header", "RoleName"), ("",)),),
        required_header=config.get("records_header", "RoleName"),
    )
    assignments = AssignmentsConfig(
        a_header=config.get("a_header", "RoleName"),
        b_header=config.get("b_header", "EntitlementName"),
        mark_values=parse_mark_values(
            config.get("mark_values", DEFAULT_MARK_VALUES)),
    )
    return Template(mode=mode, records=records, assignments=assignments)


# ---------------------------------------------------------------------------
# dict <-> objects
# ---------------------------------------------------------------------------

def _str(d, key, default=""):
    v = d.get(key)
    return v if isinstance(v, str) else default


def _list(d, key):
    v = d.get(key)
    return v if isinstance(v, list) else []


def _columns_from(items) -> tuple:
    columns = []
    for item in items:
        if not isinstance(item, dict):
            continue
        ranges = tuple(r for r in _list(item, "rangesA1") if isinstance(r, str))
        columns.append(ColumnSpec(header=_str(item, "header"), ranges=ranges))
    return tuple(columns)


def _filters_from(items) -> tuple:
    filters = []
    for item in items:
        if not isinstance(item, dict):
            continue
        source = _str(item, "source", SOURCE_OUTPUT)
        if source not in (SOURCE_OUTPUT, SOURCE_SHEET):
            source = SOURCE_OUTPUT
        op = _str(item, "op", OP_LIKE)
        if op not in OPERATORS:
            logger.warning(f"Unknown filter operator {op!r}; the filter never passes")
        filters.append(FilterCondition(
            source=source,
            op=op,
            value=_str(item, "value"),
            field=_str(item, "field"),
            sheet_range=_str(item, "sheetRangeA1"),
            id=_str(item, "id") or uuid.uuid4().hex,
        ))
    return tuple(filters)


def _columns_to(columns) -> list:
    return [{"header": c.header, "rangesA1": list(c.ranges)} for c in columns]


def _filters_to(filters) -> list:
    return [{
        "id": f.id,
        "source": f.source,
        "field": f.field,
        "sheetRangeA1": f.sheet_range,
        "op": f.op,
        "value": f.value,
    } for f in filters]


def template_from_dict(data) -> Template:
    """Build a :class:`Template` from a decoded JSON object."""
    if not isinstance(data, dict):
        raise TemplateError("Template must be a JSON object.")

    base = Template()
    mode = data.get("mode")
    if mode not in MODES:
        mode = base.mode

    records = RecordsConfig(
        columns=_columns_from(_list(data, "rolesColumns")),
        required_header=_str(data, "requiredRoleHeader"),
        filters=_filters_from(_list(data, "rolesFilters")),
    )

    a = base.assignments
    marks = data.get("assignMarkValues")
    assignments = AssignmentsConfig(
        a_header=_str(data, "assignAHeader", a.a_header),
        b_header=_str(data, "assignBHeader", a.b_header),
        object_a_range=_str(data, "assignObjARange"),
        object_b_range=_str(data, "assignObjBRange"),
        matrix_range=_str(data, "assignMatrixRange"),
        mark_values=parse_mark_values(
            marks if isinstance(marks, str) else DEFAULT_MARK_VALUES),
        extra_columns=_columns_from(_list(data, "assignExtraColumns")),
        filters=_filters_from(_list(data, "assignFilters")),
    )

    version = data.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        version = TEMPLATE_VERSION
    elif version > TEMPLATE_VERSION:
        logger.warning(f"Template version {version} is newer than "
                       f"{TEMPLATE_VERSION}; unknown fields are ignored")

    return Template(
        mode=mode,
        records=records,
        assignments=assignments,
        sheet_name=_str(data, "sheetName"),
        version=version,
    )


def template_to_dict(template: Template) -> dict:
    r = template.records
    a = template.assignments
    data = {
        "version": TEMPLATE_VERSION,
        "mode": template.mode,
        "rolesColumns": _columns_to(r.columns),
        "requiredRoleHeader": r.required_header,
        "rolesFilters": _filters_to(r.filters),
        "assignAHeader": a.a_header,
        "assignBHeader": a.b_header,
        "assignObjARange": a.object_a_range,
        "assignObjBRange": a.object_b_range,
        "assignMatrixRange": a.matrix_range,
        "assignMarkValues": ",".join(a.mark_values),
        "assignExtraColumns": _columns_to(a.extra_columns),
        "assignFilters": _filters_to(a.filters),
    }
    if template.sheet_name:
        data["sheetName"] = template.sheet_name
    return data


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def parse_template(text: str) -> Template:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TemplateError(
            f"Could not import template JSON ({exc.msg} at line {exc.lineno}). "
            f"Please verify the file.") from exc
    return template_from_dict(data)


def load_template(path: str) -> Template:
    """Read a template file; raises :class:`TemplateError` when unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateError(f"Could not read template '{path}': {exc}") from exc
    return parse_template(text)


def save_template(template: Template, path: str) -> str:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(template_to_dict(template), f, indent=2)
    logger.info(f"Saved template: {path}")
    return path
