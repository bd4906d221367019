"""Tests for template JSON loading/saving and the YAML tool config."""

import json
import os
import shutil
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from excel_to_csv.config import load_config
from excel_to_csv.models import ColumnSpec, FilterCondition
from excel_to_csv.template import (
    Template,
    TemplateError,
    default_template,
    load_template,
    new_filter,
    parse_template,
    save_template,
    template_from_dict,
    template_to_dict,
)

SAVED = {
    "version": 1,
    "mode": "assignments",
    "rolesColumns": [{"header": "RoleName", "rangesA1": ["A2:A10", "B2"]}],
    "requiredRoleHeader": "RoleName",
    "rolesFilters": [],
    "assignAHeader": "RoleName",
    "assignBHeader": "EntitlementName",
    "assignObjARange": "A2:A4",
    "assignObjBRange": "B1:D1",
    "assignMatrixRange": "B2:D4",
    "assignMarkValues": "1, X ,,yes",
    "assignExtraColumns": [{"header": "Level", "rangesA1": ["E2:E4"]}],
    "assignFilters": [{
        "id": "f1", "source": "sheet", "field": "",
        "sheetRangeA1": "E2:E4", "op": "neq", "value": "Low",
    }],
    "sheetName": "Matrix",
}


class TestTemplateFromDict(unittest.TestCase):
    def test_full_document(self):
        t = template_from_dict(SAVED)
        self.assertEqual(t.mode, "assignments")
        self.assertEqual(t.sheet_name, "Matrix")
        self.assertEqual(t.records.columns,
                         (ColumnSpec("RoleName", ("A2:A10", "B2")),))
        self.assertEqual(t.assignments.mark_values, ("1", "X", "yes"))
        self.assertEqual(t.assignments.extra_columns,
                         (ColumnSpec("Level", ("E2:E4",)),))
        self.assertEqual(t.assignments.filters, (FilterCondition(
            source="sheet", op="neq", value="Low", field="",
            sheet_range="E2:E4", id="f1"),))

    def test_round_trip(self):
        self.assertEqual(template_from_dict(template_to_dict(template_from_dict(SAVED))),
                         template_from_dict(SAVED))

    def test_unknown_and_mistyped_fields_ignored(self):
        t = template_from_dict({
            "mode": "spreadsheet",
            "rolesColumns": "not a list",
            "requiredRoleHeader": 5,
            "assignFilters": [{"source": "moon", "op": "eq"}, "junk"],
            "futureField": {"x": 1},
        })
        self.assertEqual(t.mode, "roles")
        self.assertEqual(t.records.columns, ())
        self.assertEqual(t.records.required_header, "")
        self.assertEqual(len(t.assignments.filters), 1)
        self.assertEqual(t.assignments.filters[0].source, "output")
        self.assertTrue(t.assignments.filters[0].id)

    def test_missing_marks_default(self):
        t = template_from_dict({})
        self.assertEqual(t.assignments.mark_values, ("1", "X", "x", "YES", "yes"))

    def test_not_an_object(self):
        with self.assertRaises(TemplateError):
            template_from_dict([1, 2])

    def test_sheet_name_omitted_when_blank(self):
        self.assertNotIn("sheetName", template_to_dict(Template()))


class TestTemplateFiles(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_save_and_load(self):
        path = os.path.join(self.tmpdir, "sub", "mapping.json")
        t = template_from_dict(SAVED)
        save_template(t, path)
        with open(path) as f:
            self.assertEqual(json.load(f)["version"], 1)
        self.assertEqual(load_template(path), t)

    def test_invalid_json(self):
        with self.assertRaises(TemplateError) as ctx:
            parse_template("{not json")
        self.assertIn("Could not import template JSON", str(ctx.exception))

    def test_missing_file(self):
        with self.assertRaises(TemplateError):
            load_template(os.path.join(self.tmpdir, "missing.json"))


class TestDefaults(unittest.TestCase):
    def test_default_template_from_config(self):
        config = load_config(None)
        t = default_template("assignments", config)
        self.assertEqual(t.mode, "assignments")
        self.assertEqual(t.assignments.a_header, "RoleName")
        self.assertEqual(t.assignments.b_header, "EntitlementName")
        self.assertEqual(t.records.required_header, "RoleName")

    def test_new_filter_ids_unique(self):
        self.assertNotEqual(new_filter().id, new_filter().id)

    def test_custom_config(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("mark_values: 'Y'\ncompare_report_limit: 5\n")
            f.flush()
            config = load_config(f.name)
        os.unlink(f.name)
        self.assertEqual(config["mark_values"], "Y")
        self.assertEqual(config["compare_report_limit"], 5)
        self.assertEqual(config["log_level"], "INFO")


if __name__ == "__main__":
    unittest.main()
