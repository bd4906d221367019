"""Tests for CSV encoding/decoding, comparison and duplicate detection."""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from excel_to_csv.csv_codec import (
    compare_csv,
    comparison_report,
    csv_escape,
    parse_csv,
    to_csv,
)
from excel_to_csv.duplicates import find_duplicates
from excel_to_csv.models import Provenance, Record


class TestEncode(unittest.TestCase):
    def test_plain_values_unquoted(self):
        self.assertEqual(csv_escape("abc"), "abc")

    def test_quoting(self):
        self.assertEqual(csv_escape("a,b"), '"a,b"')
        self.assertEqual(csv_escape('say "hi"'), '"say ""hi"""')
        self.assertEqual(csv_escape("two\nlines"), '"two\nlines"')

    def test_to_csv_header_order_and_missing(self):
        text = to_csv(["a", "b"], [{"b": "2", "a": "1"}, {"a": "3"}])
        self.assertEqual(text, "a,b\n1,2\n3,")

    def test_records_emit_public_fields_only(self):
        rec = Record(values={"Name": "x"}, provenance=Provenance(row=4, col=2))
        self.assertEqual(to_csv(["Name"], [rec]), "Name\nx")


class TestDecode(unittest.TestCase):
    def test_round_trip_special_values(self):
        headers = ["Name", "Notes"]
        rows = [
            {"Name": "a,b", "Notes": 'He said "no"'},
            {"Name": "multi\nline", "Notes": ""},
            {"Name": '""', "Notes": ",\n,"},
        ]
        parsed_headers, parsed_rows = parse_csv(to_csv(headers, rows))
        self.assertEqual(parsed_headers, headers)
        self.assertEqual(parsed_rows, rows)

    def test_crlf_and_trailing_blank_rows(self):
        headers, rows = parse_csv("a,b\r\n1,2\r\n\r\n")
        self.assertEqual(headers, ["a", "b"])
        self.assertEqual(rows, [{"a": "1", "b": "2"}])

    def test_carriage_returns_inside_quotes_kept(self):
        rows = [{"v": "a\r\nb"}, {"v": "c\rd"}]
        headers, parsed = parse_csv(to_csv(["v"], rows))
        self.assertEqual(headers, ["v"])
        self.assertEqual(parsed, rows)

    def test_bare_cr_separates_records(self):
        self.assertEqual(parse_csv("a\r1\r2"), (["a"], [{"a": "1"}, {"a": "2"}]))

    def test_blank_header_named_by_position(self):
        headers, rows = parse_csv(" a ,\n1,2")
        self.assertEqual(headers, ["a", ""])
        self.assertEqual(rows, [{"a": "1", "Column2": "2"}])

    def test_short_rows_padded(self):
        _, rows = parse_csv("a,b,c\n1")
        self.assertEqual(rows, [{"a": "1", "b": "", "c": ""}])

    def test_empty_text(self):
        self.assertEqual(parse_csv(""), ([], []))


class TestCompare(unittest.TestCase):
    CSV = "Role,Perm\nAdmin,Read\nAdmin,Read\nViewer,Read"

    def test_identical(self):
        result = compare_csv(self.CSV, self.CSV)
        self.assertEqual(result.only_in_left, [])
        self.assertEqual(result.only_in_right, [])
        self.assertTrue(result.headers_match)
        self.assertIn("Headers match.", result.summary)

    def test_multiset_difference(self):
        other = "Role,Perm\nAdmin,Read\nEditor,Write\nEditor,Write"
        result = compare_csv(self.CSV, other)
        self.assertEqual(result.only_in_left,
                         [{"Role": "Admin", "Perm": "Read"},
                          {"Role": "Viewer", "Perm": "Read"}])
        self.assertEqual(result.only_in_right,
                         [{"Role": "Editor", "Perm": "Write"},
                          {"Role": "Editor", "Perm": "Write"}])
        self.assertIn("- Only in generated: 2", result.summary)

    def test_values_trimmed_for_keys(self):
        result = compare_csv("a\n x ", "a\nx")
        self.assertEqual(result.only_in_left, [])

    def test_common_headers_only(self):
        other = "Perm,Role,Extra\nRead,Admin,1\nRead,Admin,2\nRead,Viewer,3"
        result = compare_csv(self.CSV, other)
        self.assertFalse(result.headers_match)
        self.assertEqual(result.headers, ["Role", "Perm"])
        self.assertEqual(result.only_in_left, [])
        self.assertEqual(result.only_in_right, [])
        self.assertIn("Comparing on common headers: 2/3.", result.summary)

    def test_no_common_headers(self):
        result = compare_csv("a\n1", "b\n1")
        self.assertEqual(result.headers, ["a", "b"])
        self.assertEqual(len(result.only_in_left), 1)
        self.assertEqual(len(result.only_in_right), 1)

    def test_report(self):
        other = "Role,Perm\nEditor,Write"
        report = comparison_report(compare_csv(self.CSV, other), max_list=1)
        self.assertTrue(report.startswith("CSV Comparison Report\n"))
        self.assertIn("Headers used for compare (2):\nRole, Perm", report)
        self.assertIn("Only in GENERATED (3)", report)
        self.assertIn("1. Role=Admin | Perm=Read", report)
        self.assertIn("... truncated (2 more)", report)
        self.assertIn("Only in OTHER CSV (1)", report)

    def test_report_none(self):
        report = comparison_report(compare_csv(self.CSV, self.CSV))
        self.assertEqual(report.count("(none)"), 2)


class TestFindDuplicates(unittest.TestCase):
    def test_all_occurrences_returned(self):
        rows = [{"a": "1", "b": "2"}, {"a": "1", "b": "2"}, {"a": "3", "b": "4"}]
        report = find_duplicates(rows, ["a", "b"])
        self.assertEqual(report.group_count, 1)
        self.assertEqual(report.duplicate_row_count, 2)
        self.assertEqual(report.duplicate_rows, rows[:2])

    def test_keys_trimmed(self):
        rows = [{"a": " x"}, {"a": "x "}]
        self.assertEqual(find_duplicates(rows, ["a"]).group_count, 1)

    def test_records_supported(self):
        rows = [Record({"a": "1"}, Provenance(row=1)),
                Record({"a": "1"}, Provenance(row=2))]
        self.assertEqual(find_duplicates(rows, ["a"]).duplicate_row_count, 2)

    def test_no_duplicates(self):
        report = find_duplicates([{"a": "1"}, {"a": "2"}], ["a"])
        self.assertEqual((report.group_count, report.duplicate_row_count), (0, 0))


if __name__ == "__main__":
    unittest.main()
