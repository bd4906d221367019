#!/usr/bin/env python
"""
Excel → CSV – CLI entry point.

Usage:
    # List the sheets of a workbook
    python -m excel_to_csv.main sheets <excel_file>

    # Generate a CSV from a workbook and a saved template
    python -m excel_to_csv.main generate <excel_file> --template mapping.json
        [--sheet Sheet1] [--output out.csv] [--duplicates dups.csv]
        [--compare previous.csv] [--report report.txt]

    # Compare two CSV files
    python -m excel_to_csv.main compare <generated.csv> <other.csv> [--report report.txt]

    # Write a starter template
    python -m excel_to_csv.main template <mapping.json> [--mode roles|assignments]
"""

import argparse
import logging
import os
import sys
import zipfile

from openpyxl.utils.exceptions import InvalidFileException

from .config import load_config
from .csv_codec import compare_csv, comparison_report
from .models import MODES, MODE_RECORDS
from .pipeline import Session
from .template import TemplateError, default_template, load_template, save_template
from .workbook import sheet_names

logger = logging.getLogger(__name__)

WORKBOOK_ERRORS = (InvalidFileException, zipfile.BadZipFile, OSError)


def setup_logging(level_str: str = "INFO"):
    """Configure logging."""
    level = getattr(logging, level_str.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def _read_text(path):
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return f.read()


def _write_text(path, text):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    logger.info(f"Wrote {path}")


def _require(path):
    if not os.path.exists(path):
        logger.error(f"File not found: {path}")
        sys.exit(1)


def _read_csv(path):
    try:
        return _read_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"Could not read CSV {path}: {exc}")
        sys.exit(1)


def _write_comparison(result, report_path, limit):
    print(result.summary)
    if report_path:
        _write_text(report_path, comparison_report(result, max_list=limit))


def cmd_sheets(args, config):
    _require(args.excel_file)
    try:
        names = sheet_names(args.excel_file)
    except WORKBOOK_ERRORS as exc:
        logger.error(f"Could not open workbook {args.excel_file}: {exc}")
        sys.exit(1)
    for name in names:
        print(name)


def cmd_generate(args, config):
    _require(args.excel_file)
    _require(args.template)
    try:
        template = load_template(args.template)
    except TemplateError as exc:
        logger.error(str(exc))
        sys.exit(1)

    session = Session(template)
    try:
        session.load_workbook(args.excel_file, args.sheet)
    except KeyError as exc:
        logger.error(str(exc))
        sys.exit(1)
    except WORKBOOK_ERRORS as exc:
        logger.error(f"Could not open workbook {args.excel_file}: {exc}")
        sys.exit(1)

    result = session.generate()
    if not result.ok:
        logger.error("Generation failed; no CSV produced.")
        sys.exit(2)

    out = args.output or os.path.join(config["output_dir"], "output.csv")
    _write_text(out, result.csv + "\n")
    if args.duplicates and result.duplicates_csv:
        _write_text(args.duplicates, result.duplicates_csv + "\n")

    if args.compare:
        _require(args.compare)
        comparison = session.compare(_read_csv(args.compare))
        _write_comparison(comparison, args.report, config["compare_report_limit"])


def cmd_compare(args, config):
    _require(args.generated)
    _require(args.other)
    result = compare_csv(_read_csv(args.generated), _read_csv(args.other))
    _write_comparison(result, args.report, config["compare_report_limit"])


def cmd_template(args, config):
    save_template(default_template(args.mode, config), args.output)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Excel → CSV: map sheet ranges to records, filter, de-duplicate and compare"
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config YAML file (default: config.yaml)")
    parser.add_argument("--log-level", default=None,
                        help="Logging level: DEBUG, INFO, WARNING, ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    # ---- sheets ----
    p_sheets = sub.add_parser("sheets", help="List the sheets of a workbook")
    p_sheets.add_argument("excel_file", help="Path to the Excel file (.xlsx)")
    p_sheets.set_defaults(func=cmd_sheets)

    # ---- generate ----
    p_gen = sub.add_parser("generate", help="Generate a CSV from a template")
    p_gen.add_argument("excel_file", help="Path to the Excel file (.xlsx)")
    p_gen.add_argument("--template", required=True, help="Template JSON file")
    p_gen.add_argument("--sheet", default=None,
                       help="Sheet to read (default: template sheet, else first)")
    p_gen.add_argument("--output", default=None,
                       help="Output CSV path (default: <output_dir>/output.csv)")
    p_gen.add_argument("--duplicates", default=None,
                       help="Write duplicate rows to this CSV when any are found")
    p_gen.add_argument("--compare", default=None,
                       help="Compare the generated CSV against this CSV")
    p_gen.add_argument("--report", default=None,
                       help="Write the comparison report to this text file")
    p_gen.set_defaults(func=cmd_generate)

    # ---- compare ----
    p_cmp = sub.add_parser("compare", help="Compare two CSV files")
    p_cmp.add_argument("generated", help="Generated CSV")
    p_cmp.add_argument("other", help="CSV to compare against")
    p_cmp.add_argument("--report", default=None,
                       help="Write the comparison report to this text file")
    p_cmp.set_defaults(func=cmd_compare)

    # ---- template ----
    p_tpl = sub.add_parser("template", help="Write a starter template")
    p_tpl.add_argument("output", help="Template JSON path")
    p_tpl.add_argument("--mode", choices=MODES, default=MODE_RECORDS)
    p_tpl.set_defaults(func=cmd_template)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(args.log_level or config["log_level"])
    args.func(args, config)


if __name__ == "__main__":
    main()
