"""
CSV encoding, decoding and multiset comparison.

Output uses LF line endings and quotes a value only when it contains a
comma, a quote or a line break.  The decoder accepts LF, CRLF and CR.
"""

import re
from collections import Counter
from dataclasses import dataclass, field

from .duplicates import row_key
from .models import as_mapping, make_unique_headers

_MUST_QUOTE = re.compile(r'[",\n\r]')


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def csv_escape(value) -> str:
    v = "" if value is None else str(value)
    escaped = v.replace('"', '""')
    return f'"{escaped}"' if _MUST_QUOTE.search(v) else escaped


def to_csv(headers, rows) -> str:
    """Render *rows* (records or dicts) under *headers*."""
    lines = [",".join(csv_escape(h) for h in headers)]
    for row in rows:
        values = as_mapping(row)
        lines.append(",".join(csv_escape(values.get(h, "")) for h in headers))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def _split_rows(text):
    s = text or ""
    rows = []
    row = []
    cur = []
    in_quotes = False
    i = 0
    while i < len(s):
        ch = s[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < len(s) and s[i + 1] == '"':
                    cur.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                cur.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            row.append("".join(cur))
            cur = []
        elif ch in "\r\n":
            # CRLF, CR and LF end a record only outside quotes
            if ch == "\r" and i + 1 < len(s) and s[i + 1] == "\n":
                i += 1
            row.append("".join(cur))
            cur = []
            rows.append(row)
            row = []
        else:
            cur.append(ch)
        i += 1

    row.append("".join(cur))
    rows.append(row)

    while rows and all(not v.strip() for v in rows[-1]):
        rows.pop()
    return rows


def parse_csv(text):
    """Parse CSV *text* into ``(headers, rows)``.

    Rows are dicts keyed by header; a blank header at position ``i`` is
    keyed ``Column{i+1}``.  Missing trailing fields read as ``""``.
    """
    raw = _split_rows(text)
    if not raw:
        return [], []
    headers = [h.strip() for h in raw[0]]
    keys = [h or f"Column{i + 1}" for i, h in enumerate(headers)]
    rows = []
    for values in raw[1:]:
        rows.append({k: (values[i] if i < len(values) else "")
                     for i, k in enumerate(keys)})
    return headers, rows


# ---------------------------------------------------------------------------
# Compare
# ---------------------------------------------------------------------------

@dataclass
class CsvComparison:
    summary: str
    headers: list
    headers_match: bool
    left_count: int = 0
    right_count: int = 0
    only_in_left: list = field(default_factory=list)
    only_in_right: list = field(default_factory=list)


def _surplus(rows, own, other, headers):
    """Rows whose key occurs more often in *own* than in *other*."""
    remaining = Counter(own)
    out = []
    for r in rows:
        k = row_key(r, headers)
        if remaining[k] > other.get(k, 0):
            out.append(r)
            remaining[k] -= 1
    return out


def compare_csv(left_text, right_text) -> CsvComparison:
    """Multiset difference of two CSV documents.

    Rows are keyed on the headers both sides share; when they share none,
    on the union of both header lists.
    """
    left_headers, left_rows = parse_csv(left_text)
    right_headers, right_rows = parse_csv(right_text)
    left_headers = [h for h in left_headers if h]
    right_headers = [h for h in right_headers if h]

    common = [h for h in left_headers if h in right_headers]
    headers_match = left_headers == right_headers
    if headers_match:
        note = "Headers match."
    else:
        total = max(len(left_headers), len(right_headers))
        note = (f"Headers differ. Comparing on common headers: "
                f"{len(common)}/{total}.")
    key_headers = common or make_unique_headers(left_headers + right_headers)

    left_counts = Counter(row_key(r, key_headers) for r in left_rows)
    right_counts = Counter(row_key(r, key_headers) for r in right_rows)
    only_left = _surplus(left_rows, left_counts, right_counts, key_headers)
    only_right = _surplus(right_rows, right_counts, left_counts, key_headers)

    summary = "\n".join([
        "Compare result:",
        f"- Generated rows: {len(left_rows)}",
        f"- Other rows: {len(right_rows)}",
        f"- Only in generated: {len(only_left)}",
        f"- Only in other: {len(only_right)}",
        f"- {note}",
    ])
    return CsvComparison(
        summary=summary,
        headers=key_headers,
        headers_match=headers_match,
        left_count=len(left_rows),
        right_count=len(right_rows),
        only_in_left=only_left,
        only_in_right=only_right,
    )


def _render_section(lines, title, underline, rows, headers, max_list):
    lines.append(f"{title} ({len(rows)})")
    lines.append(underline)
    if not rows:
        lines.append("(none)")
    for i, r in enumerate(rows[:max_list], 1):
        lines.append(f"{i}. " + " | ".join(
            f"{h}={str(r.get(h, '')).strip()}" for h in headers))
    if len(rows) > max_list:
        lines.append(f"... truncated ({len(rows) - max_list} more)")
    lines.append("")


def comparison_report(result: CsvComparison, max_list: int = 200) -> str:
    """Render a readable plain-text report of a :class:`CsvComparison`."""
    lines = [
        "CSV Comparison Report",
        "=====================",
        "",
        result.summary,
        "",
        f"Headers used for compare ({len(result.headers)}):",
        ", ".join(result.headers),
        "",
    ]
    _render_section(lines, "Only in GENERATED", "----------------------",
                    result.only_in_left, result.headers, max_list)
    _render_section(lines, "Only in OTHER CSV", "-------------------",
                    result.only_in_right, result.headers, max_list)
    return "\n".join(lines)
