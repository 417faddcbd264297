"""Wide-to-long reshaping of financial rows — pure functions, no side effects."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from numbers import Real
from typing import Any

from finchart import COMPANY_COLUMN, FIELD_COLUMN, UNKNOWN_LABEL
from finchart.models import FinancialRecord, NormalizeReport, SheetLayout

# ── Header classification ───────────────────────────────────────


_YEAR_HEADER_RE = re.compile(r"[0-9]{4}")
_FLOAT_PREFIX_RE = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)


def _key_text(key: object) -> str:
    return key if isinstance(key, str) else str(key)


def is_year_header(key: object) -> bool:
    """True when *key* is exactly four ASCII digits."""
    return _YEAR_HEADER_RE.fullmatch(_key_text(key)) is not None


def classify_headers(
    headers: Iterable[object],
    *,
    company_column: str = COMPANY_COLUMN,
    field_column: str = FIELD_COLUMN,
) -> SheetLayout:
    """Partition *headers* into year columns and everything else, once per sheet."""
    year_columns: list[str] = []
    ignored: list[str] = []
    seen: set[str] = set()
    for header in headers:
        text = _key_text(header)
        if text in seen:
            continue
        seen.add(text)
        if is_year_header(text):
            year_columns.append(text)
        elif text not in (company_column, field_column):
            ignored.append(text)
    return SheetLayout(
        company_column=company_column,
        field_column=field_column,
        year_columns=tuple(year_columns),
        ignored_columns=tuple(ignored),
    )


def headers_of(rows: Iterable[Mapping[Any, Any]]) -> list[str]:
    """Return every header seen across *rows*, in first-seen order."""
    out: dict[str, None] = {}
    for row in rows:
        for key in row:
            out.setdefault(_key_text(key), None)
    return list(out)


# ── Coercion helpers ────────────────────────────────────────────


def parse_value(value: object) -> float:
    """Coerce a cell to ``float``, falling back to NaN.

    Numbers pass through; text is read by its longest leading numeric
    prefix after leading whitespace, so ``"12.5kg"`` gives 12.5 and
    ``"1,234"`` gives 1.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, Real):
        return float(value)
    if not isinstance(value, str):
        return math.nan
    match = _FLOAT_PREFIX_RE.match(value.lstrip())
    if match is None:
        return math.nan
    return float(match.group(0))


def _label(row: Mapping[Any, Any], column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, float) and math.isnan(value):
        return None
    return str(value)


# ── Main reshaping function ─────────────────────────────────────


def normalize_rows_with_report(
    rows: Sequence[Mapping[Any, Any]],
    *,
    company_column: str = COMPANY_COLUMN,
    field_column: str = FIELD_COLUMN,
) -> tuple[list[FinancialRecord], NormalizeReport]:
    """Reshape wide rows into long-form records plus a quality report.

    One record is emitted per (row, four-digit key) pair, in row order
    and then in each row's key order. A cell that is not numeric still
    yields a record whose Value is NaN. Rows without a company or field
    value use ``UNKNOWN_LABEL`` and are reported.
    """
    records: list[FinancialRecord] = []
    report = NormalizeReport(rows_in=len(rows))
    years: dict[str, int | None] = {}

    for index, row in enumerate(rows, start=1):
        company = _label(row, company_column)
        metric = _label(row, field_column)
        missing = [
            col for col, val in ((company_column, company), (field_column, metric))
            if val is None
        ]
        if missing:
            report.missing_labels += 1
            report.warnings.append(
                f"Row {index}: missing {', '.join(repr(c) for c in missing)}; "
                f"using {UNKNOWN_LABEL!r}"
            )

        for key, cell in row.items():
            text = _key_text(key)
            if text not in years:
                years[text] = int(text) if is_year_header(text) else None
                if years[text] is not None:
                    report.year_columns.append(text)
            year = years[text]
            if year is None:
                continue
            value = parse_value(cell)
            if math.isnan(value):
                report.unparsable_values += 1
            records.append(
                FinancialRecord(
                    Company=company if company is not None else UNKNOWN_LABEL,
                    Metric=metric if metric is not None else UNKNOWN_LABEL,
                    Year=year,
                    Value=value,
                )
            )

    report.records_out = len(records)
    if report.unparsable_values:
        suffix = "" if report.unparsable_values == 1 else "s"
        report.warnings.append(
            f"Found {report.unparsable_values} non-numeric value{suffix} "
            "under year columns; emitted as NaN"
        )
    if rows and not report.year_columns:
        report.warnings.append("No four-digit year columns found")
    return records, report


def normalize_rows(
    rows: Sequence[Mapping[Any, Any]],
    *,
    company_column: str = COMPANY_COLUMN,
    field_column: str = FIELD_COLUMN,
) -> list[FinancialRecord]:
    """Reshape wide rows into long-form ``FinancialRecord`` values."""
    records, _report = normalize_rows_with_report(
        rows, company_column=company_column, field_column=field_column
    )
    return records
