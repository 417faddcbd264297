"""Data models used across the package."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


def json_number(value: float) -> float | None:
    """Return *value*, or ``None`` when it has no JSON representation."""
    if math.isnan(value) or math.isinf(value):
        return None
    return value


@dataclass(frozen=True)
class FinancialRecord:
    """One (company, metric, year) observation in long form."""

    Company: str
    Metric: str
    Year: int
    Value: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "Company": self.Company,
            "Metric": self.Metric,
            "Year": self.Year,
            "Value": json_number(self.Value),
        }


@dataclass(frozen=True)
class ChartPoint:
    year: int
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"year": self.year, "value": json_number(self.value)}


@dataclass(frozen=True)
class SheetLayout:
    """Header classification for one sheet.

    ``year_columns`` keeps the order in which the headers appear.
    """

    company_column: str
    field_column: str
    year_columns: tuple[str, ...] = ()
    ignored_columns: tuple[str, ...] = ()

    @property
    def years(self) -> list[int]:
        return [int(col) for col in self.year_columns]


@dataclass
class NormalizeReport:
    """Quality report for one normalization pass.

    Contract invariant: ``records_out`` equals the number of four-digit
    keys summed over every input row.
    """

    rows_in: int = 0
    records_out: int = 0
    unparsable_values: int = 0
    missing_labels: int = 0
    year_columns: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.records_out = _to_non_negative_int(self.records_out, "records_out")
        self.unparsable_values = _to_non_negative_int(
            self.unparsable_values, "unparsable_values"
        )
        self.missing_labels = _to_non_negative_int(self.missing_labels, "missing_labels")
        self.year_columns = _to_string_list(self.year_columns, "year_columns")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.unparsable_values > self.records_out:
            raise ValueError("unparsable_values must be <= records_out")
        if self.missing_labels > self.rows_in:
            raise ValueError("missing_labels must be <= rows_in")

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "records_out": self.records_out,
            "unparsable_values": self.unparsable_values,
            "missing_labels": self.missing_labels,
            "year_columns": list(self.year_columns),
            "warnings": list(self.warnings),
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a single export run."""

    tool: str = "finchart"
    version: str = ""
    input_path: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    rows_in: int = 0
    records_out: int = 0
    sha256: str = ""

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.records_out = _to_non_negative_int(self.records_out, "records_out")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "rows_in": self.rows_in,
            "records_out": self.records_out,
            "sha256": self.sha256,
        }
