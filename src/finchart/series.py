"""Selection helpers — filter records into one chart-ready series."""

from __future__ import annotations

from collections.abc import Iterable

from finchart import COMPANIES, METRICS
from finchart.models import ChartPoint, FinancialRecord


def default_selection() -> tuple[str, str]:
    """Return the initial ``(company, metric)`` selection."""
    return COMPANIES[0], METRICS[0]


def filter_series(
    records: Iterable[FinancialRecord], company: str, metric: str
) -> list[ChartPoint]:
    """Project records matching *company* and *metric* to ``(year, value)`` points.

    Matching is exact and the input order is kept.
    """
    return [
        ChartPoint(year=r.Year, value=r.Value)
        for r in records
        if r.Company == company and r.Metric == metric
    ]


def chart_title(company: str, metric: str) -> str:
    return f"{metric} for {company}"


def format_axis_value(value: float) -> str:
    """Format a value in millions for an axis tick (``$1.5B`` / ``$250M``)."""
    if value >= 1000:
        return f"${value / 1000:.1f}B"
    if float(value).is_integer():
        return f"${int(value)}M"
    return f"${value}M"


def companies_in(records: Iterable[FinancialRecord]) -> list[str]:
    return list(dict.fromkeys(r.Company for r in records))


def metrics_in(records: Iterable[FinancialRecord]) -> list[str]:
    return list(dict.fromkeys(r.Metric for r in records))
