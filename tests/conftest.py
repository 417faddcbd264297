from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from finchart import COMPANIES, METRICS

YEARS = [2021, 2022, 2023]


def write_workbook(
    path: Path,
    header: Sequence[Any],
    rows: Sequence[Sequence[Any]],
    *,
    extra_sheets: dict[str, list[list[Any]]] | None = None,
) -> Path:
    """Write an .xlsx whose first sheet holds *header* + *rows*."""
    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.title = "Financials"
    ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    for name, sheet_rows in (extra_sheets or {}).items():
        other = wb.create_sheet(title=name)
        for row in sheet_rows:
            other.append(row)
    wb.save(path)
    return path


def sample_value(company_idx: int, metric_idx: int, year: int) -> int:
    return 1000 * (company_idx + 1) + 100 * metric_idx + (year - 2000)


@pytest.fixture
def financials_xlsx(tmp_path: Path) -> Path:
    """5 companies x 3 metrics x 3 years, plus an ignored Notes column."""
    header: list[Any] = ["Company name", "Field", *YEARS, "Notes"]
    rows = []
    for c_idx, company in enumerate(COMPANIES):
        for m_idx, metric in enumerate(METRICS):
            values = [sample_value(c_idx, m_idx, y) for y in YEARS]
            rows.append([company, metric, *values, "audited"])
    return write_workbook(
        tmp_path / "Financials.xlsx",
        header,
        rows,
        extra_sheets={"Other": [["Company name", "Field", 1999], ["X", "SALES", 1]]},
    )
