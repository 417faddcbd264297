"""Excel chart writer — produces Chart.xlsx with a native line chart."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl import Workbook
from openpyxl.chart import LineChart, Reference
from openpyxl.chart.marker import Marker
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from finchart.models import ChartPoint, FinancialRecord, json_number
from finchart.series import chart_title

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

TITLE_FONT = Font(name="Calibri", bold=True, size=14, color="2F5496")
VALUE_FONT = Font(name="Calibri", size=11)

LINE_COLOR = "22D3EE"
# Values are millions; thousands and up render as billions ("$1.5B").
MILLIONS_FMT = '[>=1000]"$"0.0,"B";"$"#,##0.##"M"'
YEAR_FMT = "0"

CHART_SHEET = "Chart"
RECORDS_SHEET = "Records"
_SERIES_HEADER_ROW = 3
_AUTO_WIDTH_SAMPLE_ROWS = 300


# ── Helpers ──────────────────────────────────────────────────────


def _style_header(ws: Worksheet, row: int, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=row, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _auto_width(ws: Worksheet) -> None:
    max_row = min(ws.max_row, _AUTO_WIDTH_SAMPLE_ROWS + 1)
    for c_idx in range(1, ws.max_column + 1):
        letter = get_column_letter(c_idx)
        width = 0
        for row in ws.iter_rows(min_row=1, max_row=max_row, min_col=c_idx, max_col=c_idx):
            width = max(width, len(str(row[0].value or "")))
        ws.column_dimensions[letter].width = min(width + 4, 40)


def _sanitize_table_name(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if not re.match(r"^[A-Za-z_]", cleaned):
        cleaned = f"_{cleaned}"
    return cleaned[:255]


def _excel_value(val: Any) -> Any:
    if isinstance(val, float):
        return json_number(val)
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        return val
    return val


def _write_records_sheet(wb: Workbook, records: Sequence[FinancialRecord]) -> None:
    ws = wb.create_sheet(title=RECORDS_SHEET)
    df = pd.DataFrame(
        [r.to_dict() for r in records], columns=["Company", "Metric", "Year", "Value"]
    )
    col_names = list(df.columns)
    for c_idx, col_name in enumerate(col_names, 1):
        ws.cell(row=1, column=c_idx, value=col_name)
    for r_idx, row_vals in enumerate(df.itertuples(index=False, name=None), 2):
        for c_idx, val in enumerate(row_vals, 1):
            ws.cell(row=r_idx, column=c_idx, value=_excel_value(val))
    _style_header(ws, 1, len(col_names))
    ws.freeze_panes = "A2"
    _auto_width(ws)
    if len(df) > 0:
        ref = f"A1:{get_column_letter(len(col_names))}{len(df) + 1}"
        table = Table(displayName=_sanitize_table_name(RECORDS_SHEET), ref=ref)
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9", showFirstColumn=False,
            showLastColumn=False, showRowStripes=True, showColumnStripes=False,
        )
        ws.add_table(table)


def _write_chart_sheet(
    wb: Workbook, points: Sequence[ChartPoint], company: str, metric: str
) -> None:
    ws = wb.create_sheet(title=CHART_SHEET)
    title = chart_title(company, metric)
    ws.cell(row=1, column=1, value=title).font = TITLE_FONT

    header_row = _SERIES_HEADER_ROW
    ws.cell(row=header_row, column=1, value="Year")
    ws.cell(row=header_row, column=2, value=metric)
    _style_header(ws, header_row, 2)

    for offset, point in enumerate(points, 1):
        year_cell = ws.cell(row=header_row + offset, column=1, value=point.year)
        year_cell.number_format = YEAR_FMT
        value_cell = ws.cell(
            row=header_row + offset, column=2, value=json_number(point.value)
        )
        value_cell.number_format = MILLIONS_FMT
        value_cell.font = VALUE_FONT

    ws.column_dimensions["A"].width = 10
    ws.column_dimensions["B"].width = 16
    if not points:
        return

    last_row = header_row + len(points)
    chart = LineChart()
    chart.title = title
    chart.x_axis.title = "Year"
    chart.y_axis.title = metric
    chart.y_axis.numFmt = MILLIONS_FMT
    chart.height = 10
    chart.width = 20
    data = Reference(ws, min_col=2, min_row=header_row, max_row=last_row)
    years = Reference(ws, min_col=1, min_row=header_row + 1, max_row=last_row)
    chart.add_data(data, titles_from_data=True)
    chart.set_categories(years)
    line = chart.series[0]
    line.graphicalProperties.line.solidFill = LINE_COLOR
    line.graphicalProperties.line.width = 25400  # 2pt in EMU
    line.marker = Marker(symbol="circle", size=6)
    line.smooth = True
    ws.add_chart(chart, "D3")


# ── Public API ───────────────────────────────────────────────────


def write_chart_report(
    out_dir: Path,
    records: Sequence[FinancialRecord],
    points: Sequence[ChartPoint],
    *,
    company: str,
    metric: str,
) -> Path:
    """Write ``Chart.xlsx`` (chart + all records) and return the path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    report_path = out_dir / "Chart.xlsx"

    wb = Workbook()
    active_sheet = wb.active
    if active_sheet is not None:
        wb.remove(active_sheet)  # remove default sheet

    _write_chart_sheet(wb, points, company, metric)
    _write_records_sheet(wb, records)

    tmp_path = out_dir / "Chart.tmp.xlsx"
    wb.save(tmp_path)
    tmp_path.replace(report_path)
    return report_path
