"""CLI entry point for finchart."""

from __future__ import annotations

import math
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from finchart import COMPANY_COLUMN, FIELD_COLUMN, __version__
from finchart.io import RawRow, load_first_sheet_as_rows, write_json
from finchart.models import NormalizeReport, RunManifest
from finchart.normalize import classify_headers, headers_of, normalize_rows_with_report
from finchart.report import write_chart_report
from finchart.series import (
    chart_title,
    companies_in,
    default_selection,
    filter_series,
    format_axis_value,
    metrics_in,
)
from finchart.settings import Settings
from finchart.utils import setup_logging, sha256_file, utcnow_iso

app = typer.Typer(
    name="finchart",
    help="finchart — Serve spreadsheet financials as chart-ready records.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"finchart v{__version__}")
        raise typer.Exit()


def _load_rows(input_file: Path) -> list[RawRow]:
    try:
        return load_first_sheet_as_rows(input_file)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)


def _write_manifest(
    out_dir: Path, input_file: Path, created_at: str, report: NormalizeReport
) -> Path:
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass

    manifest = RunManifest(
        version=__version__,
        input_path=str(input_file.resolve()),
        output_dir=str(out_dir.resolve()),
        created_at_utc=created_at,
        rows_in=report.rows_in,
        records_out=report.records_out,
        sha256=sha256,
    )
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """finchart CLI."""


# ── serve command ────────────────────────────────────────────────


@app.command()
def serve(
    data_file: Path | None = typer.Option(
        None, "--data-file", "-d",
        help="Workbook to serve (default: ./Financials.xls).",
    ),
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port."),
    company_column: str = typer.Option(COMPANY_COLUMN, "--company-column"),
    field_column: str = typer.Option(FIELD_COLUMN, "--field-column"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Serve GET /api/data over HTTP."""
    import uvicorn

    from finchart.api import create_app

    try:
        kwargs = {"data_file": data_file} if data_file else {}
        settings = Settings(
            host=host,
            port=port,
            company_column=company_column,
            field_column=field_column,
            log_level=log_level,
            **kwargs,
        )
    except (TypeError, ValueError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    setup_logging(settings.log_level)
    console.print(Panel(
        f"[bold]finchart[/bold] v{__version__}\n"
        f"Data:   {settings.data_file}\n"
        f"Listen: http://{settings.host}:{settings.port}/api/data",
        title="Serve", border_style="blue",
    ))
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# ── export command ───────────────────────────────────────────────


@app.command()
def export(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the XLS/XLSX (or CSV) workbook.",
        exists=True, readable=True,
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for records + report + manifest.",
    ),
    company_column: str = typer.Option(COMPANY_COLUMN, "--company-column"),
    field_column: str = typer.Option(FIELD_COLUMN, "--field-column"),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
) -> None:
    """Write records.json, normalize_report.json and run_manifest.json."""
    echo = _printer(quiet)
    created_at = utcnow_iso()

    if not quiet:
        console.print(Panel(
            f"[bold]finchart[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {out_dir}",
            title="Export", border_style="blue",
        ))

    echo("[blue]>[/blue] Loading input file …")
    rows = _load_rows(input_file)
    echo(f"  {len(rows)} rows")

    try:
        echo("[blue]>[/blue] Normalizing …")
        records, report = normalize_rows_with_report(
            rows, company_column=company_column, field_column=field_column
        )
        if not quiet:
            for w in report.warnings:
                console.print(f"  [yellow]![/yellow] {w}")

        out_dir.mkdir(parents=True, exist_ok=True)
        records_path = write_json(out_dir / "records.json", [r.to_dict() for r in records])
        echo(f"  Records  -> {records_path}")
        report_path = write_json(out_dir / "normalize_report.json", report.to_dict())
        echo(f"  Report   -> {report_path}")
        manifest_path = _write_manifest(out_dir, input_file, created_at, report)
        echo(f"  Manifest -> {manifest_path}")

        if not quiet:
            console.print(Panel(
                f"[green]Done[/green] — {report.records_out} records -> {records_path}",
                title="Export Complete", border_style="green",
            ))
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)


# ── validate command ─────────────────────────────────────────────


@app.command()
def validate(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the XLS/XLSX (or CSV) workbook.",
        exists=True, readable=True,
    ),
    company_column: str = typer.Option(COMPANY_COLUMN, "--company-column"),
    field_column: str = typer.Option(FIELD_COLUMN, "--field-column"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report failures."),
) -> None:
    """Check a workbook's layout without writing anything.

    Exit 0 = OK, exit 2 = no year columns found or unreadable input.
    """
    rows = _load_rows(input_file)
    layout = classify_headers(
        headers_of(rows), company_column=company_column, field_column=field_column
    )
    records, report = normalize_rows_with_report(
        rows, company_column=company_column, field_column=field_column
    )

    if not quiet:
        tbl = RichTable(title="Validation Summary", show_lines=True)
        tbl.add_column("Check", style="bold")
        tbl.add_column("Result")

        tbl.add_row("Rows in", str(report.rows_in))
        tbl.add_row("Records out", str(report.records_out))
        tbl.add_row("Year columns", ", ".join(layout.year_columns) or "[red]none[/red]")
        tbl.add_row("Ignored columns", ", ".join(layout.ignored_columns) or "none")
        tbl.add_row("Companies", ", ".join(companies_in(records)) or "none")
        tbl.add_row("Metrics", ", ".join(metrics_in(records)) or "none")
        tbl.add_row("Non-numeric values", str(report.unparsable_values))
        tbl.add_row("Rows missing labels", str(report.missing_labels))
        for w in report.warnings:
            tbl.add_row("Warning", f"[yellow]{w}[/yellow]")
        tbl.add_row(
            "Status", "[green]PASS[/green]" if layout.year_columns else "[red]FAIL[/red]"
        )
        console.print(tbl)

    if not layout.year_columns:
        _err("No four-digit year columns found")
        raise typer.Exit(code=2)


# ── chart command ────────────────────────────────────────────────


@app.command()
def chart(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the XLS/XLSX (or CSV) workbook.",
        exists=True, readable=True,
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for Chart.xlsx.",
    ),
    company: str | None = typer.Option(None, "--company", "-c", help="Company to chart."),
    metric: str | None = typer.Option(None, "--metric", "-m", help="Metric to chart."),
    company_column: str = typer.Option(COMPANY_COLUMN, "--company-column"),
    field_column: str = typer.Option(FIELD_COLUMN, "--field-column"),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
) -> None:
    """Render one company/metric series as an Excel line chart."""
    echo = _printer(quiet)
    default_company, default_metric = default_selection()
    company = company or default_company
    metric = metric or default_metric

    rows = _load_rows(input_file)
    records, _report = normalize_rows_with_report(
        rows, company_column=company_column, field_column=field_column
    )
    points = filter_series(records, company, metric)
    if not points:
        _err(f"No data available for {chart_title(company, metric)}")
        raise typer.Exit(code=2)

    try:
        report_path = write_chart_report(
            out_dir, records, points, company=company, metric=metric
        )
    except OSError as exc:
        _err(f"Could not write chart: {exc}")
        raise typer.Exit(code=1)
    echo(f"  {chart_title(company, metric)}: {len(points)} points")
    for point in points:
        label = "n/a" if math.isnan(point.value) else format_axis_value(point.value)
        echo(f"    {point.year}: {label}")
    echo(f"  Chart -> {report_path}")
