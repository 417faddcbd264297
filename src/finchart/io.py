"""I/O helpers — load the first sheet as row-objects, write JSON artifacts."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Literal, cast

import pandas as pd

logger = logging.getLogger(__name__)

RawRow = dict[str, Any]

_EXCEL_ENGINES: dict[str, str] = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xltx": "openpyxl",
    ".xltm": "openpyxl",
    ".xls": "xlrd",
}


class SheetLoadError(ValueError):
    """The input exists but could not be read as a workbook or table."""


# ── Loading ──────────────────────────────────────────────────────


def _header_text(name: object) -> str:
    # Excel stores numbers as floats; a year typed as 2022 must read as "2022".
    if isinstance(name, float) and name.is_integer():
        return str(int(name))
    return str(name)


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(cast(Any, value)))
    except (TypeError, ValueError):
        return False


def _cell_value(value: object) -> object:
    item = getattr(value, "item", None)
    if callable(item):
        return item()
    return value


def _read_csv(path: Path) -> pd.DataFrame:
    last_exc: Exception | None = None
    engine: Literal["python"] = "python"
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            return pd.read_csv(
                path,
                dtype="string",
                sep=None,
                engine=engine,
                encoding=encoding,
                encoding_errors="strict",
                keep_default_na=False,
                na_values=[""],
            )
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
    raise SheetLoadError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def _read_first_sheet(path: Path, engine: str) -> pd.DataFrame:
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        # Only truly empty cells are missing; "N/A", "NA" or "None" stay text.
        return read_excel(
            path,
            sheet_name=0,
            engine=engine,
            dtype=object,
            header=0,
            keep_default_na=False,
            na_values=[""],
        )
    except ImportError as exc:
        raise SheetLoadError(
            f"Reading {path.suffix} input requires {engine!r}. "
            f"Either convert the file or add dependency: pip install {engine}"
        ) from exc
    except Exception as exc:
        raise SheetLoadError(f"Could not read workbook {path}: {exc}") from exc


def frame_to_rows(df: pd.DataFrame) -> list[RawRow]:
    """Turn *df* into row-objects keyed by header text, in column order.

    Blank cells are left out of the row-object entirely.
    """
    headers = [_header_text(c) for c in df.columns]
    rows: list[RawRow] = []
    for values in df.itertuples(index=False, name=None):
        row: RawRow = {}
        for header, value in zip(headers, values):
            if _is_blank(value):
                continue
            row[header] = _cell_value(value)
        rows.append(row)
    return rows


def load_first_sheet_as_rows(path: Path) -> list[RawRow]:
    """Load the first sheet of a workbook (or a CSV table) as row-objects.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    SheetLoadError
        If *path* is not a file, the extension is not supported, or the
        content cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if not path.is_file():
        raise SheetLoadError(f"Input path is not a file: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = _read_csv(path)
    elif suffix in _EXCEL_ENGINES:
        df = _read_first_sheet(path, _EXCEL_ENGINES[suffix])
    else:
        raise SheetLoadError(
            f"Unsupported file type: {suffix!r}. Use .xls, .xlsx, or .csv"
        )

    rows = frame_to_rows(df)
    logger.debug("Loaded %d rows x %d columns from %s", len(rows), len(df.columns), path)
    return rows


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        allow_nan=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
