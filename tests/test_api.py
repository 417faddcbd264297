"""HTTP contract tests for /api/data and friends."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import pytest
from conftest import YEARS, write_workbook
from fastapi.testclient import TestClient

from finchart import COMPANIES, METRICS
from finchart.api import create_app
from finchart.settings import Settings

CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


def _client(data_file: Path) -> TestClient:
    return TestClient(create_app(Settings(data_file=data_file)))


def _assert_cors(headers) -> None:  # type: ignore[no-untyped-def]
    for name, value in CORS.items():
        assert headers[name] == value


def test_get_data_returns_all_records_with_cors(financials_xlsx: Path) -> None:
    response = _client(financials_xlsx).get("/api/data")

    assert response.status_code == 200
    _assert_cors(response.headers)
    body = response.json()
    assert len(body) == len(COMPANIES) * len(METRICS) * len(YEARS)
    assert body[0] == {
        "Company": "HCL Technologies Ltd.",
        "Metric": "SALES",
        "Year": 2021,
        "Value": 1021,
    }
    assert all(isinstance(item["Year"], int) for item in body)
    assert {item["Company"] for item in body} == set(COMPANIES)


def test_na_like_cells_and_labels_survive_workbook_load(tmp_path: Path) -> None:
    path = write_workbook(
        tmp_path / "na.xlsx",
        ["Company name", "Field", 2021, 2022, 2023],
        [
            ["Infosys Ltd.", "SALES", "N/A", "abc", "NA"],
            ["NA", "None", 1, 2, 3],
        ],
    )

    response = _client(path).get("/api/data")

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 6
    assert [item["Value"] for item in body[:3]] == [None, None, None]
    assert body[3] == {"Company": "NA", "Metric": "None", "Year": 2021, "Value": 1}


def test_non_numeric_cells_serialize_as_null(tmp_path: Path) -> None:
    path = write_workbook(
        tmp_path / "fin.xlsx",
        ["Company name", "Field", 2022, 2023],
        [["Infosys Ltd.", "SALES", "abc", 110]],
    )

    body = _client(path).get("/api/data").json()

    assert body == [
        {"Company": "Infosys Ltd.", "Metric": "SALES", "Year": 2022, "Value": None},
        {"Company": "Infosys Ltd.", "Metric": "SALES", "Year": 2023, "Value": 110},
    ]


def test_options_preflight_is_empty_200(financials_xlsx: Path) -> None:
    response = _client(financials_xlsx).options(
        "/api/data",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.content == b""
    _assert_cors(response.headers)


def test_missing_file_returns_500_and_logs(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    client = _client(tmp_path / "Financials.xls")

    with caplog.at_level(logging.ERROR, logger="finchart.api"):
        response = client.get("/api/data")

    assert response.status_code == 500
    assert response.json() == {"error": "Error processing data file."}
    _assert_cors(response.headers)
    assert any("Failed to process the data file" in r.message for r in caplog.records)
    assert any(r.exc_info for r in caplog.records)


def test_corrupt_workbook_returns_500(tmp_path: Path) -> None:
    path = tmp_path / "Financials.xlsx"
    path.write_bytes(b"garbage")

    response = _client(path).get("/api/data")

    assert response.status_code == 500
    assert response.json() == {"error": "Error processing data file."}


def test_file_is_reread_on_every_request(tmp_path: Path) -> None:
    path = tmp_path / "fin.xlsx"
    write_workbook(path, ["Company name", "Field", 2022], [["A", "SALES", 1]])
    client = _client(path)

    assert len(client.get("/api/data").json()) == 1

    write_workbook(path, ["Company name", "Field", 2022, 2023], [["A", "SALES", 1, 2]])

    assert len(client.get("/api/data").json()) == 2


def test_series_defaults_to_first_company_and_metric(financials_xlsx: Path) -> None:
    response = _client(financials_xlsx).get("/api/series")

    assert response.status_code == 200
    _assert_cors(response.headers)
    body = response.json()
    assert body["title"] == "SALES for HCL Technologies Ltd."
    assert body["company"] == "HCL Technologies Ltd."
    assert body["metric"] == "SALES"
    assert [p["year"] for p in body["points"]] == YEARS


def test_series_filters_by_query_params(financials_xlsx: Path) -> None:
    response = _client(financials_xlsx).get(
        "/api/series", params={"company": "Wipro Ltd.", "metric": "PAT"}
    )

    body = response.json()
    assert body["title"] == "PAT for Wipro Ltd."
    assert body["points"] == [{"year": 2021, "value": 4221}, {"year": 2022, "value": 4222}, {"year": 2023, "value": 4223}]


def test_series_unknown_selection_has_no_points(financials_xlsx: Path) -> None:
    body = _client(financials_xlsx).get(
        "/api/series", params={"company": "Nobody", "metric": "SALES"}
    ).json()

    assert body["points"] == []


def test_series_missing_file_returns_500(tmp_path: Path) -> None:
    response = _client(tmp_path / "missing.xlsx").get("/api/series")

    assert response.status_code == 500
    assert response.json() == {"error": "Error processing data file."}


def test_health() -> None:
    client = TestClient(create_app(Settings(data_file=Path("unused.xlsx"))))

    assert client.get("/api/health").json() == {"ok": True}


def test_records_value_is_finite_or_null(financials_xlsx: Path) -> None:
    body = _client(financials_xlsx).get("/api/data").json()

    for item in body:
        assert item["Value"] is None or math.isfinite(item["Value"])
