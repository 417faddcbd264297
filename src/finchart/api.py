"""FastAPI application serving normalized financial records."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from finchart import __version__
from finchart.io import load_first_sheet_as_rows
from finchart.models import FinancialRecord
from finchart.normalize import normalize_rows
from finchart.series import chart_title, default_selection, filter_series
from finchart.settings import Settings

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
DATA_ERROR = {"error": "Error processing data file."}


def load_records(settings: Settings) -> list[FinancialRecord]:
    """Read the data file fresh from disk and reshape it. No caching."""
    rows = load_first_sheet_as_rows(settings.data_file)
    records = normalize_rows(
        rows,
        company_column=settings.company_column,
        field_column=settings.field_column,
    )
    logger.info("Served %d records from %s", len(records), settings.data_file)
    return records


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title="Financial Metrics API", version=__version__)
    app.state.settings = settings

    # Not CORSMiddleware: these headers go out even without Origin, and preflight is an empty 200.
    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/"):
            response.headers.update(CORS_HEADERS)
        return response

    @app.get("/api/health")
    def health():
        return {"ok": True}

    @app.options("/api/data")
    def data_preflight():
        return Response(status_code=200)

    @app.get("/api/data")
    def data():
        try:
            records = load_records(settings)
        except Exception:
            logger.exception("Failed to process the data file %s", settings.data_file)
            return JSONResponse(status_code=500, content=DATA_ERROR)
        return JSONResponse(content=[r.to_dict() for r in records])

    @app.get("/api/series")
    def series(
        company: Optional[str] = Query(default=None),
        metric: Optional[str] = Query(default=None),
    ):
        default_company, default_metric = default_selection()
        company = company or default_company
        metric = metric or default_metric
        try:
            records = load_records(settings)
        except Exception:
            logger.exception("Failed to process the data file %s", settings.data_file)
            return JSONResponse(status_code=500, content=DATA_ERROR)
        points = filter_series(records, company, metric)
        return JSONResponse(
            content={
                "title": chart_title(company, metric),
                "company": company,
                "metric": metric,
                "points": [p.to_dict() for p in points],
            }
        )

    return app
