"""
Rehab Analytics - FastAPI Application

Thin HTTP surface over the comparison engine:
- Health/status
- Comparison runs (time, patient, progress)
- Export (JSON envelope or CSV)

Records arrive in the request body already scoped and authorised by the
caller; the app keeps no state between requests.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from rehab_analytics import config
from rehab_analytics.core.comparison import ComparisonMode
from rehab_analytics.core.reports import export_csv, export_filename
from rehab_analytics.models import (
    ComparisonRequest,
    ComparisonResponse,
    ExportRequest,
    HealthResponse,
)
from rehab_analytics.services import ComparisonService
from rehab_analytics.utils import RehabAnalyticsError, get_logger, setup_logging

logger = get_logger(__name__)

_comparison_service = ComparisonService()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and attach the service on startup."""
    setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
    app.state.comparison_service = _comparison_service
    logger.info(f"Rehab Analytics API v{config.APP_VERSION} ready")
    yield
    logger.info("Rehab Analytics API shutting down")


app = FastAPI(
    title="Rehab Analytics API",
    description="Assessment comparison and progress analytics",
    version=config.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RehabAnalyticsError)
async def analytics_error_handler(request: Request, exc: RehabAnalyticsError):
    logger.warning(f"{request.url.path}: {exc.code} - {exc.message}")
    return JSONResponse(status_code=422, content=exc.to_dict())


# ---- Health ----

@app.get("/", response_model=HealthResponse)
async def root():
    return HealthResponse(
        status="healthy",
        version=config.APP_VERSION,
        modes=[m.value for m in ComparisonMode],
    )


@app.get("/health", response_model=HealthResponse)
async def health():
    return await root()


# ---- Comparisons ----

@app.post("/api/v1/comparisons", response_model=ComparisonResponse)
async def run_comparison(request: ComparisonRequest):
    """Run one comparison over the supplied records."""
    records = request.to_records()
    settings = request.to_settings()
    run = await run_in_threadpool(_comparison_service.run, records, settings)
    return ComparisonResponse(**run.to_dict())


@app.post("/api/v1/comparisons/export")
async def export_comparison(request: ExportRequest):
    """Run a comparison and return it as a JSON envelope or CSV text."""
    records = request.to_records()
    settings = request.to_settings()
    run = await run_in_threadpool(_comparison_service.run, records, settings)
    filename = export_filename(run.mode, request.scope)

    if request.format == "csv":
        return Response(
            content=export_csv(run.result),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'},
        )

    envelope = ComparisonService.export(run, request.scope)
    return JSONResponse(
        content=envelope,
        headers={"Content-Disposition": f'attachment; filename="{filename}.json"'},
    )
