"""
RICE Prioritizer FastAPI Application
====================================

REST API for the RICE backlog prioritizer.

Endpoints:
    GET  /api/health           - Health check
    POST /api/score            - Score, rank and annotate a backlog
    POST /api/score/export     - Same scoring, returned as a CSV download
    POST /api/sensitivity      - What-if scores (no AI)
    GET  /api/samples          - List sample backlogs
    GET  /api/samples/{name}   - Sample request body

Usage:
    uvicorn ricerank.api.main:app --reload --port 8000
"""

from dotenv import load_dotenv
load_dotenv()

import logging
import math
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ..ai.rationale_generator import RationaleGenerator
from ..data.config import load_settings
from ..data.samples import SAMPLES, build_sample_request
from ..export.exporter import rows_to_csv
from ..orchestrator.logging_config import setup_logging
from ..orchestrator.pipeline import OutputValidationError, PrioritizationPipeline, rank_request
from ..scoring.sensitivity import sensitivity_by_item
from .models import (
    EffortUnit,
    HealthResponse,
    ScoreRequest,
    ScoreResponse,
    SensitivityModel,
    Timeframe,
)

logger = logging.getLogger(__name__)

settings = load_settings()


def build_pipeline() -> PrioritizationPipeline:
    """Pipeline wired from the LLM settings."""
    generator = RationaleGenerator(
        provider=settings.llm.provider,
        model=settings.llm.model,
        temperature=settings.llm.temperature,
        max_tokens=settings.llm.max_tokens,
    )
    return PrioritizationPipeline(generator=generator, use_ai=settings.llm.enabled)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_logs,
        log_file=settings.logging.log_file,
    )
    logger.info("Starting RICE Prioritizer API...")
    yield
    logger.info("Shutting down RICE Prioritizer API...")


app = FastAPI(
    title="RICE Prioritizer API",
    description="Deterministic RICE ranking with AI rationale",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Holds configuration only, no per-request state
app.state.pipeline = build_pipeline()


def json_safe(value: Any) -> Any:
    """Replace NaN and Infinity, which strict JSON cannot carry, with their names."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [json_safe(v) for v in value]
    return value


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with the usual error list; rejected NaN/Infinity inputs are echoed as strings."""
    return JSONResponse(
        status_code=422,
        content={"detail": json_safe(jsonable_encoder(exc.errors()))},
    )


# ============================================================================
# HEALTH ENDPOINT
# ============================================================================

@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    `llm` is "configured" when AI rationale is enabled and a provider key
    is present, "disabled" when turned off, "not_configured" otherwise.
    """
    if not settings.llm.enabled:
        llm_status = "disabled"
    elif settings.llm.has_api_key:
        llm_status = "configured"
    else:
        llm_status = "not_configured"

    return HealthResponse(status="healthy", version=settings.app_version, llm=llm_status)


# ============================================================================
# SCORING ENDPOINTS
# ============================================================================

@app.post("/api/score", response_model=ScoreResponse)
async def score_backlog(
    request: ScoreRequest,
    use_ai: bool = Query(True, description="Generate AI rationale when configured"),
):
    """
    Score, rank and annotate a backlog.

    Invalid input is rejected with 422 before scoring. An AI failure
    degrades to deterministic notes; only a broken output is a 500.
    """
    pipeline: PrioritizationPipeline = app.state.pipeline
    try:
        return await pipeline.run(request, use_ai=use_ai and pipeline.use_ai)
    except OutputValidationError:
        logger.error("Scoring error: output failed validation")
        raise HTTPException(status_code=500, detail="Failed to score items")


@app.post("/api/score/export")
async def export_backlog_csv(
    request: ScoreRequest,
    use_ai: bool = Query(False, description="Generate AI rationale for the note column"),
):
    """
    Score a backlog and return the tabular export as a CSV file.
    """
    pipeline: PrioritizationPipeline = app.state.pipeline
    try:
        response = await pipeline.run(request, use_ai=use_ai and pipeline.use_ai)
    except OutputValidationError:
        logger.error("Export error: output failed validation")
        raise HTTPException(status_code=500, detail="Failed to score items")

    rows = [row.model_dump() for row in response.exports.csvRows]
    return Response(
        content=rows_to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=rice_export.csv"},
    )


@app.post("/api/sensitivity", response_model=Dict[str, SensitivityModel])
async def sensitivity_preview(request: ScoreRequest):
    """
    What-if scores per item, keyed by itemId in ranked order.
    """
    ranked = rank_request(request)
    return {
        item_id: result.to_dict()
        for item_id, result in sensitivity_by_item(ranked).items()
    }


# ============================================================================
# SAMPLE ENDPOINTS
# ============================================================================

@app.get("/api/samples", response_model=List[str])
async def list_samples():
    """Names of the available sample backlogs."""
    return sorted(SAMPLES)


@app.get("/api/samples/{name}")
async def get_sample(
    name: str,
    timeframe: Timeframe = Query(Timeframe.MONTH),
    effort_unit: EffortUnit = Query(EffortUnit.DAYS),
):
    """A ready-to-post score request for a sample backlog."""
    if name not in SAMPLES:
        raise HTTPException(status_code=404, detail=f"Unknown sample: {name}")
    return build_sample_request(name, timeframe=timeframe.value, effort_unit=effort_unit.value)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
