# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""FastAPI application entry point for the Reservation Coverage Analyzer.

Exposes the analysis over HTTP for the dashboard, plus a health check.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import ConfigurationError, settings
from .models import AnalysisFailure, HealthStatus, ReservationAnalysisResult
from .tools.get_reservation_analysis import (
    CONFIGURATION_ERROR,
    get_reservation_analysis,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Reservation Coverage Analyzer",
    description=(
        "Compares running Azure virtual machines with the reserved instances "
        "that apply to the subscription, per VM size and region."
    ),
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _failure_status(failure: AnalysisFailure) -> int:
    """HTTP status for a failed analysis."""
    return 500 if failure.error == CONFIGURATION_ERROR else 502


@app.exception_handler(Exception)
async def global_exception_handler(request, exc: Exception):
    """
    Global exception handler for unhandled errors.

    Logs the error and returns a structured error response.
    """
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "Error processing request.",
        },
    )


@app.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Health check endpoint for monitoring server status.

    The server is degraded when no target subscription is configured or
    the configuration cannot be parsed, since every analysis request would
    fail.
    """
    try:
        configured = bool((settings().azure_subscription_id or "").strip())
    except ConfigurationError as e:
        logger.warning(f"Health check found invalid configuration: {e}")
        configured = False
    return HealthStatus(
        status="healthy" if configured else "degraded",
        version=__version__,
        subscription_configured=configured,
    )


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Reservation Coverage Analyzer",
        "version": __version__,
        "health_check": "/health",
        "endpoints": {
            "analysis": "/api/get-reservation-analysis",
            "analysis_with_diagnostics": "/api/v1/reservation-analysis",
        },
    }


@app.get("/api/get-reservation-analysis")
async def api_get_reservation_analysis():
    """
    Reservation analysis as a bare array of rows.

    Rows use the dashboard field names (vmSize, location, actual, reserved,
    gap, coverage, status). Failures return ``{message, details}`` with a
    500 status.
    """
    result = await get_reservation_analysis()

    if isinstance(result, AnalysisFailure):
        return JSONResponse(
            status_code=500,
            content={"message": result.message, "details": result.details},
        )

    return JSONResponse(
        content=[row.model_dump(mode="json", by_alias=True) for row in result.rows]
    )


@app.get(
    "/api/v1/reservation-analysis",
    response_model=ReservationAnalysisResult,
    responses={500: {"model": AnalysisFailure}, 502: {"model": AnalysisFailure}},
)
async def api_reservation_analysis():
    """Reservation analysis with per-feed diagnostics."""
    result = await get_reservation_analysis()

    if isinstance(result, AnalysisFailure):
        return JSONResponse(
            status_code=_failure_status(result),
            content=result.model_dump(mode="json"),
        )

    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))
