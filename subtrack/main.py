"""
SubTrack - FastAPI Application

Main entry point for the scheduler-facing API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from subtrack import __version__
from subtrack.config.settings import settings
from subtrack.infrastructure.exceptions import (
    SubTrackError,
    ValidationError,
)
from subtrack.logging_config import configure_logging

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    from subtrack.infrastructure.db.database import init_db, close_db

    logger.info(f"SubTrack starting in {settings.environment} mode...")
    await init_db()
    logger.info("Database connection pool initialized")

    yield

    await close_db()
    logger.info("SubTrack shutting down...")


app = FastAPI(
    title="SubTrack",
    description="Subscription renewal and reminder engine",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=400,
        content=exc.to_dict(),
    )


@app.exception_handler(SubTrackError)
async def general_error_handler(request: Request, exc: SubTrackError):
    """Handle all other application errors (failed runs, store failures)."""
    logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content=exc.to_dict(),
    )


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "subtrack"}


# ============================================================================
# Import and register routers
# ============================================================================

from subtrack.api.routes import jobs  # noqa: E402

app.include_router(jobs.router, prefix="/api", tags=["Scheduled Jobs"])
