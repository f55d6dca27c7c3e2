"""
FastAPI application entry point for the ledger sync service.

Creates the app, wires the SyncContext into its lifespan and registers all
routers. Run with: uvicorn ledgersync.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledgersync.config import settings
from ledgersync.context import SyncContext
from ledgersync.routes.events import router as events_router
from ledgersync.routes.health import router as health_router
from ledgersync.routes.reset import router as reset_router
from ledgersync.routes.sync import router as sync_router
from ledgersync.utils.logging import LOG_FORMAT

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=LOG_FORMAT
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    context = SyncContext.from_settings(settings)
    await context.startup()
    app.state.sync_context = context
    try:
        yield
    finally:
        await context.shutdown()
        app.state.sync_context = None


app = FastAPI(
    title="Ledger Sync API",
    description="Local sync and verification service for the personal finance tracker",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log detailed validation errors for debugging."""
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": jsonable_encoder(exc.errors())
        }
    )


app.include_router(health_router)
app.include_router(sync_router)
app.include_router(events_router)
app.include_router(reset_router)

logger.info("FastAPI app initialized successfully")
