"""
Reset API endpoints.

POST /reset is destructive and the only sync route that returns an HTTP
error: a failed reset surfaces as 500 instead of a structured result.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from ledgersync.context import SyncContext
from ledgersync.errors import ResetError
from ledgersync.routes.dependencies import get_sync_context
from ledgersync.schemas.api import ResetResponse, ResetStatusResponse
from ledgersync.schemas.results import PruneResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reset", tags=["reset"])


@router.get("/status", response_model=ResetStatusResponse, summary="Is there local data to reset?")
async def reset_status(
    context: Annotated[SyncContext, Depends(get_sync_context)],
) -> ResetStatusResponse:
    return ResetStatusResponse(has_default_data=await context.reset.has_default_data_remaining())


@router.post("", response_model=ResetResponse, summary="Clear all local data")
async def reset_all(
    context: Annotated[SyncContext, Depends(get_sync_context)],
) -> ResetResponse:
    try:
        await context.reset.reset_all()
    except ResetError as e:
        logger.error(f"Reset request failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "reset_failed",
                "details": e.message
            }
        )
    return ResetResponse()


@router.post("/defaults", response_model=PruneResult, summary="Remove seed data only")
async def prune_defaults(
    context: Annotated[SyncContext, Depends(get_sync_context)],
) -> PruneResult:
    return await context.reset.prune_defaults_only()
