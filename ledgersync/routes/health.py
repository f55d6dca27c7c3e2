"""
Health check route.

PUBLIC endpoint used by the UI shell to see whether the sync process is up.
"""

from fastapi import APIRouter, Request

from ledgersync.schemas.api import HealthResponse
from ledgersync.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    status_code=200,
    tags=["system"],
)
async def health_check(request: Request) -> HealthResponse:
    """Report liveness and whether a user session is configured."""
    logger.debug("Health check endpoint called")

    context = getattr(request.app.state, "sync_context", None)
    return HealthResponse(status="ok", session=bool(context and context.has_session))
