"""
FastAPI dependencies shared by the routers.
"""

from fastapi import HTTPException, Request, status

from ledgersync.context import SyncContext


def get_sync_context(request: Request) -> SyncContext:
    """
    Return the SyncContext created by the application lifespan.

    Raises:
        HTTPException: 503 if the context is missing or not started
    """
    context = getattr(request.app.state, "sync_context", None)
    if context is None or not context.started:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "not_ready",
                "details": "Sync services are not initialized"
            }
        )
    return context
