"""
Recent sync activity, polled by the UI status indicator.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ledgersync.context import SyncContext
from ledgersync.routes.dependencies import get_sync_context
from ledgersync.schemas.api import RecentEventsResponse

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/recent", response_model=RecentEventsResponse, summary="Recent sync events")
async def recent_events(
    context: Annotated[SyncContext, Depends(get_sync_context)],
    limit: int = Query(20, ge=1, le=100, description="Maximum number of events"),
) -> RecentEventsResponse:
    events = [event.model_dump(mode="json") for event in context.activity_log.recent(limit)]
    return RecentEventsResponse(events=events, count=len(events))
