"""
Pydantic schemas for the HTTP surface used by the local UI.
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

from ledgersync.schemas.entities import SyncIntent


class HealthResponse(BaseModel):
    """Response model for GET /health."""

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    session: bool = Field(
        default=False,
        description="Whether the process was started with a user session"
    )


class EntityUpsertRequest(BaseModel):
    """Create or update one entity locally and remotely."""

    entity: Dict[str, Any] = Field(
        ...,
        description="Entity fields; 'id' is replaced if it is not a valid UUID",
        examples=[{"id": "1", "name": "Cash", "type": "cash", "current_value": 50000}]
    )
    intent: SyncIntent = Field(SyncIntent.UPDATE, description="create or update")


class BatchUpsertRequest(BaseModel):
    """Push several entities of one kind to the remote store."""

    entities: List[Dict[str, Any]] = Field(..., description="Entities, synced in order")
    intent: SyncIntent = Field(SyncIntent.UPDATE, description="create or update")


class RecentEventsResponse(BaseModel):
    events: List[Dict[str, Any]] = Field(default_factory=list, description="Newest first")
    count: int = 0


class ResetStatusResponse(BaseModel):
    has_default_data: bool = Field(
        ...,
        description="Whether the local store still holds domain data"
    )


class ResetResponse(BaseModel):
    status: Literal["reset"] = "reset"
    message: str = "All local data cleared"
