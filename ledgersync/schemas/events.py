"""
Event payloads published on the in-process event bus.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ledgersync.errors import SyncErrorKind
from ledgersync.schemas.entities import EntityKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncSuccessEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    operation: str
    id: str
    timestamp: datetime = Field(default_factory=_utcnow)


class SyncErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    operation: str
    error: str
    error_kind: SyncErrorKind = SyncErrorKind.UNCLASSIFIED
    id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
