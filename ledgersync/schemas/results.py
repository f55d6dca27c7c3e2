"""
Result contracts of the sync layer.

Results are immutable once created: services build them and hand them to
the caller and to event subscribers.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ledgersync.errors import SyncErrorKind


class SyncOutcome(BaseModel):
    """Outcome of one coordinator call (upsert or delete)."""

    model_config = ConfigDict(frozen=True)

    success: bool = Field(..., description="False only when a remote call failed")
    message: str = Field(..., description="Human-readable summary")
    data: Optional[Any] = Field(None, description="The written record, when there is one")
    error: Optional[str] = Field(None, description="Underlying error message on failure")
    error_kind: Optional[SyncErrorKind] = Field(
        None,
        description="Failure taxonomy; auth_absent marks a skipped (successful) call"
    )

    @property
    def skipped(self) -> bool:
        """True when the call short-circuited because nobody is logged in."""
        return self.error_kind == SyncErrorKind.AUTH_ABSENT


class VerdictCause(str, Enum):
    """Why a verification check came out the way it did."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    STILL_PRESENT = "still_present"
    QUERY_FAILED = "query_failed"
    CHECK_RAISED = "check_raised"
    AUTH_ABSENT = "auth_absent"


class VerificationVerdict(BaseModel):
    """Verdict of a read-after-write or read-after-delete check."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    cause: VerdictCause
    details: Optional[Dict[str, Any]] = None


class BatchVerification(BaseModel):
    """Aggregate of batch_verify."""

    model_config = ConfigDict(frozen=True)

    successful: int = 0
    failed: int = 0
    results: List[VerificationVerdict] = Field(default_factory=list)


class BatchResult(BaseModel):
    """
    Aggregate of upsert_batch.

    success_count + failed_count always equals the number of submitted items,
    and errors holds one message per failed item, in submission order.
    """

    model_config = ConfigDict(frozen=True)

    success_count: int = 0
    failed_count: int = 0
    errors: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count


class PruneResult(BaseModel):
    """Outcome of pruning default/seed data."""

    model_config = ConfigDict(frozen=True)

    success: bool
    removed: Dict[str, int] = Field(default_factory=dict)
    error: Optional[str] = None
