"""
Error variants raised inside the sync layer.

Every failure the remote store adapter, the local store or the reset service
can produce is one of the SyncError subclasses below. Callers switch on
`error.kind` instead of inspecting messages or driver error codes.
"""

from enum import Enum
from typing import Optional


class SyncErrorKind(str, Enum):
    """Closed taxonomy of sync failures."""

    AUTH_ABSENT = "auth_absent"
    REMOTE_WRITE_FAILURE = "remote_write_failure"
    REMOTE_READ_FAILURE = "remote_read_failure"
    VERIFICATION_MISMATCH = "verification_mismatch"
    REMOTE_NOT_FOUND = "remote_not_found"
    PERSISTENT_STORE_FAILURE = "persistent_store_failure"
    UNCLASSIFIED = "unclassified"


class SyncError(Exception):
    """Base class for sync failures."""

    kind: SyncErrorKind = SyncErrorKind.UNCLASSIFIED

    def __init__(
        self,
        message: str,
        *,
        table: Optional[str] = None,
        record_id: Optional[str] = None,
        code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.table = table
        self.record_id = record_id
        self.code = code

    def __str__(self) -> str:
        return self.message


class RemoteWriteError(SyncError):
    """Upsert, update or delete against the remote store failed."""

    kind = SyncErrorKind.REMOTE_WRITE_FAILURE


class RemoteReadError(SyncError):
    """A remote query failed for a reason other than "no rows"."""

    kind = SyncErrorKind.REMOTE_READ_FAILURE


class RemoteNotFoundError(SyncError):
    """A point read matched no row."""

    kind = SyncErrorKind.REMOTE_NOT_FOUND


class VerificationMismatchError(SyncError):
    """The write reported success but reading it back disagreed."""

    kind = SyncErrorKind.VERIFICATION_MISMATCH


class PersistentStoreError(SyncError):
    """The local key-value store could not be read or written."""

    kind = SyncErrorKind.PERSISTENT_STORE_FAILURE


class ResetError(SyncError):
    """reset_all could not clear local state completely."""

    kind = SyncErrorKind.PERSISTENT_STORE_FAILURE


def classify(error: BaseException) -> SyncErrorKind:
    """Return the taxonomy kind for any exception."""
    if isinstance(error, SyncError):
        return error.kind
    return SyncErrorKind.UNCLASSIFIED
