"""
Post-write verification service.

The coordinator never trusts the return value of a write call. After a
write it re-reads the row through this service; deletions can be checked
the same way on request.

A "no matching row" answer from the remote store is the failing outcome of
an existence check and the passing outcome of an absence check. Both
checks handle RemoteNotFoundError explicitly for that reason, and keep it
apart from query failures, which fail either check.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, NamedTuple, Optional

from ledgersync.db.remote_store import RemoteStore
from ledgersync.errors import RemoteNotFoundError, RemoteReadError
from ledgersync.schemas.entities import DeleteMode, EntityKind
from ledgersync.schemas.results import (
    BatchVerification,
    VerdictCause,
    VerificationVerdict,
)

logger = logging.getLogger(__name__)

# Columns read back per kind; enough to identify the row in diagnostics
_SUMMARY_COLUMNS = {
    EntityKind.ASSET: "id, name, type, current_value",
    EntityKind.TRANSACTION: "id, description, amount, type",
    EntityKind.LIABILITY: "id, name, type, amount",
    EntityKind.ACCOUNT: "id, name, type, is_active",
}


class VerificationCheck(NamedTuple):
    label: str
    check: Callable[[], Awaitable[VerificationVerdict]]


class VerificationService:
    """Read-after-write and read-after-delete checks against the remote store."""

    def __init__(self, remote_store: RemoteStore) -> None:
        self.remote_store = remote_store

    def _filters(self, kind: EntityKind, entity_id: str, owner_id: str) -> Dict[str, Any]:
        filters: Dict[str, Any] = {"id": entity_id, "user_id": owner_id}
        # A deactivated row no longer counts as present
        if kind.delete_mode is DeleteMode.SOFT:
            filters["is_active"] = True
        return filters

    async def confirm_exists(
        self,
        kind: EntityKind,
        entity_id: str,
        owner_id: str,
    ) -> VerificationVerdict:
        """
        Confirm that exactly one live row exists for (entity_id, owner_id).

        Returns:
            success=True with the row as details when found; success=False
            with cause NOT_FOUND when the store has no such row, and with
            cause QUERY_FAILED / CHECK_RAISED when the read itself failed.
        """
        try:
            row = await self.remote_store.fetch_one(
                kind.table,
                self._filters(kind, entity_id, owner_id),
                columns=_SUMMARY_COLUMNS[kind],
            )
        except RemoteNotFoundError as e:
            return VerificationVerdict(
                success=False,
                message=f"{kind.value} {entity_id} does not exist remotely",
                cause=VerdictCause.NOT_FOUND,
                details={"code": e.code},
            )
        except RemoteReadError as e:
            return VerificationVerdict(
                success=False,
                message=f"Failed to verify {kind.value} {entity_id}: {e.message}",
                cause=VerdictCause.QUERY_FAILED,
                details={"code": e.code, "error": e.message},
            )
        except Exception as e:
            return VerificationVerdict(
                success=False,
                message=f"Verification of {kind.value} {entity_id} raised: {e}",
                cause=VerdictCause.CHECK_RAISED,
                details={"error": str(e)},
            )

        return VerificationVerdict(
            success=True,
            message=f"{kind.value} {entity_id} exists remotely",
            cause=VerdictCause.FOUND,
            details=row,
        )

    async def confirm_absent(
        self,
        kind: EntityKind,
        entity_id: str,
        owner_id: str,
    ) -> VerificationVerdict:
        """
        Confirm that no live row remains for (entity_id, owner_id).

        Returns:
            success=True when the store reports no matching row; success=False
            with the remaining row as details (cause STILL_PRESENT), or with
            cause QUERY_FAILED / CHECK_RAISED when the read itself failed.
        """
        try:
            row = await self.remote_store.fetch_one(
                kind.table,
                self._filters(kind, entity_id, owner_id),
                columns="id",
            )
        except RemoteNotFoundError:
            return VerificationVerdict(
                success=True,
                message=f"{kind.value} {entity_id} is gone from the remote store",
                cause=VerdictCause.NOT_FOUND,
            )
        except RemoteReadError as e:
            return VerificationVerdict(
                success=False,
                message=f"Failed to verify deletion of {kind.value} {entity_id}: {e.message}",
                cause=VerdictCause.QUERY_FAILED,
                details={"code": e.code, "error": e.message},
            )
        except Exception as e:
            return VerificationVerdict(
                success=False,
                message=f"Deletion check of {kind.value} {entity_id} raised: {e}",
                cause=VerdictCause.CHECK_RAISED,
                details={"error": str(e)},
            )

        return VerificationVerdict(
            success=False,
            message=f"{kind.value} {entity_id} still exists remotely, delete did not take effect",
            cause=VerdictCause.STILL_PRESENT,
            details=row,
        )

    async def batch_verify(
        self,
        checks: Iterable[VerificationCheck],
    ) -> BatchVerification:
        """
        Run checks one after another and aggregate their verdicts.

        A check that raises becomes a failed verdict for that item only.
        """
        results = []
        successful = 0
        failed = 0

        for label, check in checks:
            verdict: Optional[VerificationVerdict] = None
            try:
                verdict = await check()
            except Exception as e:
                verdict = VerificationVerdict(
                    success=False,
                    message=f"Check '{label}' raised: {e}",
                    cause=VerdictCause.CHECK_RAISED,
                    details={"error": str(e)},
                )

            results.append(verdict)
            if verdict.success:
                successful += 1
                logger.info(f"[verified] {label}: {verdict.message}")
            else:
                failed += 1
                logger.warning(f"[verification failed] {label}: {verdict.message}")

        logger.info(f"Batch verification finished: {successful} passed, {failed} failed")
        return BatchVerification(successful=successful, failed=failed, results=results)
