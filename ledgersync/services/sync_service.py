"""
Sync coordinator.

Owns every create/update/delete of a financial entity in the remote store.
One upsert call runs, in this order and never reordered:

1. Resolve the session user. No user means the app runs logged out; the
   call succeeds without touching the remote store.
2. Normalize the entity identifier (in place).
3. Map the entity onto the full remote row.
4. Upsert by identifier (idempotent, no duplicate rows).
5. Re-read the row through the verification service. A write that cannot
   be read back is reported as failed.
6. Publish sync_success / sync_error on the event bus.
7. Return the SyncOutcome.

No public method raises: every failure comes back as a failed SyncOutcome
tagged with its SyncErrorKind. Nothing is retried.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Mapping, Optional

from ledgersync.auth.session import AuthenticatedUser, AuthProvider
from ledgersync.db.remote_store import RemoteStore
from ledgersync.errors import (
    SyncErrorKind,
    VerificationMismatchError,
    classify,
)
from ledgersync.schemas.entities import (
    SYNC_ORDER,
    DeleteMode,
    Entity,
    EntityKind,
    SyncIntent,
)
from ledgersync.schemas.events import SyncErrorEvent, SyncSuccessEvent
from ledgersync.schemas.results import (
    BatchResult,
    SyncOutcome,
    VerdictCause,
    VerificationVerdict,
)
from ledgersync.services import identity_service
from ledgersync.services.event_bus import EventBus, Events
from ledgersync.services.record_mapper import display_name, to_remote_record
from ledgersync.services.verification_service import VerificationService

logger = logging.getLogger(__name__)

NOT_LOGGED_IN_MESSAGE = "User not logged in; remote sync skipped"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncService:
    """Create, update and delete financial entities in the remote store."""

    def __init__(
        self,
        remote_store: RemoteStore,
        auth_provider: AuthProvider,
        event_bus: EventBus,
        verification: VerificationService,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.remote_store = remote_store
        self.auth_provider = auth_provider
        self.event_bus = event_bus
        self.verification = verification
        self.clock = clock

    async def _current_user(self) -> Optional[AuthenticatedUser]:
        return await self.auth_provider.get_current_user()

    def _skipped(self, kind: EntityKind, operation: str) -> SyncOutcome:
        logger.info(f"{kind.value} {operation}: {NOT_LOGGED_IN_MESSAGE}")
        return SyncOutcome(
            success=True,
            message=NOT_LOGGED_IN_MESSAGE,
            error_kind=SyncErrorKind.AUTH_ABSENT,
        )

    def _failed(
        self,
        kind: EntityKind,
        operation: str,
        error: BaseException,
        entity_id: Optional[str] = None,
    ) -> SyncOutcome:
        error_kind = classify(error)
        message = str(error) or error.__class__.__name__
        if error_kind is SyncErrorKind.UNCLASSIFIED:
            logger.error(f"{kind.value} {operation} raised unexpectedly: {message}", exc_info=True)
        else:
            logger.error(f"{kind.value} {operation} failed ({error_kind.value}): {message}")

        self.event_bus.publish(
            Events.SYNC_ERROR,
            SyncErrorEvent(
                kind=kind,
                operation=operation,
                error=message,
                error_kind=error_kind,
                id=entity_id,
                timestamp=self.clock(),
            ),
        )
        return SyncOutcome(
            success=False,
            message=f"{kind.value} {operation} sync failed",
            error=message,
            error_kind=error_kind,
        )

    async def upsert_entity(
        self,
        kind: EntityKind,
        entity: Entity,
        intent: SyncIntent = SyncIntent.UPDATE,
    ) -> SyncOutcome:
        """
        Write `entity` to the remote store and verify it landed.

        If the identifier had to be replaced, entity["id"] holds the new
        value afterwards and callers must key their local copy by it.

        Args:
            kind: Entity kind
            entity: Local entity dict (mutated: id may be normalized)
            intent: create or update; both use the same idempotent upsert

        Returns:
            SyncOutcome with the written row as data on success
        """
        operation = intent.value
        entity_id: Optional[str] = None
        try:
            user = await self._current_user()
            if user is None:
                return self._skipped(kind, operation)

            if identity_service.ensure_entity_id(entity):
                logger.info(f"{kind.value} got a new identifier {entity['id']} before sync")
            entity_id = entity["id"]

            record = to_remote_record(kind, entity, user.user_id, now=self.clock())
            logger.info(f"Syncing {kind.value} {entity_id} ({operation}) to {kind.table}")

            written = await self.remote_store.upsert(kind.table, record)

            verdict = await self.verification.confirm_exists(kind, entity_id, user.user_id)
            if not verdict.success:
                raise VerificationMismatchError(
                    f"Write reported success but read-back failed: {verdict.message}",
                    table=kind.table,
                    record_id=entity_id,
                )

            self.event_bus.publish(
                Events.SYNC_SUCCESS,
                SyncSuccessEvent(
                    kind=kind,
                    operation=operation,
                    id=entity_id,
                    timestamp=self.clock(),
                ),
            )
            logger.info(f"{kind.value} {entity_id} synced and verified")

            return SyncOutcome(
                success=True,
                message=f"{kind.value} {operation} synced",
                data=written[0] if written else record,
            )

        except Exception as e:
            return self._failed(kind, operation, e, entity_id)

    async def delete_entity(self, kind: EntityKind, entity_id: str) -> SyncOutcome:
        """
        Remove the entity from the remote store.

        Accounts are deactivated (is_active=false); other kinds are deleted.
        Success means the delete was issued; call verify_deleted to confirm.
        """
        operation = "delete"
        try:
            user = await self._current_user()
            if user is None:
                return self._skipped(kind, operation)

            if not identity_service.is_valid(entity_id):
                # Invalid ids are replaced before any write, so this one never reached the store
                logger.info(f"{kind.value} {entity_id!r} was never synced; nothing to delete remotely")
                return SyncOutcome(
                    success=True,
                    message=f"{kind.value} was never synced; nothing to delete",
                )

            filters = {"id": entity_id, "user_id": user.user_id}
            if kind.delete_mode is DeleteMode.SOFT:
                await self.remote_store.update(
                    kind.table,
                    {"is_active": False, "updated_at": self.clock().isoformat()},
                    filters,
                )
            else:
                await self.remote_store.delete(kind.table, filters)

            event = SyncSuccessEvent(
                kind=kind,
                operation=operation,
                id=entity_id,
                timestamp=self.clock(),
            )
            self.event_bus.publish(Events.SYNC_SUCCESS, event)
            self.event_bus.publish(Events.ENTITY_DELETED, event)
            logger.info(f"{kind.value} {entity_id} removed from {kind.table} ({kind.delete_mode.value} delete)")

            return SyncOutcome(success=True, message=f"{kind.value} delete synced")

        except Exception as e:
            return self._failed(kind, operation, e, entity_id)

    async def verify_exists(self, kind: EntityKind, entity_id: str) -> VerificationVerdict:
        """Explicit read-after-write check for the session user."""
        user = await self._current_user()
        if user is None:
            return VerificationVerdict(
                success=False,
                message=NOT_LOGGED_IN_MESSAGE,
                cause=VerdictCause.AUTH_ABSENT,
            )
        return await self.verification.confirm_exists(kind, entity_id, user.user_id)

    async def verify_deleted(self, kind: EntityKind, entity_id: str) -> VerificationVerdict:
        """Explicit read-after-delete check for the session user."""
        user = await self._current_user()
        if user is None:
            return VerificationVerdict(
                success=False,
                message=NOT_LOGGED_IN_MESSAGE,
                cause=VerdictCause.AUTH_ABSENT,
            )
        return await self.verification.confirm_absent(kind, entity_id, user.user_id)

    async def upsert_batch(
        self,
        kind: EntityKind,
        entities: Iterable[Entity],
        intent: SyncIntent = SyncIntent.UPDATE,
    ) -> BatchResult:
        """
        Upsert entities one at a time; a failed item never stops the batch.

        Items run sequentially to keep load on the remote store predictable.
        """
        success_count = 0
        failed_count = 0
        errors = []

        for entity in entities:
            outcome = await self.upsert_entity(kind, entity, intent)
            if outcome.success:
                success_count += 1
            else:
                failed_count += 1
                errors.append(f"{display_name(kind, entity)}: {outcome.error}")

        logger.info(
            f"Batch {intent.value} of {kind.value}: "
            f"{success_count} succeeded, {failed_count} failed"
        )
        return BatchResult(
            success_count=success_count,
            failed_count=failed_count,
            errors=errors,
        )

    async def sync_all(
        self,
        collections: Mapping[EntityKind, Iterable[Entity]],
    ) -> Dict[EntityKind, BatchResult]:
        """Push every local collection, kind by kind, and announce the summary."""
        results: Dict[EntityKind, BatchResult] = {}
        for kind in SYNC_ORDER:
            if kind in collections:
                results[kind] = await self.upsert_batch(kind, collections[kind], SyncIntent.UPDATE)

        self.event_bus.publish(
            Events.DATA_SYNC_COMPLETED,
            {
                kind.value: {
                    "success_count": result.success_count,
                    "failed_count": result.failed_count,
                }
                for kind, result in results.items()
            },
        )
        return results
