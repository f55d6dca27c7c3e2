"""
Domain services: one in-memory collection per entity kind.

Each service owns its collection and mirrors it into the local key-value
store. Writes go through the sync gateway first; the local copy changes
only after the gateway reports success (a verified remote write, or a
skipped sync while logged out).

Domain services depend on the SyncGateway protocol, never on the concrete
coordinator, so the coordinator can be built without them.
"""

import json
import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Tuple

from ledgersync.errors import PersistentStoreError
from ledgersync.schemas.entities import SYNC_ORDER, DeleteMode, Entity, EntityKind, SyncIntent
from ledgersync.schemas.results import BatchResult, SyncOutcome
from ledgersync.services import identity_service
from ledgersync.services.record_mapper import display_name
from ledgersync.storage.local_store import KeyValueStore
from ledgersync.utils.constants import LOCAL_COLLECTION_KEY_PREFIX

logger = logging.getLogger(__name__)


class SyncGateway(Protocol):
    async def upsert_entity(
        self, kind: EntityKind, entity: Entity, intent: SyncIntent = SyncIntent.UPDATE
    ) -> SyncOutcome:
        ...

    async def delete_entity(self, kind: EntityKind, entity_id: str) -> SyncOutcome:
        ...

    async def sync_all(
        self, collections: Mapping[EntityKind, Iterable[Entity]]
    ) -> Dict[EntityKind, BatchResult]:
        ...


def storage_key_for(kind: EntityKind) -> str:
    return f"{LOCAL_COLLECTION_KEY_PREFIX}{kind.table}"


class DomainService:
    """In-memory collection of one entity kind, cached in the local store."""

    def __init__(self, kind: EntityKind, local_store: KeyValueStore, gateway: SyncGateway) -> None:
        self.kind = kind
        self.local_store = local_store
        self.gateway = gateway
        self.storage_key = storage_key_for(kind)
        self._items: List[Entity] = []

    async def load(self) -> None:
        """
        Replace the in-memory collection with the cached one.

        Raises:
            PersistentStoreError: If the cached value is not a JSON list
        """
        raw = await self.local_store.get(self.storage_key)
        if raw is None:
            self._items = []
            return
        try:
            items = json.loads(raw)
        except ValueError as e:
            raise PersistentStoreError(f"Corrupt cache under {self.storage_key}: {e}") from e
        if not isinstance(items, list):
            raise PersistentStoreError(f"Cache under {self.storage_key} is not a list")
        self._items = [dict(item) for item in items if isinstance(item, dict)]
        logger.debug(f"Loaded {len(self._items)} {self.kind.value} records from the local cache")

    def get_all(self) -> List[Entity]:
        return [dict(item) for item in self._items]

    def get(self, entity_id: str) -> Optional[Entity]:
        for item in self._items:
            if item.get("id") == entity_id:
                return dict(item)
        return None

    async def _persist(self) -> None:
        await self.local_store.set(
            self.storage_key,
            json.dumps(self._items, ensure_ascii=False, default=str),
        )

    async def bulk_set(self, items: Iterable[Entity]) -> None:
        """Replace the whole collection (memory and cache)."""
        self._items = [dict(item) for item in items]
        await self._persist()

    async def clear(self) -> None:
        self._items = []
        await self.local_store.remove(self.storage_key)

    def discard_memory(self) -> None:
        """Drop the in-memory collection without touching the cache."""
        self._items = []

    def _store(self, entity: Entity, original_id: Optional[str]) -> None:
        # Replace the copy keyed by either id in place; drop any duplicate
        keys = {original_id, entity["id"]} - {None}
        kept: List[Entity] = []
        placed = False
        for item in self._items:
            if item.get("id") in keys:
                if not placed:
                    kept.append(entity)
                    placed = True
                continue
            kept.append(item)
        if not placed:
            kept.append(entity)
        self._items = kept

    async def _sync_one(self, entity: Entity, intent: SyncIntent) -> Tuple[SyncOutcome, Entity]:
        entity = dict(entity)
        original_id = entity.get("id")
        if not original_id:
            entity["id"] = identity_service.generate()

        outcome = await self.gateway.upsert_entity(self.kind, entity, intent)
        if outcome.success:
            self._store(entity, original_id)
        return outcome, entity

    async def save(self, entity: Entity, intent: SyncIntent = SyncIntent.UPDATE) -> SyncOutcome:
        """
        Sync `entity`, then store it locally under its (possibly new) id.

        The local collection is left untouched when the sync fails.
        """
        outcome, _ = await self._sync_one(entity, intent)
        if outcome.success:
            await self._persist()
        return outcome

    async def save_batch(
        self,
        entities: Iterable[Entity],
        intent: SyncIntent = SyncIntent.UPDATE,
    ) -> BatchResult:
        """
        Save entities one at a time; a failed item never stops the batch.

        Only items whose sync succeeded are stored, under their normalized ids.
        """
        success_count = 0
        failed_count = 0
        errors = []

        for entity in entities:
            outcome, synced = await self._sync_one(entity, intent)
            if outcome.success:
                success_count += 1
            else:
                failed_count += 1
                errors.append(f"{display_name(self.kind, synced)}: {outcome.error}")

        if success_count:
            await self._persist()
        logger.info(
            f"Saved batch of {self.kind.value}: {success_count} succeeded, {failed_count} failed"
        )
        return BatchResult(success_count=success_count, failed_count=failed_count, errors=errors)

    async def adopt_identifiers(self, pairs: Iterable[Tuple[Optional[str], Entity]]) -> int:
        """
        Rekey local items whose id was normalized during a push.

        Args:
            pairs: (id before the push, pushed entity) per item, in collection order

        Returns:
            Number of items rekeyed
        """
        changed = 0
        for position, (original_id, pushed) in enumerate(pairs):
            new_id = pushed.get("id")
            if new_id == original_id:
                continue
            if position < len(self._items) and self._items[position].get("id") == original_id:
                target: Optional[Entity] = self._items[position]
            else:
                target = next(
                    (item for item in self._items if original_id and item.get("id") == original_id),
                    None,
                )
            if target is not None:
                target["id"] = new_id
                changed += 1

        if changed:
            await self._persist()
            logger.info(f"Rekeyed {changed} {self.kind.value} records to normalized identifiers")
        return changed

    async def remove(self, entity_id: str) -> SyncOutcome:
        """Delete remotely, then locally (accounts are only deactivated)."""
        outcome = await self.gateway.delete_entity(self.kind, entity_id)
        if not outcome.success:
            return outcome

        if self.kind.delete_mode is DeleteMode.SOFT:
            for item in self._items:
                if item.get("id") == entity_id:
                    item["is_active"] = False
        else:
            self._items = [item for item in self._items if item.get("id") != entity_id]
        await self._persist()
        return outcome


class DomainRegistry:
    """The four domain services, addressed by kind."""

    def __init__(self, services: Dict[EntityKind, DomainService]) -> None:
        missing = [kind.value for kind in SYNC_ORDER if kind not in services]
        if missing:
            raise ValueError(f"Missing domain services for: {', '.join(missing)}")
        self._services = services

    @classmethod
    def build(cls, local_store: KeyValueStore, gateway: SyncGateway) -> "DomainRegistry":
        return cls({kind: DomainService(kind, local_store, gateway) for kind in SYNC_ORDER})

    def __getitem__(self, kind: EntityKind) -> DomainService:
        return self._services[kind]

    def __iter__(self) -> Iterator[DomainService]:
        return (self._services[kind] for kind in SYNC_ORDER)

    async def load_all(self) -> None:
        for service in self:
            await service.load()

    def snapshot(self) -> Dict[EntityKind, List[Entity]]:
        return {service.kind: service.get_all() for service in self}

    async def push_all(self, gateway: SyncGateway) -> Dict[EntityKind, BatchResult]:
        """
        Push every local collection and keep identifiers normalized on the way.

        The gateway normalizes ids on the pushed copies; the local items are
        rekeyed to match, so later pushes upsert the same remote rows.
        """
        collections = self.snapshot()
        original_ids = {
            kind: [item.get("id") for item in items]
            for kind, items in collections.items()
        }

        results = await gateway.sync_all(collections)

        for service in self:
            kind = service.kind
            await service.adopt_identifiers(zip(original_ids[kind], collections[kind]))
        return results
