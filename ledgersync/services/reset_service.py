"""
Reset and default-data filter service.

Two destructive operations on local state:

- reset_all wipes every domain collection and every non-reserved key of
  the local store. It is the one operation in the sync layer that raises:
  a silent partial reset is worse than a visible failure.
- prune_defaults_only removes seed records that earlier releases shipped
  with, keeping user data.

Seed records are recognized by content (ids, names, description/amount
pairs) because they were never tagged. The match is a heuristic: a user
transaction that happens to read "餐飲" for exactly 5000 is pruned too.
Records created with an explicit is_seed_data flag are pruned by that flag.
"""

import logging
from typing import Dict

from ledgersync.errors import ResetError
from ledgersync.schemas.entities import Entity, EntityKind
from ledgersync.schemas.results import PruneResult
from ledgersync.services.domain_service import DomainRegistry
from ledgersync.services.event_bus import EventBus, Events
from ledgersync.storage.local_store import KeyValueStore
from ledgersync.utils.constants import (
    DOMAIN_KEY_SUBSTRINGS,
    RESERVED_KEY_PREFIXES,
    RESERVED_KEYS,
    SEED_ACCOUNT_IDS,
    SEED_ACCOUNT_NAMES,
    SEED_ASSET_IDS,
    SEED_ASSET_NAMES,
    SEED_DATA_FLAG,
    SEED_LIABILITY_NAME_MARKERS,
    SEED_TRANSACTIONS,
)

logger = logging.getLogger(__name__)


def is_reserved_key(key: str) -> bool:
    return key in RESERVED_KEYS or key.startswith(RESERVED_KEY_PREFIXES)


def _is_seed_transaction(entity: Entity) -> bool:
    amount = entity.get("amount")
    for label, seed_amount in SEED_TRANSACTIONS:
        if amount == seed_amount and label in (entity.get("description"), entity.get("category")):
            return True
    return False


def is_default_entity(kind: EntityKind, entity: Entity) -> bool:
    """Whether `entity` looks like shipped seed data."""
    if entity.get(SEED_DATA_FLAG) is True:
        return True

    entity_id = str(entity.get("id", ""))
    name = entity.get("name")

    if kind is EntityKind.ASSET:
        return entity_id in SEED_ASSET_IDS or name in SEED_ASSET_NAMES
    if kind is EntityKind.ACCOUNT:
        return entity_id in SEED_ACCOUNT_IDS or name in SEED_ACCOUNT_NAMES
    if kind is EntityKind.TRANSACTION:
        return _is_seed_transaction(entity)
    if kind is EntityKind.LIABILITY:
        return isinstance(name, str) and any(marker in name for marker in SEED_LIABILITY_NAME_MARKERS)
    return False


class ResetService:
    def __init__(
        self,
        registry: DomainRegistry,
        local_store: KeyValueStore,
        event_bus: EventBus,
    ) -> None:
        self.registry = registry
        self.local_store = local_store
        self.event_bus = event_bus

    async def reset_all(self) -> None:
        """
        Clear every domain collection and the local store.

        Reserved platform keys survive. The store is cleared first and the
        in-memory collections only after it succeeded, so a failure leaves
        memory and cache describing the same data.

        Raises:
            ResetError: If any step fails (chained to the cause)
        """
        logger.info("Resetting all local data")
        try:
            keys = await self.local_store.list_all_keys()
            removable = [key for key in keys if not is_reserved_key(key)]
            await self.local_store.remove_many(removable)
            logger.info(f"Removed {len(removable)} keys from the local store, kept {len(keys) - len(removable)}")

            for service in self.registry:
                service.discard_memory()
        except Exception as e:
            logger.error(f"Data reset failed: {e}", exc_info=True)
            raise ResetError(f"Data reset failed: {e}") from e

        self.event_bus.publish(Events.DATA_RESET)
        self.event_bus.publish(Events.FORCE_REFRESH_ALL)
        logger.info("All local data reset")

    async def reinitialize(self) -> None:
        """Reload every domain service from the local store."""
        await self.registry.load_all()
        logger.info("Domain services reloaded from the local store")

    async def has_default_data_remaining(self) -> bool:
        """Cheap probe: does the local store still hold any domain key?"""
        try:
            keys = await self.local_store.list_all_keys()
        except Exception as e:
            logger.error(f"Failed to list local store keys: {e}")
            return False
        return any(
            substring in key
            for key in keys
            for substring in DOMAIN_KEY_SUBSTRINGS
        )

    async def prune_defaults_only(self) -> PruneResult:
        """Drop seed records from every domain collection, keep the rest."""
        removed: Dict[str, int] = {}
        try:
            for service in self.registry:
                items = service.get_all()
                kept = [item for item in items if not is_default_entity(service.kind, item)]
                pruned = len(items) - len(kept)
                removed[service.kind.value] = pruned
                if pruned:
                    await service.bulk_set(kept)
        except Exception as e:
            logger.error(f"Pruning default data failed: {e}", exc_info=True)
            return PruneResult(success=False, removed=removed, error=str(e))

        total = sum(removed.values())
        logger.info(f"Pruned {total} default records: {removed}")
        if total:
            self.event_bus.publish(Events.FINANCIAL_DATA_UPDATED, removed)
        return PruneResult(success=True, removed=removed)
