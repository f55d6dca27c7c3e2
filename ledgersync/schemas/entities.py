"""
Entity kinds synchronized with the remote store.

A financial entity is a plain dict of field names to primitive values; the
kind decides the remote table, the remote row shape and the delete strategy.
"""

from enum import Enum
from typing import Any, Dict

Entity = Dict[str, Any]


class DeleteMode(str, Enum):
    HARD = "hard"
    SOFT = "soft"


class SyncIntent(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class EntityKind(str, Enum):
    """Financial entity kinds and their remote tables."""

    ASSET = "asset"
    TRANSACTION = "transaction"
    LIABILITY = "liability"
    ACCOUNT = "account"

    @property
    def table(self) -> str:
        return _TABLES[self]

    @property
    def delete_mode(self) -> DeleteMode:
        # Accounts are referenced by transactions, so they are only deactivated
        if self is EntityKind.ACCOUNT:
            return DeleteMode.SOFT
        return DeleteMode.HARD


_TABLES = {
    EntityKind.ASSET: "assets",
    EntityKind.TRANSACTION: "transactions",
    EntityKind.LIABILITY: "liabilities",
    EntityKind.ACCOUNT: "accounts",
}

# Order used when syncing or resetting every kind at once
SYNC_ORDER = (
    EntityKind.TRANSACTION,
    EntityKind.ASSET,
    EntityKind.LIABILITY,
    EntityKind.ACCOUNT,
)
