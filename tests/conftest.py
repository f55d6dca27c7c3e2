"""
Pytest configuration for ledger sync tests.

Sets up the test environment and shared fixtures: a MagicMock Supabase
client for adapter tests, and an in-memory remote store with upsert-by-id
semantics for service tests.
"""
import os

# Disable config validation during tests
os.environ["VALIDATE_CONFIG"] = "false"

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")

from datetime import datetime, timezone  # noqa: E402
from typing import Any, Dict, List, Optional, Set  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from ledgersync.auth.session import AuthenticatedUser  # noqa: E402
from ledgersync.errors import (  # noqa: E402
    RemoteNotFoundError,
    RemoteReadError,
    RemoteWriteError,
)
from ledgersync.services.domain_service import DomainRegistry  # noqa: E402
from ledgersync.services.event_bus import EventBus  # noqa: E402
from ledgersync.services.reset_service import ResetService  # noqa: E402
from ledgersync.services.sync_service import SyncService  # noqa: E402
from ledgersync.services.verification_service import VerificationService  # noqa: E402
from ledgersync.storage.local_store import InMemoryKeyValueStore  # noqa: E402

TEST_USER_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"
FIXED_NOW = datetime(2025, 11, 5, 10, 0, 0, tzinfo=timezone.utc)


class FakeRemoteStore:
    """
    In-memory stand-in for RemoteStore.

    Knobs:
        fail_upsert_ids: ids whose upsert raises RemoteWriteError
        drop_writes: upserts report success but store nothing
        fail_reads: every read raises RemoteReadError
        fail_deletes: delete/update raise RemoteWriteError
    """

    def __init__(self) -> None:
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[str] = []
        self.fail_upsert_ids: Set[str] = set()
        self.drop_writes = False
        self.fail_reads = False
        self.fail_deletes = False

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return list(self.tables.get(table, {}).values())

    def _match(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            row for row in self.tables.get(table, {}).values()
            if all(row.get(column) == value for column, value in filters.items())
        ]

    async def select(self, table, filters=None, columns="*", order_by=None, desc=False, limit=None):
        self.calls.append("select")
        if self.fail_reads:
            raise RemoteReadError("connection reset", table=table)
        rows = [dict(row) for row in self._match(table, filters or {})]
        return rows[:limit] if limit is not None else rows

    async def count(self, table, filters=None):
        self.calls.append("count")
        return len(self._match(table, filters or {}))

    async def fetch_one(self, table, filters, columns="*"):
        self.calls.append("fetch_one")
        if self.fail_reads:
            raise RemoteReadError("connection reset", table=table, code="08006")
        rows = self._match(table, filters)
        if not rows:
            raise RemoteNotFoundError("no rows", table=table, record_id=filters.get("id"), code="PGRST116")
        if len(rows) > 1:
            raise RemoteReadError("multiple rows", table=table)
        return dict(rows[0])

    async def upsert(self, table, record, on_conflict="id"):
        self.calls.append("upsert")
        key = record[on_conflict]
        if key in self.fail_upsert_ids:
            raise RemoteWriteError(f"insert or update on table \"{table}\" violates check constraint", table=table, record_id=key)
        if self.drop_writes:
            return [dict(record)]
        self.tables.setdefault(table, {})[key] = dict(record)
        return [dict(record)]

    async def update(self, table, values, filters):
        self.calls.append("update")
        if self.fail_deletes:
            raise RemoteWriteError("update failed", table=table)
        rows = self._match(table, filters)
        for row in rows:
            row.update(values)
        return [dict(row) for row in rows]

    async def delete(self, table, filters):
        self.calls.append("delete")
        if self.fail_deletes:
            raise RemoteWriteError("delete failed", table=table)
        rows = self._match(table, filters)
        for row in rows:
            del self.tables[table][row["id"]]
        return [dict(row) for row in rows]


class FakeAuthProvider:
    def __init__(self, user: Optional[AuthenticatedUser]) -> None:
        self.user = user
        self.calls = 0

    async def get_current_user(self) -> Optional[AuthenticatedUser]:
        self.calls += 1
        return self.user


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    return MagicMock()


@pytest.fixture
def remote_store():
    return FakeRemoteStore()


@pytest.fixture
def auth_provider():
    return FakeAuthProvider(AuthenticatedUser(user_id=TEST_USER_ID, email="user@example.com"))


@pytest.fixture
def logged_out_auth():
    return FakeAuthProvider(None)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def recorded_events(event_bus):
    """Every event published on the bus, as (channel, args) tuples."""
    from ledgersync.services.event_bus import Events

    events: List[Any] = []
    for channel in (
        Events.SYNC_SUCCESS,
        Events.SYNC_ERROR,
        Events.ENTITY_DELETED,
        Events.DATA_SYNC_COMPLETED,
        Events.DATA_RESET,
        Events.FORCE_REFRESH_ALL,
        Events.FINANCIAL_DATA_UPDATED,
    ):
        event_bus.subscribe(channel, lambda *args, channel=channel: events.append((channel, args)))
    return events


@pytest.fixture
def verification(remote_store):
    return VerificationService(remote_store)


@pytest.fixture
def sync_service(remote_store, auth_provider, event_bus, verification):
    return SyncService(
        remote_store=remote_store,
        auth_provider=auth_provider,
        event_bus=event_bus,
        verification=verification,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def local_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def registry(local_store, sync_service):
    return DomainRegistry.build(local_store, sync_service)


@pytest.fixture
def reset_service(registry, local_store, event_bus):
    return ResetService(registry, local_store, event_bus)
