"""
Tests for the Supabase remote store adapter.

Tests cover:
- Driver results are unwrapped into plain rows
- PGRST116 and empty results become RemoteNotFoundError
- Every other driver failure becomes RemoteReadError / RemoteWriteError
- Upsert is keyed by identifier
"""

from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from ledgersync.db.remote_store import RemoteStore
from ledgersync.errors import (
    RemoteNotFoundError,
    RemoteReadError,
    RemoteWriteError,
    SyncErrorKind,
)

ROW = {"id": "6ec0bd7f-11c0-43da-975e-2a8ad9ebae0b", "name": "Cash"}


def _query(data=None, count=None, error=None):
    """Query builder mock whose chained calls all return the builder itself."""
    query = MagicMock()
    for method in ("select", "eq", "order", "limit", "upsert", "update", "delete"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data, count=count)
    return query


@pytest.fixture
def make_store(supabase_client):
    def _make(**kwargs):
        query = _query(**kwargs)
        supabase_client.table.return_value = query
        return RemoteStore(supabase_client), query
    return _make


class TestReads:
    @pytest.mark.asyncio
    async def test_select_applies_every_filter(self, make_store, supabase_client):
        store, query = make_store(data=[ROW])

        rows = await store.select("assets", {"user_id": "u1", "type": "cash"}, order_by="name", limit=5)

        assert rows == [ROW]
        supabase_client.table.assert_called_with("assets")
        query.eq.assert_any_call("user_id", "u1")
        query.eq.assert_any_call("type", "cash")
        query.order.assert_called_once_with("name", desc=False)
        query.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_count_uses_exact_count(self, make_store):
        store, query = make_store(data=[], count=7)

        assert await store.count("transactions", {"user_id": "u1"}) == 7
        query.select.assert_called_once_with("id", count="exact")

    @pytest.mark.asyncio
    async def test_fetch_one_returns_the_row(self, make_store):
        store, _ = make_store(data=[ROW])

        assert await store.fetch_one("assets", {"id": ROW["id"]}) == ROW

    @pytest.mark.asyncio
    async def test_fetch_one_empty_result_is_not_found(self, make_store):
        store, _ = make_store(data=[])

        with pytest.raises(RemoteNotFoundError) as exc_info:
            await store.fetch_one("assets", {"id": ROW["id"]})

        assert exc_info.value.kind == SyncErrorKind.REMOTE_NOT_FOUND
        assert exc_info.value.record_id == ROW["id"]

    @pytest.mark.asyncio
    async def test_fetch_one_pgrst116_is_not_found(self, make_store):
        error = APIError({"message": "JSON object requested, multiple (or no) rows returned", "code": "PGRST116"})
        store, _ = make_store(error=error)

        with pytest.raises(RemoteNotFoundError) as exc_info:
            await store.fetch_one("assets", {"id": ROW["id"]})

        assert exc_info.value.code == "PGRST116"

    @pytest.mark.asyncio
    async def test_fetch_one_other_api_error_is_read_failure(self, make_store):
        error = APIError({"message": "permission denied for table assets", "code": "42501"})
        store, _ = make_store(error=error)

        with pytest.raises(RemoteReadError) as exc_info:
            await store.fetch_one("assets", {"id": ROW["id"]})

        assert exc_info.value.code == "42501"
        assert "permission denied" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fetch_one_multiple_rows_is_read_failure(self, make_store):
        store, _ = make_store(data=[ROW, ROW])

        with pytest.raises(RemoteReadError):
            await store.fetch_one("assets", {"id": ROW["id"]})

    @pytest.mark.asyncio
    async def test_network_error_is_read_failure(self, make_store):
        store, _ = make_store(error=ConnectionError("connection reset by peer"))

        with pytest.raises(RemoteReadError) as exc_info:
            await store.select("assets")

        assert exc_info.value.code is None
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestWrites:
    @pytest.mark.asyncio
    async def test_upsert_is_keyed_by_id(self, make_store):
        """
        Should:
        - Call upsert() with on_conflict="id"
        - Replace instead of ignoring duplicates
        - Return the written rows
        """
        store, query = make_store(data=[ROW])

        written = await store.upsert("assets", ROW)

        assert written == [ROW]
        query.upsert.assert_called_once_with(ROW, on_conflict="id", ignore_duplicates=False)

    @pytest.mark.asyncio
    async def test_upsert_failure(self, make_store):
        error = APIError({"message": "null value in column \"name\"", "code": "23502"})
        store, _ = make_store(error=error)

        with pytest.raises(RemoteWriteError) as exc_info:
            await store.upsert("assets", ROW)

        assert exc_info.value.kind == SyncErrorKind.REMOTE_WRITE_FAILURE
        assert exc_info.value.table == "assets"
        assert exc_info.value.record_id == ROW["id"]

    @pytest.mark.asyncio
    async def test_update_filters_rows(self, make_store):
        store, query = make_store(data=[ROW])

        await store.update("accounts", {"is_active": False}, {"id": ROW["id"], "user_id": "u1"})

        query.update.assert_called_once_with({"is_active": False})
        query.eq.assert_any_call("id", ROW["id"])
        query.eq.assert_any_call("user_id", "u1")

    @pytest.mark.asyncio
    async def test_delete_failure(self, make_store):
        store, _ = make_store(error=TimeoutError("timed out"))

        with pytest.raises(RemoteWriteError):
            await store.delete("assets", {"id": ROW["id"]})

    @pytest.mark.asyncio
    async def test_delete_with_no_matching_rows_returns_empty(self, make_store):
        store, _ = make_store(data=None)

        assert await store.delete("assets", {"id": ROW["id"]}) == []
