"""
Remote store adapter.

Wraps the Supabase table API behind the small contract the sync layer
consumes: equality-filtered reads, idempotent upsert keyed by identifier,
filtered update and delete. Driver exceptions never leave this module;
they are converted into the SyncError variants from ledgersync.errors.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from postgrest.exceptions import APIError
from supabase import Client

from ledgersync.errors import (
    RemoteNotFoundError,
    RemoteReadError,
    RemoteWriteError,
)
from ledgersync.utils.constants import POSTGREST_NO_ROWS_CODE

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Filters = Dict[str, Any]


def _describe(error: Exception) -> str:
    """Human-readable message for a driver exception."""
    if isinstance(error, APIError):
        return error.message or str(error)
    return str(error)


def _error_code(error: Exception) -> Optional[str]:
    if isinstance(error, APIError):
        return error.code
    return None


class RemoteStore:
    """
    Table-oriented access to the Supabase database.

    All methods are coroutines so the sync layer can suspend on them; the
    underlying Supabase client call is blocking.
    """

    def __init__(self, client: Client) -> None:
        self.client = client

    def _apply_filters(self, query: Any, filters: Filters) -> Any:
        for column, value in filters.items():
            query = query.eq(column, value)
        return query

    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """
        Read rows matching every equality filter.

        Raises:
            RemoteReadError: If the query fails
        """
        try:
            query = self.client.table(table).select(columns)
            query = self._apply_filters(query, filters or {})
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            result = query.execute()
        except Exception as e:
            raise RemoteReadError(
                f"Query on {table} failed: {_describe(e)}",
                table=table,
                code=_error_code(e),
            ) from e

        return cast(List[Row], result.data or [])

    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        """
        Count rows matching the filters without fetching them.

        Raises:
            RemoteReadError: If the query fails
        """
        try:
            query = self.client.table(table).select("id", count="exact")
            query = self._apply_filters(query, filters or {})
            result = query.execute()
        except Exception as e:
            raise RemoteReadError(
                f"Count on {table} failed: {_describe(e)}",
                table=table,
                code=_error_code(e),
            ) from e

        return int(result.count or 0)

    async def fetch_one(
        self,
        table: str,
        filters: Filters,
        columns: str = "*",
    ) -> Row:
        """
        Point read that expects exactly one row.

        Raises:
            RemoteNotFoundError: If no row matches
            RemoteReadError: If the query fails or more than one row matches
        """
        record_id = filters.get("id")
        try:
            query = self.client.table(table).select(columns)
            result = self._apply_filters(query, filters).execute()
        except Exception as e:
            if _error_code(e) == POSTGREST_NO_ROWS_CODE:
                raise RemoteNotFoundError(
                    f"No {table} row matches {record_id}",
                    table=table,
                    record_id=record_id,
                    code=POSTGREST_NO_ROWS_CODE,
                ) from e
            raise RemoteReadError(
                f"Point read on {table} failed: {_describe(e)}",
                table=table,
                record_id=record_id,
                code=_error_code(e),
            ) from e

        rows = cast(List[Row], result.data or [])
        if not rows:
            raise RemoteNotFoundError(
                f"No {table} row matches {record_id}",
                table=table,
                record_id=record_id,
                code=POSTGREST_NO_ROWS_CODE,
            )
        if len(rows) > 1:
            raise RemoteReadError(
                f"Point read on {table} matched {len(rows)} rows for {record_id}",
                table=table,
                record_id=record_id,
            )
        return rows[0]

    async def upsert(
        self,
        table: str,
        record: Row,
        on_conflict: str = "id",
    ) -> List[Row]:
        """
        Insert the record, or replace the row with the same conflict key.

        Raises:
            RemoteWriteError: If the write fails
        """
        record_id = record.get(on_conflict)
        logger.debug(f"Upserting {table} row {record_id}")
        try:
            result = (
                self.client.table(table)
                .upsert(record, on_conflict=on_conflict, ignore_duplicates=False)
                .execute()
            )
        except Exception as e:
            raise RemoteWriteError(
                f"Upsert into {table} failed: {_describe(e)}",
                table=table,
                record_id=record_id,
                code=_error_code(e),
            ) from e

        return cast(List[Row], result.data or [])

    async def update(self, table: str, values: Row, filters: Filters) -> List[Row]:
        """
        Update the rows matching the filters.

        Raises:
            RemoteWriteError: If the write fails
        """
        try:
            query = self.client.table(table).update(values)
            result = self._apply_filters(query, filters).execute()
        except Exception as e:
            raise RemoteWriteError(
                f"Update on {table} failed: {_describe(e)}",
                table=table,
                record_id=filters.get("id"),
                code=_error_code(e),
            ) from e

        return cast(List[Row], result.data or [])

    async def delete(self, table: str, filters: Filters) -> List[Row]:
        """
        Delete the rows matching the filters.

        Raises:
            RemoteWriteError: If the delete fails
        """
        try:
            query = self.client.table(table).delete()
            result = self._apply_filters(query, filters).execute()
        except Exception as e:
            raise RemoteWriteError(
                f"Delete from {table} failed: {_describe(e)}",
                table=table,
                record_id=filters.get("id"),
                code=_error_code(e),
            ) from e

        return cast(List[Row], result.data or [])
