"""
Tests for mapping local entities onto remote rows.
"""

from datetime import datetime, timezone

import pytest

from ledgersync.schemas.entities import EntityKind
from ledgersync.services.record_mapper import (
    coalesce_amount,
    display_name,
    is_absent,
    to_remote_record,
)

NOW = datetime(2025, 11, 5, 10, 0, 0, tzinfo=timezone.utc)
USER_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"
ENTITY_ID = "6ec0bd7f-11c0-43da-975e-2a8ad9ebae0b"


class TestCoalesceAmount:
    def test_first_present_field_wins(self):
        assert coalesce_amount({"current_value": 10, "cost_basis": 20}, "current_value", "cost_basis") == 10.0

    def test_falls_back_past_absent_fields(self):
        entity = {"current_value": None, "cost_basis": ""}
        assert coalesce_amount(entity, "current_value", "cost_basis", "quantity") == 0.0
        assert coalesce_amount({"current_value": None, "cost_basis": "75.5"}, "current_value", "cost_basis") == 75.5

    def test_zero_is_a_value(self):
        assert coalesce_amount({"current_value": 0, "cost_basis": 99}, "current_value", "cost_basis") == 0.0

    def test_non_numeric_values_are_skipped(self):
        assert coalesce_amount({"amount": "n/a", "balance": 3}, "amount", "balance") == 3.0
        assert coalesce_amount({"amount": True}, "amount", default=-1.0) == -1.0

    def test_non_finite_values_are_skipped(self):
        assert coalesce_amount({"sort_order": "inf"}, "sort_order") == 0.0
        assert coalesce_amount({"current_value": float("nan"), "cost_basis": 40}, "current_value", "cost_basis") == 40.0

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_absent_values(self, value):
        assert is_absent(value) is True

    def test_present_values(self):
        assert is_absent(0) is False
        assert is_absent("x") is False


class TestToRemoteRecord:
    def test_asset_row_sends_explicit_nulls(self):
        row = to_remote_record(EntityKind.ASSET, {"id": ENTITY_ID, "name": "Cash", "current_value": 50000}, USER_ID, now=NOW)

        assert row["id"] == ENTITY_ID
        assert row["user_id"] == USER_ID
        assert row["value"] == row["current_value"] == 50000.0
        assert row["cost_basis"] == 50000.0
        assert row["quantity"] == 1.0
        for column in ("stock_code", "area", "price_per_ping", "insurance_amount"):
            assert column in row
            assert row[column] is None

    def test_infinite_sort_order_falls_back_to_zero(self):
        row = to_remote_record(EntityKind.ASSET, {"id": ENTITY_ID, "sort_order": "inf"}, USER_ID, now=NOW)
        assert row["sort_order"] == 0

    def test_owner_is_never_taken_from_the_entity(self):
        row = to_remote_record(EntityKind.ASSET, {"id": ENTITY_ID, "user_id": "someone-else"}, USER_ID, now=NOW)
        assert row["user_id"] == USER_ID

    def test_timestamps(self):
        created = "2024-01-01T00:00:00+00:00"
        row = to_remote_record(EntityKind.LIABILITY, {"id": ENTITY_ID, "created_at": created}, USER_ID, now=NOW)

        assert row["created_at"] == created
        assert row["updated_at"] == NOW.isoformat()

    def test_transaction_defaults(self):
        row = to_remote_record(EntityKind.TRANSACTION, {"id": ENTITY_ID, "amount": "120"}, USER_ID, now=NOW)

        assert row["amount"] == 120.0
        assert row["type"] == "expense"
        assert row["date"] == "2025-11-05"
        assert row["is_deleted"] is False
        assert row["from_account"] is None

    def test_transaction_accepts_camel_case_transfer_fields(self):
        row = to_remote_record(
            EntityKind.TRANSACTION,
            {"id": ENTITY_ID, "type": "transfer", "fromAccount": "Cash", "toAccount": "Bank"},
            USER_ID,
            now=NOW,
        )
        assert row["from_account"] == "Cash"
        assert row["to_account"] == "Bank"

    def test_liability_falls_back_to_balance(self):
        row = to_remote_record(EntityKind.LIABILITY, {"id": ENTITY_ID, "name": "Card", "balance": 8000}, USER_ID, now=NOW)

        assert row["amount"] == 8000.0
        assert row["current_amount"] == 8000.0
        assert row["due_date"] is None

    def test_account_is_written_active(self):
        row = to_remote_record(EntityKind.ACCOUNT, {"id": ENTITY_ID, "account_type": "bank", "current_value": 5}, USER_ID, now=NOW)

        assert row["is_active"] is True
        assert row["type"] == "bank"
        assert row["balance"] == 5.0


class TestDisplayName:
    def test_uses_name_or_description(self):
        assert display_name(EntityKind.ASSET, {"id": ENTITY_ID, "name": "House"}) == "House"
        assert display_name(EntityKind.TRANSACTION, {"id": ENTITY_ID, "description": "Lunch"}) == "Lunch"

    def test_falls_back_to_id(self):
        assert display_name(EntityKind.LIABILITY, {"id": ENTITY_ID}) == ENTITY_ID
        assert display_name(EntityKind.ASSET, {}) == "<unnamed>"
