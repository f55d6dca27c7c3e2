"""
Map local entities onto remote rows.

Every column of the remote schema is written on every upsert: optional
columns that the local entity lacks are sent as explicit nulls, so a
replace-by-id never leaves stale values behind. Monetary columns are
coerced to numbers, falling back along a fixed chain of alternative fields
when the primary one is absent.
"""

import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from ledgersync.schemas.entities import Entity, EntityKind

Row = Dict[str, Any]


def is_absent(value: Any) -> bool:
    """Missing, None and empty strings are absent; zero is a value."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def coalesce_amount(entity: Entity, *fields: str, default: float = 0.0) -> float:
    """
    Return the first present, finite numeric field among `fields` as a float.

    Example:
        >>> coalesce_amount({"cost_basis": "1200"}, "current_value", "cost_basis")
        1200.0
    """
    for field in fields:
        value = entity.get(field)
        if is_absent(value) or isinstance(value, bool):
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(number):
            return number
    return default


def optional(entity: Entity, *fields: str) -> Any:
    """First present value among `fields`, or None."""
    for field in fields:
        value = entity.get(field)
        if not is_absent(value):
            return value
    return None


def text(entity: Entity, field: str, default: str) -> str:
    value = entity.get(field)
    return default if is_absent(value) else str(value)


def _timestamps(entity: Entity, now: datetime) -> Row:
    stamp = now.isoformat()
    return {
        "created_at": optional(entity, "created_at") or stamp,
        "updated_at": stamp,
    }


def _asset_row(entity: Entity, now: datetime) -> Row:
    current_value = coalesce_amount(entity, "current_value", "cost_basis")
    return {
        "name": text(entity, "name", "Unnamed asset"),
        "type": text(entity, "type", "other"),
        "value": current_value,
        "current_value": current_value,
        "cost_basis": coalesce_amount(entity, "cost_basis", "current_value"),
        "quantity": coalesce_amount(entity, "quantity", default=1.0),
        "purchase_price": coalesce_amount(entity, "purchase_price", "cost_basis"),
        "current_price": coalesce_amount(entity, "current_price", "current_value", "cost_basis"),
        "sort_order": int(coalesce_amount(entity, "sort_order")),
        "stock_code": optional(entity, "stock_code"),
        "area": optional(entity, "area"),
        "price_per_ping": optional(entity, "price_per_ping"),
        "current_price_per_ping": optional(entity, "current_price_per_ping"),
        "buy_exchange_rate": optional(entity, "buy_exchange_rate"),
        "current_exchange_rate": optional(entity, "current_exchange_rate"),
        "insurance_amount": optional(entity, "insurance_amount"),
    }


def _transaction_row(entity: Entity, now: datetime) -> Row:
    return {
        "type": text(entity, "type", "expense"),
        "amount": coalesce_amount(entity, "amount"),
        "description": text(entity, "description", ""),
        "category": text(entity, "category", ""),
        "account": text(entity, "account", ""),
        "from_account": optional(entity, "from_account", "fromAccount"),
        "to_account": optional(entity, "to_account", "toAccount"),
        "date": optional(entity, "date") or now.date().isoformat(),
        "is_recurring": bool(entity.get("is_recurring")),
        "recurring_frequency": optional(entity, "recurring_frequency"),
        "max_occurrences": optional(entity, "max_occurrences"),
        "start_date": optional(entity, "start_date"),
        "is_deleted": False,
    }


def _liability_row(entity: Entity, now: datetime) -> Row:
    return {
        "name": text(entity, "name", "Unnamed liability"),
        "type": text(entity, "type", "credit_card"),
        "amount": coalesce_amount(entity, "amount", "balance"),
        "current_amount": coalesce_amount(entity, "current_amount", "balance"),
        "interest_rate": coalesce_amount(entity, "interest_rate"),
        "minimum_payment": coalesce_amount(entity, "minimum_payment"),
        "due_date": optional(entity, "due_date"),
        "description": text(entity, "description", ""),
    }


def _account_row(entity: Entity, now: datetime) -> Row:
    return {
        "name": text(entity, "name", "Unnamed account"),
        "type": str(optional(entity, "type", "account_type") or "other"),
        "balance": coalesce_amount(entity, "balance", "current_value"),
        "account_number": optional(entity, "account_number"),
        "currency": optional(entity, "currency"),
        "is_active": True,
    }


_BUILDERS: Dict[EntityKind, Callable[[Entity, datetime], Row]] = {
    EntityKind.ASSET: _asset_row,
    EntityKind.TRANSACTION: _transaction_row,
    EntityKind.LIABILITY: _liability_row,
    EntityKind.ACCOUNT: _account_row,
}


def to_remote_record(
    kind: EntityKind,
    entity: Entity,
    user_id: str,
    now: Optional[datetime] = None,
) -> Row:
    """
    Build the full remote row for `entity`.

    The entity's identifier must already be normalized.

    Args:
        kind: Entity kind, selects the column set
        entity: Local entity dict
        user_id: Owner written to user_id (never taken from the entity)
        now: Clock override for tests

    Returns:
        Dict with every column of the kind's remote table
    """
    now = now or datetime.now(timezone.utc)
    row: Row = {"id": entity["id"], "user_id": user_id}
    row.update(_BUILDERS[kind](entity, now))
    row.update(_timestamps(entity, now))
    return row


def display_name(kind: EntityKind, entity: Entity) -> str:
    """Label used in batch error messages."""
    label_fields: Tuple[str, ...] = ("description", "category") if kind is EntityKind.TRANSACTION else ("name",)
    return str(optional(entity, *label_fields) or entity.get("id") or "<unnamed>")
