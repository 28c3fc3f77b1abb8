from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: 9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return _coerce_int(col.key, value)

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_inventory_item(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for key in ("price_cents", "cost_cents"):
        if key in patch and patch[key] is not None:
            if patch[key] < 0:
                raise ValidationError(f"{key} must be >= 0")
            if patch[key] > MAX_PRICE_CENTS:
                raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS}")

    if "stock" in patch and patch["stock"] is not None and patch["stock"] < 0:
        raise ValidationError("stock must be >= 0")


def parse_amount_cents(value: Any, *, key: str = "amount_cents", allow_zero: bool = False) -> int:
    amount = _coerce_int(key, value)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(f"{key} must be {'>= 0' if allow_zero else '> 0'}")
    if amount > MAX_PRICE_CENTS:
        raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS}")
    return amount


def parse_line_items(raw_items: Any) -> list[dict]:
    """
    Validate sale-like line items from a JSON body.

    Each line: {item_id?, item_name, quantity > 0, unit_price_cents >= 0, total_cents?}
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")

    items: list[dict] = []
    for i, raw in enumerate(raw_items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{i}] must be an object")

        name = str(raw.get("item_name") or "").strip()
        if not name:
            raise ValidationError(f"items[{i}].item_name is required")

        quantity = _coerce_int(f"items[{i}].quantity", raw.get("quantity"))
        if quantity <= 0:
            raise ValidationError(f"items[{i}].quantity must be > 0")

        unit_price = parse_amount_cents(
            raw.get("unit_price_cents"), key=f"items[{i}].unit_price_cents", allow_zero=True
        )

        line = {
            "item_id": (str(raw["item_id"]).strip() or None) if raw.get("item_id") else None,
            "item_name": name,
            "quantity": quantity,
            "unit_price_cents": unit_price,
        }
        if raw.get("total_cents") is not None:
            line["total_cents"] = parse_amount_cents(
                raw["total_cents"], key=f"items[{i}].total_cents", allow_zero=True
            )
        items.append(line)

    return items
