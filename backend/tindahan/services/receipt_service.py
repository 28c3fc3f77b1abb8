"""
Expense receipts

Stores purchase receipts read off a photo (by the external extraction
service) or typed in by hand. Extraction and channel notifications happen
outside this package; this module only validates and persists the fields.
"""

from __future__ import annotations

import json

from ..extensions import db
from ..models import ExpenseReceipt
from ..validation import ValidationError, parse_amount_cents
from tindahan.time_utils import normalize_business_date, utcnow
from .concurrency import atomic

PAYMENT_SOURCES = ("Cash on Hand", "G-Cash")


def _clean_receipt(data: dict) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")

    merchant = str(data.get("merchant_name") or "").strip()
    if not merchant:
        raise ValidationError("merchant_name is required")

    category = str(data.get("category") or "").strip()
    if not category:
        raise ValidationError("category is required")

    source = data.get("payment_source")
    if source not in PAYMENT_SOURCES:
        raise ValidationError(f"payment_source must be one of: {', '.join(PAYMENT_SOURCES)}")

    try:
        transaction_date = normalize_business_date(data.get("transaction_date"))
    except ValueError:
        raise ValidationError("transaction_date must be YYYY-MM-DD")

    raw_items = data.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    items = []
    for i, raw in enumerate(raw_items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{i}] must be an object")
        name = str(raw.get("name") or "").strip()
        if not name:
            raise ValidationError(f"items[{i}].name is required")
        items.append({
            "name": name,
            "price_cents": parse_amount_cents(raw.get("price_cents"), key=f"items[{i}].price_cents", allow_zero=True),
        })

    other = data.get("other_category_description")
    return {
        "merchant_name": merchant,
        "transaction_date": transaction_date,
        "category": category,
        "other_category_description": str(other).strip() if other else None,
        "total_cents": parse_amount_cents(data.get("total_cents"), key="total_cents", allow_zero=True),
        "payment_source": source,
        "items": items,
    }


def save_receipt(data: dict) -> ExpenseReceipt:
    cleaned = _clean_receipt(data)

    def _op():
        receipt = ExpenseReceipt(
            merchant_name=cleaned["merchant_name"],
            transaction_date=cleaned["transaction_date"],
            category=cleaned["category"],
            other_category_description=cleaned["other_category_description"],
            total_cents=cleaned["total_cents"],
            payment_source=cleaned["payment_source"],
            items_json=json.dumps(cleaned["items"]),
            created_at=utcnow(),
        )
        db.session.add(receipt)
        db.session.flush()
        return receipt

    return atomic(_op)


def list_receipts(transaction_date=None, limit: int | None = None) -> list[ExpenseReceipt]:
    q = db.session.query(ExpenseReceipt)
    if transaction_date is not None:
        q = q.filter(ExpenseReceipt.transaction_date == normalize_business_date(transaction_date))
    q = q.order_by(ExpenseReceipt.created_at.desc(), ExpenseReceipt.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()
