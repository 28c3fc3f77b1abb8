# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/tindahan/services/inventory_service.py

from __future__ import annotations

from flask import current_app

from ..errors import InsufficientStockError, ItemNotFoundError, NotFoundError
from ..extensions import db
from ..models import InventoryItem
from ..validation import ValidationError, enforce_rules_inventory_item
from tindahan.time_utils import utcnow
from .concurrency import atomic, lock_for_update
from .line_items import NewItem, new_inventory_item_id
"""
Inventory Ledger Invariants (authoritative)

Stock model:
- InventoryItem.stock is a stored counter, never negative (CHECK constraint).
- Sales and credits move stock only through reserve/release deltas written
  in the same DB transaction as the sale/credit document.

Reserve (decrement) protocol, in this order and never interleaved:
1. read phase: fetch every referenced item in one batched, locked query
2. validation: any missing item -> ItemNotFoundError; any item with
   stock < requested -> InsufficientStockError
3. write phase: only after every item validated, stock -= qty
A failing item means no item is decremented.

Release (increment):
- Used by voids and deletes. Items that no longer exist are skipped; an
  administrative delete after the sale is not an error.

Items created implicitly by a sale/credit:
- seeded with the line's unit price, zero cost and NEW_ITEM_DEFAULT_STOCK
- not stock-checked or decremented by the sale that created them
"""


def _validate_deltas(deltas: dict[str, int]) -> None:
    for item_id, qty in deltas.items():
        if not item_id:
            raise ValueError("item_id is required")
        if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
            raise ValueError(f"quantity for {item_id} must be a positive integer")


def _load_items_locked(item_ids) -> dict[str, InventoryItem]:
    ids = sorted(set(item_ids))
    if not ids:
        return {}
    rows = lock_for_update(
        db.session.query(InventoryItem).filter(InventoryItem.id.in_(ids))
    ).all()
    return {row.id: row for row in rows}


def reserve_stock_locked(decrements: dict[str, int]) -> dict[str, InventoryItem]:
    """Read-validate-write decrement inside the caller's unit (no commit)."""
    _validate_deltas(decrements)

    items = _load_items_locked(decrements.keys())

    for item_id in sorted(decrements):
        item = items.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        requested = decrements[item_id]
        if item.stock < requested:
            raise InsufficientStockError(
                item_id=item_id,
                available=item.stock,
                requested=requested,
                name=item.name,
            )

    for item_id, qty in decrements.items():
        items[item_id].stock = items[item_id].stock - qty

    return items


def release_stock_locked(increments: dict[str, int]) -> list[str]:
    """
    Add stock back inside the caller's unit (no commit).

    Returns the ids that were actually restored; vanished items are skipped.
    """
    _validate_deltas(increments)

    items = _load_items_locked(increments.keys())

    restored = []
    for item_id, qty in increments.items():
        item = items.get(item_id)
        if item is None:
            continue
        item.stock = item.stock + qty
        restored.append(item_id)
    return restored


def create_items_locked(new_items: list[NewItem]) -> list[InventoryItem]:
    default_stock = current_app.config.get("NEW_ITEM_DEFAULT_STOCK", 100)
    now = utcnow()
    created = []
    for new in new_items:
        item = InventoryItem(
            id=new.item_id,
            name=new.name,
            price_cents=new.price_cents,
            cost_cents=0,
            stock=default_stock,
            created_at=now,
            updated_at=now,
        )
        db.session.add(item)
        created.append(item)
    return created


def create_items_and_reserve_locked(
    new_items: list[NewItem],
    existing_decrements: dict[str, int],
) -> list[InventoryItem]:
    """
    Reserve stock on pre-existing items, then create the new ones.

    New items are never part of the decrement set: they did not exist before
    this sale.
    """
    new_ids = {n.item_id for n in new_items}
    overlap = new_ids.intersection(existing_decrements)
    if overlap:
        raise ValueError(f"new items cannot be reserved: {', '.join(sorted(overlap))}")

    if existing_decrements:
        reserve_stock_locked(existing_decrements)
    return create_items_locked(new_items)


def reserve_stock(decrements: dict[str, int]) -> dict[str, int]:
    """Atomically decrement stock for every item, or for none. Returns new stock levels."""
    def _op():
        items = reserve_stock_locked(decrements)
        return {item_id: items[item_id].stock for item_id in decrements}

    return atomic(_op)


def release_stock(increments: dict[str, int]) -> list[str]:
    """Atomically restore stock; missing items are skipped."""
    return atomic(lambda: release_stock_locked(increments))


def create_items_and_reserve(
    new_items: list[NewItem],
    existing_decrements: dict[str, int],
) -> list[str]:
    def _op():
        created = create_items_and_reserve_locked(new_items, existing_decrements)
        return [item.id for item in created]

    return atomic(_op)


# =============================================================================
# Item management (inventory screen)
# =============================================================================

INVENTORY_ITEM_MUTABLE_FIELDS = {"name", "price_cents", "cost_cents", "stock"}


def apply_item_patch(item: InventoryItem, patch: dict) -> None:
    for k, v in patch.items():
        if k not in INVENTORY_ITEM_MUTABLE_FIELDS:
            continue
        setattr(item, k, v)


def get_item(item_id: str) -> InventoryItem:
    item = db.session.get(InventoryItem, item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


def list_items(page: int | None = None, per_page: int | None = None) -> dict:
    """
    List inventory items ordered by name, with optional pagination.

    Returns a dict with 'items', 'count', and pagination metadata if paginated.
    """
    base_query = db.session.query(InventoryItem).order_by(InventoryItem.name.asc(), InventoryItem.id.asc())

    if page is None:
        items = base_query.all()
        return {
            "items": [i.to_dict() for i in items],
            "count": len(items),
        }

    per_page = min(per_page or 20, 100)  # Default 20, max 100
    page = max(page, 1)

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    items = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [i.to_dict() for i in items],
        "count": len(items),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def add_item(*, patch: dict) -> InventoryItem:
    """Create an inventory item from a validated patch dict."""
    if not (patch.get("name") or "").strip():
        raise ValidationError("name is required")
    enforce_rules_inventory_item(patch)

    def _op():
        now = utcnow()
        item = InventoryItem(id=new_inventory_item_id(), created_at=now, updated_at=now)
        apply_item_patch(item, patch)
        db.session.add(item)
        db.session.flush()
        return item

    return atomic(_op)


def update_item(*, item_id: str, patch: dict) -> InventoryItem:
    """Direct field edit (name/price/cost/stock) from the management screen."""
    enforce_rules_inventory_item(patch)

    def _op():
        item = lock_for_update(db.session.query(InventoryItem).filter_by(id=item_id)).first()
        if item is None:
            raise ItemNotFoundError(item_id)
        apply_item_patch(item, patch)
        return item

    return atomic(_op)


def delete_item(*, item_id: str) -> None:
    """
    Hard delete. Unguarded administrative operation: sales and credits that
    reference the item keep their lines, and later releases skip it.
    """
    def _op():
        item = db.session.get(InventoryItem, item_id)
        if item is None:
            raise NotFoundError(f"Inventory item with ID {item_id} not found.", details={"item_id": item_id})
        db.session.delete(item)

    atomic(_op)
