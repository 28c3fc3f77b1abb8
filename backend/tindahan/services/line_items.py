# Overview: Pure resolution of sale-like line items into inventory effects.

"""
Line item resolution shared by the sale and credit coordinators.

resolve_line_items() turns a list of line dicts
    {item_id?, item_name, quantity, unit_price_cents, total_cents?}
into:
- new_items: inventory documents to create (lines without item_id)
- aggregated_decrements: {item_id: total quantity} for existing items;
  several lines referencing one item are summed before any stock check
- resolved_items: the lines in order, each now carrying its item_id and
  line total

No database access happens here; callers own the atomic
read-validate-write orchestration.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable

from tindahan.time_utils import id_timestamp


def new_inventory_item_id() -> str:
    return f"{id_timestamp()}-I-{uuid.uuid4().hex[:6]}"


@dataclass(frozen=True)
class NewItem:
    item_id: str
    name: str
    price_cents: int


@dataclass
class ResolvedLines:
    new_items: list[NewItem] = field(default_factory=list)
    aggregated_decrements: dict[str, int] = field(default_factory=dict)
    resolved_items: list[dict] = field(default_factory=list)

    @property
    def total_cents(self) -> int:
        return sum(item["total_cents"] for item in self.resolved_items)


def line_total_cents(item: dict) -> int:
    total = item.get("total_cents")
    if total is None:
        return item["quantity"] * item["unit_price_cents"]
    return total


def resolve_line_items(
    items: list[dict],
    *,
    create_missing: bool = True,
    id_factory: Callable[[], str] = new_inventory_item_id,
) -> ResolvedLines:
    """
    Split lines into new-inventory creations and aggregated stock decrements.

    With create_missing=False, lines without item_id stay untracked service
    lines: no inventory document is created and no stock moves.
    """
    resolved = ResolvedLines()

    for item in items:
        quantity = item["quantity"]
        if quantity <= 0:
            raise ValueError("quantity must be > 0")

        line = {
            "item_id": item.get("item_id") or None,
            "item_name": item["item_name"],
            "quantity": quantity,
            "unit_price_cents": item["unit_price_cents"],
            "total_cents": line_total_cents(item),
        }

        if line["item_id"] is None:
            if create_missing:
                new_id = id_factory()
                resolved.new_items.append(
                    NewItem(item_id=new_id, name=line["item_name"], price_cents=line["unit_price_cents"])
                )
                line["item_id"] = new_id
        else:
            item_id = line["item_id"]
            resolved.aggregated_decrements[item_id] = (
                resolved.aggregated_decrements.get(item_id, 0) + quantity
            )

        resolved.resolved_items.append(line)

    return resolved
