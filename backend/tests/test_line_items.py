# Overview: Pytest coverage for pure line item resolution.

import re

import pytest

from tindahan.services.line_items import (
    line_total_cents,
    new_inventory_item_id,
    resolve_line_items,
)


def _ids():
    counter = iter(range(1, 100))
    return lambda: f"NEW-{next(counter)}"


class TestResolveLineItems:
    def test_quantities_for_same_item_are_summed(self):
        resolved = resolve_line_items([
            {"item_id": "A", "item_name": "Coke", "quantity": 3, "unit_price_cents": 2000},
            {"item_id": "B", "item_name": "Sprite", "quantity": 1, "unit_price_cents": 2000},
            {"item_id": "A", "item_name": "Coke", "quantity": 4, "unit_price_cents": 2000},
        ])
        assert resolved.aggregated_decrements == {"A": 7, "B": 1}
        assert resolved.new_items == []
        assert len(resolved.resolved_items) == 3

    def test_lines_without_item_id_become_new_items(self):
        resolved = resolve_line_items(
            [{"item_name": "Ice candy", "quantity": 2, "unit_price_cents": 500}],
            id_factory=_ids(),
        )
        assert len(resolved.new_items) == 1
        new = resolved.new_items[0]
        assert new.item_id == "NEW-1"
        assert new.name == "Ice candy"
        assert new.price_cents == 500
        assert resolved.resolved_items[0]["item_id"] == "NEW-1"
        # New items are never stock-checked by the sale that creates them
        assert resolved.aggregated_decrements == {}

    def test_untracked_lines_keep_no_item_id(self):
        resolved = resolve_line_items(
            [{"item_name": "Gcash Cash-In Fee", "quantity": 1, "unit_price_cents": 1000}],
            create_missing=False,
        )
        assert resolved.new_items == []
        assert resolved.aggregated_decrements == {}
        assert resolved.resolved_items[0]["item_id"] is None

    def test_total_defaults_to_quantity_times_price(self):
        resolved = resolve_line_items([
            {"item_id": "A", "item_name": "Egg", "quantity": 6, "unit_price_cents": 850},
            {"item_id": "B", "item_name": "Bread", "quantity": 1, "unit_price_cents": 4500, "total_cents": 4000},
        ])
        assert [i["total_cents"] for i in resolved.resolved_items] == [5100, 4000]
        assert resolved.total_cents == 9100

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValueError):
            resolve_line_items([{"item_id": "A", "item_name": "Egg", "quantity": quantity, "unit_price_cents": 850}])


def test_line_total_cents_prefers_explicit_total():
    assert line_total_cents({"quantity": 2, "unit_price_cents": 100}) == 200
    assert line_total_cents({"quantity": 2, "unit_price_cents": 100, "total_cents": 150}) == 150


def test_new_inventory_item_id_format():
    assert re.fullmatch(r"\d{8}_\d{6}-I-[0-9a-f]{6}", new_inventory_item_id())
