# Overview: Pytest coverage for the inventory ledger (reserve/release/create) and item management.

import pytest

from tindahan.errors import InsufficientStockError, ItemNotFoundError, NotFoundError
from tindahan.extensions import db
from tindahan.models import InventoryItem
from tindahan.services import inventory_service
from tindahan.services.line_items import NewItem
from tindahan.validation import ValidationError


def _stock(item_id):
    db.session.expire_all()
    return db.session.get(InventoryItem, item_id).stock


class TestReserveStock:
    def test_decrements_every_item(self, make_item):
        a = make_item("Coke", stock=10)
        b = make_item("Sprite", stock=5)

        levels = inventory_service.reserve_stock({a.id: 3, b.id: 5})

        assert levels == {a.id: 7, b.id: 0}
        assert _stock(a.id) == 7
        assert _stock(b.id) == 0

    def test_insufficient_stock_reports_available_and_requested(self, make_item):
        a = make_item("Coke", stock=5)

        with pytest.raises(InsufficientStockError) as exc:
            inventory_service.reserve_stock({a.id: 7})

        assert exc.value.item_id == a.id
        assert exc.value.available == 5
        assert exc.value.requested == 7
        assert _stock(a.id) == 5

    def test_one_failing_item_means_no_item_is_decremented(self, make_item):
        a = make_item("Coke", stock=10)
        b = make_item("Sprite", stock=1)

        with pytest.raises(InsufficientStockError):
            inventory_service.reserve_stock({a.id: 2, b.id: 2})

        assert _stock(a.id) == 10
        assert _stock(b.id) == 1

    def test_missing_item_fails_whole_batch(self, make_item):
        a = make_item("Coke", stock=10)

        with pytest.raises(ItemNotFoundError) as exc:
            inventory_service.reserve_stock({a.id: 1, "missing-item": 1})

        assert "missing-item" in str(exc.value)
        assert _stock(a.id) == 10

    def test_non_positive_quantity_rejected(self, item):
        with pytest.raises(ValueError):
            inventory_service.reserve_stock({item.id: 0})


class TestReleaseStock:
    def test_adds_stock_back(self, make_item):
        a = make_item("Coke", stock=2)
        restored = inventory_service.release_stock({a.id: 3})
        assert restored == [a.id]
        assert _stock(a.id) == 5

    def test_vanished_items_are_skipped(self, make_item):
        a = make_item("Coke", stock=2)
        restored = inventory_service.release_stock({a.id: 1, "gone": 4})
        assert restored == [a.id]
        assert _stock(a.id) == 3


class TestCreateItemsAndReserve:
    def test_new_items_seeded_and_existing_reserved(self, app, make_item):
        a = make_item("Coke", stock=10)
        new = NewItem(item_id="20260101_080000-I-abc123", name="Ice candy", price_cents=500)

        created = inventory_service.create_items_and_reserve([new], {a.id: 4})

        assert created == [new.item_id]
        assert _stock(a.id) == 6
        fresh = db.session.get(InventoryItem, new.item_id)
        assert fresh.name == "Ice candy"
        assert fresh.price_cents == 500
        assert fresh.cost_cents == 0
        assert fresh.stock == app.config["NEW_ITEM_DEFAULT_STOCK"]

    def test_reserve_failure_creates_nothing(self, make_item):
        a = make_item("Coke", stock=1)
        new = NewItem(item_id="20260101_080000-I-def456", name="Ice candy", price_cents=500)

        with pytest.raises(InsufficientStockError):
            inventory_service.create_items_and_reserve([new], {a.id: 2})

        assert db.session.get(InventoryItem, new.item_id) is None


class TestItemManagement:
    def test_add_requires_name(self, db_session):
        with pytest.raises(ValidationError):
            inventory_service.add_item(patch={"price_cents": 100})

    def test_add_rejects_negative_stock(self, db_session):
        with pytest.raises(ValidationError):
            inventory_service.add_item(patch={"name": "Salt", "stock": -1})

    def test_update_fields(self, item):
        updated = inventory_service.update_item(item_id=item.id, patch={"price_cents": 1800, "stock": 40})
        assert updated.price_cents == 1800
        assert _stock(item.id) == 40

    def test_update_unknown_item(self, db_session):
        with pytest.raises(ItemNotFoundError):
            inventory_service.update_item(item_id="nope", patch={"stock": 1})

    def test_delete_is_hard(self, item):
        inventory_service.delete_item(item_id=item.id)
        assert db.session.get(InventoryItem, item.id) is None
        with pytest.raises(NotFoundError):
            inventory_service.delete_item(item_id=item.id)

    def test_list_ordered_by_name_with_pagination(self, make_item):
        make_item("Sardines")
        make_item("Bread")
        make_item("Coffee")

        names = [i["name"] for i in inventory_service.list_items()["items"]]
        assert names == ["Bread", "Coffee", "Sardines"]

        page = inventory_service.list_items(page=2, per_page=2)
        assert [i["name"] for i in page["items"]] == ["Sardines"]
        assert page["pagination"]["total"] == 3
        assert page["pagination"]["has_prev"] is True
        assert page["pagination"]["has_next"] is False
