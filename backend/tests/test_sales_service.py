# Overview: Pytest coverage for committing and voiding sales, including e-wallet service sales.

"""
Sale Transaction Tests

Covers:
1. A sale decrements stock and a void restores it exactly once
2. Quantities for one item are summed before the stock check
3. A failed sale writes nothing and consumes no receipt number
4. Receipt numbers are unique and strictly increasing
5. Items created by a sale start at the default stock
6. Sales are refused once the day is closed
7. GCash fee rules
"""

import re
import threading

import pytest

from conftest import line, service_line
from tindahan import create_app
from tindahan.errors import AlreadyVoidedError, DayClosedError, InsufficientStockError, NotFoundError
from tindahan.extensions import db
from tindahan.models import InventoryItem, SaleTransaction
from tindahan.services import inventory_service, sales_service, wallet_service
from tindahan.services.counter_service import get_current_number


def _stock(item_id):
    db.session.expire_all()
    return db.session.get(InventoryItem, item_id).stock


class TestCommitSale:
    def test_sale_then_void_restores_stock(self, make_item):
        """Stock 10 -> sale of 2 -> 8 -> void -> 10."""
        item = make_item("Coke Mismo", stock=10, price_cents=2000)

        sale = sales_service.commit_sale([line(item, 2)], "Juan")

        assert sale.status == "active"
        assert sale.total_cents == 4000
        assert sale.receipt_number == "000001"
        assert re.fullmatch(r"\d{8}_\d{6}-S-000001", sale.id)
        assert _stock(item.id) == 8

        voided = sales_service.void_sale_transaction(sale.id)
        assert voided.status == "voided"
        assert voided.voided_at is not None
        assert _stock(item.id) == 10

    def test_second_void_is_rejected_and_moves_no_stock(self, make_item):
        item = make_item(stock=10)
        sale = sales_service.commit_sale([line(item, 2)])
        sales_service.void_sale_transaction(sale.id)

        with pytest.raises(AlreadyVoidedError):
            sales_service.void_sale_transaction(sale.id)

        assert _stock(item.id) == 10

    def test_void_unknown_sale(self, db_session):
        with pytest.raises(NotFoundError):
            sales_service.void_sale_transaction("missing")

    def test_quantities_aggregated_before_stock_check(self, make_item):
        """Two lines of 3 and 4 against stock 5 fail as one request for 7."""
        item = make_item(stock=5)

        with pytest.raises(InsufficientStockError) as exc:
            sales_service.commit_sale([line(item, 3), line(item, 4)])

        assert exc.value.available == 5
        assert exc.value.requested == 7
        assert _stock(item.id) == 5
        assert db.session.query(SaleTransaction).count() == 0

    def test_failed_sale_does_not_consume_a_receipt_number(self, make_item):
        item = make_item(stock=1)
        sales_service.commit_sale([line(item, 1)])

        with pytest.raises(InsufficientStockError):
            sales_service.commit_sale([line(item, 1)])

        assert get_current_number("saleReceipt") == 1

    def test_receipt_numbers_strictly_increasing_and_unique(self, make_item):
        item = make_item(stock=50)

        receipts = [sales_service.commit_sale([line(item, 1)]).receipt_number for _ in range(6)]

        assert receipts == ["000001", "000002", "000003", "000004", "000005", "000006"]
        assert len(set(receipts)) == len(receipts)
        assert get_current_number("saleReceipt") == 6

    def test_new_item_created_with_default_stock_and_not_decremented(self, app, db_session):
        sale = sales_service.commit_sale([
            {"item_name": "Turon", "quantity": 3, "unit_price_cents": 1500},
        ])

        new_id = sale.lines[0].item_id
        assert new_id is not None
        created = db.session.get(InventoryItem, new_id)
        assert created.name == "Turon"
        assert created.price_cents == 1500
        assert created.cost_cents == 0
        assert created.stock == app.config["NEW_ITEM_DEFAULT_STOCK"]

    def test_void_of_sale_with_deleted_item_skips_it(self, make_item):
        kept = make_item("Coke", stock=10)
        gone = make_item("Sprite", stock=10)
        sale = sales_service.commit_sale([line(kept, 1), line(gone, 1)])

        db.session.delete(db.session.get(InventoryItem, gone.id))
        db.session.commit()

        sales_service.void_sale_transaction(sale.id)
        assert _stock(kept.id) == 10

    def test_explicit_total_overrides_line_sum(self, item):
        sale = sales_service.commit_sale([line(item, 2)], total_cents=2500)
        assert sale.total_cents == 2500

    def test_empty_sale_rejected(self, db_session):
        with pytest.raises(ValueError):
            sales_service.commit_sale([])

    def test_sales_refused_after_day_closed(self, item):
        entry = wallet_service.start_day(50000)
        sales_service.commit_sale([line(item, 1)])
        wallet_service.close_day(entry.id, 62000)

        with pytest.raises(DayClosedError):
            sales_service.commit_sale([line(item, 1)])

        assert get_current_number("saleReceipt") == 1


class TestConcurrentSales:
    """Several connections racing for the same counter and stock row."""

    WORKERS = 16

    @pytest.fixture
    def file_app(self, tmp_path):
        """App on a file-backed SQLite database so each thread gets its own connection."""
        app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'store.sqlite3'}",
            "TRANSACTION_RETRY_ATTEMPTS": 10,
        })
        with app.app_context():
            db.create_all()
        yield app
        with app.app_context():
            db.session.remove()
            db.engine.dispose()

    def test_receipts_distinct_and_strictly_increasing(self, file_app):
        with file_app.app_context():
            item = inventory_service.add_item(patch={"name": "Coke", "stock": 1000, "price_cents": 2000})
            item_id = item.id

        receipts, errors = [], []
        start = threading.Barrier(self.WORKERS)

        def sell():
            with file_app.app_context():
                try:
                    start.wait()
                    sale = sales_service.commit_sale([
                        {"item_id": item_id, "item_name": "Coke", "quantity": 1, "unit_price_cents": 2000},
                    ])
                    receipts.append(sale.receipt_number)
                except Exception as e:
                    errors.append(e)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=sell) for _ in range(self.WORKERS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert errors == []
        assert sorted(receipts) == [f"{n:06d}" for n in range(1, self.WORKERS + 1)]

        with file_app.app_context():
            assert db.session.get(InventoryItem, item_id).stock == 1000 - self.WORKERS
            assert get_current_number("saleReceipt") == self.WORKERS
            sales = db.session.query(SaleTransaction).order_by(SaleTransaction.receipt_number).all()
            created = [s.created_at for s in sales]
            assert created == sorted(created)
            db.session.remove()


class TestListSales:
    def test_newest_first_with_status_filter(self, make_item):
        item = make_item(stock=10)
        first = sales_service.commit_sale([line(item, 1)])
        second = sales_service.commit_sale([line(item, 1)])
        sales_service.void_sale_transaction(first.id)

        assert [s.id for s in sales_service.list_sales()] == [second.id, first.id]
        assert [s.id for s in sales_service.list_sales(status="voided")] == [first.id]


class TestEwallet:
    @pytest.mark.parametrize("amount,fee", [(50000, 1000), (100000, 1000), (250000, 2500), (123456, 1235)])
    def test_fee_is_one_percent_with_minimum(self, amount, fee):
        assert sales_service.ewallet_fee_cents(amount) == fee

    def test_cash_in_total_is_fee_only(self):
        sale = sales_service.build_ewallet_sale("cash-in", 200000)
        assert sale["total_cents"] == 2000
        assert sale["service_type"] == "gcash"
        assert [i["item_name"] for i in sale["items"]] == ["Gcash Cash-In", "Gcash Cash-In Fee"]

    def test_cash_out_total_is_amount_plus_fee(self):
        sale = sales_service.build_ewallet_sale("cash-out", 50000)
        assert sale["total_cents"] == 51000

    def test_e_load_fixed_fee(self):
        sale = sales_service.build_ewallet_sale("e-load", 10000)
        assert sale["total_cents"] == sales_service.ELOAD_FEE_CENTS
        assert sale["service_type"] == "gcash-e-load"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            sales_service.build_ewallet_sale("bills", 10000)

    def test_submit_records_untracked_lines(self, db_session):
        sale = sales_service.submit_ewallet_transaction("cash-in", 100000)

        assert sale.service_type == "gcash"
        assert sale.total_cents == 1000
        assert all(l.item_id is None for l in sale.lines)
        assert db.session.query(InventoryItem).count() == 0

    def test_service_line_helper_in_regular_sale_creates_item(self, db_session):
        sale = sales_service.commit_sale([service_line("Load wallet top-up", 5000)])
        assert db.session.query(InventoryItem).count() == 1
        assert sale.total_cents == 5000
