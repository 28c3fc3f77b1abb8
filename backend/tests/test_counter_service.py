# Overview: Pytest coverage for the receipt counter.

import pytest

from tindahan.extensions import db
from tindahan.models import Counter
from tindahan.services.counter_service import (
    format_receipt_number,
    get_current_number,
    next_receipt_number,
    store_counter,
)


class TestCounterAllocator:
    def test_absent_counter_starts_at_one(self, db_session):
        counter, number = next_receipt_number("saleReceipt")
        assert counter is None
        assert number == 1

    def test_store_then_read_advances(self, db_session):
        counter, number = next_receipt_number("saleReceipt")
        store_counter(counter, "saleReceipt", number)
        db.session.commit()

        counter, number = next_receipt_number("saleReceipt")
        assert counter is not None
        assert number == 2
        assert get_current_number("saleReceipt") == 1

    def test_rollback_leaves_counter_unchanged(self, db_session):
        db.session.add(Counter(id="saleReceipt", current_number=41))
        db.session.commit()

        counter, number = next_receipt_number("saleReceipt")
        store_counter(counter, "saleReceipt", number)
        db.session.rollback()

        assert get_current_number("saleReceipt") == 41

    def test_counter_never_moves_backwards(self, db_session):
        db.session.add(Counter(id="saleReceipt", current_number=5))
        db.session.commit()

        counter, _ = next_receipt_number("saleReceipt")
        with pytest.raises(ValueError):
            store_counter(counter, "saleReceipt", 5)

    def test_counter_name_required(self, db_session):
        with pytest.raises(ValueError):
            next_receipt_number("")


@pytest.mark.parametrize("number,expected", [(1, "000001"), (42, "000042"), (123456, "123456"), (1234567, "1234567")])
def test_format_receipt_number(number, expected):
    assert format_receipt_number(number) == expected
