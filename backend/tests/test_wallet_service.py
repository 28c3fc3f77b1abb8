# Overview: Pytest coverage for the daily wallet session (start/close day).

import pytest

from tindahan.errors import AlreadyClosedError, AlreadyOpenError, DayClosedError, NotFoundError
from tindahan.services import wallet_service


class TestStartDay:
    def test_start_keys_entry_by_date(self, db_session):
        entry = wallet_service.start_day(50000, date="2026-10-18")

        assert entry.id == "2026-10-18"
        assert entry.date == "2026-10-18"
        assert entry.status == "open"
        assert entry.starting_cash_cents == 50000
        assert entry.ending_cash_cents is None
        assert wallet_service.get_open_day().id == "2026-10-18"

    def test_defaults_to_store_business_date(self, db_session):
        entry = wallet_service.start_day(0)
        assert entry.id == wallet_service.today()

    def test_only_one_day_open_at_a_time(self, db_session):
        wallet_service.start_day(50000, date="2026-10-18")
        with pytest.raises(AlreadyOpenError):
            wallet_service.start_day(40000, date="2026-10-19")

    def test_closed_date_cannot_be_reopened(self, db_session):
        entry = wallet_service.start_day(50000, date="2026-10-18")
        wallet_service.close_day(entry.id, 65000)

        with pytest.raises(DayClosedError):
            wallet_service.start_day(50000, date="2026-10-18")

    @pytest.mark.parametrize("bad", ["18/10/2026", "not-a-date"])
    def test_invalid_date(self, db_session, bad):
        with pytest.raises(ValueError):
            wallet_service.start_day(100, date=bad)

    def test_negative_starting_cash(self, db_session):
        with pytest.raises(ValueError):
            wallet_service.start_day(-1)


class TestCloseDay:
    def test_close_records_ending_cash(self, db_session):
        entry = wallet_service.start_day(50000, date="2026-10-18")

        closed = wallet_service.close_day(entry.id, 72550)

        assert closed.status == "closed"
        assert closed.ending_cash_cents == 72550
        assert closed.closed_at is not None
        assert wallet_service.get_open_day() is None
        assert wallet_service.is_day_closed("2026-10-18") is True

    def test_close_twice_rejected(self, db_session):
        entry = wallet_service.start_day(50000, date="2026-10-18")
        wallet_service.close_day(entry.id, 60000)

        with pytest.raises(AlreadyClosedError):
            wallet_service.close_day(entry.id, 61000)

    def test_close_unknown_entry(self, db_session):
        with pytest.raises(NotFoundError):
            wallet_service.close_day("2020-01-01", 100)

    def test_next_day_can_open_after_close(self, db_session):
        first = wallet_service.start_day(50000, date="2026-10-18")
        wallet_service.close_day(first.id, 60000)

        second = wallet_service.start_day(60000, date="2026-10-19")

        assert second.status == "open"
        history = wallet_service.list_wallet_history()
        assert [e.id for e in history] == ["2026-10-19", "2026-10-18"]
