"""
Wallet Session Tracker

WHY: Daily cash accountability. The owner counts the cash on hand when the
store opens and again when it closes.

DESIGN PRINCIPLES:
- One entry per business date; the date is the primary key
- At most one open entry at any time (the "current day")
- Every check-then-write runs inside one atomic unit with the precondition
  read first
- Closed entries are immutable
"""

from __future__ import annotations

from flask import current_app

from ..errors import AlreadyClosedError, AlreadyOpenError, DayClosedError, NotFoundError
from ..extensions import db
from ..models import WalletEntry
from tindahan.time_utils import business_date, normalize_business_date, utcnow
from .concurrency import atomic, lock_for_update


def today() -> str:
    return business_date(current_app.config.get("STORE_TIMEZONE", "UTC"))


def is_day_closed(date=None) -> bool:
    """True when the wallet entry for `date` (default: today) is closed."""
    date_key = normalize_business_date(date) if date is not None else today()
    entry = db.session.query(WalletEntry).filter_by(id=date_key, status="closed").first()
    return entry is not None


def ensure_day_not_closed(date=None) -> None:
    if is_day_closed(date):
        raise DayClosedError("Cannot record a sale. The daily session is already closed.")


def get_open_day() -> WalletEntry | None:
    return (
        db.session.query(WalletEntry)
        .filter_by(status="open")
        .order_by(WalletEntry.created_at.desc())
        .first()
    )


def start_day(starting_cash_cents: int, date=None) -> WalletEntry:
    """
    Open the wallet for a business date.

    Raises AlreadyOpenError if any entry is still open and DayClosedError if
    this date was already opened and closed.
    """
    if starting_cash_cents is None or starting_cash_cents < 0:
        raise ValueError("starting_cash_cents must be >= 0")
    date_key = normalize_business_date(date) if date is not None else today()

    def _op():
        open_entry = lock_for_update(
            db.session.query(WalletEntry).filter_by(status="open")
        ).first()
        if open_entry is not None:
            raise AlreadyOpenError(
                f"A day is already open ({open_entry.date}). Close it before starting a new one.",
                details={"open_entry_id": open_entry.id},
            )

        existing = lock_for_update(db.session.query(WalletEntry).filter_by(id=date_key)).first()
        if existing is not None:
            raise DayClosedError(
                f"The day {date_key} has already been closed.",
                details={"entry_id": existing.id},
            )

        entry = WalletEntry(
            id=date_key,
            date=date_key,
            starting_cash_cents=starting_cash_cents,
            ending_cash_cents=None,
            status="open",
            created_at=utcnow(),
        )
        db.session.add(entry)
        db.session.flush()
        return entry

    return atomic(_op)


def close_day(entry_id: str, ending_cash_cents: int) -> WalletEntry:
    """
    Close an open wallet entry with the counted ending cash.

    Raises NotFoundError for an unknown entry and AlreadyClosedError if it
    is already closed.
    """
    if ending_cash_cents is None or ending_cash_cents < 0:
        raise ValueError("ending_cash_cents must be >= 0")

    def _op():
        entry = lock_for_update(db.session.query(WalletEntry).filter_by(id=entry_id)).first()
        if entry is None:
            raise NotFoundError("Wallet entry not found.", details={"entry_id": entry_id})
        if entry.status != "open":
            raise AlreadyClosedError(
                f"The day {entry.date} is already closed.",
                details={"entry_id": entry.id},
            )

        entry.ending_cash_cents = ending_cash_cents
        entry.status = "closed"
        entry.closed_at = utcnow()
        return entry

    return atomic(_op)


def list_wallet_history(limit: int | None = None) -> list[WalletEntry]:
    q = db.session.query(WalletEntry).order_by(WalletEntry.created_at.desc(), WalletEntry.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()
