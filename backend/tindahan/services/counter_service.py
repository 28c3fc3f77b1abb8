# Overview: Service-layer operations for counters; hands out strictly increasing receipt numbers.

"""
Counter Allocator

A counter is read and written inside the caller's atomic unit, never in a
transaction of its own:

    counter, number = next_receipt_number("saleReceipt")
    ... other reads, validation, writes ...
    store_counter(counter, "saleReceipt", number)

Concurrent callers are serialized by the unit's write lock (SQLite) or the
row lock plus version_id check (other databases); the loser re-runs its whole
read-modify-write, so no two callers observe the same number. If the unit
aborts, the counter is not advanced.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Counter
from .concurrency import lock_for_update

RECEIPT_NUMBER_WIDTH = 6


def next_receipt_number(counter_name: str) -> tuple[Counter | None, int]:
    """
    Read the counter and return (counter row or None, next number).

    An absent counter is treated as current value 0.
    """
    if not counter_name:
        raise ValueError("counter_name is required")

    counter = lock_for_update(db.session.query(Counter).filter_by(id=counter_name)).first()
    current = counter.current_number if counter else 0
    return counter, (current or 0) + 1


def store_counter(counter: Counter | None, counter_name: str, number: int) -> Counter:
    """Write the allocated number back as part of the same unit."""
    if counter is None:
        counter = Counter(id=counter_name, current_number=number)
        db.session.add(counter)
    else:
        if number <= counter.current_number:
            raise ValueError("counter values must increase")
        counter.current_number = number
    return counter


def format_receipt_number(number: int) -> str:
    return str(number).zfill(RECEIPT_NUMBER_WIDTH)


def get_current_number(counter_name: str) -> int:
    counter = db.session.get(Counter, counter_name)
    return counter.current_number if counter else 0
