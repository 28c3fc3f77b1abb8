# Overview: Domain error taxonomy shared by the ledger, inventory and wallet services.

from __future__ import annotations


class LedgerError(Exception):
    """Base class for business-rule failures raised inside an atomic operation."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class NotFoundError(LedgerError):
    """Referenced document is absent."""


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str):
        super().__init__(
            f"Inventory item with ID {item_id} not found.",
            details={"item_id": item_id},
        )
        self.item_id = item_id


class AlreadyVoidedError(LedgerError):
    pass


class AlreadyDeletedError(LedgerError):
    pass


class AlreadyOpenError(LedgerError):
    pass


class AlreadyClosedError(LedgerError):
    pass


class DayClosedError(LedgerError):
    pass


class InsufficientStockError(LedgerError):
    def __init__(self, item_id: str, available: int, requested: int, name: str | None = None):
        label = name or item_id
        super().__init__(
            f'Insufficient stock for "{label}". Available: {available}, Requested: {requested}.',
            details={"item_id": item_id, "available": available, "requested": requested},
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested


class OutstandingBalanceError(LedgerError):
    def __init__(self, balance_cents: int):
        super().__init__(
            f"Cannot delete customer with an outstanding balance of {balance_cents / 100:,.2f}.",
            details={"balance_cents": balance_cents},
        )
        self.balance_cents = balance_cents


class TransactionAbortedError(LedgerError):
    """Store transaction retries exhausted, or an unexpected failure inside the unit."""
