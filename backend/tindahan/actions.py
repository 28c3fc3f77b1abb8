# Overview: Public operation boundary; every call returns {"success": ..., "message"?: ..., <id/value>} and never raises.

"""
Action layer

Each action wraps one service operation. Failures never propagate past this
boundary:
- LedgerError (business rule) -> {"success": False, "message": "<prefix>: <reason>", ...}
- ValueError / ValidationError (bad input) -> same shape
- anything else -> logged with the traceback, generic message

The message is meant to be shown to the user as-is. "error" carries the
exception class name for HTTP status mapping in the routes.
"""

from __future__ import annotations

from functools import wraps

from flask import current_app

from .errors import LedgerError
from .extensions import db
from .services import credit_service, inventory_service, receipt_service, sales_service, wallet_service

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


def _failure(message: str, error: str, details: dict | None = None) -> dict:
    result = {"success": False, "message": message, "error": error}
    if details:
        result["details"] = details
    return result


def action(failure_prefix: str):
    """Convert any exception raised by the wrapped operation into a failure result."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                result = f(*args, **kwargs)
            except LedgerError as e:
                return _failure(f"{failure_prefix}: {e}", type(e).__name__, e.details)
            except ValueError as e:
                return _failure(f"{failure_prefix}: {e}", type(e).__name__)
            except Exception:
                db.session.rollback()
                current_app.logger.exception("Unexpected failure in %s", f.__name__)
                return _failure(f"{failure_prefix}: {UNKNOWN_ERROR_MESSAGE}", "InternalError")
            return {"success": True, **(result or {})}
        return wrapper
    return decorator


# =============================================================================
# Inventory
# =============================================================================

@action("Could not add item")
def add_inventory_item(patch: dict) -> dict:
    item = inventory_service.add_item(patch=patch)
    return {"item": item.to_dict()}


@action("Could not update item")
def update_inventory_item(item_id: str, patch: dict) -> dict:
    item = inventory_service.update_item(item_id=item_id, patch=patch)
    return {"item": item.to_dict()}


@action("Could not delete item")
def delete_inventory_item(item_id: str) -> dict:
    inventory_service.delete_item(item_id=item_id)
    return {}


@action("Stock reservation failed")
def reserve_stock(decrements: dict[str, int]) -> dict:
    return {"stock": inventory_service.reserve_stock(decrements)}


@action("Stock release failed")
def release_stock(increments: dict[str, int]) -> dict:
    return {"restored_item_ids": inventory_service.release_stock(increments)}


# =============================================================================
# Sales
# =============================================================================

@action("Transaction failed")
def submit_sale_transaction(
    items: list[dict],
    customer_name: str | None = None,
    total_cents: int | None = None,
) -> dict:
    sale = sales_service.commit_sale(items, customer_name, total_cents=total_cents)
    return {"transaction_id": sale.id, "receipt_number": sale.receipt_number}


@action("Transaction failed")
def void_sale_transaction(transaction_id: str) -> dict:
    sale = sales_service.void_sale_transaction(transaction_id)
    return {"transaction_id": sale.id}


@action("Transaction failed")
def submit_ewallet_transaction(kind: str, amount_cents: int) -> dict:
    sale = sales_service.submit_ewallet_transaction(kind, amount_cents)
    return {"transaction_id": sale.id, "receipt_number": sale.receipt_number}


# =============================================================================
# Customers and credit ledger
# =============================================================================

@action("Could not add customer")
def add_customer(name: str, initial_amount_cents: int = 0, description: str | None = None) -> dict:
    customer = credit_service.add_customer(name, initial_amount_cents, description)
    return {"customer_id": customer.id}


@action("Could not update customer")
def update_customer_name(customer_id: int, name: str) -> dict:
    customer = credit_service.rename_customer(customer_id, name)
    return {"customer_id": customer.id}


@action("Could not delete customer")
def delete_customer(customer_id: int) -> dict:
    credit_service.delete_customer(customer_id)
    return {}


@action("Transaction failed")
def add_ledger_transaction(
    customer_id: int,
    transaction_type: str,
    *,
    amount_cents: int | None = None,
    items: list[dict] | None = None,
    description: str | None = None,
    paid_credit_ids: list[int] | None = None,
) -> dict:
    """Record a credit (from items) or a payment (from an amount)."""
    if transaction_type == "credit":
        txn = credit_service.commit_credit(customer_id, items or [], description)
    elif transaction_type == "payment":
        txn = credit_service.commit_payment(customer_id, amount_cents, paid_credit_ids, description)
    else:
        raise ValueError("type must be 'credit' or 'payment'")
    return {"transaction_id": txn.id}


@action("Could not delete transaction")
def delete_ledger_transaction(transaction_id: int) -> dict:
    credit_service.delete_ledger_transaction(transaction_id)
    return {}


# =============================================================================
# Wallet
# =============================================================================

@action("Could not start day")
def start_day(starting_cash_cents: int, date=None) -> dict:
    entry = wallet_service.start_day(starting_cash_cents, date)
    return {"entry_id": entry.id}


@action("Could not close day")
def close_day(entry_id: str, ending_cash_cents: int) -> dict:
    entry = wallet_service.close_day(entry_id, ending_cash_cents)
    return {"entry_id": entry.id}


# =============================================================================
# Expense receipts
# =============================================================================

@action("Could not save receipt")
def save_receipt(data: dict) -> dict:
    receipt = receipt_service.save_receipt(data)
    return {"receipt_id": receipt.id}
