"""
Customer Credit Ledger and Credit Transaction Coordinator

WHY: Regular customers take goods on account ("credit") and settle later
("payment"). Credits can carry inventory lines, so committing or deleting
one moves stock in the same atomic unit.

BALANCE (single source of truth):
    balance = sum(active credit amount - paid_amount)
            - sum(active payment amount - allocated amount)

Every allocation adds the same amount to a credit's paid_amount and to its
payment's allocated total, so this always equals
    sum(active credit amount) - sum(active payment amount)
A negative balance is an advance paid by the customer.

KNOWN NON-GOALS (financial history semantics, kept on purpose):
- Deleting a credit does not unwind payments already allocated to it.
- Deleting a customer soft-deletes their ledger but restores no inventory.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func

from ..errors import AlreadyDeletedError, NotFoundError, OutstandingBalanceError
from ..extensions import db
from ..models import Customer, LedgerTransaction, CreditLine, PaymentAllocation
from tindahan.time_utils import utcnow
from .concurrency import atomic, lock_for_update
from .inventory_service import create_items_and_reserve_locked, release_stock_locked
from .line_items import resolve_line_items


@dataclass(frozen=True)
class Allocation:
    credit_id: int
    amount_cents: int


# =============================================================================
# Reads
# =============================================================================

def _get_customer_locked(customer_id: int) -> Customer:
    customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
    if customer is None:
        raise NotFoundError("Customer not found.", details={"customer_id": customer_id})
    return customer


def _require_active_customer(customer_id: int) -> Customer:
    customer = _get_customer_locked(customer_id)
    if customer.status == "deleted":
        raise AlreadyDeletedError("Customer has been deleted.", details={"customer_id": customer_id})
    return customer


def _active_credits_oldest_first(customer_id: int) -> list[LedgerTransaction]:
    return lock_for_update(
        db.session.query(LedgerTransaction)
        .filter_by(customer_id=customer_id, type="credit", status="active")
        .order_by(LedgerTransaction.created_at.asc(), LedgerTransaction.id.asc())
    ).all()


def get_customer_balance(customer_id: int) -> int:
    """Outstanding balance in cents (negative = advance)."""
    credit_outstanding = db.session.query(
        func.coalesce(func.sum(LedgerTransaction.amount_cents - LedgerTransaction.paid_amount_cents), 0)
    ).filter(
        LedgerTransaction.customer_id == customer_id,
        LedgerTransaction.type == "credit",
        LedgerTransaction.status == "active",
    ).scalar()

    payments_total = db.session.query(
        func.coalesce(func.sum(LedgerTransaction.amount_cents), 0)
    ).filter(
        LedgerTransaction.customer_id == customer_id,
        LedgerTransaction.type == "payment",
        LedgerTransaction.status == "active",
    ).scalar()

    allocated_total = db.session.query(
        func.coalesce(func.sum(PaymentAllocation.amount_cents), 0)
    ).join(
        LedgerTransaction, PaymentAllocation.payment_id == LedgerTransaction.id
    ).filter(
        LedgerTransaction.customer_id == customer_id,
        LedgerTransaction.status == "active",
    ).scalar()

    unapplied = int(payments_total or 0) - int(allocated_total or 0)
    return int(credit_outstanding or 0) - unapplied


def get_ledger_totals(customer_id: int) -> dict:
    """Entry view: total active credit and total active payments, in cents."""
    rows = db.session.query(
        LedgerTransaction.type,
        func.coalesce(func.sum(LedgerTransaction.amount_cents), 0),
    ).filter(
        LedgerTransaction.customer_id == customer_id,
        LedgerTransaction.status == "active",
    ).group_by(LedgerTransaction.type).all()

    totals = {t: int(s or 0) for t, s in rows}
    return {
        "total_credit_cents": totals.get("credit", 0),
        "total_paid_cents": totals.get("payment", 0),
    }


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found.", details={"customer_id": customer_id})
    return customer


def get_customer_summary(customer_id: int) -> dict:
    customer = get_customer(customer_id)
    outstanding = (
        db.session.query(LedgerTransaction)
        .filter_by(customer_id=customer_id, type="credit", status="active")
        .filter(LedgerTransaction.paid_amount_cents < LedgerTransaction.amount_cents)
        .order_by(LedgerTransaction.created_at.asc(), LedgerTransaction.id.asc())
        .all()
    )
    return {
        "customer": customer.to_dict(),
        "balance_cents": get_customer_balance(customer_id),
        **get_ledger_totals(customer_id),
        "outstanding_credits": [c.to_dict() for c in outstanding],
    }


def list_customers(include_deleted: bool = False) -> list[dict]:
    q = db.session.query(Customer)
    if not include_deleted:
        q = q.filter(Customer.status == "active")
    customers = q.order_by(Customer.name.asc(), Customer.id.asc()).all()
    return [
        {**c.to_dict(), "balance_cents": get_customer_balance(c.id)}
        for c in customers
    ]


def list_ledger_transactions(customer_id: int, include_deleted: bool = True) -> list[LedgerTransaction]:
    """Newest first, as the customer page shows them."""
    q = db.session.query(LedgerTransaction).filter_by(customer_id=customer_id)
    if not include_deleted:
        q = q.filter(LedgerTransaction.status == "active")
    return q.order_by(LedgerTransaction.created_at.desc(), LedgerTransaction.id.desc()).all()


# =============================================================================
# Allocation (run inside the caller's atomic unit)
# =============================================================================

def allocate_payment_fifo(customer_id: int, amount_cents: int) -> list[Allocation]:
    """
    Apply a payment to the customer's active credits, oldest first.

    Each credit receives min(payment remaining, credit outstanding) until the
    payment is used up or credits run out. Any remainder is not attributed
    to a credit; it stays on the payment as an advance.
    """
    credits = _active_credits_oldest_first(customer_id)

    allocations: list[Allocation] = []
    remaining = amount_cents
    for credit in credits:
        if remaining <= 0:
            break
        outstanding = credit.amount_cents - credit.paid_amount_cents
        if outstanding <= 0:
            continue
        applied = min(remaining, outstanding)
        allocations.append(Allocation(credit_id=credit.id, amount_cents=applied))
        remaining -= applied

    by_id = {c.id: c for c in credits}
    for allocation in allocations:
        credit = by_id[allocation.credit_id]
        credit.paid_amount_cents = credit.paid_amount_cents + allocation.amount_cents

    return allocations


def allocate_payment_to_credits(customer_id: int, credit_ids: list[int], amount_cents: int) -> list[Allocation]:
    """
    Apply a payment to explicitly chosen credits, in the order given.

    Each credit receives min(payment remaining, credit outstanding); the
    remainder, if any, is an advance. Ids that are unknown, belong to another
    customer, are deleted or are not credits raise NotFoundError.
    """
    ordered_ids: list[int] = []
    for credit_id in credit_ids:
        if credit_id not in ordered_ids:
            ordered_ids.append(credit_id)

    rows = lock_for_update(
        db.session.query(LedgerTransaction).filter(LedgerTransaction.id.in_(ordered_ids))
    ).all()
    by_id = {row.id: row for row in rows}

    for credit_id in ordered_ids:
        credit = by_id.get(credit_id)
        if (
            credit is None
            or credit.customer_id != customer_id
            or credit.type != "credit"
            or credit.status != "active"
        ):
            raise NotFoundError(
                f"Credit {credit_id} not found for this customer.",
                details={"credit_id": credit_id, "customer_id": customer_id},
            )

    allocations: list[Allocation] = []
    remaining = amount_cents
    for credit_id in ordered_ids:
        if remaining <= 0:
            break
        credit = by_id[credit_id]
        outstanding = credit.amount_cents - credit.paid_amount_cents
        if outstanding <= 0:
            continue
        applied = min(remaining, outstanding)
        allocations.append(Allocation(credit_id=credit_id, amount_cents=applied))
        remaining -= applied

    for allocation in allocations:
        credit = by_id[allocation.credit_id]
        credit.paid_amount_cents = credit.paid_amount_cents + allocation.amount_cents

    return allocations


def reverse_credit_stock_effects(credit: LedgerTransaction) -> list[str]:
    """Put a credit's inventory lines back in stock (vanished items skipped)."""
    increments: dict[str, int] = {}
    for line in credit.lines:
        if line.item_id:
            increments[line.item_id] = increments.get(line.item_id, 0) + line.quantity
    if not increments:
        return []
    return release_stock_locked(increments)


# =============================================================================
# Coordinators
# =============================================================================

DESCRIPTION_MAX_LENGTH = 512


def _clean_description(description) -> str | None:
    if description is None:
        return None
    if not isinstance(description, str):
        raise ValueError("description must be a string")
    return description[:DESCRIPTION_MAX_LENGTH]


def commit_credit(customer_id: int, items: list[dict], description: str | None = None) -> LedgerTransaction:
    """
    Record goods taken on account.

    Same line resolution and stock reservation as a sale; no receipt number
    is consumed. The credit amount is the sum of line totals.
    """
    if not items:
        raise ValueError("Please add at least one item for a credit transaction.")

    def _op():
        _require_active_customer(customer_id)

        resolved = resolve_line_items(items)
        amount = resolved.total_cents
        if amount <= 0:
            raise ValueError("Amount must not be 0.")

        create_items_and_reserve_locked(resolved.new_items, resolved.aggregated_decrements)

        credit = LedgerTransaction(
            customer_id=customer_id,
            type="credit",
            amount_cents=amount,
            description=_clean_description(
                description or ", ".join(i["item_name"] for i in resolved.resolved_items)
            ),
            paid_amount_cents=0,
            status="active",
            created_at=utcnow(),
        )
        for i, line in enumerate(resolved.resolved_items, start=1):
            credit.lines.append(CreditLine(
                line_number=i,
                item_id=line["item_id"],
                item_name=line["item_name"],
                quantity=line["quantity"],
                unit_price_cents=line["unit_price_cents"],
                line_total_cents=line["total_cents"],
            ))
        db.session.add(credit)
        db.session.flush()
        return credit

    return atomic(_op)


def commit_payment(
    customer_id: int,
    amount_cents: int,
    paid_credit_ids: list[int] | None = None,
    description: str | None = None,
) -> LedgerTransaction:
    """
    Record a payment and allocate it to credits.

    With paid_credit_ids the chosen credits are paid in that order,
    otherwise oldest credits first. The credit query, allocation and payment
    write share one atomic unit.
    """
    if amount_cents is None or amount_cents <= 0:
        raise ValueError("Amount must not be 0.")

    def _op():
        _require_active_customer(customer_id)

        if paid_credit_ids:
            allocations = allocate_payment_to_credits(customer_id, list(paid_credit_ids), amount_cents)
        else:
            allocations = allocate_payment_fifo(customer_id, amount_cents)

        payment = LedgerTransaction(
            customer_id=customer_id,
            type="payment",
            amount_cents=amount_cents,
            description=_clean_description(description),
            paid_amount_cents=0,
            status="active",
            created_at=utcnow(),
        )
        db.session.add(payment)
        db.session.flush()

        for allocation in allocations:
            db.session.add(PaymentAllocation(
                payment_id=payment.id,
                credit_id=allocation.credit_id,
                amount_cents=allocation.amount_cents,
            ))
        db.session.flush()
        return payment

    return atomic(_op)


def delete_ledger_transaction(transaction_id: int) -> LedgerTransaction:
    """
    Soft-delete one ledger transaction.

    - credit with lines: its stock is released
    - payment: its allocations are taken back off the credits it paid
    Payments already allocated to a deleted credit are left as they are.
    """
    def _op():
        txn = lock_for_update(
            db.session.query(LedgerTransaction).filter_by(id=transaction_id)
        ).first()
        if txn is None:
            raise NotFoundError("Transaction not found.", details={"transaction_id": transaction_id})
        if txn.status == "deleted":
            raise AlreadyDeletedError(
                "This transaction has already been deleted.",
                details={"transaction_id": transaction_id},
            )

        if txn.type == "credit":
            reverse_credit_stock_effects(txn)
        else:
            allocations = list(txn.allocations)
            credit_ids = [a.credit_id for a in allocations]
            credits = {}
            if credit_ids:
                credits = {
                    c.id: c for c in lock_for_update(
                        db.session.query(LedgerTransaction).filter(LedgerTransaction.id.in_(credit_ids))
                    ).all()
                }
            for allocation in allocations:
                credit = credits[allocation.credit_id]
                credit.paid_amount_cents = max(0, credit.paid_amount_cents - allocation.amount_cents)

        txn.status = "deleted"
        txn.deleted_at = utcnow()
        return txn

    return atomic(_op)


def add_customer(name: str, initial_amount_cents: int = 0, description: str | None = None) -> Customer:
    """Create a customer and, for a positive initial amount, an opening credit."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Customer name is required.")
    if initial_amount_cents is None:
        initial_amount_cents = 0
    if initial_amount_cents < 0:
        raise ValueError("initial_amount_cents must be >= 0")

    def _op():
        now = utcnow()
        customer = Customer(name=name, status="active", created_at=now)
        db.session.add(customer)
        db.session.flush()

        if initial_amount_cents > 0:
            db.session.add(LedgerTransaction(
                customer_id=customer.id,
                type="credit",
                amount_cents=initial_amount_cents,
                description=_clean_description(description) or "Initial balance",
                paid_amount_cents=0,
                status="active",
                created_at=now,
            ))
            db.session.flush()
        return customer

    return atomic(_op)


def rename_customer(customer_id: int, name: str) -> Customer:
    name = (name or "").strip()
    if not name:
        raise ValueError("Customer name is required.")

    def _op():
        customer = _require_active_customer(customer_id)
        customer.name = name
        return customer

    return atomic(_op)


def delete_customer(customer_id: int) -> Customer:
    """
    Soft-delete a customer and every ledger transaction of theirs.

    Only allowed at a zero balance. Inventory is not restored for their
    credits.
    """
    def _op():
        customer = _require_active_customer(customer_id)

        balance = get_customer_balance(customer_id)
        if balance != 0:
            raise OutstandingBalanceError(balance)

        now = utcnow()
        txns = lock_for_update(
            db.session.query(LedgerTransaction).filter_by(customer_id=customer_id, status="active")
        ).all()
        for txn in txns:
            txn.status = "deleted"
            txn.deleted_at = now

        customer.status = "deleted"
        customer.deleted_at = now
        return customer

    return atomic(_op)
