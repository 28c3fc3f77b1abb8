"""
Sale Transaction Coordinator

WHY: A sale is one atomic unit: stock decrements, implicitly created
inventory items, the receipt number and the sale document commit together
or not at all.

LIFECYCLE: active (on commit) -> voided (terminal, stock restored once).
"""

from __future__ import annotations

from flask import current_app

from ..errors import AlreadyVoidedError, NotFoundError
from ..extensions import db
from ..models import SaleTransaction, SaleLine
from tindahan.time_utils import id_timestamp, utcnow
from .concurrency import atomic, lock_for_update
from .counter_service import format_receipt_number, next_receipt_number, store_counter
from .inventory_service import create_items_and_reserve_locked, release_stock_locked
from .line_items import resolve_line_items
from .wallet_service import ensure_day_not_closed

EWALLET_KINDS = ("cash-in", "cash-out", "e-load")
EWALLET_MIN_FEE_CENTS = 1000
EWALLET_FEE_BPS = 100  # 1%
ELOAD_FEE_CENTS = 200


def _receipt_counter_name() -> str:
    return current_app.config.get("RECEIPT_COUNTER_NAME", "saleReceipt")


def commit_sale(
    items: list[dict],
    customer_name: str | None = None,
    *,
    total_cents: int | None = None,
    service_type: str | None = None,
    create_missing: bool = True,
) -> SaleTransaction:
    """
    Commit a sale atomically and return the new active SaleTransaction.

    Lines without item_id create new inventory items (unless
    create_missing=False, for untracked service lines). Quantities for the
    same existing item are summed before the stock check. total_cents
    defaults to the sum of line totals.
    """
    if not items:
        raise ValueError("No items in the report.")

    counter_name = _receipt_counter_name()

    def _op():
        ensure_day_not_closed()

        resolved = resolve_line_items(items, create_missing=create_missing)
        counter, number = next_receipt_number(counter_name)

        create_items_and_reserve_locked(resolved.new_items, resolved.aggregated_decrements)

        now = utcnow()
        receipt_number = format_receipt_number(number)
        sale = SaleTransaction(
            id=f"{id_timestamp(now)}-S-{receipt_number}",
            receipt_number=receipt_number,
            customer_name=customer_name or None,
            service_type=service_type,
            total_cents=resolved.total_cents if total_cents is None else total_cents,
            status="active",
            created_at=now,
        )
        for i, line in enumerate(resolved.resolved_items, start=1):
            sale.lines.append(SaleLine(
                line_number=i,
                item_id=line["item_id"],
                item_name=line["item_name"],
                quantity=line["quantity"],
                unit_price_cents=line["unit_price_cents"],
                line_total_cents=line["total_cents"],
            ))
        db.session.add(sale)

        store_counter(counter, counter_name, number)
        db.session.flush()
        return sale

    return atomic(_op)


def void_sale_transaction(sale_id: str) -> SaleTransaction:
    """
    Void an active sale and restore its stock.

    A second void is rejected with AlreadyVoidedError and moves no stock.
    """
    if not sale_id:
        raise ValueError("Transaction ID is missing.")

    def _op():
        sale = lock_for_update(db.session.query(SaleTransaction).filter_by(id=sale_id)).first()
        if sale is None:
            raise NotFoundError("Transaction not found.", details={"sale_id": sale_id})
        if sale.status == "voided":
            raise AlreadyVoidedError("This transaction has already been voided.", details={"sale_id": sale_id})

        increments: dict[str, int] = {}
        for line in sale.lines:
            if line.item_id:
                increments[line.item_id] = increments.get(line.item_id, 0) + line.quantity

        if increments:
            release_stock_locked(increments)

        sale.status = "voided"
        sale.voided_at = utcnow()
        return sale

    return atomic(_op)


def get_sale(sale_id: str) -> SaleTransaction:
    sale = db.session.get(SaleTransaction, sale_id)
    if sale is None:
        raise NotFoundError("Transaction not found.", details={"sale_id": sale_id})
    return sale


def list_sales(status: str | None = None, limit: int | None = None) -> list[SaleTransaction]:
    q = db.session.query(SaleTransaction)
    if status:
        q = q.filter(SaleTransaction.status == status)
    q = q.order_by(SaleTransaction.created_at.desc(), SaleTransaction.receipt_number.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


# =============================================================================
# E-wallet (GCash) service sales
# =============================================================================

def ewallet_fee_cents(amount_cents: int) -> int:
    """1% of the amount, half-up, with a 10.00 minimum."""
    percent_fee = (amount_cents * EWALLET_FEE_BPS + 5000) // 10000
    return max(EWALLET_MIN_FEE_CENTS, percent_fee)


def build_ewallet_sale(kind: str, amount_cents: int) -> dict:
    """
    Lines, label and total for an e-wallet service sale.

    Totals follow what reaches the drawer:
    - cash-in: only the fee is revenue
    - cash-out: amount plus fee leave the drawer
    - e-load: only the fixed fee is revenue
    """
    if kind not in EWALLET_KINDS:
        raise ValueError(f"kind must be one of: {', '.join(EWALLET_KINDS)}")
    if amount_cents <= 0:
        raise ValueError("amount_cents must be > 0")

    amount_label = f"{amount_cents / 100:,.2f}"

    if kind == "e-load":
        fee = ELOAD_FEE_CENTS
        return {
            "items": [
                {"item_name": f"E-Load ({amount_label})", "quantity": 1,
                 "unit_price_cents": amount_cents, "total_cents": amount_cents},
                {"item_name": "E-Load Fee", "quantity": 1,
                 "unit_price_cents": fee, "total_cents": fee},
            ],
            "customer_name": "E-Load",
            "total_cents": fee,
            "service_type": "gcash-e-load",
        }

    fee = ewallet_fee_cents(amount_cents)
    if kind == "cash-in":
        title, label, total = "Gcash Cash-In", f"G-Cash In ({amount_label})", fee
    else:
        title, label, total = "Gcash Cash-Out", f"G-Cash Out ({amount_label})", amount_cents + fee

    return {
        "items": [
            {"item_name": title, "quantity": 1,
             "unit_price_cents": amount_cents, "total_cents": amount_cents},
            {"item_name": f"{title} Fee", "quantity": 1,
             "unit_price_cents": fee, "total_cents": fee},
        ],
        "customer_name": label,
        "total_cents": total,
        "service_type": "gcash",
    }


def submit_ewallet_transaction(kind: str, amount_cents: int) -> SaleTransaction:
    """Record a GCash cash-in, cash-out or e-load as an untracked service sale."""
    sale = build_ewallet_sale(kind, amount_cents)
    return commit_sale(
        sale["items"],
        sale["customer_name"],
        total_cents=sale["total_cents"],
        service_type=sale["service_type"],
        create_missing=False,
    )
