from __future__ import annotations

from ..extensions import db
from tindahan.time_utils import to_utc_z


class Customer(db.Model):
    """
    Credit ("utang") customer.

    LIFECYCLE:
    - active
    - deleted: terminal soft delete, only allowed at zero balance
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_status_name", "status", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    status = db.Column(db.String(16), nullable=False, default="active", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "deleted_at": to_utc_z(self.deleted_at) if self.deleted_at else None,
            "version_id": self.version_id,
        }


class LedgerTransaction(db.Model):
    """
    One signed movement against a customer's balance.

    TRANSACTION TYPES:
    - credit: goods or cash given on account; paid_amount_cents tracks how
      much of it payments have covered (0 <= paid <= amount)
    - payment: money received; its allocations say which credits it covered,
      any unallocated remainder is an advance on the account

    LIFECYCLE: active -> deleted (terminal, soft delete).
    """
    __tablename__ = "ledger_transactions"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_ledger_transactions_amount_positive"),
        db.CheckConstraint(
            "paid_amount_cents >= 0 AND paid_amount_cents <= amount_cents",
            name="ck_ledger_transactions_paid_within_amount",
        ),
        db.Index("ix_ledger_txns_customer_type_status_created", "customer_id", "type", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False, index=True)  # credit, payment
    amount_cents = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(512), nullable=True)

    # Credit only; always 0 on payments
    paid_amount_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="active", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    customer = db.relationship("Customer", backref=db.backref("ledger_transactions", lazy=True))
    lines = db.relationship(
        "CreditLine",
        backref="credit",
        lazy=True,
        order_by="CreditLine.line_number",
        cascade="all, delete-orphan",
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def outstanding_cents(self) -> int:
        if self.type != "credit":
            return 0
        return self.amount_cents - self.paid_amount_cents

    @property
    def applied_cents(self) -> int:
        return sum(a.amount_cents for a in self.allocations)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "type": self.type,
            "amount_cents": self.amount_cents,
            "description": self.description,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "deleted_at": to_utc_z(self.deleted_at) if self.deleted_at else None,
            "version_id": self.version_id,
        }
        if self.type == "credit":
            data["paid_amount_cents"] = self.paid_amount_cents
            data["outstanding_cents"] = self.outstanding_cents
            data["items"] = [line.to_dict() for line in self.lines]
        else:
            data["paid_credit_ids"] = [a.credit_id for a in self.allocations]
            data["applied_cents"] = self.applied_cents
        return data


class CreditLine(db.Model):
    """Line item carried by a credit (same shape as a sale line)."""
    __tablename__ = "credit_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    ledger_transaction_id = db.Column(
        db.Integer, db.ForeignKey("ledger_transactions.id"), nullable=False, index=True
    )
    line_number = db.Column(db.Integer, nullable=False)

    item_id = db.Column(db.String(64), nullable=True, index=True)
    item_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "total_cents": self.line_total_cents,
        }


class PaymentAllocation(db.Model):
    """
    Portion of a payment applied to one credit.

    Sum over a credit's allocations from active payments equals the
    credit's paid_amount_cents.
    """
    __tablename__ = "payment_allocations"
    __table_args__ = (
        db.UniqueConstraint("payment_id", "credit_id", name="uq_payment_allocations_payment_credit"),
        db.CheckConstraint("amount_cents > 0", name="ck_payment_allocations_amount_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    payment_id = db.Column(db.Integer, db.ForeignKey("ledger_transactions.id"), nullable=False, index=True)
    credit_id = db.Column(db.Integer, db.ForeignKey("ledger_transactions.id"), nullable=False, index=True)
    amount_cents = db.Column(db.Integer, nullable=False)

    payment = db.relationship(
        "LedgerTransaction",
        foreign_keys=[payment_id],
        backref=db.backref("allocations", lazy=True, order_by="PaymentAllocation.id"),
    )
    credit = db.relationship("LedgerTransaction", foreign_keys=[credit_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payment_id": self.payment_id,
            "credit_id": self.credit_id,
            "amount_cents": self.amount_cents,
        }
