from __future__ import annotations

from ..extensions import db
from tindahan.time_utils import to_utc_z


class SaleTransaction(db.Model):
    """
    Point-of-sale transaction document.

    LIFECYCLE:
    - active: committed together with its stock decrements and receipt number
    - voided: terminal; stock was restored exactly once

    receipt_number is the zero-padded value of the receipt counter at commit
    time. It is unique across all sales, voided ones included.
    """
    __tablename__ = "sale_transactions"
    __table_args__ = (
        db.UniqueConstraint("receipt_number", name="uq_sale_transactions_receipt_number"),
        db.Index("ix_sale_transactions_status_created", "status", "created_at"),
    )

    # "{yyyyMMdd_HHmmss}-S-{receipt_number}"
    id = db.Column(db.String(64), primary_key=True)
    receipt_number = db.Column(db.String(32), nullable=False)

    customer_name = db.Column(db.String(255), nullable=True)

    # e.g. "gcash", "gcash-e-load"; NULL for regular store sales
    service_type = db.Column(db.String(32), nullable=True, index=True)

    total_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="active", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    voided_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    lines = db.relationship(
        "SaleLine",
        backref="sale",
        lazy=True,
        order_by="SaleLine.line_number",
        cascade="all, delete-orphan",
    )
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "receipt_number": self.receipt_number,
            "customer_name": self.customer_name,
            "service_type": self.service_type,
            "total_cents": self.total_cents,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "voided_at": to_utc_z(self.voided_at) if self.voided_at else None,
            "version_id": self.version_id,
        }
        if include_items:
            data["items"] = [line.to_dict() for line in self.lines]
        return data


class SaleLine(db.Model):
    """
    Line item on a sale.

    item_id is a plain reference (no FK): items may be deleted
    administratively after the sale and the line must survive.
    NULL item_id marks an untracked service line.
    """
    __tablename__ = "sale_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.String(64), db.ForeignKey("sale_transactions.id"), nullable=False, index=True)
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
