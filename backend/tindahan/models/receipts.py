from __future__ import annotations

import json

from ..extensions import db
from tindahan.time_utils import to_utc_z


class ExpenseReceipt(db.Model):
    """
    Purchase receipt recorded from a scan or by hand.

    items_json holds a JSON array of {name, price_cents} as read off the
    receipt; the rows are informational and never touch inventory.
    """
    __tablename__ = "expense_receipts"
    __table_args__ = (
        db.Index("ix_expense_receipts_date", "transaction_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    merchant_name = db.Column(db.String(255), nullable=False)
    transaction_date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    category = db.Column(db.String(64), nullable=False)
    other_category_description = db.Column(db.String(255), nullable=True)
    total_cents = db.Column(db.Integer, nullable=False)
    payment_source = db.Column(db.String(32), nullable=False)  # Cash on Hand, G-Cash
    items_json = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "merchant_name": self.merchant_name,
            "transaction_date": self.transaction_date,
            "category": self.category,
            "other_category_description": self.other_category_description,
            "total_cents": self.total_cents,
            "payment_source": self.payment_source,
            "items": json.loads(self.items_json) if self.items_json else [],
            "created_at": to_utc_z(self.created_at),
        }
