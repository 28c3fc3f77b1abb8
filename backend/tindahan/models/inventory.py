from __future__ import annotations

from ..extensions import db
from tindahan.time_utils import to_utc_z


class InventoryItem(db.Model):
    """
    Inventory item master data with its current stock count.

    Stock is a mutable counter owned by the inventory ledger. Sales and
    credits change it only through reserve/release deltas inside the same
    DB transaction as the document they belong to; management screens may
    edit it directly.

    ID FORMAT: "{yyyyMMdd_HHmmss}-I-{6 hex}" (string key, generated on create).
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_inventory_items_stock_non_negative"),
        db.Index("ix_inventory_items_name", "name"),
    )

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    cost_cents = db.Column(db.Integer, nullable=False, default=0)

    stock = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "stock": self.stock,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
