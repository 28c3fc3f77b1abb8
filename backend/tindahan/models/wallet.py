from __future__ import annotations

from ..extensions import db
from tindahan.time_utils import to_utc_z


class WalletEntry(db.Model):
    """
    Daily cash-on-hand session.

    The primary key is the business date ("YYYY-MM-DD"), so a date can only
    ever have one entry.

    LIFECYCLE:
    - open: day started with a counted starting cash
    - closed: terminal; ending cash counted

    At most one entry is open at any time.
    """
    __tablename__ = "wallet_entries"
    __table_args__ = (
        db.Index("ix_wallet_entries_status_created", "status", "created_at"),
    )

    id = db.Column(db.String(10), primary_key=True)
    date = db.Column(db.String(10), nullable=False, unique=True)

    starting_cash_cents = db.Column(db.Integer, nullable=False, default=0)
    ending_cash_cents = db.Column(db.Integer, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="open", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "starting_cash_cents": self.starting_cash_cents,
            "ending_cash_cents": self.ending_cash_cents,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
            "version_id": self.version_id,
        }
