from __future__ import annotations

from ..extensions import db
from tindahan.time_utils import to_utc_z


class Counter(db.Model):
    """
    Named monotonically increasing sequence (e.g. "saleReceipt").

    current_number is the last number handed out. It never decreases, even
    when the documents that consumed numbers are later voided or deleted.
    """
    __tablename__ = "counters"

    id = db.Column(db.String(64), primary_key=True)
    current_number = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "current_number": self.current_number,
            "updated_at": to_utc_z(self.updated_at),
        }
