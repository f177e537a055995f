from __future__ import annotations

from ..extensions import db
from consigntrack.time_utils import to_utc_z, utcnow


ACTION_SALE = "SALE"
ACTION_PAYMENT = "PAYMENT"


class ActivityLogEntry(db.Model):
    """
    Audit trail of undoable actions.

    One row per SalesRecord or Payment created; action_id points at it.
    items is a snapshot of the sale lines at the time of the sale.
    Undo picks the newest non-voided row per tenant, ordered by
    (created_at, id) descending.
    """
    __tablename__ = "activity_log"
    __table_args__ = (
        db.Index("ix_activity_log_tenant_voided_created", "tenant_id", "voided", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(128), nullable=False)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)

    action_id = db.Column(db.String(36), nullable=False, index=True)
    action_type = db.Column(db.String(16), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    items = db.Column(db.JSON, nullable=False, default=list)

    voided = db.Column(db.Boolean, nullable=False, default=False)
    voided_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "store_id": self.store_id,
            "action_id": self.action_id,
            "action_type": self.action_type,
            "amount_cents": self.amount_cents,
            "items": list(self.items or []),
            "voided": self.voided,
            "voided_at": to_utc_z(self.voided_at) if self.voided_at else None,
            "created_at": to_utc_z(self.created_at),
        }
