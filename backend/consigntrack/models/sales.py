from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from consigntrack.time_utils import to_utc_z, utcnow


class SalesRecord(db.Model):
    """
    Sale inferred from a stock count.

    Immutable except for the void flip (voided, voided_at), which only the
    void service performs, exactly once.
    """
    __tablename__ = "sales_records"
    __table_args__ = (
        db.Index("ix_sales_records_store_occurred", "store_id", "occurred_at"),
        db.Index("ix_sales_records_tenant_occurred", "tenant_id", "occurred_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    total_amount_cents = db.Column(db.Integer, nullable=False)

    voided = db.Column(db.Boolean, nullable=False, default=False, index=True)
    voided_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    lines = db.relationship(
        "SalesRecordLine",
        backref="sales_record",
        lazy=True,
        order_by="SalesRecordLine.position",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "store_id": self.store_id,
            "occurred_at": to_utc_z(self.occurred_at),
            "items": [line.to_dict() for line in self.lines],
            "total_amount_cents": self.total_amount_cents,
            "voided": self.voided,
            "voided_at": to_utc_z(self.voided_at) if self.voided_at else None,
        }


class SalesRecordLine(db.Model):
    __tablename__ = "sales_record_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)
    sales_record_id = db.Column(db.String(36), db.ForeignKey("sales_records.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(db.String(36), nullable=False)
    quantity_sold = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity_sold": self.quantity_sold,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


class Payment(db.Model):
    """Cash received from a store. Immutable except for the void flip."""
    __tablename__ = "payments"
    __table_args__ = (
        db.Index("ix_payments_store_occurred", "store_id", "occurred_at"),
        db.Index("ix_payments_tenant_occurred", "tenant_id", "occurred_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)

    amount_cents = db.Column(db.Integer, nullable=False)
    note = db.Column(db.String(255), nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    voided = db.Column(db.Boolean, nullable=False, default=False, index=True)
    voided_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "store_id": self.store_id,
            "amount_cents": self.amount_cents,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
            "voided": self.voided,
            "voided_at": to_utc_z(self.voided_at) if self.voided_at else None,
        }
