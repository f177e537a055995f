from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from consigntrack.time_utils import to_utc_z, utcnow


INVENTORY_LOG_DELIVERY = "DELIVERY"
INVENTORY_LOG_COUNT = "COUNT"


class Product(db.Model):
    """
    Catalog entry, independent of any store.

    Price resolution: StorePricing override for (store, product) if present,
    else default_price_cents.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_tenant_name", "tenant_id", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    default_price_cents = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} tenant_id={self.tenant_id!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "default_price_cents": self.default_price_cents,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
        }


class StorePricing(db.Model):
    """Per-(store, product) price override. id is "{store_id}_{product_id}"."""
    __tablename__ = "store_pricing"
    __table_args__ = (
        db.UniqueConstraint("store_id", "product_id", name="uq_store_pricing_store_product"),
    )

    id = db.Column(db.String(80), primary_key=True)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False)

    price_cents = db.Column(db.Integer, nullable=False)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "store_id": self.store_id,
            "product_id": self.product_id,
            "price_cents": self.price_cents,
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryLog(db.Model):
    """Append-only DELIVERY or COUNT event. Never updated after insert."""
    __tablename__ = "inventory_logs"
    __table_args__ = (
        db.Index("ix_inventory_logs_store_occurred", "store_id", "occurred_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)
    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False, index=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    lines = db.relationship(
        "InventoryLogLine",
        backref="log",
        lazy=True,
        order_by="InventoryLogLine.position",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "store_id": self.store_id,
            "type": self.type,
            "occurred_at": to_utc_z(self.occurred_at),
            "items": [line.to_dict() for line in self.lines],
        }


class InventoryLogLine(db.Model):
    __tablename__ = "inventory_log_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)
    log_id = db.Column(db.String(36), db.ForeignKey("inventory_logs.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(db.String(36), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {"product_id": self.product_id, "quantity": self.quantity}
