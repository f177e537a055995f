from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from consigntrack.time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    Whitelisted login identity.

    MULTI-TENANT: the user's uid IS the tenant id. Every tenant-scoped row
    carries tenant_id == users.id of its owner.
    """
    __tablename__ = "users"

    id = db.Column(db.String(128), primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False, default="staff")  # admin | staff
    active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id!r} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "active": self.active,
            "created_at": to_utc_z(self.created_at),
        }


class Store(db.Model):
    """Consignment outlet owned by a tenant. Never hard-deleted outside a tenant reset."""
    __tablename__ = "stores"
    __table_args__ = (
        db.Index("ix_stores_tenant_name", "tenant_id", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Store id={self.id} name={self.name!r} tenant_id={self.tenant_id!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "phone": self.phone,
            "location": self.location,
            "notes": self.notes,
            "active": self.active,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
        }


class StoreBalance(db.Model):
    """
    The single mutable aggregate per store.

    INVARIANTS:
    - current_stock values are non-negative integers, keyed by product id
    - current_balance_cents is signed (negative = store in credit)
    - only the delivery, count, payment and void services write this row,
      always inside run_with_retry with the row locked for update

    version_id gives optimistic concurrency: a concurrent writer that read
    the same version gets StaleDataError on flush and the unit of work is
    retried from the read.
    """
    __tablename__ = "store_balances"

    store_id = db.Column(db.String(36), db.ForeignKey("stores.id"), primary_key=True)
    tenant_id = db.Column(db.String(128), nullable=False, index=True)

    current_balance_cents = db.Column(db.Integer, nullable=False, default=0)
    current_stock = db.Column(db.JSON, nullable=False, default=dict)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<StoreBalance store_id={self.store_id} balance={self.current_balance_cents}>"

    def to_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "tenant_id": self.tenant_id,
            "current_balance_cents": self.current_balance_cents,
            "current_stock": dict(self.current_stock or {}),
            "version_id": self.version_id,
            "updated_at": to_utc_z(self.updated_at),
        }
