"""
Multi-Tenant Guard: the only authorization logic inside the core.

WHY: Every row in every table carries tenant_id. Every mutator must check
the stored tenant_id of an existing record against the caller's tenant
before writing, and must stamp new records with the caller's tenant.
Centralizing the check here keeps it uniform across services.

SECURITY INVARIANTS:
1. A mismatch raises TenantAccessError and nothing is written
2. A record without a stored tenant_id (legacy/lazy default) is accepted
3. Denials are logged at WARNING on the application logger

USAGE:
    from consigntrack.services.tenant_service import require_store, assert_tenant_match

    store = require_store(store_id, tenant_id)
    assert_tenant_match(balance.tenant_id, tenant_id, resource=f"store_balance:{store_id}")
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Store, Product


class TenantAccessError(Exception):
    """Raised when cross-tenant access is attempted."""
    pass


class NotFoundError(LookupError):
    """Raised when a referenced record does not exist."""
    pass


def require_tenant_id(tenant_id: str | None) -> str:
    if not tenant_id or not str(tenant_id).strip():
        raise TenantAccessError("Tenant context not established")
    return str(tenant_id)


def assert_tenant_match(existing_tenant_id: str | None, tenant_id: str, *, resource: str = "record") -> None:
    """
    Compare a stored record's tenant against the caller's tenant.

    Args:
        existing_tenant_id: tenant_id read from the stored record (may be None)
        tenant_id: the caller's tenant
        resource: short description used in the security log line

    Raises:
        TenantAccessError on mismatch
    """
    if existing_tenant_id and existing_tenant_id != tenant_id:
        current_app.logger.warning(
            "Cross-tenant access denied: %s belongs to %s, caller %s",
            resource, existing_tenant_id, tenant_id,
        )
        raise TenantAccessError("Unauthorized access to another tenant's data.")


def require_store(store_id: str, tenant_id: str) -> Store:
    """
    Load a store and verify it belongs to the caller's tenant.

    Raises:
        NotFoundError if the store does not exist
        TenantAccessError if it belongs to another tenant
    """
    store = db.session.query(Store).filter_by(id=store_id).first()
    if not store:
        raise NotFoundError(f"Store {store_id} not found")
    assert_tenant_match(store.tenant_id, tenant_id, resource=f"store:{store_id}")
    return store


def require_product(product_id: str, tenant_id: str) -> Product:
    product = db.session.query(Product).filter_by(id=product_id).first()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    assert_tenant_match(product.tenant_id, tenant_id, resource=f"product:{product_id}")
    return product


def scoped_query(model, tenant_id: str):
    """
    Base query for a tenant-scoped model.

    Usage:
        products = scoped_query(Product, tenant_id).order_by(Product.name).all()
    """
    return db.session.query(model).filter(model.tenant_id == require_tenant_id(tenant_id))
