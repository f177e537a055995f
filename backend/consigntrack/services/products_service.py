# backend/consigntrack/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All product operations are tenant-scoped.
- list_products filters by tenant_id
- create_product stamps the caller's tenant_id
- update_product validates ownership before writing
"""
from __future__ import annotations

from consigntrack.extensions import db
from consigntrack.models import Product
from consigntrack.validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)
from consigntrack.services.concurrency import lock_for_update, run_with_retry
from consigntrack.services.tenant_service import (
    NotFoundError,
    assert_tenant_match,
    require_tenant_id,
    scoped_query,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "default_price_cents"},
    required_on_create={"name", "default_price_cents"},
)


def create_product(
    name: str,
    default_price_cents,
    tenant_id: str,
    product_id: str | None = None,
) -> Product:
    """
    Create a catalog product.

    product_id lets the caller choose the id (e.g. when re-seeding a
    catalog). Reusing an id owned by another tenant is an authorization
    error; reusing one of the caller's own ids is a validation error.
    """
    def _op():
        require_tenant_id(tenant_id)
        patch = validate_payload(
            model=Product,
            payload={"name": name, "default_price_cents": default_price_cents},
            policy=PRODUCT_POLICY,
            partial=False,
        )
        enforce_rules_product(patch)

        if product_id is not None:
            existing = db.session.query(Product).filter_by(id=product_id).first()
            if existing:
                assert_tenant_match(existing.tenant_id, tenant_id, resource=f"product:{product_id}")
                raise ValidationError(f"Product {product_id} already exists", product_id=product_id)

        product = Product(tenant_id=tenant_id, **patch)
        if product_id is not None:
            product.id = product_id
        db.session.add(product)
        db.session.flush()
        return product

    return run_with_retry(_op)


def update_product(product_id: str, fields: dict, tenant_id: str) -> Product:
    def _op():
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        assert_tenant_match(product.tenant_id, tenant_id, resource=f"product:{product_id}")

        patch = validate_payload(model=Product, payload=fields, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        for k, v in patch.items():
            setattr(product, k, v)

        db.session.flush()
        return product

    return run_with_retry(_op)


def list_products(tenant_id: str) -> list[Product]:
    return scoped_query(Product, tenant_id).order_by(Product.name.asc(), Product.id.asc()).all()
