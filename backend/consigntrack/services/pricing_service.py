# Overview: Unit price resolution (store override, else product default) and override maintenance.

from __future__ import annotations

from typing import Callable, Mapping

from flask import current_app

from ..extensions import db
from ..ids import pricing_id
from ..models import Product, StorePricing
from ..validation import require_price_cents
from .concurrency import lock_for_update, run_with_retry
from .tenant_service import assert_tenant_match, require_product, require_store, scoped_query


PriceResolver = Callable[[str], int]


def resolve_unit_price(
    store_id: str,
    product_id: str,
    overrides: Mapping[tuple[str, str], int],
    catalog: Mapping[str, int],
) -> int:
    """
    Pure price lookup.

    overrides: {(store_id, product_id): price_cents}
    catalog: {product_id: default_price_cents}

    A product missing from both resolves to 0.
    """
    key = (store_id, product_id)
    if key in overrides:
        return overrides[key]
    return catalog.get(product_id, 0)


def load_price_resolver(store_id: str, tenant_id: str) -> PriceResolver:
    """Snapshot the tenant's overrides for this store and its catalog into a resolver."""
    overrides = {
        (row.store_id, row.product_id): row.price_cents
        for row in scoped_query(StorePricing, tenant_id).filter_by(store_id=store_id).all()
    }
    catalog = {
        product.id: product.default_price_cents
        for product in scoped_query(Product, tenant_id).all()
    }

    def _resolve(product_id: str) -> int:
        return resolve_unit_price(store_id, product_id, overrides, catalog)

    return _resolve


def set_store_pricing(store_id: str, product_id: str, price_cents, tenant_id: str) -> StorePricing:
    """Upsert the (store, product) override."""
    def _op():
        price = require_price_cents(price_cents)
        require_store(store_id, tenant_id)
        require_product(product_id, tenant_id)

        key = pricing_id(store_id, product_id)
        row = lock_for_update(db.session.query(StorePricing).filter_by(id=key)).first()
        if row:
            assert_tenant_match(row.tenant_id, tenant_id, resource=f"store_pricing:{key}")
            row.price_cents = price
        else:
            row = StorePricing(
                id=key,
                tenant_id=tenant_id,
                store_id=store_id,
                product_id=product_id,
                price_cents=price,
            )
            db.session.add(row)
        db.session.flush()
        return row

    row = run_with_retry(_op)
    current_app.logger.info("Store pricing set: store=%s product=%s price_cents=%s", store_id, product_id, row.price_cents)
    return row


def clear_store_pricing(store_id: str, product_id: str, tenant_id: str) -> bool:
    """Remove an override so the product default applies again. Returns False if none existed."""
    def _op():
        require_store(store_id, tenant_id)
        key = pricing_id(store_id, product_id)
        row = lock_for_update(db.session.query(StorePricing).filter_by(id=key)).first()
        if not row:
            return False
        assert_tenant_match(row.tenant_id, tenant_id, resource=f"store_pricing:{key}")
        db.session.delete(row)
        return True

    return run_with_retry(_op)


def get_store_pricing(store_id: str, tenant_id: str) -> list[StorePricing]:
    require_store(store_id, tenant_id)
    return scoped_query(StorePricing, tenant_id).filter_by(store_id=store_id).all()
