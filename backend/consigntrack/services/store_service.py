from __future__ import annotations

from flask import current_app

from consigntrack.extensions import db
from consigntrack.models import Store, StoreBalance
from consigntrack.validation import ModelValidationPolicy, validate_payload
from consigntrack.services.concurrency import lock_for_update, run_with_retry
from consigntrack.services.tenant_service import (
    assert_tenant_match,
    require_store,
    require_tenant_id,
    scoped_query,
    NotFoundError,
)


STORE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "location", "notes", "active"},
    required_on_create={"name"},
)


def create_store(
    name: str,
    tenant_id: str,
    phone: str | None = None,
    location: str | None = None,
    notes: str | None = None,
    active: bool = True,
) -> Store:
    """Create a store and its zeroed balance row in one transaction."""
    def _op():
        require_tenant_id(tenant_id)
        patch = validate_payload(
            model=Store,
            payload={"name": name, "phone": phone, "location": location, "notes": notes, "active": active},
            policy=STORE_POLICY,
            partial=False,
        )

        store = Store(tenant_id=tenant_id, **patch)
        db.session.add(store)
        db.session.flush()

        db.session.add(StoreBalance(
            store_id=store.id,
            tenant_id=tenant_id,
            current_balance_cents=0,
            current_stock={},
        ))
        db.session.flush()
        return store

    store = run_with_retry(_op)
    current_app.logger.info("Store created: id=%s tenant=%s", store.id, tenant_id)
    return store


def update_store(store_id: str, fields: dict, tenant_id: str) -> Store:
    """Merge partial fields into an existing store after the tenant check."""
    def _op():
        store = lock_for_update(db.session.query(Store).filter_by(id=store_id)).first()
        if not store:
            raise NotFoundError(f"Store {store_id} not found")
        assert_tenant_match(store.tenant_id, tenant_id, resource=f"store:{store_id}")

        patch = validate_payload(model=Store, payload=fields, policy=STORE_POLICY, partial=True)
        for k, v in patch.items():
            setattr(store, k, v)

        db.session.flush()
        return store

    return run_with_retry(_op)


def get_store(store_id: str, tenant_id: str) -> Store:
    return require_store(store_id, tenant_id)


def list_stores(tenant_id: str, active_only: bool = False) -> list[Store]:
    query = scoped_query(Store, tenant_id)
    if active_only:
        query = query.filter_by(active=True)
    return query.order_by(Store.name.asc()).all()
