# Overview: Administrative bulk operations (tenant data reset).

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import (
    ActivityLogEntry,
    InventoryLog,
    InventoryLogLine,
    Payment,
    Product,
    SalesRecord,
    SalesRecordLine,
    Store,
    StoreBalance,
    StorePricing,
)
from .tenant_service import require_tenant_id


# Children before parents so foreign keys never dangle mid-reset.
TENANT_TABLES = [
    ActivityLogEntry,
    SalesRecordLine,
    SalesRecord,
    Payment,
    InventoryLogLine,
    InventoryLog,
    StorePricing,
    StoreBalance,
    Store,
    Product,
]


def _primary_key(model):
    return model.__mapper__.primary_key[0]


def delete_tenant_rows(model, tenant_id: str, *, batch_size: int) -> int:
    """
    Delete every row of `model` owned by tenant_id, batch_size rows per
    commit, until a short batch shows the table is drained.
    """
    pk = _primary_key(model)
    deleted = 0
    while True:
        ids = [
            row[0]
            for row in db.session.query(pk).filter(model.tenant_id == tenant_id).limit(batch_size).all()
        ]
        if not ids:
            break
        db.session.query(model).filter(pk.in_(ids)).delete(synchronize_session=False)
        db.session.commit()
        deleted += len(ids)
        if len(ids) < batch_size:
            break
    return deleted


def reset_tenant_data(tenant_id: str, *, batch_size: int | None = None) -> dict[str, int]:
    """
    Bulk-delete all tenant-scoped data (stores, balances, pricing, catalog,
    ledger, activity). Users are kept so the owner can still sign in.

    Not atomic across tables: each batch commits on its own. Re-running
    after an interruption finishes the job.

    Returns:
        {table_name: rows_deleted}
    """
    require_tenant_id(tenant_id)
    if batch_size is None:
        batch_size = current_app.config.get("RESET_BATCH_SIZE", 500)
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    summary: dict[str, int] = {}
    try:
        for model in TENANT_TABLES:
            summary[model.__tablename__] = delete_tenant_rows(model, tenant_id, batch_size=batch_size)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Tenant reset interrupted for %s", tenant_id)
        raise

    current_app.logger.info("Tenant reset: tenant=%s deleted=%s", tenant_id, summary)
    return summary
