# Overview: Ledger Writer. Appends immutable inventory, sales, payment and activity records.

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ..extensions import db
from ..models import (
    ActivityLogEntry,
    InventoryLog,
    InventoryLogLine,
    Payment,
    SalesRecord,
    SalesRecordLine,
)
from consigntrack.time_utils import utcnow
"""
Ledger Invariants (authoritative)

- Append-only: nothing here updates or deletes an existing row.
- Rows are written inside the same DB transaction as the balance change
  they justify (callers run inside run_with_retry).
- Every row is stamped with the caller's tenant_id.
- The only permitted later mutation is the void flip done by void_service.
"""


def append_inventory_log(
    *,
    tenant_id: str,
    store_id: str,
    log_type: str,
    items: Iterable[tuple[str, int]],
    occurred_at: Optional[datetime] = None,
) -> InventoryLog:
    log = InventoryLog(
        tenant_id=tenant_id,
        store_id=store_id,
        type=log_type,
        occurred_at=occurred_at or utcnow(),
    )
    db.session.add(log)
    db.session.flush()  # ensures log.id is assigned without committing

    for position, (product_id, quantity) in enumerate(items):
        db.session.add(InventoryLogLine(
            tenant_id=tenant_id,
            log_id=log.id,
            position=position,
            product_id=product_id,
            quantity=quantity,
        ))
    db.session.flush()
    return log


def append_sales_record(
    *,
    tenant_id: str,
    store_id: str,
    items: list[dict],
    total_amount_cents: int,
    occurred_at: Optional[datetime] = None,
) -> SalesRecord:
    """
    items: dicts with product_id, quantity_sold, unit_price_cents, line_total_cents.
    """
    record = SalesRecord(
        tenant_id=tenant_id,
        store_id=store_id,
        total_amount_cents=total_amount_cents,
        occurred_at=occurred_at or utcnow(),
        voided=False,
    )
    db.session.add(record)
    db.session.flush()

    for position, item in enumerate(items):
        db.session.add(SalesRecordLine(
            tenant_id=tenant_id,
            sales_record_id=record.id,
            position=position,
            product_id=item["product_id"],
            quantity_sold=item["quantity_sold"],
            unit_price_cents=item["unit_price_cents"],
            line_total_cents=item["line_total_cents"],
        ))
    db.session.flush()
    return record


def append_payment(
    *,
    tenant_id: str,
    store_id: str,
    amount_cents: int,
    note: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
) -> Payment:
    payment = Payment(
        tenant_id=tenant_id,
        store_id=store_id,
        amount_cents=amount_cents,
        note=note,
        occurred_at=occurred_at or utcnow(),
        voided=False,
    )
    db.session.add(payment)
    db.session.flush()
    return payment


def log_activity(
    *,
    tenant_id: str,
    store_id: str,
    action_id: str,
    action_type: str,
    amount_cents: int,
    items: Optional[list[dict]] = None,
) -> ActivityLogEntry:
    entry = ActivityLogEntry(
        tenant_id=tenant_id,
        store_id=store_id,
        action_id=action_id,
        action_type=action_type,
        amount_cents=amount_cents,
        items=list(items or []),
        voided=False,
        created_at=utcnow(),
    )
    db.session.add(entry)
    db.session.flush()
    return entry
