# Overview: Read-side summaries over balances and the ledger (dashboard, period report, store history).

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import func

from consigntrack.extensions import db
from consigntrack.models import (
    ActivityLogEntry,
    InventoryLog,
    Payment,
    SalesRecord,
    Store,
    StoreBalance,
)
from consigntrack.services.tenant_service import require_store, scoped_query
from consigntrack.time_utils import day_range, to_utc_z, utcnow


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def period_summary(tenant_id: str, start: datetime, end: datetime) -> dict:
    """
    Revenue (non-voided sales), collected (non-voided payments) and
    per-store revenue for occurred_at in [start, end].
    """
    if start > end:
        raise ReportError("start must not be after end")

    revenue_rows = (
        db.session.query(
            SalesRecord.store_id,
            func.count(SalesRecord.id),
            func.coalesce(func.sum(SalesRecord.total_amount_cents), 0),
        )
        .filter(
            SalesRecord.tenant_id == tenant_id,
            SalesRecord.voided.is_(False),
            SalesRecord.occurred_at >= start,
            SalesRecord.occurred_at <= end,
        )
        .group_by(SalesRecord.store_id)
        .all()
    )

    collected = (
        db.session.query(func.coalesce(func.sum(Payment.amount_cents), 0))
        .filter(
            Payment.tenant_id == tenant_id,
            Payment.voided.is_(False),
            Payment.occurred_at >= start,
            Payment.occurred_at <= end,
        )
        .scalar()
        or 0
    )

    per_store = {store_id: int(total or 0) for store_id, _count, total in revenue_rows}
    revenue = sum(per_store.values())
    sales_count = sum(int(count or 0) for _store_id, count, _total in revenue_rows)

    return {
        "start": to_utc_z(start),
        "end": to_utc_z(end),
        "revenue_cents": revenue,
        "collected_cents": int(collected),
        "net_cents": revenue - int(collected),
        "sales_count": sales_count,
        "per_store_revenue_cents": per_store,
    }


def dashboard_summary(tenant_id: str, today: date | None = None) -> dict:
    """
    Outstanding balances across stores plus today's non-voided sales.

    total_outstanding only counts positive balances; stores in credit are
    listed as clear.
    """
    today = today or utcnow().date()
    stores = scoped_query(Store, tenant_id).order_by(Store.name.asc()).all()
    balances = {
        b.store_id: b.current_balance_cents or 0
        for b in scoped_query(StoreBalance, tenant_id).all()
    }

    with_debt = []
    clear = []
    for store in stores:
        owed = balances.get(store.id, 0)
        row = {"store_id": store.id, "name": store.name, "current_balance_cents": owed}
        if owed > 0:
            with_debt.append(row)
        else:
            clear.append(row)

    start, end = day_range(today)
    sales_today = scoped_query(SalesRecord, tenant_id).filter(
        SalesRecord.voided.is_(False),
        SalesRecord.occurred_at >= start,
        SalesRecord.occurred_at <= end,
    ).all()

    return {
        "total_outstanding_cents": sum(max(v, 0) for v in balances.values()),
        "stores_with_debt": with_debt,
        "stores_clear": clear,
        "today": today.isoformat(),
        "sales_today_count": len(sales_today),
        "sales_today_total_cents": sum(s.total_amount_cents for s in sales_today),
    }


def store_history(store_id: str, tenant_id: str, limit: int = 100) -> list[dict]:
    """
    Merged timeline for one store, newest first.

    Amounts: sales positive, payments negative, inventory events 0.
    can_void is true for sales and payments that are not voided yet.
    """
    require_store(store_id, tenant_id)
    limit = max(1, min(int(limit), 500))

    timeline: list[dict] = []

    for log in scoped_query(InventoryLog, tenant_id).filter_by(store_id=store_id) \
            .order_by(InventoryLog.occurred_at.desc()).limit(limit).all():
        timeline.append({
            "id": log.id,
            "type": log.type,
            "occurred_at": log.occurred_at,
            "amount_cents": 0,
            "items": [line.to_dict() for line in log.lines],
            "voided": False,
            "can_void": False,
        })

    for sale in scoped_query(SalesRecord, tenant_id).filter_by(store_id=store_id) \
            .order_by(SalesRecord.occurred_at.desc()).limit(limit).all():
        timeline.append({
            "id": sale.id,
            "type": "SALE",
            "occurred_at": sale.occurred_at,
            "amount_cents": sale.total_amount_cents,
            "items": [line.to_dict() for line in sale.lines],
            "voided": sale.voided,
            "can_void": not sale.voided,
        })

    for payment in scoped_query(Payment, tenant_id).filter_by(store_id=store_id) \
            .order_by(Payment.occurred_at.desc()).limit(limit).all():
        timeline.append({
            "id": payment.id,
            "type": "PAYMENT",
            "occurred_at": payment.occurred_at,
            "amount_cents": -payment.amount_cents,
            "note": payment.note,
            "items": [],
            "voided": payment.voided,
            "can_void": not payment.voided,
        })

    timeline.sort(key=lambda e: e["occurred_at"], reverse=True)
    timeline = timeline[:limit]
    for entry in timeline:
        entry["occurred_at"] = to_utc_z(entry["occurred_at"])
    return timeline


def list_activity(tenant_id: str, include_voided: bool = False, limit: int = 50) -> list[ActivityLogEntry]:
    query = scoped_query(ActivityLogEntry, tenant_id)
    if not include_voided:
        query = query.filter_by(voided=False)
    return query.order_by(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc()).limit(limit).all()
