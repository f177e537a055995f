# Overview: Void/undo engine. Reverses a sale or payment and marks its ledger rows voided.

"""
Void / Undo

WHY: Staff mistakes (wrong count, payment typed twice) are corrected by
reversing the entry, never by deleting it. The ledger row stays, flagged
voided with a timestamp.

DESIGN:
- One reversal function (_apply_reversal) serves both entry points, so the
  explicit void and undo-last-action cannot diverge.
- The stored SalesRecord / Payment is authoritative for amount and items.
  Caller-supplied amount/items on void_entry are treated as expectations;
  a mismatch means the caller acted on a stale view and is rejected.
- A row can be voided once. A second void raises PreconditionError and
  changes nothing.
- Voiding an entry also voids its activity-log rows, so undo never
  reverses it a second time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from flask import current_app

from ..extensions import db
from ..models import ActivityLogEntry, Payment, SalesRecord, StoreBalance
from ..models.activity import ACTION_PAYMENT, ACTION_SALE
from ..validation import ValidationError, coerce_int
from consigntrack.time_utils import utcnow
from .balance_service import load_balance_for_update, stock_snapshot, write_balance
from .concurrency import lock_for_update, run_with_retry
from .tenant_service import assert_tenant_match, require_tenant_id


VALID_ENTRY_TYPES = [ACTION_SALE, ACTION_PAYMENT]


class PreconditionError(Exception):
    """Raised when the requested reversal cannot apply to the current state."""
    pass


@dataclass(frozen=True)
class VoidResult:
    entry_id: str
    entry_type: str
    store_id: str
    amount_cents: int
    balance_after_cents: int


@dataclass(frozen=True)
class UndoResult:
    undone_action_type: str
    action_id: str
    store_id: str
    amount_cents: int


# =============================================================================
# REVERSAL
# =============================================================================

def _apply_reversal(
    balance: StoreBalance,
    entry_type: str,
    amount_cents: int,
    items: Iterable[dict],
) -> int:
    """
    Exact inverse of the forward operation on the balance row.

    SALE: balance -= amount; stock[p] += quantity_sold for every line.
    PAYMENT: balance += |amount|.

    Returns the new balance in cents.
    """
    current = balance.current_balance_cents or 0
    stock = stock_snapshot(balance)

    if entry_type == ACTION_SALE:
        new_balance = current - amount_cents
        for item in items:
            qty = int(item.get("quantity_sold") or 0)
            product_id = item["product_id"]
            stock[product_id] = stock.get(product_id, 0) + qty
    elif entry_type == ACTION_PAYMENT:
        new_balance = current + abs(amount_cents)
    else:
        raise PreconditionError(f"Unsupported action type: {entry_type}")

    write_balance(balance, balance_cents=new_balance, stock=stock)
    return new_balance


def _load_entry_locked(entry_type: str, entry_id: str):
    model = SalesRecord if entry_type == ACTION_SALE else Payment
    return lock_for_update(db.session.query(model).filter_by(id=entry_id)).first()


def _entry_amount(entry_type: str, record) -> int:
    if entry_type == ACTION_SALE:
        return record.total_amount_cents
    return record.amount_cents


def _entry_items(entry_type: str, record) -> list[dict]:
    if entry_type == ACTION_SALE:
        return [line.to_dict() for line in record.lines]
    return []


def _mark_voided(record, entry_id: str, tenant_id: str) -> None:
    now = utcnow()
    record.voided = True
    record.voided_at = now

    entries = lock_for_update(
        db.session.query(ActivityLogEntry).filter_by(action_id=entry_id, voided=False)
    ).all()
    for entry in entries:
        assert_tenant_match(entry.tenant_id, tenant_id, resource=f"activity_log:{entry.id}")
        entry.voided = True
        entry.voided_at = now


def _items_match(expected: Iterable, actual: list[dict]) -> bool:
    def _key(items):
        pairs = []
        for item in items:
            pairs.append((str(item["product_id"]), coerce_int(item.get("quantity_sold", 0), "quantity_sold")))
        return sorted(pairs)

    return _key(expected) == _key(actual)


# =============================================================================
# ENTRY POINTS
# =============================================================================

def void_entry(
    entry_id: str,
    entry_type: str,
    store_id: str,
    tenant_id: str,
    amount_cents: Optional[int] = None,
    items: Optional[list[dict]] = None,
) -> VoidResult:
    """
    Void a specific sale or payment (explicit action from the history view).

    Args:
        entry_id: SalesRecord or Payment id
        entry_type: "SALE" or "PAYMENT"
        store_id: Store the caller believes the entry belongs to
        tenant_id: Caller's tenant
        amount_cents: Optional expected amount (rejected if it differs)
        items: Optional expected sale lines (rejected if they differ)

    Raises:
        ValidationError: bad entry type, store mismatch, stale amount/items
        PreconditionError: entry missing or already voided
        TenantAccessError: entry or balance belongs to another tenant
    """
    if entry_type not in VALID_ENTRY_TYPES:
        raise ValidationError(f"Invalid entry type: {entry_type}. Must be one of {VALID_ENTRY_TYPES}")
    require_tenant_id(tenant_id)

    def _op():
        record = _load_entry_locked(entry_type, entry_id)
        if not record:
            raise PreconditionError(f"{entry_type.title()} record {entry_id} missing.")
        assert_tenant_match(record.tenant_id, tenant_id, resource=f"{entry_type.lower()}:{entry_id}")

        if record.store_id != store_id:
            raise ValidationError(f"{entry_type.title()} {entry_id} does not belong to store {store_id}")
        if record.voided:
            raise PreconditionError(f"{entry_type.title()} {entry_id} already voided")

        amount = _entry_amount(entry_type, record)
        if amount_cents is not None and coerce_int(amount_cents, "amount_cents") != amount:
            raise ValidationError(
                f"Amount {amount_cents} does not match recorded amount {amount}; refresh and retry"
            )

        record_items = _entry_items(entry_type, record)
        if entry_type == ACTION_SALE and items is not None and not _items_match(items, record_items):
            raise ValidationError("Sale items do not match the recorded sale; refresh and retry")

        balance = load_balance_for_update(record.store_id, tenant_id)
        new_balance = _apply_reversal(balance, entry_type, amount, record_items)
        _mark_voided(record, entry_id, tenant_id)

        return VoidResult(
            entry_id=entry_id,
            entry_type=entry_type,
            store_id=record.store_id,
            amount_cents=amount,
            balance_after_cents=new_balance,
        )

    result = run_with_retry(_op)
    current_app.logger.info(
        "Entry voided: type=%s id=%s store=%s amount_cents=%d balance_after=%d",
        entry_type, entry_id, result.store_id, result.amount_cents, result.balance_after_cents,
    )
    return result


def undo_last_action(tenant_id: str) -> UndoResult:
    """
    Reverse the tenant's most recent non-voided sale or payment.

    Activity rows whose ledger record was already voided elsewhere are
    flagged voided and skipped.

    Raises:
        PreconditionError: nothing to undo, incomplete log row, record missing
        TenantAccessError: the referenced record belongs to another tenant
    """
    require_tenant_id(tenant_id)

    def _op():
        candidates = lock_for_update(
            db.session.query(ActivityLogEntry)
            .filter_by(tenant_id=tenant_id, voided=False)
            .order_by(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc())
        ).all()

        for entry in candidates:
            if not entry.store_id or not entry.action_id:
                raise PreconditionError("Log entry incomplete.")
            if entry.action_type not in VALID_ENTRY_TYPES:
                raise PreconditionError(f"Unsupported action type: {entry.action_type}")

            record = _load_entry_locked(entry.action_type, entry.action_id)
            if not record:
                raise PreconditionError(f"{entry.action_type.title()} record missing.")
            assert_tenant_match(record.tenant_id, tenant_id, resource=f"{entry.action_type.lower()}:{entry.action_id}")

            if record.voided:
                entry.voided = True
                entry.voided_at = record.voided_at or utcnow()
                continue

            amount = _entry_amount(entry.action_type, record)
            if amount is None:
                amount = entry.amount_cents
            items = _entry_items(entry.action_type, record) or list(entry.items or [])

            balance = load_balance_for_update(record.store_id, tenant_id)
            _apply_reversal(balance, entry.action_type, amount, items)
            _mark_voided(record, entry.action_id, tenant_id)

            return UndoResult(
                undone_action_type=entry.action_type,
                action_id=entry.action_id,
                store_id=record.store_id,
                amount_cents=amount,
            )

        raise PreconditionError("No actions to undo.")

    result = run_with_retry(_op)
    current_app.logger.info(
        "Undo applied: type=%s id=%s store=%s amount_cents=%d",
        result.undone_action_type, result.action_id, result.store_id, result.amount_cents,
    )
    return result
