# Overview: Balance Store access. Reads and lazily creates the per-store StoreBalance row.

"""
StoreBalance access discipline

- Mutators call load_balance_for_update() INSIDE their run_with_retry unit
  of work, then assign new values; they never compute from a cached copy.
- A missing row is treated as {balance: 0, stock: {}} and inserted under a
  savepoint on first write, stamped with the caller's tenant. Losing the
  insert race to another writer falls back to their row.
- current_stock is replaced with a new dict on every write (JSON column
  change detection only sees reassignment).
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import StoreBalance
from ..validation import ValidationError
from .concurrency import lock_for_update
from .tenant_service import assert_tenant_match, require_store


def load_balance_for_update(store_id: str, tenant_id: str) -> StoreBalance:
    """
    Lock and return the store's balance row, creating the lazy default.

    Raises:
        NotFoundError if the store does not exist
        TenantAccessError if the store or balance belongs to another tenant
    """
    require_store(store_id, tenant_id)

    balance = lock_for_update(db.session.query(StoreBalance).filter_by(store_id=store_id)).first()
    if balance is None:
        balance = StoreBalance(
            store_id=store_id,
            tenant_id=tenant_id,
            current_balance_cents=0,
            current_stock={},
        )
        try:
            with db.session.begin_nested():
                db.session.add(balance)
            return balance
        except IntegrityError:
            # Another writer created the row between our read and insert.
            balance = lock_for_update(db.session.query(StoreBalance).filter_by(store_id=store_id)).one()

    assert_tenant_match(balance.tenant_id, tenant_id, resource=f"store_balance:{store_id}")
    return balance


def stock_snapshot(balance: StoreBalance) -> dict[str, int]:
    """Copy of the stock map with integer values."""
    return {str(k): int(v) for k, v in (balance.current_stock or {}).items()}


def write_balance(balance: StoreBalance, *, balance_cents: int, stock: dict[str, int]) -> None:
    """Assign the new balance and stock, enforcing the non-negative stock invariant."""
    for product_id, qty in stock.items():
        if qty < 0:
            raise ValidationError(
                f"Stock for product {product_id} would become negative ({qty})",
                product_id=product_id,
            )
    balance.current_balance_cents = balance_cents
    balance.current_stock = dict(stock)


def get_store_balance(store_id: str, tenant_id: str) -> dict:
    """Read-only view; returns the lazy default when no row exists yet."""
    require_store(store_id, tenant_id)
    balance = db.session.query(StoreBalance).filter_by(store_id=store_id).first()
    if balance is None:
        return {
            "store_id": store_id,
            "tenant_id": tenant_id,
            "current_balance_cents": 0,
            "current_stock": {},
        }
    assert_tenant_match(balance.tenant_id, tenant_id, resource=f"store_balance:{store_id}")
    return balance.to_dict()
