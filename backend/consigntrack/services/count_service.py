# backend/consigntrack/services/count_service.py
"""
Stock count reconciliation.

WHY: A consigned store does not report sales. Staff physically count what
is still on the shelf; whatever is missing relative to tracked stock was
sold, and the store owes its price.

ALGORITHM (one transaction against the store's StoreBalance):
1. Read current stock.
2. For each counted product: sold = previous - counted.
3. sold < 0 (count exceeds tracked stock) aborts everything.
4. sold > 0 is priced (store override, else product default) and totalled.
5. Counted products take the counted quantity; others are untouched.
6. Write stock and balance += total; append COUNT log, and if anything sold a
   SalesRecord plus a SALE activity entry for undo (also at a 0 total, so
   a zero-priced stock drop stays voidable).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional

from flask import current_app

from consigntrack.models.activity import ACTION_SALE
from consigntrack.models.inventory import INVENTORY_LOG_COUNT
from consigntrack.validation import ValidationError, require_quantity
from consigntrack.services.balance_service import load_balance_for_update, stock_snapshot, write_balance
from consigntrack.services.concurrency import run_with_retry
from consigntrack.services.ledger_service import append_inventory_log, append_sales_record, log_activity
from consigntrack.services.pricing_service import load_price_resolver
from consigntrack.services.tenant_service import require_product


@dataclass(frozen=True)
class SaleLineDraft:
    product_id: str
    quantity_sold: int
    unit_price_cents: int
    line_total_cents: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity_sold": self.quantity_sold,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }


@dataclass(frozen=True)
class Reconciliation:
    next_stock: dict[str, int]
    sales_items: list[SaleLineDraft] = field(default_factory=list)
    total_amount_cents: int = 0


@dataclass(frozen=True)
class StockCountResult:
    inventory_log_id: str
    sales_record_id: Optional[str]
    total_amount_cents: int
    items: list[dict]


def normalize_counts(counts: Iterable) -> list[tuple[str, int]]:
    """
    Accepts (product_id, quantity) pairs or dicts with product_id and
    quantity; validates quantities and rejects duplicate products.
    """
    normalized: list[tuple[str, int]] = []
    seen: set[str] = set()
    for entry in counts:
        if isinstance(entry, Mapping):
            if "product_id" not in entry or "quantity" not in entry:
                raise ValidationError("Each count needs product_id and quantity")
            product_id, raw_qty = entry["product_id"], entry["quantity"]
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            product_id, raw_qty = entry
        else:
            raise ValidationError("Each count must be {product_id, quantity} or a (product_id, quantity) pair")
        if not isinstance(product_id, str) or not product_id.strip():
            raise ValidationError("product_id must be a non-empty string")
        product_id = product_id.strip()
        qty = require_quantity(raw_qty, f"quantity for product {product_id}")
        if product_id in seen:
            raise ValidationError(f"Product {product_id} counted more than once", product_id=product_id)
        seen.add(product_id)
        normalized.append((product_id, qty))
    return normalized


def reconcile_count(
    current_stock: Mapping[str, int],
    counts: list[tuple[str, int]],
    price_of: Callable[[str], int],
) -> Reconciliation:
    """
    Pure reconciliation of a physical count against tracked stock.

    Raises:
        ValidationError naming the first product whose count exceeds
        tracked stock; nothing is returned for partial application.
    """
    next_stock = dict(current_stock)
    sales_items: list[SaleLineDraft] = []
    total = 0

    for product_id, counted in counts:
        previous = int(current_stock.get(product_id, 0))
        sold = previous - counted
        if sold < 0:
            raise ValidationError(
                f"Count for product {product_id} exceeds tracked stock ({previous}).",
                product_id=product_id,
            )
        next_stock[product_id] = counted
        if sold > 0:
            unit_price = price_of(product_id)
            line_total = unit_price * sold
            sales_items.append(SaleLineDraft(
                product_id=product_id,
                quantity_sold=sold,
                unit_price_cents=unit_price,
                line_total_cents=line_total,
            ))
            total += line_total

    return Reconciliation(next_stock=next_stock, sales_items=sales_items, total_amount_cents=total)


def record_stock_count(
    store_id: str,
    counts: Iterable,
    tenant_id: str,
    price_resolver: Optional[Callable[[str], int]] = None,
) -> StockCountResult:
    """
    Reconcile a physical count and post the inferred sale.

    Args:
        store_id: Store being counted
        counts: (product_id, quantity) pairs or {"product_id", "quantity"} dicts
        tenant_id: Caller's tenant
        price_resolver: product_id -> unit price in cents; defaults to the
            store's overrides falling back to catalog defaults

    Returns:
        StockCountResult; sales_record_id None means nothing was sold and
        the count only adjusted stock.

    Raises:
        ValidationError: bad quantity, duplicate product, or count above
            tracked stock (no stock or balance change is made)
        TenantAccessError / NotFoundError: store or a counted product not the caller's
    """
    normalized = normalize_counts(counts)
    if not normalized:
        raise ValidationError("A stock count needs at least one product")

    def _op():
        for product_id, _qty in normalized:
            require_product(product_id, tenant_id)
        balance = load_balance_for_update(store_id, tenant_id)
        price_of = price_resolver or load_price_resolver(store_id, tenant_id)

        result = reconcile_count(stock_snapshot(balance), normalized, price_of)
        write_balance(
            balance,
            balance_cents=(balance.current_balance_cents or 0) + result.total_amount_cents,
            stock=result.next_stock,
        )

        log = append_inventory_log(
            tenant_id=tenant_id,
            store_id=store_id,
            log_type=INVENTORY_LOG_COUNT,
            items=normalized,
        )

        items = [line.to_dict() for line in result.sales_items]
        sales_record_id = None
        if result.sales_items:
            record = append_sales_record(
                tenant_id=tenant_id,
                store_id=store_id,
                items=items,
                total_amount_cents=result.total_amount_cents,
            )
            sales_record_id = record.id
            log_activity(
                tenant_id=tenant_id,
                store_id=store_id,
                action_id=record.id,
                action_type=ACTION_SALE,
                amount_cents=result.total_amount_cents,
                items=items,
            )

        return StockCountResult(
            inventory_log_id=log.id,
            sales_record_id=sales_record_id,
            total_amount_cents=result.total_amount_cents,
            items=items,
        )

    outcome = run_with_retry(_op)
    current_app.logger.info(
        "Stock count recorded: store=%s products=%d sale=%s total_cents=%d",
        store_id, len(normalized), outcome.sales_record_id, outcome.total_amount_cents,
    )
    return outcome
