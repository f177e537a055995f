# Overview: Delivery mutator. Adds delivered quantity to a store's tracked stock.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from consigntrack.models import InventoryLog
from consigntrack.models.inventory import INVENTORY_LOG_DELIVERY
from consigntrack.validation import require_quantity
from consigntrack.services.balance_service import load_balance_for_update, stock_snapshot, write_balance
from consigntrack.services.concurrency import run_with_retry
from consigntrack.services.ledger_service import append_inventory_log
from consigntrack.services.tenant_service import require_product


@dataclass(frozen=True)
class DeliveryResult:
    inventory_log_id: str
    product_id: str
    quantity: int
    stock_after: int


def record_delivery(store_id: str, product_id: str, quantity, tenant_id: str) -> DeliveryResult:
    """
    Record goods left at a store.

    Effect: current_stock[product_id] += quantity. Balance is unchanged.
    A DELIVERY inventory log entry is written in the same transaction.

    Raises:
        ValidationError: quantity not a non-negative integer
        TenantAccessError / NotFoundError: store or product not the caller's
    """
    qty = require_quantity(quantity)

    def _op():
        require_product(product_id, tenant_id)
        balance = load_balance_for_update(store_id, tenant_id)

        stock = stock_snapshot(balance)
        stock[product_id] = stock.get(product_id, 0) + qty
        write_balance(balance, balance_cents=balance.current_balance_cents or 0, stock=stock)

        log: InventoryLog = append_inventory_log(
            tenant_id=tenant_id,
            store_id=store_id,
            log_type=INVENTORY_LOG_DELIVERY,
            items=[(product_id, qty)],
        )
        return DeliveryResult(
            inventory_log_id=log.id,
            product_id=product_id,
            quantity=qty,
            stock_after=stock[product_id],
        )

    result = run_with_retry(_op)
    current_app.logger.info(
        "Delivery recorded: store=%s product=%s qty=%d stock_after=%d",
        store_id, product_id, qty, result.stock_after,
    )
    return result
