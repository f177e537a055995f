# Overview: Payment mutator. Records cash received against a store's balance.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app

from ..models.activity import ACTION_PAYMENT
from ..validation import ValidationError, require_amount_cents
from .balance_service import load_balance_for_update, stock_snapshot, write_balance
from .concurrency import run_with_retry
from .ledger_service import append_payment, log_activity


MAX_NOTE_LENGTH = 255


@dataclass(frozen=True)
class PaymentResult:
    payment_id: str
    amount_cents: int
    balance_after_cents: int


def record_payment(
    store_id: str,
    amount_cents,
    tenant_id: str,
    note: Optional[str] = None,
) -> PaymentResult:
    """
    Record a payment from a store.

    Effect: current_balance -= amount. Stock is untouched. A Payment and a
    PAYMENT activity entry are written in the same transaction.

    Raises:
        ValidationError: amount not a positive integer of cents, note too long
    """
    amount = require_amount_cents(amount_cents)
    if note is not None:
        note = str(note).strip() or None
    if note and len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"note exceeds max length {MAX_NOTE_LENGTH}")

    def _op():
        balance = load_balance_for_update(store_id, tenant_id)
        new_balance = (balance.current_balance_cents or 0) - amount
        write_balance(balance, balance_cents=new_balance, stock=stock_snapshot(balance))

        payment = append_payment(
            tenant_id=tenant_id,
            store_id=store_id,
            amount_cents=amount,
            note=note,
        )
        log_activity(
            tenant_id=tenant_id,
            store_id=store_id,
            action_id=payment.id,
            action_type=ACTION_PAYMENT,
            amount_cents=amount,
        )
        return PaymentResult(payment_id=payment.id, amount_cents=amount, balance_after_cents=new_balance)

    result = run_with_retry(_op)
    current_app.logger.info(
        "Payment recorded: store=%s amount_cents=%d balance_after=%d",
        store_id, amount, result.balance_after_cents,
    )
    return result
