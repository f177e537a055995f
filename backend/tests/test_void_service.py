# Overview: Pytest coverage for void and undo of sales and payments.

import pytest

from conftest import TENANT_A
from consigntrack.extensions import db
from consigntrack.models import ActivityLogEntry, Payment, SalesRecord
from consigntrack.services import count_service, inventory_service, payment_service
from consigntrack.services.balance_service import get_store_balance
from consigntrack.services.void_service import PreconditionError, undo_last_action, void_entry
from consigntrack.validation import ValidationError


@pytest.fixture
def sale_a(stocked_store_a, product_a):
    """Count 7 of 10: sale of 3 x 500."""
    return count_service.record_stock_count(stocked_store_a.id, [(product_a.id, 7)], TENANT_A)


def _state(store_id):
    db.session.expire_all()
    balance = get_store_balance(store_id, TENANT_A)
    return balance["current_balance_cents"], balance["current_stock"]


class TestVoidSale:
    def test_void_restores_balance_and_stock(self, db_session, stocked_store_a, product_a, sale_a):
        assert _state(stocked_store_a.id) == (1500, {product_a.id: 7})

        result = void_entry(sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A)

        assert result.amount_cents == 1500
        assert result.balance_after_cents == 0
        assert _state(stocked_store_a.id) == (0, {product_a.id: 10})

        sale = db_session.get(SalesRecord, sale_a.sales_record_id)
        assert sale.voided is True
        assert sale.voided_at is not None
        entry = db_session.query(ActivityLogEntry).filter_by(action_id=sale.id).one()
        assert entry.voided is True

    def test_matching_expectations_accepted(self, db_session, stocked_store_a, product_a, sale_a):
        void_entry(
            sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A,
            amount_cents=1500,
            items=[{"product_id": product_a.id, "quantity_sold": 3}],
        )
        assert _state(stocked_store_a.id)[0] == 0

    def test_stale_amount_rejected(self, db_session, stocked_store_a, sale_a):
        with pytest.raises(ValidationError):
            void_entry(sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A, amount_cents=999)

        assert db_session.get(SalesRecord, sale_a.sales_record_id).voided is False
        assert _state(stocked_store_a.id)[0] == 1500

    def test_stale_items_rejected(self, db_session, stocked_store_a, product_a, sale_a):
        with pytest.raises(ValidationError):
            void_entry(
                sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A,
                items=[{"product_id": product_a.id, "quantity_sold": 5}],
            )
        assert _state(stocked_store_a.id)[0] == 1500

    def test_double_void_rejected(self, db_session, stocked_store_a, product_a, sale_a):
        void_entry(sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A)

        with pytest.raises(PreconditionError):
            void_entry(sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A)

        assert _state(stocked_store_a.id) == (0, {product_a.id: 10})

    def test_wrong_store_rejected(self, db_session, stocked_store_a, sale_a, user_a):
        from consigntrack.services import store_service

        other = store_service.create_store(name="Second Shop", tenant_id=TENANT_A)
        with pytest.raises(ValidationError):
            void_entry(sale_a.sales_record_id, "SALE", other.id, TENANT_A)

    def test_missing_record(self, db_session, stocked_store_a):
        with pytest.raises(PreconditionError):
            void_entry("does-not-exist", "SALE", stocked_store_a.id, TENANT_A)

    def test_invalid_entry_type(self, db_session, stocked_store_a, sale_a):
        with pytest.raises(ValidationError):
            void_entry(sale_a.sales_record_id, "DELIVERY", stocked_store_a.id, TENANT_A)

    def test_void_after_later_delivery_keeps_delivery(self, db_session, stocked_store_a, product_a, sale_a):
        inventory_service.record_delivery(stocked_store_a.id, product_a.id, 5, TENANT_A)

        void_entry(sale_a.sales_record_id, "SALE", stocked_store_a.id, TENANT_A)

        assert _state(stocked_store_a.id) == (0, {product_a.id: 15})


class TestVoidPayment:
    def test_void_payment_restores_balance(self, db_session, stocked_store_a, sale_a):
        payment = payment_service.record_payment(stocked_store_a.id, 1000, TENANT_A)
        assert _state(stocked_store_a.id)[0] == 500

        result = void_entry(payment.payment_id, "PAYMENT", stocked_store_a.id, TENANT_A, amount_cents=1000)

        assert result.balance_after_cents == 1500
        assert db_session.get(Payment, payment.payment_id).voided is True

    def test_double_void_payment_rejected(self, db_session, store_a):
        payment = payment_service.record_payment(store_a.id, 200, TENANT_A)
        void_entry(payment.payment_id, "PAYMENT", store_a.id, TENANT_A)

        with pytest.raises(PreconditionError):
            void_entry(payment.payment_id, "PAYMENT", store_a.id, TENANT_A)

        assert _state(store_a.id)[0] == 0


class TestUndoLastAction:
    def test_undo_reverses_most_recent_first(self, db_session, stocked_store_a, product_a, sale_a):
        payment = payment_service.record_payment(stocked_store_a.id, 400, TENANT_A)

        first = undo_last_action(TENANT_A)
        assert first.undone_action_type == "PAYMENT"
        assert first.action_id == payment.payment_id
        assert _state(stocked_store_a.id)[0] == 1500

        second = undo_last_action(TENANT_A)
        assert second.undone_action_type == "SALE"
        assert second.action_id == sale_a.sales_record_id
        assert _state(stocked_store_a.id) == (0, {product_a.id: 10})

        with pytest.raises(PreconditionError, match="No actions to undo"):
            undo_last_action(TENANT_A)

    def test_undo_with_no_history(self, db_session, user_a):
        with pytest.raises(PreconditionError, match="No actions to undo"):
            undo_last_action(TENANT_A)

    def test_undo_skips_entries_voided_explicitly(self, db_session, stocked_store_a, product_a, sale_a):
        payment = payment_service.record_payment(stocked_store_a.id, 300, TENANT_A)
        void_entry(payment.payment_id, "PAYMENT", stocked_store_a.id, TENANT_A)

        result = undo_last_action(TENANT_A)

        assert result.action_id == sale_a.sales_record_id
        assert _state(stocked_store_a.id) == (0, {product_a.id: 10})

    def test_undo_marks_stale_activity_when_record_already_voided(self, db_session, stocked_store_a, sale_a):
        payment = payment_service.record_payment(stocked_store_a.id, 300, TENANT_A)
        record = db_session.get(Payment, payment.payment_id)
        record.voided = True
        db_session.commit()

        result = undo_last_action(TENANT_A)

        assert result.action_id == sale_a.sales_record_id
        db_session.expire_all()
        entry = db_session.query(ActivityLogEntry).filter_by(action_id=payment.payment_id).one()
        assert entry.voided is True

    def test_undo_ignores_count_without_sale(self, db_session, stocked_store_a, product_a):
        count_service.record_stock_count(stocked_store_a.id, [(product_a.id, 10)], TENANT_A)

        with pytest.raises(PreconditionError):
            undo_last_action(TENANT_A)

    def test_undo_with_missing_record(self, db_session, store_a):
        payment = payment_service.record_payment(store_a.id, 300, TENANT_A)
        db_session.query(Payment).filter_by(id=payment.payment_id).delete()
        db_session.commit()

        with pytest.raises(PreconditionError, match="record missing"):
            undo_last_action(TENANT_A)

        assert _state(store_a.id)[0] == -300
