# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

SECURITY TESTS: Prove that every mutator refuses records owned by another
tenant and leaves them untouched.

Two tenants (A and B) each own a store and a product; every test acts as
tenant A against tenant B's records (or the reverse) and checks that:
1. TenantAccessError is raised
2. The foreign balance, stock and ledger are unchanged
3. Read helpers only ever return the caller's rows
"""

import logging

import pytest

from conftest import TENANT_A, TENANT_B
from consigntrack.models import Payment, Product, SalesRecord, Store, StorePricing
from consigntrack.services import (
    count_service,
    inventory_service,
    payment_service,
    pricing_service,
    products_service,
    reporting_service,
    store_service,
)
from consigntrack.services.balance_service import get_store_balance
from consigntrack.services.tenant_service import (
    TenantAccessError,
    assert_tenant_match,
    require_store,
    require_tenant_id,
    scoped_query,
)
from consigntrack.services.void_service import PreconditionError, undo_last_action, void_entry


@pytest.fixture
def stocked_store_b(store_b, product_b):
    inventory_service.record_delivery(store_b.id, product_b.id, 6, TENANT_B)
    return store_b


def _balance_b(store_b):
    balance = get_store_balance(store_b.id, TENANT_B)
    return balance["current_balance_cents"], balance["current_stock"]


class TestTenantServiceHelpers:
    """Test tenant_service helper functions."""

    def test_require_store_own_tenant(self, db_session, store_a):
        assert require_store(store_a.id, TENANT_A).id == store_a.id

    def test_require_store_cross_tenant(self, db_session, store_a, user_b):
        with pytest.raises(TenantAccessError):
            require_store(store_a.id, TENANT_B)

    def test_missing_stored_tenant_is_accepted(self, app):
        assert_tenant_match(None, TENANT_A)

    @pytest.mark.parametrize("tenant", [None, "", "   "])
    def test_blank_tenant_rejected(self, tenant):
        with pytest.raises(TenantAccessError):
            require_tenant_id(tenant)

    def test_scoped_query_only_returns_own_rows(self, db_session, store_a, store_b):
        assert [s.id for s in scoped_query(Store, TENANT_A).all()] == [store_a.id]
        assert [s.id for s in scoped_query(Store, TENANT_B).all()] == [store_b.id]

    def test_cross_tenant_denial_is_logged(self, app, db_session, store_b, user_a, caplog):
        with caplog.at_level(logging.WARNING, logger=app.logger.name):
            with pytest.raises(TenantAccessError):
                require_store(store_b.id, TENANT_A)

        assert any("Cross-tenant access denied" in r.getMessage() for r in caplog.records)


class TestCrossTenantMutators:
    """Tenant A acting on tenant B's records."""

    def test_update_store(self, db_session, store_b, user_a):
        with pytest.raises(TenantAccessError):
            store_service.update_store(store_b.id, {"name": "Hijacked"}, TENANT_A)

        assert db_session.get(Store, store_b.id).name == "Beta Kiosk"

    def test_update_product(self, db_session, product_b, user_a):
        with pytest.raises(TenantAccessError):
            products_service.update_product(product_b.id, {"default_price_cents": 1}, TENANT_A)

        assert db_session.get(Product, product_b.id).default_price_cents == 300

    def test_create_product_with_foreign_id(self, db_session, product_b, user_a):
        with pytest.raises(TenantAccessError):
            products_service.create_product("Copy", 100, TENANT_A, product_id=product_b.id)

        assert db_session.get(Product, product_b.id).tenant_id == TENANT_B

    def test_set_store_pricing_on_foreign_store(self, db_session, store_b, product_a):
        with pytest.raises(TenantAccessError):
            pricing_service.set_store_pricing(store_b.id, product_a.id, 1, TENANT_A)

        assert db_session.query(StorePricing).count() == 0

    def test_set_store_pricing_with_foreign_product(self, db_session, store_a, product_b):
        with pytest.raises(TenantAccessError):
            pricing_service.set_store_pricing(store_a.id, product_b.id, 1, TENANT_A)

    def test_delivery_to_foreign_store(self, db_session, stocked_store_b, product_b, user_a):
        with pytest.raises(TenantAccessError):
            inventory_service.record_delivery(stocked_store_b.id, product_b.id, 5, TENANT_A)

        assert _balance_b(stocked_store_b) == (0, {product_b.id: 6})

    def test_stock_count_on_foreign_store(self, db_session, stocked_store_b, product_b, user_a):
        with pytest.raises(TenantAccessError):
            count_service.record_stock_count(stocked_store_b.id, [(product_b.id, 1)], TENANT_A)

        assert _balance_b(stocked_store_b) == (0, {product_b.id: 6})
        assert db_session.query(SalesRecord).count() == 0

    def test_stock_count_naming_foreign_product(self, db_session, stocked_store_a, product_a, product_b):
        with pytest.raises(TenantAccessError):
            count_service.record_stock_count(stocked_store_a.id, [(product_b.id, 0)], TENANT_A)

        balance = get_store_balance(stocked_store_a.id, TENANT_A)
        assert balance["current_stock"] == {product_a.id: 10}
        assert product_b.id not in balance["current_stock"]

    def test_payment_on_foreign_store(self, db_session, store_b, user_a):
        with pytest.raises(TenantAccessError):
            payment_service.record_payment(store_b.id, 100, TENANT_A)

        assert db_session.query(Payment).count() == 0

    def test_void_foreign_sale(self, db_session, stocked_store_b, product_b, user_a):
        sale = count_service.record_stock_count(stocked_store_b.id, [(product_b.id, 4)], TENANT_B)

        with pytest.raises(TenantAccessError):
            void_entry(sale.sales_record_id, "SALE", stocked_store_b.id, TENANT_A)

        assert db_session.get(SalesRecord, sale.sales_record_id).voided is False
        assert _balance_b(stocked_store_b) == (600, {product_b.id: 4})

    def test_void_foreign_payment(self, db_session, store_b, user_a):
        payment = payment_service.record_payment(store_b.id, 250, TENANT_B)

        with pytest.raises(TenantAccessError):
            void_entry(payment.payment_id, "PAYMENT", store_b.id, TENANT_A)

        assert db_session.get(Payment, payment.payment_id).voided is False

    def test_undo_never_reaches_other_tenant(self, db_session, store_b, user_a):
        payment_service.record_payment(store_b.id, 250, TENANT_B)

        with pytest.raises(PreconditionError, match="No actions to undo"):
            undo_last_action(TENANT_A)

        assert _balance_b(store_b)[0] == -250


class TestCrossTenantReads:
    def test_balance_read_denied(self, db_session, store_b, user_a):
        with pytest.raises(TenantAccessError):
            get_store_balance(store_b.id, TENANT_A)

    def test_history_read_denied(self, db_session, store_b, user_a):
        with pytest.raises(TenantAccessError):
            reporting_service.store_history(store_b.id, TENANT_A)

    def test_listings_are_scoped(self, db_session, store_a, store_b, product_a, product_b):
        assert [s.id for s in store_service.list_stores(TENANT_A)] == [store_a.id]
        assert [p.id for p in products_service.list_products(TENANT_B)] == [product_b.id]
