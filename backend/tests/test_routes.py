# Overview: Pytest coverage for the HTTP API: identity headers, status mapping, payload shapes.

import pytest

from conftest import TENANT_A, TENANT_B, tenant_headers


@pytest.fixture
def headers_a(user_a):
    return tenant_headers(TENANT_A)


@pytest.fixture
def headers_b(user_b):
    return tenant_headers(TENANT_B)


class TestIdentity:
    def test_health_needs_no_identity(self, client, db_session):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}

    def test_missing_header_is_401(self, client, db_session):
        assert client.get("/api/stores").status_code == 401

    def test_unknown_user_is_403(self, client, db_session):
        response = client.get("/api/stores", headers=tenant_headers("stranger"))
        assert response.status_code == 403

    def test_inactive_user_is_403(self, client, db_session, user_a):
        user_a.active = False
        db_session.commit()

        response = client.get("/api/stores", headers=tenant_headers(TENANT_A))
        assert response.status_code == 403

    def test_admin_only_routes(self, client, db_session, headers_b):
        assert client.post("/api/admin/reset", headers=headers_b).status_code == 403
        assert client.get("/api/admin/users", headers=headers_b).status_code == 403


class TestStoreAndCatalogRoutes:
    def test_create_and_list_store(self, client, db_session, headers_a):
        response = client.post("/api/stores", json={"name": "Market Stall"}, headers=headers_a)
        assert response.status_code == 201
        store = response.get_json()
        assert store["tenant_id"] == TENANT_A

        listed = client.get("/api/stores", headers=headers_a).get_json()
        assert [s["id"] for s in listed] == [store["id"]]

        balance = client.get(f"/api/stores/{store['id']}/balance", headers=headers_a).get_json()
        assert balance["current_balance_cents"] == 0
        assert balance["current_stock"] == {}

    def test_create_store_without_name_is_400(self, client, db_session, headers_a):
        response = client.post("/api/stores", json={}, headers=headers_a)
        assert response.status_code == 400

    def test_unknown_store_is_404(self, client, db_session, headers_a):
        assert client.get("/api/stores/missing", headers=headers_a).status_code == 404

    def test_foreign_store_is_403(self, client, db_session, store_b, headers_a):
        response = client.patch(f"/api/stores/{store_b.id}", json={"name": "x"}, headers=headers_a)
        assert response.status_code == 403

    def test_product_with_chosen_id(self, client, db_session, headers_a):
        response = client.post(
            "/api/products",
            json={"id": "jar-large", "name": "Large Jar", "default_price_cents": 900},
            headers=headers_a,
        )
        assert response.status_code == 201
        assert response.get_json()["id"] == "jar-large"

    def test_pricing_override_roundtrip(self, client, db_session, store_a, product_a, headers_a):
        url = f"/api/stores/{store_a.id}/pricing/{product_a.id}"

        assert client.put(url, json={"price_cents": 450}, headers=headers_a).status_code == 200
        rows = client.get(f"/api/stores/{store_a.id}/pricing", headers=headers_a).get_json()
        assert [r["price_cents"] for r in rows] == [450]

        assert client.delete(url, headers=headers_a).status_code == 204
        assert client.delete(url, headers=headers_a).status_code == 404


class TestLedgerRoutes:
    def test_delivery_count_payment_flow(self, client, db_session, store_a, product_a, headers_a):
        base = f"/api/stores/{store_a.id}"

        delivery = client.post(f"{base}/deliveries", json={"product_id": product_a.id, "quantity": 10}, headers=headers_a)
        assert delivery.status_code == 201
        assert delivery.get_json()["stock_after"] == 10

        count = client.post(f"{base}/counts", json={"counts": [{"product_id": product_a.id, "quantity": 6}]}, headers=headers_a)
        assert count.status_code == 201
        assert count.get_json()["total_amount_cents"] == 2000

        payment = client.post(f"{base}/payments", json={"amount_cents": 1500, "note": "cash"}, headers=headers_a)
        assert payment.status_code == 201
        assert payment.get_json()["balance_after_cents"] == 500

        history = client.get(f"{base}/history", headers=headers_a).get_json()
        by_type = {entry["type"]: entry for entry in history}
        assert by_type["PAYMENT"]["amount_cents"] == -1500
        assert by_type["SALE"]["amount_cents"] == 2000
        assert by_type["SALE"]["can_void"] is True
        assert by_type["DELIVERY"]["can_void"] is False

    def test_over_count_is_400_with_product(self, client, db_session, stocked_store_a, product_a, headers_a):
        response = client.post(
            f"/api/stores/{stocked_store_a.id}/counts",
            json={"counts": [{"product_id": product_a.id, "quantity": 11}]},
            headers=headers_a,
        )

        assert response.status_code == 400
        body = response.get_json()
        assert body["product_id"] == product_a.id
        assert "exceeds tracked stock" in body["error"]

    def test_counts_must_be_list(self, client, db_session, stocked_store_a, headers_a):
        response = client.post(f"/api/stores/{stocked_store_a.id}/counts", json={"counts": "all"}, headers=headers_a)
        assert response.status_code == 400

    @pytest.mark.parametrize("counts", [[5], ["ab"], [{"product_id": None, "quantity": 1}]])
    def test_malformed_count_entries_are_400(self, client, db_session, stocked_store_a, headers_a, counts):
        response = client.post(f"/api/stores/{stocked_store_a.id}/counts", json={"counts": counts}, headers=headers_a)
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_payment_requires_amount(self, client, db_session, store_a, headers_a):
        response = client.post(f"/api/stores/{store_a.id}/payments", json={}, headers=headers_a)
        assert response.status_code == 400

    def test_void_then_double_void_is_409(self, client, db_session, store_a, headers_a):
        payment = client.post(f"/api/stores/{store_a.id}/payments", json={"amount_cents": 300}, headers=headers_a).get_json()
        body = {"entry_id": payment["payment_id"], "entry_type": "PAYMENT", "store_id": store_a.id}

        first = client.post("/api/ledger/void", json=body, headers=headers_a)
        assert first.status_code == 200
        assert first.get_json()["balance_after_cents"] == 0

        assert client.post("/api/ledger/void", json=body, headers=headers_a).status_code == 409

    def test_void_missing_fields_is_400(self, client, db_session, headers_a):
        assert client.post("/api/ledger/void", json={"entry_type": "SALE"}, headers=headers_a).status_code == 400

    def test_undo_and_activity(self, client, db_session, store_a, headers_a):
        client.post(f"/api/stores/{store_a.id}/payments", json={"amount_cents": 300}, headers=headers_a)

        activity = client.get("/api/ledger/activity", headers=headers_a).get_json()
        assert [a["action_type"] for a in activity] == ["PAYMENT"]

        undo = client.post("/api/ledger/undo", headers=headers_a)
        assert undo.status_code == 200
        assert undo.get_json()["undone_action_type"] == "PAYMENT"

        assert client.get("/api/ledger/activity", headers=headers_a).get_json() == []
        assert client.post("/api/ledger/undo", headers=headers_a).status_code == 409


class TestReportAndAdminRoutes:
    def test_dashboard(self, client, db_session, stocked_store_a, product_a, headers_a):
        client.post(
            f"/api/stores/{stocked_store_a.id}/counts",
            json={"counts": [{"product_id": product_a.id, "quantity": 8}]},
            headers=headers_a,
        )

        body = client.get("/api/reports/dashboard", headers=headers_a).get_json()

        assert body["total_outstanding_cents"] == 1000
        assert body["sales_today_count"] == 1
        assert [s["store_id"] for s in body["stores_with_debt"]] == [stocked_store_a.id]

    def test_summary_bad_range_is_400(self, client, db_session, headers_a):
        response = client.get("/api/reports/summary?range=next-year", headers=headers_a)
        assert response.status_code == 400

    def test_summary_needs_both_bounds(self, client, db_session, headers_a):
        response = client.get("/api/reports/summary?start=2026-01-01T00:00:00Z", headers=headers_a)
        assert response.status_code == 400

    def test_admin_reset(self, client, db_session, stocked_store_a, headers_a):
        response = client.post("/api/admin/reset", headers=headers_a)

        assert response.status_code == 200
        assert response.get_json()["deleted"]["stores"] == 1
        assert client.get("/api/stores", headers=headers_a).get_json() == []

    def test_admin_whitelists_user(self, client, db_session, headers_a):
        response = client.post(
            "/api/admin/users",
            json={"uid": "new-uid", "email": "new@acme.test", "role": "staff"},
            headers=headers_a,
        )
        assert response.status_code == 201

        users = client.get("/api/admin/users", headers=headers_a).get_json()
        assert {u["id"] for u in users} == {TENANT_A, "new-uid"}
