"""
Pytest fixtures for consigntrack backend tests.

Provides test database setup, two-tenant fixtures, and a test client.
"""

import pytest

from consigntrack import create_app
from consigntrack.config import TestConfig
from consigntrack.extensions import db
from consigntrack.models import User
from consigntrack.services import inventory_service, products_service, store_service


TENANT_A = "tenant-a-uid"
TENANT_B = "tenant-b-uid"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def user_a(db_session):
    """Owner of tenant A (admin)."""
    user = User(id=TENANT_A, email="owner@acme.test", role="admin", active=True)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def user_b(db_session):
    """Owner of tenant B (staff)."""
    user = User(id=TENANT_B, email="owner@beta.test", role="staff", active=True)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def store_a(db_session, user_a):
    """Store in tenant A."""
    return store_service.create_store(name="Corner Shop", tenant_id=TENANT_A, phone="+15550001")


@pytest.fixture(scope='function')
def store_b(db_session, user_b):
    """Store in tenant B."""
    return store_service.create_store(name="Beta Kiosk", tenant_id=TENANT_B)


@pytest.fixture(scope='function')
def product_a(db_session, user_a):
    """Product A in tenant A, default price 5.00."""
    return products_service.create_product(name="Honey Jar", default_price_cents=500, tenant_id=TENANT_A)


@pytest.fixture(scope='function')
def product_a2(db_session, user_a):
    """Second product in tenant A, default price 2.50."""
    return products_service.create_product(name="Beeswax Candle", default_price_cents=250, tenant_id=TENANT_A)


@pytest.fixture(scope='function')
def product_b(db_session, user_b):
    """Product in tenant B."""
    return products_service.create_product(name="Beta Soap", default_price_cents=300, tenant_id=TENANT_B)


@pytest.fixture(scope='function')
def stocked_store_a(store_a, product_a):
    """Store A holding 10 units of product A, balance 0."""
    inventory_service.record_delivery(store_a.id, product_a.id, 10, TENANT_A)
    return store_a


def tenant_headers(tenant_id: str) -> dict:
    """Helper to create tenant identity headers."""
    return {'X-Tenant-Id': tenant_id}
