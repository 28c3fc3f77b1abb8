"""
Pytest fixtures for the store ledger backend tests.

Provides test database setup, a test client, and small factories for
inventory items and customers.
"""

import pytest

from tindahan import create_app
from tindahan.extensions import db
from tindahan.services import credit_service, inventory_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_TIMEZONE': 'Asia/Manila',
        'NEW_ITEM_DEFAULT_STOCK': 100,
        'TRANSACTION_RETRY_ATTEMPTS': 3,
    })

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
def make_item(db_session):
    """Factory: create a committed inventory item and return it."""
    def _make(name="Lucky Me Pancit Canton", stock=10, price_cents=1500, cost_cents=1100):
        return inventory_service.add_item(patch={
            "name": name,
            "stock": stock,
            "price_cents": price_cents,
            "cost_cents": cost_cents,
        })
    return _make


@pytest.fixture(scope='function')
def make_customer(db_session):
    """Factory: create a committed customer with an optional opening credit."""
    def _make(name="Aling Nena", initial_amount_cents=0):
        return credit_service.add_customer(name, initial_amount_cents)
    return _make


@pytest.fixture(scope='function')
def item(make_item):
    return make_item()


@pytest.fixture(scope='function')
def customer(make_customer):
    return make_customer()


def line(item, quantity, unit_price_cents=None):
    """Build a sale/credit line for an existing item."""
    return {
        "item_id": item.id,
        "item_name": item.name,
        "quantity": quantity,
        "unit_price_cents": item.price_cents if unit_price_cents is None else unit_price_cents,
    }


def service_line(name, amount_cents):
    """A one-off line with no inventory item behind it."""
    return {"item_name": name, "quantity": 1, "unit_price_cents": amount_cents}
