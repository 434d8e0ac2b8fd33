"""
Pytest fixtures for stall POS backend tests.

Provides the application on an in-memory database, a per-test table wipe,
a test client and small catalog factories.
"""

import pytest

from stallpos import create_app
from stallpos.extensions import db
from stallpos.models import Employee, Item


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STALL_TIMEZONE': 'UTC',
        'STORAGE_RETRY_ATTEMPTS': 2,
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
def make_employee(db_session):
    def _make(username="cook", confirmation_mode="manual"):
        employee = Employee(username=username, employee_code=username.upper(), confirmation_mode=confirmation_mode)
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make


@pytest.fixture(scope='function')
def make_item(db_session):
    def _make(name="Tea", price_cents=2000, cost_per_unit_cents=1000, stock_type="unlimited",
              stock_qty=9999, employee=None):
        item = Item(
            name=name,
            price_cents=price_cents,
            cost_per_unit_cents=cost_per_unit_cents,
            stock_type=stock_type,
            stock_qty=stock_qty,
            assigned_employee_id=employee.id if employee else None,
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make
