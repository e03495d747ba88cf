"""Pytest configuration and shared fixtures for the Lokal API tests.

- Each test gets a fresh app on an in-memory database
- Auth headers carry a JWT for any user id
- Stripe calls are patched per test, never sent
"""

import pytest
from flask_jwt_extended import create_access_token

from lokal import create_app
from lokal.config import TestConfig
from lokal.extensions import db
from lokal.model import Receipt


@pytest.fixture(scope="function")
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Build Authorization headers for a user id."""
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def add_receipt(app):
    """Insert a receipt through the app's own session and return its id."""
    def _add(**fields):
        with app.app_context():
            r = Receipt(**fields)
            db.session.add(r)
            db.session.commit()
            return r.id
    return _add


@pytest.fixture
def receipts(app):
    """All stored receipts as column dicts."""
    def _all(**filters):
        with app.app_context():
            return [r.as_dict() for r in Receipt.query.filter_by(**filters).all()]
    return _all
