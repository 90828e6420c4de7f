"""Shared test fixtures for the expense API tests."""

import pytest

from expense_api import create_app

TEST_PASSWORD = "Secret123"


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "APP_ENV": "testing",
        "DB_PATH": str(tmp_path / "expenses.db"),
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user and return (uid, bearer headers)."""

    def _register(email="alice@example.com", password=TEST_PASSWORD, display_name=None):
        body = {"email": email, "password": password}
        if display_name:
            body["displayName"] = display_name
        resp = client.post("/api/register", json=body)
        assert resp.status_code == 201, resp.get_json()
        data = resp.get_json()["data"]
        return data["uid"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def auth_headers(register):
    _, headers = register()
    return headers


@pytest.fixture
def add_expense(client):
    """POST an expense and return the created record."""

    def _add(headers, **fields):
        body = {"title": "Lunch", "amount": 10, "category": "Food"}
        body.update(fields)
        resp = client.post("/api/expenses", json=body, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _add
