"""
Pytest configuration and fixtures for the Run Tracker API tests.

Provides:
- In-memory SQLite database, recreated for every test
- TokenService / AccountStore / AuthenticationFlow wired like the app does it
- Flask app + test client built with TestingConfig
- helpers that sign up and log in accounts over HTTP
"""
import os

# Must be set before `models` is imported: the storage singleton reads it once
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"

import pytest

from api import create_app
from api.config import TestingConfig
from models import storage
from models.account import ADMIN
from models.account_store import AccountStore
from utils.auth_flow import AuthenticationFlow
from utils.security import TokenConfig, TokenService

PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def clean_db():
    storage.drop_all()
    storage.reload()
    yield
    storage.close()


@pytest.fixture
def token_config():
    return TokenConfig(secret=TestingConfig.JWT_SECRET)


@pytest.fixture
def tokens(token_config):
    return TokenService(token_config)


@pytest.fixture
def store():
    return AccountStore(storage)


@pytest.fixture
def flow(store, tokens):
    return AuthenticationFlow(store, tokens)


@pytest.fixture
def app():
    return create_app("testing")


@pytest.fixture
def client(app):
    return app.test_client()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Sign up + log in over HTTP; returns account data and tokens."""
    def _register(email="runner@example.com", password=PASSWORD, first="Ada", last="Lovelace"):
        resp = client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "firstName": first, "lastName": last},
        )
        assert resp.status_code == 201, resp.get_json()
        account = resp.get_json()["data"]
        resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        body = resp.get_json()
        return {
            "account": account,
            "token": body["token"],
            "refresh": body["refreshToken"],
            "headers": bearer(body["token"]),
        }

    return _register


@pytest.fixture
def admin(client, register, store):
    """An ADMIN account, logged in after promotion so its token carries the role."""
    info = register(email="admin@example.com")
    store.update_fields(info["account"]["accountId"], role=ADMIN)
    resp = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    body = resp.get_json()
    info.update(token=body["token"], refresh=body["refreshToken"], headers=bearer(body["token"]))
    return info
