"""
HTTP-level tests for the auth and accounts blueprints.
"""
import pytest

from api import create_app
from api.config import TestingConfig
from models.account import LOGGED_OUT

PASSWORD = "correct-horse-battery"


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_auth_routes_are_mounted_under_auth_prefix(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    for path in ("signup", "login", "refresh", "logout", "me"):
        assert f"/api/v1/auth/{path}" in rules
        assert f"/api/v1/{path}" not in rules


def test_app_refuses_to_start_without_secret(monkeypatch):
    monkeypatch.setattr(TestingConfig, "JWT_SECRET", None)
    with pytest.raises(RuntimeError):
        create_app("testing")


class TestSignup:
    def test_returns_sanitized_account(self, client):
        resp = client.post(
            "/api/v1/auth/signup",
            json={"email": "New@Example.com", "password": PASSWORD, "firstName": "N", "lastName": "E"},
        )
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["accountId"]
        assert data["email"] == "new@example.com"
        assert data["role"] == "USER"
        assert "password" not in data and "passwordHash" not in data and "refreshToken" not in data

    def test_duplicate_is_conflict(self, client, register):
        register(email="dup@example.com")
        resp = client.post(
            "/api/v1/auth/signup",
            json={"email": "dup@example.com", "password": PASSWORD, "firstName": "D", "lastName": "U"},
        )
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "DUPLICATE_ACCOUNT"

    def test_validation(self, client):
        resp = client.post("/api/v1/auth/signup", json={"email": "not-an-email", "password": "short"})
        assert resp.status_code == 422
        details = resp.get_json()["details"]
        assert {"email", "password", "firstName", "lastName"} <= set(details)


class TestLogin:
    def test_returns_token_pair(self, client, register):
        info = register()
        assert len(info["token"].split(".")) == 3
        assert len(info["refresh"].split(".")) == 3

    def test_wrong_password(self, client, register):
        register()
        resp = client.post("/api/v1/auth/login", json={"email": "runner@example.com", "password": "wrong-password"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "INVALID_CREDENTIALS"

    def test_unknown_email(self, client):
        resp = client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "NOT_FOUND"

    def test_missing_fields(self, client):
        resp = client.post("/api/v1/auth/login", json={})
        assert resp.status_code == 422


class TestRefresh:
    def test_rotation_and_replay(self, client, register):
        info = register()
        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": info["refresh"]})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["token"] != info["token"]
        assert body["refreshToken"] != info["refresh"]

        replay = client.post("/api/v1/auth/refresh", json={"refreshToken": info["refresh"]})
        assert replay.status_code == 404

    def test_invalid_token(self, client):
        resp = client.post("/api/v1/auth/refresh", json={"refreshToken": "garbage"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "INVALID_TOKEN"

    def test_requires_body(self, client):
        assert client.post("/api/v1/auth/refresh", json={}).status_code == 422


class TestLogout:
    def test_logout_self(self, client, register, store):
        info = register()
        resp = client.post("/api/v1/auth/logout", json={}, headers=info["headers"])
        assert resp.status_code == 204
        assert store.find_by_id(info["account"]["accountId"]).refresh_token == LOGGED_OUT

        again = client.post("/api/v1/auth/refresh", json={"refreshToken": info["refresh"]})
        assert again.status_code == 404

    def test_cannot_log_out_someone_else(self, client, register):
        me = register(email="me@example.com")
        other = register(email="other@example.com")
        resp = client.post(
            "/api/v1/auth/logout",
            json={"accountId": other["account"]["accountId"]},
            headers=me["headers"],
        )
        assert resp.status_code == 403

    def test_admin_can_log_out_anyone(self, client, register, admin):
        other = register(email="other@example.com")
        resp = client.post(
            "/api/v1/auth/logout",
            json={"accountId": other["account"]["accountId"]},
            headers=admin["headers"],
        )
        assert resp.status_code == 204


class TestAccounts:
    def test_me(self, client, register):
        info = register()
        resp = client.get("/api/v1/auth/me", headers=info["headers"])
        assert resp.status_code == 200
        assert resp.get_json()["data"]["accountId"] == info["account"]["accountId"]

    def test_get_own_account_only(self, client, register):
        me = register(email="me@example.com")
        other = register(email="other@example.com")
        own = client.get(f"/api/v1/accounts/{me['account']['accountId']}", headers=me["headers"])
        assert own.status_code == 200
        foreign = client.get(f"/api/v1/accounts/{other['account']['accountId']}", headers=me["headers"])
        assert foreign.status_code == 403

    def test_update_profile(self, client, register):
        info = register()
        account_id = info["account"]["accountId"]
        resp = client.patch(f"/api/v1/accounts/{account_id}", json={"firstName": "Grace"}, headers=info["headers"])
        assert resp.status_code == 200
        assert resp.get_json()["data"]["firstName"] == "Grace"

    def test_email_is_immutable(self, client, register):
        info = register()
        account_id = info["account"]["accountId"]
        resp = client.patch(
            f"/api/v1/accounts/{account_id}", json={"email": "new@example.com"}, headers=info["headers"]
        )
        assert resp.status_code == 422
        assert "email" in resp.get_json()["details"]

    def test_delete_account(self, client, register, store):
        info = register()
        account_id = info["account"]["accountId"]
        resp = client.delete(f"/api/v1/accounts/{account_id}", headers=info["headers"])
        assert resp.status_code == 204
        assert store.find_by_id(account_id) is None
        assert client.get(f"/api/v1/accounts/{account_id}", headers=info["headers"]).status_code == 404

    def test_admin_lists_and_promotes(self, client, register, admin):
        other = register(email="other@example.com")
        listing = client.get("/api/v1/accounts?limit=10", headers=admin["headers"])
        assert listing.status_code == 200
        assert listing.get_json()["meta"]["total"] == 2

        resp = client.put(
            f"/api/v1/accounts/{other['account']['accountId']}/role",
            json={"role": "ADMIN"},
            headers=admin["headers"],
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["role"] == "ADMIN"

    def test_role_must_be_known(self, client, register, admin):
        other = register(email="other@example.com")
        resp = client.put(
            f"/api/v1/accounts/{other['account']['accountId']}/role",
            json={"role": "ROOT"},
            headers=admin["headers"],
        )
        assert resp.status_code == 422
