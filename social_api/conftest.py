"""Shared fixtures: a fresh SQLite database and app per test."""

import pytest
from fastapi.testclient import TestClient

from social_api.config import Settings
from social_api.main import create_app

TEST_SECRET = "test-secret-key-for-unit-tests-1234567890"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        secret_key=TEST_SECRET,
        database_url=f"sqlite:///{tmp_path / 'social.db'}",
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the client runs the lifespan, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(name="Alice", email="alice@example.com", password="pass1234"):
        resp = client.post("/api/users/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp
    return _register


@pytest.fixture
def login(client, register):
    """Register (if needed) and log in; returns the x-auth-token header."""
    def _login(name="Alice", email="alice@example.com", password="pass1234"):
        client.post("/api/users/register", json={"name": name, "email": email, "password": password})
        resp = client.post("/api/users/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"x-auth-token": resp.json()["token"]}
    return _login


@pytest.fixture
def alice(login):
    return login()


@pytest.fixture
def bob(login):
    return login(name="Bob", email="bob@example.com", password="secure123")


@pytest.fixture
def user_id(client):
    def _user_id(headers) -> str:
        return client.get("/api/users/me", headers=headers).json()["user"]["id"]
    return _user_id
