"""
Tests for registration, login, /me and the x-auth-token gate.
"""

import inspect

from fastapi.routing import APIRoute

from social_api.database import DBUser
from social_api.security import Identity


def _count_users(app) -> int:
    db = app.state.session_factory()
    try:
        return db.query(DBUser).count()
    finally:
        db.close()


# --------------- Registration ---------------

def test_register_success(client, app):
    resp = client.post("/api/users/register", json={"name": "A", "email": "a@x.com", "password": "p"})
    assert resp.status_code == 200
    assert resp.json() == {"msg": "Registration is Success"}
    assert _count_users(app) == 1


def test_register_reports_every_missing_field(client, app):
    resp = client.post("/api/users/register", json={"name": "", "email": "   "})
    assert resp.status_code == 400
    errors = resp.json()["errors"]
    assert [e["param"] for e in errors] == ["name", "email", "password"]
    assert errors[0]["msg"] == "Name is Required"
    assert _count_users(app) == 0


def test_register_without_body(client):
    resp = client.post("/api/users/register")
    assert resp.status_code == 400
    assert len(resp.json()["errors"]) == 3


def test_register_duplicate_email(client, app, register):
    register(email="a@x.com")
    resp = client.post("/api/users/register", json={"name": "Other", "email": "A@X.com", "password": "other"})
    assert resp.status_code == 401
    assert resp.json()["errors"][0]["msg"] == "User already exists"
    assert _count_users(app) == 1


def test_register_rejects_password_bcrypt_cannot_hash(client, app):
    resp = client.post("/api/users/register", json={"name": "A", "email": "a@x.com", "password": "x" * 100})
    assert resp.status_code == 400
    assert resp.json()["errors"] == [
        {"msg": "Password must be at most 72 bytes", "param": "password", "value": "x" * 100, "location": "body"}
    ]
    assert _count_users(app) == 0


def test_register_accepts_72_byte_password(client):
    password = "\u00e9" * 36
    assert client.post("/api/users/register", json={"name": "A", "email": "a@x.com", "password": password}).status_code == 200
    login = client.post("/api/users/login", json={"email": "a@x.com", "password": password})
    assert login.status_code == 200


def test_register_wrong_type_uses_error_envelope(client):
    resp = client.post("/api/users/register", json={"name": ["A"], "email": "a@x.com", "password": "p"})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["param"] == "name"


def test_register_stores_hash_and_avatar(client, app, register):
    register(email="carol@example.com", password="secret")
    db = app.state.session_factory()
    try:
        user = db.query(DBUser).one()
    finally:
        db.close()
    assert user.password != "secret"
    assert user.is_admin is False
    assert user.avatar.startswith("https://www.gravatar.com/avatar/")


# --------------- Login ---------------

def test_login_token_carries_stored_user_id(client, app, register):
    register(name="Bob", email="bob@example.com", password="secure123")
    resp = client.post("/api/users/login", json={"email": "bob@example.com", "password": "secure123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["msg"] == "Login is Success"

    identity = app.state.token_service.verify(body["token"])
    db = app.state.session_factory()
    try:
        stored = db.query(DBUser).filter(DBUser.email == "bob@example.com").one()
    finally:
        db.close()
    assert identity == Identity(id=stored.id, name="Bob")


def test_login_wrong_password(client, register):
    register(email="bob@example.com", password="secure123")
    resp = client.post("/api/users/login", json={"email": "bob@example.com", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["errors"][0]["msg"] == "Invalid Credentials"


def test_login_unknown_email(client):
    resp = client.post("/api/users/login", json={"email": "ghost@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_login_missing_fields(client):
    resp = client.post("/api/users/login", json={"email": "bob@example.com"})
    assert resp.status_code == 400
    assert resp.json()["errors"] == [
        {"msg": "Password is Required", "param": "password", "value": None, "location": "body"}
    ]


# --------------- /me and the token gate ---------------

def test_me_omits_password(client, alice):
    resp = client.get("/api/users/me", headers=alice)
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"
    assert "password" not in user


def test_me_without_token(client):
    resp = client.get("/api/users/me")
    assert resp.status_code == 401
    assert resp.json()["errors"][0]["msg"] == "No Token Provided, Authentication Denied"


def test_me_with_invalid_token(client):
    resp = client.get("/api/users/me", headers={"x-auth-token": "garbage.token.here"})
    assert resp.status_code == 401
    assert resp.json()["errors"][0]["msg"] == "Invalid Token"


def test_authorization_header_is_not_accepted(client, alice):
    resp = client.get("/api/users/me", headers={"Authorization": f"Bearer {alice['x-auth-token']}"})
    assert resp.status_code == 401


def test_bearer_prefix_in_custom_header(client, alice):
    resp = client.get("/api/users/me", headers={"x-auth-token": f"Bearer {alice['x-auth-token']}"})
    assert resp.status_code == 200


def test_me_for_deleted_user(client, app):
    token = app.state.token_service.mint(Identity(id="missing", name="Ghost"))
    resp = client.get("/api/users/me", headers={"x-auth-token": token})
    assert resp.status_code == 404


def test_scenario_register_login_me(client):
    assert client.post("/api/users/register", json={"name": "A", "email": "a@x.com", "password": "p"}).status_code == 200
    assert client.post("/api/users/register", json={"name": "A", "email": "a@x.com", "password": "p"}).status_code == 401

    login = client.post("/api/users/login", json={"email": "a@x.com", "password": "p"})
    assert login.status_code == 200

    me = client.get("/api/users/me", headers={"x-auth-token": login.json()["token"]})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "a@x.com"
    assert "password" not in me.json()["user"]


# --------------- Misc ---------------

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["service"] == "social"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "errors" in resp.json()


def test_api_handlers_run_in_threadpool(app):
    # bcrypt and the SQLAlchemy session block, so handlers must not be coroutines
    api_routes = [r for r in app.routes if isinstance(r, APIRoute) and r.path.startswith("/api/")]
    assert api_routes
    assert [r.path for r in api_routes if inspect.iscoroutinefunction(r.endpoint)] == []
