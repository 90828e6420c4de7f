"""Tests for registration, login, logout and bearer-token handling."""

from datetime import timedelta

from flask_jwt_extended import create_access_token

TEST_PASSWORD = "Secret123"


def test_register_returns_uid_and_token(client):
    resp = client.post("/api/register", json={"email": "Bob@Example.com", "password": TEST_PASSWORD})

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["email"] == "bob@example.com"
    assert body["data"]["displayName"] == "bob"
    assert body["data"]["uid"]
    assert body["data"]["token"]


def test_register_duplicate_email(client, register):
    register("dup@example.com")
    resp = client.post("/api/register", json={"email": "dup@example.com", "password": TEST_PASSWORD})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Email already registered"


def test_register_rejects_weak_password(client):
    resp = client.post("/api/register", json={"email": "weak@example.com", "password": "abcdef"})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Validation failed"
    assert [e["field"] for e in body["errors"]] == ["password"]


def test_register_rejects_bad_email(client):
    resp = client.post("/api/register", json={"email": "not-an-email", "password": TEST_PASSWORD})

    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "email"


def test_register_rejects_non_string_display_name(client):
    resp = client.post(
        "/api/register", json={"email": "num@example.com", "password": TEST_PASSWORD, "displayName": 42}
    )

    assert resp.status_code == 400
    assert resp.get_json()["errors"] == [
        {"field": "displayName", "message": "Display name must be a string", "value": 42}
    ]


def test_login_success_updates_last_login(client, register):
    register("carol@example.com", display_name="Carol")
    resp = client.post("/api/login", json={"email": "carol@example.com", "password": TEST_PASSWORD})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["displayName"] == "Carol"
    assert data["lastLogin"].endswith("Z")
    assert data["token"]


def test_login_wrong_password(client, register):
    register("dave@example.com")
    resp = client.post("/api/login", json={"email": "dave@example.com", "password": "Wrong123"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_login_unknown_email(client):
    resp = client.post("/api/login", json={"email": "ghost@example.com", "password": TEST_PASSWORD})
    assert resp.status_code == 401


def test_profile(client, register):
    uid, headers = register("erin@example.com")
    resp = client.get("/api/profile", headers=headers)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["uid"] == uid
    assert data["email"] == "erin@example.com"
    assert data["emailVerified"] is False
    assert data["createdAt"].endswith("Z")


def test_missing_token(client):
    resp = client.get("/api/profile")

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Unauthorized: No token provided"


def test_malformed_token(client):
    resp = client.get("/api/profile", headers={"Authorization": "Bearer not.a.jwt"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Unauthorized: Invalid token"


def test_expired_token(app, client, register):
    uid, _ = register()
    with app.app_context():
        token = create_access_token(
            identity=uid, additional_claims={"ver": 0}, expires_delta=timedelta(seconds=-60)
        )
    resp = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Unauthorized: Token has expired"


def test_logout_revokes_existing_tokens(client, register):
    _, headers = register("frank@example.com")

    resp = client.post("/api/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["tokensValidAfterTime"] > 0

    resp = client.get("/api/profile", headers=headers)
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Unauthorized: Token has been revoked"

    login = client.post("/api/login", json={"email": "frank@example.com", "password": TEST_PASSWORD})
    fresh = {"Authorization": f"Bearer {login.get_json()['data']['token']}"}
    assert client.get("/api/profile", headers=fresh).status_code == 200


def test_token_for_unknown_user(app, client):
    with app.app_context():
        token = create_access_token(identity="no-such-user", additional_claims={"ver": 0})
    resp = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Unauthorized: Authentication failed"
