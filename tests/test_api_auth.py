from fastapi.testclient import TestClient

from app import app
from conftest import ADMIN_PASSWORD
from core.dependencies import get_storage
from core.exceptions import InfrastructureError
from utils import bootstrap as bootstrap_module

COOKIE = "carnival_session"


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_register_logs_in_and_hides_password(client):
    r = client.post(
        "/api/register",
        json={"username": "alice", "password": "alice-pass", "email": "alice@example.com"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["username"] == "alice"
    assert body["role"] == "user"
    assert "password" not in body
    assert client.cookies.get(COOKIE)

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["id"] == body["id"]


def test_register_cannot_choose_role(client):
    r = client.post(
        "/api/register",
        json={"username": "mallory", "password": "pw", "role": "admin"},
    )
    assert r.status_code == 201
    assert r.json()["role"] == "user"


def test_register_duplicate_username_is_conflict(client, make_client):
    assert client.post("/api/register", json={"username": "alice", "password": "pw"}).status_code == 201
    r = make_client().post("/api/register", json={"username": "ALICE", "password": "pw"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Username already exists"


def test_register_validation_errors(client):
    r = client.post("/api/register", json={"username": "", "password": "pw"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Validation failed"
    assert body["errors"][0]["field"] == "username"


def test_login_and_current_user(client):
    r = client.post("/api/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    assert r.json()["role"] == "admin"
    assert client.get("/api/user").json()["username"] == "admin"


def test_login_is_case_insensitive_on_username(client):
    r = client.post("/api/login", json={"username": "ADMIN", "password": ADMIN_PASSWORD})
    assert r.status_code == 200


def test_login_failures_look_the_same(client):
    wrong_password = client.post("/api/login", json={"username": "admin", "password": "nope"})
    unknown_user = client.post("/api/login", json={"username": "ghost", "password": "nope"})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()
    assert not client.cookies.get(COOKIE)


def test_missing_credentials_are_validation_errors(client):
    r = client.post("/api/login", json={"username": "admin"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "password"


def test_anonymous_current_user_is_unauthorized(client):
    assert client.get("/api/user").status_code == 401


def test_garbage_cookie_is_anonymous(make_client):
    c = make_client()
    r = c.get("/api/user", headers={"Cookie": f"{COOKIE}=garbage"})
    assert r.status_code == 401


def test_logout_invalidates_session_server_side(admin_client, make_client):
    token = admin_client.cookies.get(COOKIE)
    r = admin_client.post("/api/logout")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert admin_client.get("/api/user").status_code == 401

    # Replaying the old cookie does not bring the session back.
    replay = make_client().get("/api/user", headers={"Cookie": f"{COOKIE}={token}"})
    assert replay.status_code == 401


def test_logout_without_session_is_ok(client):
    assert client.post("/api/logout").status_code == 200


def test_default_admin_can_log_in_when_no_password_configured(storage, monkeypatch):
    monkeypatch.setattr(bootstrap_module, "ADMIN_PASSWORD", None)
    bootstrap_module.bootstrap(storage)
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        c = TestClient(app)
        r = c.post("/api/login", json={"username": "admin", "password": "password"})
        assert r.status_code == 200
        assert r.json()["role"] == "admin"
        assert c.get("/api/users").status_code == 200
    finally:
        app.dependency_overrides.clear()


def test_session_storage_failure_is_internal_error(admin_client, seeded_storage, monkeypatch):
    def broken(session_id):
        raise InfrastructureError("session store unavailable")

    monkeypatch.setattr(seeded_storage, "get_session", broken)
    r = admin_client.get("/api/user")
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
