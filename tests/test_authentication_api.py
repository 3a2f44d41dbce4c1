from fastapi.testclient import TestClient

from task_manager.api.main import create_app
from task_manager.core.config import Settings

ADMIN_EMAIL = "hexlet@example.com"
ADMIN_PASSWORD = "qwerty"


def test_login_returns_plain_text_token(anon_client, app):
    r = anon_client.post("/api/login", json={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")

    principal = app.state.tokens.decode(r.text)
    assert principal.subject == ADMIN_EMAIL


def test_login_bad_password(anon_client):
    r = anon_client.post("/api/login", json={"username": ADMIN_EMAIL, "password": "nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Bad credentials"
    assert r.headers.get("WWW-Authenticate") == "Bearer"


def test_login_unknown_user(anon_client):
    r = anon_client.post("/api/login", json={"username": "ghost@example.com", "password": "qwerty"})
    assert r.status_code == 401


def test_login_requires_both_fields(anon_client):
    r = anon_client.post("/api/login", json={"username": ADMIN_EMAIL})
    assert r.status_code == 400


def test_token_opens_protected_routes(anon_client, token):
    assert anon_client.get("/api/users").status_code == 401
    r = anon_client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_protected_routes_require_token(anon_client):
    for path in ("/api/users/1", "/api/task_statuses", "/api/labels", "/api/tasks"):
        r = anon_client.get(path)
        assert r.status_code == 401, path
        assert r.headers.get("WWW-Authenticate") == "Bearer"


def test_invalid_token_rejected(anon_client):
    r = anon_client.get("/api/tasks", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid bearer token"


def test_token_signed_with_other_secret_rejected(anon_client):
    other = create_app(
        Settings(
            database_path=":memory:",
            jwt_secret="another-secret",
            audit_log_path=None,
        )
    )
    foreign = TestClient(other).post(
        "/api/login", json={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    ).text
    r = anon_client.get("/api/tasks", headers={"Authorization": f"Bearer {foreign}"})
    assert r.status_code == 401
    other.state.store.close()


def test_token_for_deleted_user_cannot_create_tasks(client, anon_client, store):
    r = anon_client.post("/api/users", json={"email": "temp@example.com", "password": "pass"})
    assert r.status_code == 201
    user_id = r.json()["id"]
    tok = anon_client.post("/api/login", json={"username": "temp@example.com", "password": "pass"}).text

    assert client.delete(f"/api/users/{user_id}").status_code == 204

    r = anon_client.post(
        "/api/tasks",
        json={"title": "orphan", "status": "draft"},
        headers={"Authorization": f"Bearer {tok}"},
    )
    assert r.status_code == 401


def test_auth_disabled_acts_as_admin(tmp_path):
    app = create_app(
        Settings(
            database_path=str(tmp_path / "open.db"),
            auth_enabled=False,
            audit_log_path=None,
        )
    )
    c = TestClient(app)
    r = c.post("/api/tasks", json={"title": "no token", "status": "draft"})
    assert r.status_code == 201
    admin = app.state.store.users.find_by_email(ADMIN_EMAIL)
    assert r.json()["author_id"] == admin.id
    app.state.store.close()
