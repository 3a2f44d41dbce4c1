from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_manager.api.main import create_app
from task_manager.core.config import Settings

ADMIN_EMAIL = "hexlet@example.com"
ADMIN_PASSWORD = "qwerty"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Fresh on-disk database per test; seeding and auth on, like a real start."""
    return Settings(
        env="test",
        database_path=str(tmp_path / "task_manager.db"),
        jwt_secret="test-secret",
        audit_log_path=tmp_path / "audit.log",
    )


@pytest.fixture()
def app(settings):
    app = create_app(settings)
    yield app
    if app.state.audit is not None:
        app.state.audit.close()
    app.state.store.close()


@pytest.fixture()
def store(app):
    return app.state.store


@pytest.fixture()
def anon_client(app):
    return TestClient(app)


@pytest.fixture()
def token(anon_client):
    r = anon_client.post("/api/login", json={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return r.text


@pytest.fixture()
def auth_headers(token):
    return {"Authorization": f"Bearer {token}", "X-Forwarded-For": "1.2.3.4"}


@pytest.fixture()
def client(app, auth_headers):
    return TestClient(app, headers=auth_headers)


@pytest.fixture()
def admin_id(store):
    return store.users.find_by_email(ADMIN_EMAIL).id
