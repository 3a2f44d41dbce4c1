from fastapi.testclient import TestClient

from task_manager.api.main import create_app
from task_manager.api.middleware.request_context import FixedWindowCounter
from task_manager.core.config import Settings


def _app(tmp_path, **overrides):
    cfg = {"database_path": str(tmp_path / "mw.db"), "audit_log_path": None, "jwt_secret": "test-secret"}
    cfg.update(overrides)
    return create_app(Settings(**cfg))


def test_request_id_header_generated(anon_client):
    r = anon_client.get("/api/health/live")
    assert r.status_code == 200
    assert len(r.headers["X-Request-Id"]) > 10


def test_request_id_passthrough(anon_client):
    rid = "test-rid-123"
    r = anon_client.get("/api/health/live", headers={"X-Request-Id": rid})
    assert r.headers.get("X-Request-Id") == rid


def test_request_id_on_unauthorized_response(anon_client):
    r = anon_client.get("/api/tasks", headers={"X-Request-Id": "rid-401"})
    assert r.status_code == 401
    assert r.headers.get("X-Request-Id") == "rid-401"


def test_rate_limit_hits_after_rpm(tmp_path):
    app = _app(tmp_path, rate_limit_enabled=True, rate_limit_rpm=2, trusted_proxies=["testclient"])
    c = TestClient(app)
    headers = {"X-Forwarded-For": "5.6.7.8"}

    r1 = c.get("/api/health/live", headers=headers)
    r2 = c.get("/api/health/live", headers=headers)
    r3 = c.get("/api/health/live", headers=headers)

    assert r1.status_code == 200
    assert r2.status_code == 200
    assert r3.status_code == 429
    assert r3.json()["detail"] == "Rate limit exceeded"

    # other clients have their own window
    assert c.get("/api/health/live", headers={"X-Forwarded-For": "9.9.9.9"}).status_code == 200
    # outside the API surface is never limited
    assert c.get("/health", headers=headers).status_code == 200
    app.state.store.close()


def test_security_headers_when_enabled(tmp_path):
    app = _app(tmp_path, security_headers_enabled=True)
    r = TestClient(app).get("/api/health/live")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    app.state.store.close()


def test_security_headers_off_by_default(anon_client):
    r = anon_client.get("/api/health/live")
    assert "X-Frame-Options" not in r.headers


def test_safe_error_middleware_hides_traceback(tmp_path):
    app = _app(tmp_path, auth_enabled=False)

    @app.get("/api/boom")
    def boom():
        raise RuntimeError("secret internals")

    c = TestClient(app, raise_server_exceptions=False)
    r = c.get("/api/boom", headers={"X-Request-Id": "rid-500"})

    assert r.status_code == 500
    assert r.json() == {"detail": "Internal Server Error", "request_id": "rid-500"}
    assert "Traceback" not in r.text
    assert "secret internals" not in r.text

    text = c.get("/metrics").text
    assert "task_manager_unhandled_errors_total" in text
    assert 'exception="RuntimeError"' in text
    assert 'path="/api/boom"' in text
    app.state.store.close()


def test_unknown_api_path_is_not_leaky(anon_client, client):
    assert anon_client.get("/api/does/not/exist").status_code == 401
    r = client.get("/api/does/not/exist")
    assert r.status_code == 404
    assert "Traceback" not in r.text


def test_cors_preflight_skips_auth(anon_client):
    r = anon_client.options(
        "/api/tasks",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert "access-control-allow-origin" in {k.lower() for k in r.headers.keys()}


def test_custom_base_url(tmp_path):
    app = _app(tmp_path, base_url="/v2")
    c = TestClient(app)
    tok = c.post("/v2/login", json={"username": "hexlet@example.com", "password": "qwerty"})
    assert tok.status_code == 200
    assert c.get("/v2/tasks").status_code == 401
    assert c.get("/v2/tasks", headers={"Authorization": f"Bearer {tok.text}"}).status_code == 200
    assert c.get("/api/tasks").status_code == 404
    app.state.store.close()


def test_rate_limit_ignores_forwarded_for_from_untrusted_peer(tmp_path):
    app = _app(tmp_path, rate_limit_enabled=True, rate_limit_rpm=2)
    c = TestClient(app)

    codes = [
        c.get("/api/health/live", headers={"X-Forwarded-For": f"10.0.0.{n}"}).status_code
        for n in range(4)
    ]
    assert codes == [200, 200, 429, 429]
    app.state.store.close()


def test_window_counter_drops_previous_minute():
    now = [120.0]
    counter = FixedWindowCounter(clock=lambda: now[0])

    for n in range(50):
        assert counter.hit(f"client-{n}") == 1
    assert counter.hit("client-0") == 2
    assert len(counter) == 50

    now[0] += 60
    assert counter.hit("client-0") == 1
    assert len(counter) == 1
