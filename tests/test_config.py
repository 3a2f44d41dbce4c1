import logging
from pathlib import Path

import pytest

from task_manager.core.config import DEV_JWT_SECRET, ConfigError, load_settings

_VARS = (
    "ENV",
    "BASE_URL",
    "DATABASE_PATH",
    "JWT_SECRET",
    "JWT_ISSUER",
    "JWT_TTL_SECONDS",
    "JWT_LEEWAY_SECONDS",
    "AUTH_ENABLED",
    "SEED_ENABLED",
    "SEED_FILE",
    "ADMIN_EMAIL",
    "ADMIN_PASSWORD",
    "AUDIT_LOG",
    "RATE_LIMIT_ENABLED",
    "RATE_LIMIT_RPM",
    "SECURITY_HEADERS_ENABLED",
    "CORS_ORIGINS",
    "TRUSTED_PROXIES",
    "HOST",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(f"TASK_MANAGER_{name}", raising=False)


def test_defaults(caplog):
    with caplog.at_level(logging.WARNING, logger="task_manager.config"):
        s = load_settings()

    assert s.env == "dev"
    assert s.base_url == "/api"
    assert s.port == 8080
    assert s.auth_enabled is True
    assert s.seed_enabled is True
    assert s.jwt_secret == DEV_JWT_SECRET
    assert s.jwt_ttl_seconds == 86400
    assert s.audit_log_path == Path(".task_manager") / "audit.log"
    assert s.cors_origins == ["*"]
    assert s.security_headers_enabled is False
    assert any("insecure" in r.message for r in caplog.records)


def test_prod_without_secret_raises(monkeypatch):
    monkeypatch.setenv("TASK_MANAGER_ENV", "prod")
    with pytest.raises(ConfigError):
        load_settings()


def test_prod_with_secret_turns_on_security_headers(monkeypatch):
    monkeypatch.setenv("TASK_MANAGER_ENV", "prod")
    monkeypatch.setenv("TASK_MANAGER_JWT_SECRET", "s3cret")
    s = load_settings()
    assert s.is_prod
    assert s.jwt_secret == "s3cret"
    assert s.security_headers_enabled is True


@pytest.mark.parametrize(
    "raw,expected",
    [("/api", "/api"), ("api/", "/api"), ("/v1/api/", "/v1/api"), ("/", "")],
)
def test_base_url_is_normalized(monkeypatch, raw, expected):
    monkeypatch.setenv("TASK_MANAGER_BASE_URL", raw)
    assert load_settings().base_url == expected


def test_flags_ints_and_lists(monkeypatch, tmp_path):
    monkeypatch.setenv("TASK_MANAGER_AUTH_ENABLED", "0")
    monkeypatch.setenv("TASK_MANAGER_RATE_LIMIT_ENABLED", "yes")
    monkeypatch.setenv("TASK_MANAGER_RATE_LIMIT_RPM", "7")
    monkeypatch.setenv("TASK_MANAGER_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("TASK_MANAGER_SEED_FILE", str(tmp_path / "seed.yaml"))
    monkeypatch.setenv("TASK_MANAGER_LOG_LEVEL", "DEBUG")

    s = load_settings()
    assert s.auth_enabled is False
    assert s.rate_limit_enabled is True
    assert s.rate_limit_rpm == 7
    assert s.cors_origins == ["http://a.test", "http://b.test"]
    assert s.seed_file == tmp_path / "seed.yaml"
    assert s.log_level == "debug"


def test_empty_audit_log_disables_audit(monkeypatch):
    monkeypatch.setenv("TASK_MANAGER_AUDIT_LOG", "")
    assert load_settings().audit_log_path is None


def test_invalid_int_raises(monkeypatch):
    monkeypatch.setenv("TASK_MANAGER_PORT", "eighty")
    with pytest.raises(ConfigError, match="TASK_MANAGER_PORT"):
        load_settings()


def test_trusted_proxies(monkeypatch):
    assert load_settings().trusted_proxies == []

    monkeypatch.setenv("TASK_MANAGER_TRUSTED_PROXIES", "10.0.0.1, 10.0.0.2,")
    assert load_settings().trusted_proxies == ["10.0.0.1", "10.0.0.2"]
