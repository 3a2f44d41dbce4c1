from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

log = logging.getLogger("task_manager.config")

# Used only outside prod so that a fresh checkout starts without extra setup.
DEV_JWT_SECRET = "task-manager-dev-secret-change-me"

_TRUE = ("1", "true", "yes", "on")


class ConfigError(RuntimeError):
    pass


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _normalize_base_url(raw: str) -> str:
    p = "/" + raw.strip().strip("/")
    return "" if p == "/" else p


@dataclass(frozen=True)
class Settings:
    env: str = "dev"
    base_url: str = "/api"
    database_path: str = "task_manager.db"

    jwt_secret: str = DEV_JWT_SECRET
    jwt_issuer: Optional[str] = None
    jwt_ttl_seconds: int = 86400
    jwt_leeway_seconds: int = 30

    auth_enabled: bool = True
    seed_enabled: bool = True
    seed_file: Optional[Path] = None
    admin_email: str = "hexlet@example.com"
    admin_password: str = "qwerty"

    audit_log_path: Optional[Path] = Path(".task_manager") / "audit.log"

    rate_limit_enabled: bool = False
    rate_limit_rpm: int = 120
    trusted_proxies: List[str] = field(default_factory=list)
    security_headers_enabled: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"

    @property
    def is_prod(self) -> bool:
        return self.env == "prod"


def load_settings() -> Settings:
    """
    Read TASK_MANAGER_* environment variables into an immutable Settings.

    In prod a JWT secret must be configured explicitly.
    """
    env = _env("TASK_MANAGER_ENV", "dev").lower()

    secret = _env("TASK_MANAGER_JWT_SECRET")
    if not secret:
        if env == "prod":
            raise ConfigError("TASK_MANAGER_JWT_SECRET must be set when TASK_MANAGER_ENV=prod")
        log.warning("TASK_MANAGER_JWT_SECRET not set; using insecure dev secret")
        secret = DEV_JWT_SECRET

    seed_file = _env("TASK_MANAGER_SEED_FILE")
    audit_raw = os.getenv("TASK_MANAGER_AUDIT_LOG")
    if audit_raw is None:
        audit_path: Optional[Path] = Path(".task_manager") / "audit.log"
    else:
        audit_path = Path(audit_raw.strip()) if audit_raw.strip() else None

    proxies_raw = _env("TASK_MANAGER_TRUSTED_PROXIES")
    proxies = [p.strip() for p in proxies_raw.split(",") if p.strip()]

    cors_raw = _env("TASK_MANAGER_CORS_ORIGINS")
    cors = [o.strip() for o in cors_raw.split(",") if o.strip()] if cors_raw else ["*"]

    return Settings(
        env=env,
        base_url=_normalize_base_url(_env("TASK_MANAGER_BASE_URL", "/api")),
        database_path=_env("TASK_MANAGER_DATABASE_PATH", "task_manager.db"),
        jwt_secret=secret,
        jwt_issuer=_env("TASK_MANAGER_JWT_ISSUER") or None,
        jwt_ttl_seconds=_env_int("TASK_MANAGER_JWT_TTL_SECONDS", 86400),
        jwt_leeway_seconds=_env_int("TASK_MANAGER_JWT_LEEWAY_SECONDS", 30),
        auth_enabled=_env_flag("TASK_MANAGER_AUTH_ENABLED", True),
        seed_enabled=_env_flag("TASK_MANAGER_SEED_ENABLED", True),
        seed_file=Path(seed_file) if seed_file else None,
        admin_email=_env("TASK_MANAGER_ADMIN_EMAIL", "hexlet@example.com"),
        admin_password=_env("TASK_MANAGER_ADMIN_PASSWORD", "qwerty"),
        audit_log_path=audit_path,
        rate_limit_enabled=_env_flag("TASK_MANAGER_RATE_LIMIT_ENABLED", False),
        rate_limit_rpm=_env_int("TASK_MANAGER_RATE_LIMIT_RPM", 120),
        trusted_proxies=proxies,
        security_headers_enabled=_env_flag("TASK_MANAGER_SECURITY_HEADERS_ENABLED", env == "prod"),
        cors_origins=cors,
        host=_env("TASK_MANAGER_HOST", "0.0.0.0"),
        port=_env_int("TASK_MANAGER_PORT", 8080),
        log_level=_env("TASK_MANAGER_LOG_LEVEL", "info").lower(),
    )
