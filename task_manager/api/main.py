from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from task_manager import __version__
from task_manager.api.deps import bearer_scheme
from task_manager.api.endpoints import authentication, health, labels, metrics_export, task_statuses, tasks, users
from task_manager.api.middleware.audit import AuditMiddleware
from task_manager.api.middleware.auth import AuthMiddleware
from task_manager.api.middleware.error_shaping import SafeErrorMiddleware
from task_manager.api.middleware.request_context import (
    RateLimitMiddleware,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)
from task_manager.core.auth.tokens import AuthError, JwtConfig, TokenService
from task_manager.core.config import Settings, load_settings
from task_manager.core.errors import TaskManagerError
from task_manager.core.observability.audit import AuditLog
from task_manager.core.seed import seed_defaults
from task_manager.core.storage import Store, open_store

log = logging.getLogger("task_manager.app")


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskManagerError)
    async def _domain_error(request: Request, exc: TaskManagerError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError):
        return JSONResponse(
            status_code=401,
            content={"detail": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    """
    Build the application. The store is opened and seeded here rather than in
    the lifespan so that a TestClient used without a `with` block still works.
    """
    settings = settings or load_settings()
    store = store or open_store(settings.database_path)
    if settings.seed_enabled:
        seed_defaults(store, settings)

    tokens = TokenService(JwtConfig.from_settings(settings))
    audit = AuditLog(settings.audit_log_path) if settings.audit_log_path else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("task manager started env=%s base_url=%s", settings.env, settings.base_url)
        yield
        if audit is not None:
            audit.close()
        store.close()

    app = FastAPI(
        title="Task Manager",
        version=__version__,
        description="Task management system",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.tokens = tokens
    app.state.audit = audit

    _install_exception_handlers(app)

    # ------------------------------------------------------------
    # Middleware stack (ORDER MATTERS)
    # Starlette reverses add_middleware order: the LAST call = OUTERMOST wrapper.
    # Runtime order (outermost -> innermost):
    #   SafeError -> CORS -> SecurityHeaders -> RateLimit
    #   -> RequestContext -> Audit -> Auth -> handler
    # ------------------------------------------------------------
    app.add_middleware(
        AuthMiddleware,
        tokens=tokens,
        base_url=settings.base_url,
        enabled=settings.auth_enabled,
        disabled_subject=settings.admin_email,
    )
    app.add_middleware(AuditMiddleware, audit=audit, base_url=settings.base_url)
    app.add_middleware(RequestContextMiddleware, base_url=settings.base_url)
    app.add_middleware(
        RateLimitMiddleware,
        enabled=settings.rate_limit_enabled,
        rpm=settings.rate_limit_rpm,
        base_url=settings.base_url,
        trusted_proxies=settings.trusted_proxies,
    )
    app.add_middleware(SecurityHeadersMiddleware, enabled=settings.security_headers_enabled)
    # CORS second-to-last so OPTIONS preflight is answered outside Auth
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count", "X-Request-Id"],
    )
    # SafeErrorMiddleware LAST = outermost (catches all exceptions from inner middleware)
    app.add_middleware(SafeErrorMiddleware)

    # ------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------
    prefix = settings.base_url
    secured = [Depends(bearer_scheme)]

    app.include_router(authentication.router, prefix=prefix)
    app.include_router(users.router, prefix=prefix, dependencies=secured)
    app.include_router(task_statuses.router, prefix=prefix, dependencies=secured)
    app.include_router(labels.router, prefix=prefix, dependencies=secured)
    app.include_router(tasks.router, prefix=prefix, dependencies=secured)
    app.include_router(health.router, prefix=prefix)
    app.include_router(metrics_export.router)

    @app.get("/health", include_in_schema=False)
    def health_check():
        return {"status": "healthy"}

    return app
