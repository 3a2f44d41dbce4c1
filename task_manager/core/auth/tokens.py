from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt

from task_manager.core.auth.models import Principal
from task_manager.core.config import Settings

ALGORITHM = "HS256"


class AuthError(Exception):
    pass


@dataclass(frozen=True)
class JwtConfig:
    signing_key: str
    issuer: Optional[str] = None
    ttl_seconds: int = 86400
    leeway_seconds: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "JwtConfig":
        return cls(
            signing_key=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            ttl_seconds=settings.jwt_ttl_seconds,
            leeway_seconds=settings.jwt_leeway_seconds,
        )


class TokenService:
    """Issues and verifies HS256 bearer tokens whose subject is the user's email."""

    def __init__(self, cfg: JwtConfig):
        if not cfg.signing_key:
            raise AuthError("Missing JWT signing key")
        self.cfg = cfg

    def issue(self, subject: str, *, now: Optional[int] = None) -> str:
        iat = int(now if now is not None else time.time())
        claims: Dict[str, Any] = {"sub": subject, "iat": iat, "exp": iat + self.cfg.ttl_seconds}
        if self.cfg.issuer:
            claims["iss"] = self.cfg.issuer
        return jwt.encode(claims, self.cfg.signing_key, algorithm=ALGORITHM)

    def decode(self, token: str) -> Principal:
        options = {
            "verify_signature": True,
            "verify_exp": True,
            "verify_iat": False,
            "verify_nbf": True,
            "verify_iss": self.cfg.issuer is not None,
            "require": ["sub", "exp"],
        }
        try:
            claims = jwt.decode(
                token,
                self.cfg.signing_key,
                algorithms=[ALGORITHM],
                issuer=self.cfg.issuer,
                options=options,
                leeway=self.cfg.leeway_seconds,
            )
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.PyJWTError:
            raise AuthError("Invalid bearer token")

        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub:
            raise AuthError("Invalid bearer token")
        return Principal(subject=sub)


def extract_bearer(headers) -> str:
    auth_header = headers.get("authorization") or headers.get("x-forwarded-authorization")
    if not auth_header:
        raise AuthError("Authentication required")
    if not auth_header.startswith("Bearer "):
        raise AuthError("Invalid authorization header")
    token = auth_header[len("Bearer "):].strip()
    if not token:
        raise AuthError("Invalid authorization header")
    return token
