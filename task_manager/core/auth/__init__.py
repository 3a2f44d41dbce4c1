from .models import Principal
from .passwords import hash_password, verify_password
from .tokens import AuthError, JwtConfig, TokenService, extract_bearer

__all__ = [
    "AuthError",
    "JwtConfig",
    "Principal",
    "TokenService",
    "extract_bearer",
    "hash_password",
    "verify_password",
]
