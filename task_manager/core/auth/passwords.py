from __future__ import annotations

import base64
import hashlib
import hmac
import os

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000
_SALT_BYTES = 16


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _unb64(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("utf-8"))


def hash_password(raw: str, *, iterations: int = DEFAULT_ITERATIONS, salt: bytes | None = None) -> str:
    """
    Returns "pbkdf2_sha256$<iterations>$<salt>$<hash>".
    """
    salt = salt if salt is not None else os.urandom(_SALT_BYTES)
    dk = hashlib.pbkdf2_hmac("sha256", raw.encode("utf-8"), salt, iterations)
    return f"{ALGORITHM}${iterations}${_b64(salt)}${_b64(dk)}"


def verify_password(raw: str, digest: str) -> bool:
    try:
        algorithm, iterations, salt, expected = digest.split("$")
        if algorithm != ALGORITHM:
            return False
        dk = hashlib.pbkdf2_hmac("sha256", raw.encode("utf-8"), _unb64(salt), int(iterations))
        return hmac.compare_digest(dk, _unb64(expected))
    except (ValueError, TypeError):
        return False
