import time

import jwt
import pytest

from task_manager.core.auth import AuthError, JwtConfig, TokenService, extract_bearer
from task_manager.core.config import Settings


def _svc(**kw) -> TokenService:
    cfg = {"signing_key": "k1", "ttl_seconds": 60, "leeway_seconds": 0}
    cfg.update(kw)
    return TokenService(JwtConfig(**cfg))


def test_issue_and_decode_roundtrip():
    svc = _svc()
    principal = svc.decode(svc.issue("hexlet@example.com"))
    assert principal.subject == "hexlet@example.com"
    assert principal.anonymous is False


def test_token_claims_carry_subject_and_expiry():
    svc = _svc(ttl_seconds=120)
    token = svc.issue("a@b.io", now=1_700_000_000)
    claims = jwt.decode(token, options={"verify_signature": False})
    assert claims["sub"] == "a@b.io"
    assert claims["iat"] == 1_700_000_000
    assert claims["exp"] == 1_700_000_120


def test_expired_token_rejected():
    svc = _svc(ttl_seconds=10)
    token = svc.issue("a@b.io", now=int(time.time()) - 1000)
    with pytest.raises(AuthError, match="expired"):
        svc.decode(token)


def test_wrong_secret_rejected():
    token = _svc(signing_key="k1").issue("a@b.io")
    with pytest.raises(AuthError):
        _svc(signing_key="k2").decode(token)


def test_issuer_is_enforced_when_configured():
    token = _svc(issuer="other").issue("a@b.io")
    with pytest.raises(AuthError):
        _svc(issuer="task-manager").decode(token)

    ok = _svc(issuer="task-manager")
    assert ok.decode(ok.issue("a@b.io")).subject == "a@b.io"


def test_token_without_subject_rejected():
    token = jwt.encode({"exp": int(time.time()) + 60}, "k1", algorithm="HS256")
    with pytest.raises(AuthError):
        _svc().decode(token)


def test_garbage_token_rejected():
    with pytest.raises(AuthError):
        _svc().decode("not-a-jwt")


def test_missing_signing_key_rejected():
    with pytest.raises(AuthError):
        TokenService(JwtConfig(signing_key=""))


def test_config_from_settings():
    cfg = JwtConfig.from_settings(Settings(jwt_secret="s", jwt_issuer="iss", jwt_ttl_seconds=5))
    assert cfg.signing_key == "s"
    assert cfg.issuer == "iss"
    assert cfg.ttl_seconds == 5


def test_extract_bearer():
    assert extract_bearer({"authorization": "Bearer abc"}) == "abc"

    with pytest.raises(AuthError, match="required"):
        extract_bearer({})
    with pytest.raises(AuthError):
        extract_bearer({"authorization": "Basic abc"})
    with pytest.raises(AuthError):
        extract_bearer({"authorization": "Bearer   "})
