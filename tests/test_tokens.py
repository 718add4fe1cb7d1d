import time

import jwt
import pytest

from hnex_api.models import Role
from hnex_api.tokens import JWTClaims, TokenError, generate_tokens, verify_token


@pytest.fixture
def jwt_env(monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_SECRET", "secret")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "placeholder")
    monkeypatch.setenv("JWT_ACCESS_EXPIRES_IN", "60")
    monkeypatch.setenv("JWT_REFRESH_EXPIRES_IN", "3600")


def test_access_token_round_trip(jwt_env):
    access, _ = generate_tokens("user-1", Role.ADMIN, "google")
    claims = verify_token(access, "JWT_ACCESS_SECRET")
    assert claims.sub == "user-1"
    assert claims.role == "ADMIN"
    assert claims.provider == "google"
    assert claims.issuer == "hnex.api.com"
    assert claims.audience == ("access", "google")
    assert claims.expires_at - claims.issued_at == 60
    assert claims.not_before == claims.issued_at


def test_refresh_token_carries_no_provider(jwt_env):
    _, refresh = generate_tokens("user-2", "USER", "native")
    claims = verify_token(refresh, "JWT_REFRESH_SECRET")
    assert claims.sub == "user-2"
    assert claims.provider == ""
    assert claims.audience == ("refresh", "native")
    assert claims.expires_at - claims.issued_at == 3600


def test_token_signed_with_other_secret_fails(jwt_env):
    _, refresh = generate_tokens("user-3", Role.USER, "native")
    with pytest.raises(TokenError, match="token parse error"):
        verify_token(refresh, "JWT_ACCESS_SECRET")


def test_expired_token_fails(jwt_env):
    stale = jwt.encode(
        {"sub": "u", "role": "USER", "exp": int(time.time()) - 30}, "secret", algorithm="HS256"
    )
    with pytest.raises(TokenError):
        verify_token(stale, "JWT_ACCESS_SECRET")


def test_not_yet_valid_token_fails(jwt_env):
    early = jwt.encode(
        {"sub": "u", "role": "USER", "nbf": int(time.time()) + 600}, "secret", algorithm="HS256"
    )
    with pytest.raises(TokenError):
        verify_token(early, "JWT_ACCESS_SECRET")


def test_other_hmac_algorithms_are_accepted(jwt_env):
    signed = jwt.encode({"sub": "u9", "role": "USER"}, "secret", algorithm="HS512")
    assert verify_token(signed, "JWT_ACCESS_SECRET").sub == "u9"


def test_unsigned_token_is_rejected(jwt_env):
    unsigned = jwt.encode({"sub": "u", "role": "USER"}, None, algorithm="none")
    with pytest.raises(TokenError):
        verify_token(unsigned, "JWT_ACCESS_SECRET")


def test_garbage_token_is_rejected(jwt_env):
    with pytest.raises(TokenError):
        verify_token("token", "JWT_ACCESS_SECRET")


def test_bad_lifetime_setting(jwt_env, monkeypatch):
    monkeypatch.setenv("JWT_ACCESS_EXPIRES_IN", "soon")
    with pytest.raises(TokenError, match="JWT_ACCESS_EXPIRES_IN"):
        generate_tokens("user-4", Role.USER, "native")


def test_claims_from_payload_accepts_single_audience():
    claims = JWTClaims.from_payload({"sub": "a", "role": "USER", "aud": "access"})
    assert claims.audience == ("access",)
    assert claims.expires_at is None


def test_claims_from_payload_rejects_wrong_types():
    with pytest.raises(TokenError, match="invalid token claims"):
        JWTClaims.from_payload({"sub": 12, "role": "USER"})
    with pytest.raises(TokenError):
        JWTClaims.from_payload({"sub": "a", "aud": [1, 2]})
    with pytest.raises(TokenError):
        JWTClaims.from_payload("claims")