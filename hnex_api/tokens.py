"""Signing and verifying the access and refresh JWTs."""

from __future__ import annotations

import enum
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

import jwt

ISSUER = "hnex.api.com"

_ATOI = re.compile(r"[+-]?[0-9]+")


class TokenError(Exception):
    """A token that cannot be issued or does not verify."""


def _claim(payload: dict[str, Any], key: str, types: tuple[type, ...], zero: Any) -> Any:
    value = payload.get(key)
    if value is None:
        return zero
    if isinstance(value, bool) or not isinstance(value, types):
        raise TokenError("invalid token claims")
    return value


@dataclass(frozen=True)
class JWTClaims:
    """The claims carried by an access or refresh token."""

    sub: str
    role: str
    provider: str = ""
    issuer: str = ""
    audience: tuple[str, ...] = ()
    expires_at: Optional[Union[int, float]] = None
    issued_at: Optional[Union[int, float]] = None
    not_before: Optional[Union[int, float]] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "JWTClaims":
        """Build claims from a decoded token payload."""
        if not isinstance(payload, dict):
            raise TokenError("invalid token claims")
        aud = payload.get("aud")
        audience = [] if aud is None else [aud] if isinstance(aud, str) else aud
        if not isinstance(audience, list) or not all(isinstance(item, str) for item in audience):
            raise TokenError("invalid token claims")
        text, number = (str,), (int, float)
        return cls(
            sub=_claim(payload, "sub", text, ""),
            role=_claim(payload, "role", text, ""),
            provider=_claim(payload, "provider", text, ""),
            issuer=_claim(payload, "iss", text, ""),
            audience=tuple(audience),
            expires_at=_claim(payload, "exp", number, None),
            issued_at=_claim(payload, "iat", number, None),
            not_before=_claim(payload, "nbf", number, None),
        )


def _env_bytes(variable: str) -> bytes:
    return os.environ.get(variable, "").encode("utf-8")


def _lifetime(name: str) -> int:
    raw = os.environ.get(name, "")
    if not _ATOI.fullmatch(raw):
        raise TokenError(f"Error parsing {name}")
    return int(raw)


def _sign(payload: dict[str, Any], kind: str) -> str:
    try:
        return jwt.encode(payload, _env_bytes(f"JWT_{kind.upper()}_SECRET"), algorithm="HS256")
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        raise TokenError(f"failed to sign {kind} token: {exc}") from exc


def generate_tokens(user_id: str, role: Any, provider: str) -> tuple[str, str]:
    """Issue an (access, refresh) pair using secrets and lifetimes from the environment."""
    access_lifetime = _lifetime("JWT_ACCESS_EXPIRES_IN")
    refresh_lifetime = _lifetime("JWT_REFRESH_EXPIRES_IN")
    role_value = role.value if isinstance(role, enum.Enum) else str(role)
    now = int(time.time())
    common = {"sub": user_id, "role": role_value, "iss": ISSUER, "nbf": now, "iat": now}

    access = _sign({**common, "provider": provider, "aud": ["access", provider],
                    "exp": now + access_lifetime}, "access")
    refresh = _sign({**common, "provider": "", "aud": ["refresh", provider],
                     "exp": now + refresh_lifetime}, "refresh")
    return access, refresh


def verify_token(token_string: str, name: str) -> JWTClaims:
    """Verify an HMAC-signed token with the secret held in environment variable ``name``."""
    try:
        payload = jwt.decode(
            token_string,
            _env_bytes(name),
            algorithms=["HS256", "HS384", "HS512"],
            options={"verify_aud": False, "verify_iat": False},
        )
    except jwt.PyJWTError as exc:
        raise TokenError(f"token parse error: {exc}") from exc
    return JWTClaims.from_payload(payload)