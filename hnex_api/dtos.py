"""Request and provider response bodies, bound from decoded JSON."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_EMAIL = re.compile(
    r"[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*"
)


class BindingError(ValueError):
    """A request body that does not fit the expected shape or rules."""


def _kind(value: Any) -> str:
    for kind, types in (("bool", bool), ("number", (int, float)), ("string", str),
                        ("array", list), ("object", dict)):
        if isinstance(value, types):
            return kind
    return type(value).__name__


def _object(data: Any, struct: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BindingError(f"cannot unmarshal {_kind(data)} into value of type {struct}")
    return data


_FIELD_TYPES = {"string": ("string", ""), "bool": ("bool", False), "int64": ("number", 0), "object": ("object", {})}


def _get(data: dict[str, Any], key: str, struct: str, go_type: str) -> Any:
    """Read ``key`` as ``go_type``; a missing or null value gives the zero value."""
    kind, zero = _FIELD_TYPES[go_type]
    value = data.get(key)
    if value is None:
        return zero
    ok = _kind(value) == kind
    if go_type == "int64":
        ok = ok and isinstance(value, int) and -(2**63) <= value < 2**63
    if not ok:
        raise BindingError(f"cannot unmarshal {_kind(value)} into field {struct}.{key} of type {go_type}")
    return value


def _validate(struct: str, *rules: tuple[str, str, tuple[str, ...]]) -> None:
    failures = []
    for field_name, value, tags in rules:
        for tag in tags:
            if (tag == "required" and value == "") or (tag == "email" and not _EMAIL.fullmatch(value)):
                failures.append(f"Key: '{struct}.{field_name}' Error:Field validation for "
                                f"'{field_name}' failed on the '{tag}' tag")
                break
    if failures:
        raise BindingError("\n".join(failures))


@dataclass(frozen=True)
class GoogleAuthRequest:
    id_token: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "GoogleAuthRequest":
        return cls(_get(_object(data, cls.__name__), "id_token", cls.__name__, "string"))


@dataclass(frozen=True)
class GoogleTokenInfo:
    sub: str = ""
    email: str = ""
    email_verified: bool = False
    name: str = ""
    picture: str = ""
    aud: str = ""
    exp: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "GoogleTokenInfo":
        s = cls.__name__
        body = _object(data, s)
        return cls(
            sub=_get(body, "sub", s, "string"),
            email=_get(body, "email", s, "string"),
            email_verified=_get(body, "email_verified", s, "bool"),
            name=_get(body, "name", s, "string"),
            picture=_get(body, "picture", s, "string"),
            aud=_get(body, "aud", s, "string"),
            exp=_get(body, "exp", s, "int64"),
        )


@dataclass(frozen=True)
class FacebookAuthRequest:
    access_token: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "FacebookAuthRequest":
        s = cls.__name__
        request = cls(_get(_object(data, s), "accessToken", s, "string"))
        _validate(s, ("AccessToken", request.access_token, ("required",)))
        return request


@dataclass(frozen=True)
class FacebookDebugToken:
    """The ``data`` section of Facebook's token inspection reply."""

    app_id: str = ""
    is_valid: bool = False
    user_id: str = ""
    expires_at: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "FacebookDebugToken":
        s = cls.__name__
        body = _get(_object(data, s), "data", s, "object")
        return cls(
            app_id=_get(body, "app_id", s, "string"),
            is_valid=_get(body, "is_valid", s, "bool"),
            user_id=_get(body, "user_id", s, "string"),
            expires_at=_get(body, "expires_at", s, "int64"),
        )


@dataclass(frozen=True)
class FacebookUserInfo:
    """A Facebook profile with its picture URL lifted out."""

    id: str = ""
    email: str = ""
    name: str = ""
    picture_url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "FacebookUserInfo":
        s = cls.__name__
        body = _object(data, s)
        picture = _get(_get(body, "picture", s, "object"), "data", s, "object")
        return cls(
            id=_get(body, "id", s, "string"),
            email=_get(body, "email", s, "string"),
            name=_get(body, "name", s, "string"),
            picture_url=_get(picture, "url", s, "string"),
        )


@dataclass(frozen=True)
class LoginDto:
    email: str
    password: str

    @classmethod
    def from_dict(cls, data: Any) -> "LoginDto":
        s = cls.__name__
        body = _object(data, s)
        dto = cls(_get(body, "email", s, "string"), _get(body, "password", s, "string"))
        _validate(s, ("Email", dto.email, ("required", "email")), ("Password", dto.password, ("required",)))
        return dto


@dataclass(frozen=True)
class RefreshTokenDto:
    refresh_token: str

    @classmethod
    def from_dict(cls, data: Any) -> "RefreshTokenDto":
        s = cls.__name__
        dto = cls(_get(_object(data, s), "refresh_token", s, "string"))
        _validate(s, ("RefreshToken", dto.refresh_token, ("required",)))
        return dto


@dataclass(frozen=True)
class RegisterDto:
    email: str
    password: str
    display_name: str

    @classmethod
    def from_dict(cls, data: Any) -> "RegisterDto":
        s = cls.__name__
        body = _object(data, s)
        dto = cls(*(_get(body, key, s, "string") for key in ("email", "password", "display_name")))
        _validate(
            s,
            ("Email", dto.email, ("required", "email")),
            ("Password", dto.password, ("required",)),
            ("DisplayName", dto.display_name, ("required",)),
        )
        return dto