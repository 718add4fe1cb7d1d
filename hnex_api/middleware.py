"""Access-token checking for protected routes and the request's user claims."""

from __future__ import annotations

import functools
from typing import Any, Callable

from flask import abort, g, request

from hnex_api.tokens import JWTClaims, TokenError, verify_token


class UserContextError(LookupError):
    """The request carries no usable user claims."""


def access_token_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """Run ``view`` only for requests with a valid bearer access token."""

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        authorization = request.headers.get("Authorization", "")
        if not authorization:
            return {"code": 0, "msg": "Unauthorized"}, 401
        parts = authorization.split(" ")
        if len(parts) < 2:
            abort(500)
        try:
            g.user = verify_token(parts[1], "JWT_ACCESS_SECRET")
        except TokenError as exc:
            return {"code": 0, "msg": str(exc)}, 401
        return view(*args, **kwargs)

    return wrapper


def get_user_ctx() -> JWTClaims:
    """The claims stored for the current request by the access-token check."""
    if "user" not in g:
        raise UserContextError("User context not found!")
    if not isinstance(g.user, JWTClaims):
        raise UserContextError("Convert user context to JWTClaims failed")
    return g.user