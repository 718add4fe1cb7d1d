"""Sign-up, sign-in, token refresh and logout endpoints."""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Optional, TypeVar

import requests
from flask import request
from sqlalchemy.exc import SQLAlchemyError

from hnex_api.dtos import (
    BindingError,
    FacebookAuthRequest,
    FacebookDebugToken,
    FacebookUserInfo,
    GoogleAuthRequest,
    GoogleTokenInfo,
    LoginDto,
    RefreshTokenDto,
    RegisterDto,
)
from hnex_api.middleware import UserContextError, get_user_ctx
from hnex_api.models import User
from hnex_api.passwords import InvalidHashError, hash_password, verify_password
from hnex_api.repositories import AuthRepository, RecordNotFoundError, UserRepository
from hnex_api.tokens import TokenError, generate_tokens

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo?id_token="
FACEBOOK_DEBUG_URL = "https://graph.facebook.com/debug_token"
FACEBOOK_PROFILE_URL = (
    "https://graph.facebook.com/me"
    "?fields=id,name,email,picture.width(200).height(200)&access_token="
)
HTTP_TIMEOUT = 30

Reply = tuple[dict[str, Any], int]
_Dto = TypeVar("_Dto")


def _fail(status: int, message: str) -> Reply:
    return {"code": 0, "msg": message}, status


def _error(status: int, message: str, details: Optional[str] = None) -> Reply:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return body, status


def _tokens(access_token: str, refresh_token: str) -> Reply:
    return {
        "code": 1,
        "msg": "Success",
        "data": {"access_token": access_token, "refresh_token": refresh_token},
    }, HTTPStatus.OK


def _bind(dto: Any) -> Any:
    raw = request.get_data(cache=True)
    if not raw.strip():
        raise BindingError("EOF")
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise BindingError(str(exc)) from exc
    return dto.from_dict(data)


@dataclass
class AuthHandler:
    """Request handlers for the ``auth`` routes."""

    repo: AuthRepository
    user_repo: UserRepository

    def _issue(self, user_id: str, role: Any, provider: str, jwt_failure: Optional[str] = None) -> Reply:
        try:
            access_token, refresh_token = generate_tokens(user_id, role, provider)
        except TokenError as exc:
            if jwt_failure is not None:
                return _error(HTTPStatus.INTERNAL_SERVER_ERROR, jwt_failure)
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
        try:
            self.repo.update_refresh_token(user_id, refresh_token)
        except SQLAlchemyError as exc:
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
        return _tokens(access_token, refresh_token)

    def google_auth(self) -> Reply:
        """Sign in with a Google ID token."""
        try:
            req = _bind(GoogleAuthRequest)
        except BindingError as exc:
            return _fail(HTTPStatus.BAD_REQUEST, str(exc))

        try:
            resp = requests.get(GOOGLE_TOKENINFO_URL + req.id_token, timeout=HTTP_TIMEOUT)
        except requests.RequestException:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to validate token with Google")

        if resp.status_code != HTTPStatus.OK:
            return _error(resp.status_code, "Google token validation failed", resp.text)

        try:
            info = GoogleTokenInfo.from_dict(resp.json())
        except ValueError:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to parse Google token info")

        if info.aud != os.environ.get("GOOGLE_CLIENT_ID", ""):
            return _error(HTTPStatus.UNAUTHORIZED, "Invalid audience (client ID mismatch)")
        if int(time.time()) > info.exp:
            return _error(HTTPStatus.UNAUTHORIZED, "Google token expired")

        try:
            user = self.user_repo.find_by_id(info.sub)
        except (RecordNotFoundError, SQLAlchemyError):
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to find user")

        return self._issue(user.id, user.role, user.provider, "Failed to generate JWT")

    def facebook_auth(self) -> Reply:
        """Sign in with a Facebook access token."""
        try:
            req = _bind(FacebookAuthRequest)
        except BindingError as exc:
            return _error(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

        app_id = os.environ.get("FACEBOOK_APP_ID", "")
        app_credential = app_id + "|" + os.environ.get("FACEBOOK_APP_SECRET", "")
        debug_url = (
            f"{FACEBOOK_DEBUG_URL}?input_token={req.access_token}&access_token={app_credential}"
        )
        try:
            resp = requests.get(debug_url, timeout=HTTP_TIMEOUT)
        except requests.RequestException:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to validate token with Facebook")

        if resp.status_code != HTTPStatus.OK:
            return _error(resp.status_code, "Facebook token validation failed", resp.text)

        try:
            debug_info = FacebookDebugToken.from_dict(resp.json())
        except ValueError:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to parse Facebook debug info")

        if not debug_info.is_valid:
            return _error(HTTPStatus.UNAUTHORIZED, "Facebook token is invalid")
        if debug_info.app_id != app_id:
            return _error(HTTPStatus.UNAUTHORIZED, "Facebook token App ID mismatch")

        try:
            profile = requests.get(FACEBOOK_PROFILE_URL + req.access_token, timeout=HTTP_TIMEOUT)
        except requests.RequestException:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to fetch Facebook user profile")

        if profile.status_code != HTTPStatus.OK:
            return _error(profile.status_code, "Facebook profile fetch failed", profile.text)

        try:
            info = FacebookUserInfo.from_dict(profile.json())
        except ValueError:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to parse Facebook user info")

        try:
            user = self.user_repo.find_by_id(info.id)
        except (RecordNotFoundError, SQLAlchemyError):
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to find user")

        return self._issue(user.id, user.role, user.provider, "Failed to generate JWT")

    def register(self) -> Reply:
        """Create a native account and sign it in."""
        try:
            dto = _bind(RegisterDto)
        except BindingError as exc:
            return _fail(HTTPStatus.BAD_REQUEST, str(exc))

        try:
            self.user_repo.find_by_email(dto.email)
        except RecordNotFoundError:
            pass
        except SQLAlchemyError as exc:
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
        else:
            return _fail(HTTPStatus.BAD_REQUEST, "User already exists")

        user = User(
            email=dto.email,
            password=hash_password(dto.password),
            display_name=dto.display_name,
        )
        try:
            self.repo.create_user(user)
        except SQLAlchemyError as exc:
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))

        return self._issue(user.id, user.role, "native")

    def login(self) -> Reply:
        """Sign in with e-mail and password."""
        try:
            dto = _bind(LoginDto)
        except BindingError as exc:
            return _fail(HTTPStatus.BAD_REQUEST, str(exc))

        try:
            user = self.user_repo.find_by_email(dto.email)
        except RecordNotFoundError:
            return _fail(HTTPStatus.NOT_FOUND, "User not found!")
        except SQLAlchemyError as exc:
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))

        try:
            match = verify_password(dto.password, user.password)
        except InvalidHashError:
            match = False
        if not match:
            return _fail(HTTPStatus.BAD_REQUEST, "Password is incorrect")

        return self._issue(user.id, user.role, user.provider)

    def logout(self) -> Reply:
        """Forget the signed-in user's refresh token."""
        try:
            claims = get_user_ctx()
        except UserContextError:
            return _fail(HTTPStatus.UNAUTHORIZED, "Unauthorized")

        try:
            self.repo.update_refresh_token(claims.sub, None)
        except SQLAlchemyError as exc:
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))

        return {"code": 1, "msg": "Success"}, HTTPStatus.OK

    def refresh_token(self) -> Reply:
        """Exchange a refresh token for a new token pair."""
        try:
            dto = _bind(RefreshTokenDto)
        except BindingError as exc:
            return _fail(HTTPStatus.BAD_REQUEST, str(exc))

        try:
            claims = get_user_ctx()
        except UserContextError:
            return _fail(HTTPStatus.UNAUTHORIZED, "Unauthorized")

        try:
            stored_hash = self.repo.get_refresh_token_hash(claims.sub)
        except OSError as exc:
            return _fail(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
        if stored_hash is None:
            return _fail(HTTPStatus.BAD_REQUEST, "User has logged out")

        try:
            match = verify_password(dto.refresh_token, stored_hash)
        except InvalidHashError as exc:
            return _fail(HTTPStatus.BAD_REQUEST, str(exc))
        if not match:
            return _fail(HTTPStatus.BAD_REQUEST, "Refresh token is incorrect")

        return self._issue(claims.sub, claims.role, claims.provider)