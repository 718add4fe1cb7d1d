"""Endpoints that read user profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from flask import g
from sqlalchemy.exc import SQLAlchemyError

from hnex_api.repositories import RecordNotFoundError, UserRepository
from hnex_api.tokens import JWTClaims

logger = logging.getLogger(__name__)

Reply = tuple[dict[str, Any], int]


def _fail(status: int, message: str) -> Reply:
    return {"code": 0, "msg": message}, status


@dataclass
class UserHandler:
    """Request handlers for the ``users`` routes."""

    repo: UserRepository

    def get_user(self, user_id: str) -> Reply:
        """The public record of one user."""
        try:
            user = self.repo.find_by_id(user_id)
        except (RecordNotFoundError, SQLAlchemyError) as exc:
            return {"error": str(exc)}, HTTPStatus.NOT_FOUND
        return {"code": 1, "data": user.to_dict()}, HTTPStatus.OK

    def get_profile(self) -> Reply:
        """The record of the signed-in user."""
        if "user" not in g:
            logger.warning("User context not found")
            return _fail(HTTPStatus.UNAUTHORIZED, "User context not found")
        claims = g.user
        if not isinstance(claims, JWTClaims):
            logger.warning("Convert user context to JWTClaims failed")
            return _fail(HTTPStatus.UNAUTHORIZED, "Convert user context to JWTClaims failed")

        try:
            user = self.repo.find_by_id(claims.sub)
        except (RecordNotFoundError, SQLAlchemyError) as exc:
            return _fail(HTTPStatus.NOT_FOUND, str(exc))
        return {"code": 1, "data": user.to_dict()}, HTTPStatus.OK