"""Data access for users, uploads and cached refresh-token hashes."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import sessionmaker

from hnex_api.models import Upload, User
from hnex_api.passwords import hash_password


class RecordNotFoundError(LookupError):
    """No live record matches the lookup."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class MemoryTokenCache:
    """A thread-safe in-process token cache."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _refresh_key(user_id: str) -> str:
    return f"user:{user_id}:refresh_token"


def _insert(session_factory: sessionmaker, records: Sequence[Any]) -> None:
    with session_factory() as session:
        session.add_all(records)
        session.commit()
        for record in records:
            session.refresh(record)


def _update_user(session_factory: sessionmaker, user_id: str, values: Mapping[str, Any]) -> None:
    with session_factory.begin() as session:
        session.execute(
            update(User)
            .where(User.id == user_id, User.deleted_at.is_(None))
            .values(updated_at=_now(), **values)
        )


@dataclass
class UserRepository:
    """Lookups and updates on live (not soft-deleted) users."""

    session_factory: sessionmaker

    def update_by_id(self, user_id: str, fields: Mapping[str, Any]) -> None:
        """Set the given columns on the user with ``user_id``."""
        unknown = sorted(set(fields) - set(User.__table__.columns.keys()))
        if unknown:
            raise ValueError(f"unknown user fields: {', '.join(unknown)}")
        _update_user(self.session_factory, user_id, {k: v for k, v in fields.items() if k != "updated_at"}
                     | ({"updated_at": fields["updated_at"]} if "updated_at" in fields else {}))

    def find_by_id(self, user_id: str) -> User:
        """The user with ``user_id``; raise RecordNotFoundError if there is none."""
        return self._first(User.id == user_id)

    def find_by_email(self, email: str) -> User:
        """The first user with ``email``; raise RecordNotFoundError if there is none."""
        return self._first(User.email == email)

    def _first(self, condition: Any) -> User:
        with self.session_factory() as session:
            user = session.scalars(
                select(User).where(condition, User.deleted_at.is_(None)).order_by(User.id).limit(1)
            ).first()
        if user is None:
            raise RecordNotFoundError()
        return user


@dataclass
class AuthRepository:
    """User creation and refresh-token bookkeeping."""

    session_factory: sessionmaker
    cache: Any

    def update_refresh_token(self, user_id: str, refresh_token: Optional[str]) -> None:
        """Store a hash of ``refresh_token``, or clear it when None."""
        key = _refresh_key(user_id)
        hashed = None if refresh_token is None else hash_password(refresh_token)
        if hashed is None:
            self.cache.delete(key)
        else:
            self.cache.set(key, hashed)
        _update_user(self.session_factory, user_id, {"refresh_token": hashed})

    def get_refresh_token_hash(self, user_id: str) -> Optional[str]:
        """The cached refresh-token hash of a user, or None after logout."""
        return self.cache.get(_refresh_key(user_id))

    def create_user(self, user: User) -> None:
        _insert(self.session_factory, [user])


@dataclass
class UploadRepository:
    """Storage of upload records."""

    session_factory: sessionmaker

    def create(self, upload: Upload) -> None:
        _insert(self.session_factory, [upload])

    def create_many(self, uploads: Sequence[Upload]) -> None:
        """Insert several uploads at once; raise ValueError when there are none."""
        if not uploads:
            raise ValueError("empty slice found")
        _insert(self.session_factory, list(uploads))

    def delete(self, upload_id: str) -> None:
        """Soft-delete the upload with ``upload_id``; a missing one is ignored."""
        with self.session_factory.begin() as session:
            session.execute(
                update(Upload)
                .where(Upload.id == upload_id, Upload.deleted_at.is_(None))
                .values(deleted_at=_now())
            )