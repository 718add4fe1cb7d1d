"""Database models for users and their uploaded files."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    UNKNOWN = "UNKNOWN"


class Base(DeclarativeBase):
    """Declarative base shared by every table."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class _Record:
    """Identifier, timestamps and soft deletion shared by every table."""

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)

    def _record_fields(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "deleted_at": _iso(self.deleted_at),
        }


class User(_Record, Base):
    """An account, created natively or through a social provider."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String, default="")
    password: Mapped[str] = mapped_column(String, default="")
    display_name: Mapped[str] = mapped_column(String, default="")
    provider: Mapped[str] = mapped_column(String, default="native")
    role: Mapped[Role] = mapped_column(Enum(Role, native_enum=False), default=Role.USER)
    gender: Mapped[Gender] = mapped_column(Enum(Gender, native_enum=False), default=Gender.UNKNOWN)
    username: Mapped[Optional[str]] = mapped_column(String, unique=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(String)
    bio: Mapped[Optional[str]] = mapped_column(String)
    photo_url: Mapped[Optional[str]] = mapped_column(String)
    background_url: Mapped[Optional[str]] = mapped_column(String)
    location: Mapped[Optional[str]] = mapped_column(String)
    phone_number: Mapped[Optional[str]] = mapped_column(String)
    birthday: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def to_dict(self) -> dict[str, Any]:
        """The user as a JSON-ready mapping."""
        return {
            **self._record_fields(),
            "email": self.email,
            "password": self.password,
            "display_name": self.display_name,
            "provider": self.provider,
            "role": Role(self.role).value if self.role is not None else None,
            "gender": Gender(self.gender).value if self.gender is not None else None,
            "username": self.username,
            "refresh_token": self.refresh_token,
            "bio": self.bio,
            "photo_url": self.photo_url,
            "background_url": self.background_url,
            "location": self.location,
            "phone_number": self.phone_number,
            "birthday": _iso(self.birthday),
        }


class Upload(_Record, Base):
    """A file stored under the assets directory and owned by a user."""

    __tablename__ = "uploads"

    name: Mapped[str] = mapped_column(String, default="")
    size: Mapped[int] = mapped_column(BigInteger, default=0)
    path: Mapped[str] = mapped_column(String, default="")
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"))
    user: Mapped[Optional[User]] = relationship()

    def to_dict(self) -> dict[str, Any]:
        """The upload as a JSON-ready mapping, with its owner when loaded."""
        return {
            **self._record_fields(),
            "name": self.name,
            "size": self.size,
            "path": self.path,
            "user_id": self.user_id,
            "user": self.user.to_dict() if self.user is not None else None,
        }