import uuid

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hnex_api.models import Base, Gender, Role, Upload, User


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as db:
        yield db
    engine.dispose()


def test_user_defaults_are_filled_on_flush(session):
    user = User(email="someone@example.com", display_name="Someone")
    session.add(user)
    session.flush()
    assert user.provider == "native"
    assert user.role is Role.USER
    assert user.gender is Gender.UNKNOWN
    assert str(uuid.UUID(user.id)) == user.id
    assert user.created_at is not None and user.updated_at is not None
    assert user.deleted_at is None


def test_explicit_id_and_provider_are_kept(session):
    user = User(id="provider-subject-1", email="a@example.com", provider="google")
    session.add(user)
    session.commit()
    loaded = session.get(User, "provider-subject-1")
    assert loaded.provider == "google"
    assert loaded.email == "a@example.com"


def test_enums_round_trip_through_database(session):
    session.add(User(email="b@example.com", role=Role.ADMIN, gender=Gender.FEMALE))
    session.commit()
    session.expunge_all()
    loaded = session.scalars(select(User).where(User.email == "b@example.com")).one()
    assert loaded.role is Role.ADMIN
    assert loaded.gender is Gender.FEMALE


def test_ids_are_unique(session):
    users = [User(email=f"u{n}@example.com") for n in range(5)]
    session.add_all(users)
    session.flush()
    assert len({user.id for user in users}) == 5


def test_username_is_unique(session):
    session.add_all(
        [
            User(email="c@example.com", username="same"),
            User(email="d@example.com", username="same"),
        ]
    )
    with pytest.raises(IntegrityError):
        session.flush()


def test_user_to_dict_uses_json_names(session):
    user = User(email="e@example.com", display_name="E", role=Role.ADMIN)
    session.add(user)
    session.flush()
    data = user.to_dict()
    assert data["email"] == "e@example.com"
    assert data["display_name"] == "E"
    assert data["role"] == "ADMIN"
    assert data["gender"] == "UNKNOWN"
    assert data["provider"] == "native"
    assert data["id"] == user.id
    assert data["deleted_at"] is None
    assert data["photo_url"] is None
    assert set(data) >= {"refresh_token", "background_url", "phone_number", "birthday"}


def test_upload_belongs_to_user(session):
    user = User(email="f@example.com")
    session.add(user)
    session.flush()
    upload = Upload(name="pic.png", size=1234, path="assets/x.png", user_id=user.id)
    session.add(upload)
    session.commit()
    session.expunge_all()
    loaded = session.get(Upload, upload.id)
    data = loaded.to_dict()
    assert data["name"] == "pic.png"
    assert data["size"] == 1234
    assert data["path"] == "assets/x.png"
    assert data["user_id"] == user.id
    assert data["user"]["email"] == "f@example.com"