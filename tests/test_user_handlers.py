import pytest
from flask import Flask, g
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hnex_api.models import Base, User
from hnex_api.repositories import UserRepository
from hnex_api.tokens import JWTClaims
from hnex_api.user_handlers import UserHandler


@pytest.fixture
def factory():
    engine = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def app():
    return Flask(__name__)


@pytest.fixture
def handler(factory):
    with factory() as session:
        session.add(User(id="u-1", email="ann@example.com", display_name="Ann"))
        session.commit()
    return UserHandler(repo=UserRepository(factory))


def test_get_user_found(app, handler):
    with app.test_request_context("/"):
        body, status = handler.get_user("u-1")
    assert status == 200
    assert body["code"] == 1
    assert body["data"]["id"] == "u-1"
    assert body["data"]["email"] == "ann@example.com"
    assert body["data"]["role"] == "USER"


def test_get_user_missing(app, handler):
    with app.test_request_context("/"):
        body, status = handler.get_user("nobody")
    assert status == 404
    assert set(body) == {"error"}


def test_get_profile_uses_claims(app, handler):
    with app.test_request_context("/"):
        g.user = JWTClaims(sub="u-1", role="USER")
        body, status = handler.get_profile()
    assert status == 200
    assert body["data"]["display_name"] == "Ann"


def test_get_profile_without_context(app, handler):
    with app.test_request_context("/"):
        body, status = handler.get_profile()
    assert status == 401
    assert body == {"code": 0, "msg": "User context not found"}


def test_get_profile_with_wrong_context(app, handler):
    with app.test_request_context("/"):
        g.user = {"sub": "u-1"}
        body, status = handler.get_profile()
    assert status == 401
    assert body == {"code": 0, "msg": "Convert user context to JWTClaims failed"}


def test_get_profile_unknown_user(app, handler):
    with app.test_request_context("/"):
        g.user = JWTClaims(sub="ghost", role="USER")
        body, status = handler.get_profile()
    assert status == 404
    assert body["code"] == 0