"""Settings from the environment and the database connection."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hnex_api.models import Base


class ConfigError(Exception):
    """Settings that are missing or unusable."""


@dataclass(frozen=True)
class Env:
    node_env: str
    dev_db_url: str
    prod_db_url: str
    port: int


def load_env(dotenv_path: Optional[str] = None) -> Env:
    """Load ``.env`` (without overriding set variables) and read the settings."""
    path = dotenv_path or ".env"
    if not os.path.isfile(path):
        raise ConfigError("Error loading .env file")
    load_dotenv(path, override=False)

    raw_port = os.environ.get("PORT", "")
    if not re.fullmatch(r"[+-]?[0-9]+", raw_port):
        raise ConfigError("Error parsing PORT")

    return Env(
        node_env=os.environ.get("NODE_ENV", ""),
        dev_db_url=os.environ.get("DEV_DB_URL", ""),
        prod_db_url=os.environ.get("PROD_DB_URL", ""),
        port=int(raw_port),
    )


def connect_db(env: Env) -> sessionmaker:
    """Open the database for the current environment, create tables and return a session factory."""
    url = env.dev_db_url if env.node_env == "development" else env.prod_db_url
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    try:
        engine = create_engine(url)
        Base.metadata.create_all(engine)
    except (SQLAlchemyError, ImportError) as exc:
        raise ConfigError(str(exc)) from exc
    return sessionmaker(bind=engine, expire_on_commit=False)