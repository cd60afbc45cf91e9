# account_service/database.py
import os
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Base class which all database models inherit from
Base = declarative_base()


def build_engine(database_url: str, **kwargs) -> Engine:
    # connect_args is ONLY needed for SQLite multithread safety
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        _ensure_sqlite_dir(database_url)
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )


def create_tables(engine: Engine):
    from . import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables checked/created.")


def _ensure_sqlite_dir(database_url: str):
    if "///" not in database_url:
        return
    path = database_url.split("///", 1)[1]
    if not path or path == ":memory:":
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
