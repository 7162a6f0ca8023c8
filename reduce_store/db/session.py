"""SQLAlchemy session setup for the shared reduction index."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase


class Base(DeclarativeBase):
    pass


def make_engine(db_url: str):
    connect_args = {}
    if make_url(db_url).get_backend_name() == "sqlite":
        # Request threads and the index pump share one pool.
        connect_args["check_same_thread"] = False
    return create_engine(db_url, future=True, connect_args=connect_args)


def make_session_factory(db_url: str | None = None, engine=None):
    if engine is None:
        if not db_url:
            raise ValueError("db_url is required when engine is not provided")
        engine = make_engine(db_url)
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False, future=True)


def init_db(engine) -> None:
    from reduce_store.db import models  # noqa: F401  registers tables

    Base.metadata.create_all(engine)
