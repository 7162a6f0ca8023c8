"""SQL-backed shared reduction index."""

from __future__ import annotations

from datetime import datetime
import threading
import uuid

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import sessionmaker

from reduce_store.db.models import Reduction
from reduce_store.db.session import init_db, make_engine, make_session_factory


class SqlReductionRepository:
    """Maps reduction keys to the URL of their active artifact.

    Sessions are opened per call so the repository can be shared between
    request threads and the index pump.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory
        self._lock = threading.Lock()

    def add(self, key: uuid.UUID, url: str) -> None:
        payload = {"key": key.hex, "url": url, "updated_at": datetime.utcnow()}
        stmt = sqlite_insert(Reduction).values(**payload)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Reduction.key],
            set_={"url": url, "updated_at": payload["updated_at"]},
        )
        with self._lock, self.session_factory() as session:
            session.execute(stmt)
            session.commit()

    def remove(self, key: uuid.UUID) -> None:
        stmt = delete(Reduction).where(Reduction.key == key.hex)
        with self._lock, self.session_factory() as session:
            session.execute(stmt)
            session.commit()

    def get(self, key: uuid.UUID) -> str | None:
        stmt = select(Reduction).where(Reduction.key == key.hex)
        with self.session_factory() as session:
            result = session.execute(stmt).scalar_one_or_none()
            return result.url if result else None

    def all(self) -> dict[uuid.UUID, str]:
        with self.session_factory() as session:
            rows = session.execute(select(Reduction)).scalars().all()
            return {uuid.UUID(hex=row.key): row.url for row in rows}


def make_repository(db_url: str) -> SqlReductionRepository:
    """Create the reductions table if needed and return a repository over it."""
    engine = make_engine(db_url)
    init_db(engine)
    return SqlReductionRepository(make_session_factory(engine=engine))
