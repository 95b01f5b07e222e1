"""SQLite engine factory and the server's singleton engine."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from filedrop.config import settings
import filedrop.models  # noqa: F401   # registers all ORM table mappers
from filedrop.models.server import IngestRecord


def _set_wal_mode(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.close()


def make_engine(db_path: Path) -> Engine:
    """Create a SQLite engine for *db_path* with WAL journaling.

    The parent directory is created by ``create_tables``.
    """
    eng = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        echo=False,
    )
    event.listen(eng, "connect", _set_wal_mode)
    return eng


def create_tables(eng: Engine, models: Iterable[type[SQLModel]]) -> None:
    """Create only the tables for *models* on *eng*.

    All mappers share one metadata; each database holds just its own tables.
    """
    if eng.url.database:
        Path(eng.url.database).parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(eng, tables=[m.__table__ for m in models])


SERVER_TABLES: tuple[type[SQLModel], ...] = (IngestRecord,)

engine = make_engine(settings.SERVER_DB)  # type: ignore[arg-type]

__all__ = ["SERVER_TABLES", "create_tables", "engine", "make_engine"]
