"""Shared plumbing for the client's durable SQLite stores.

Each store owns its own database file and table; they are never merged.
Every public call runs in exactly one UnitOfWork, so it either commits in full
or leaves the database untouched. The unit of work runs in a worker thread so
the event loop stays free while SQLite reads and commits.
"""
from __future__ import annotations

import asyncio
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from filedrop.domain.exceptions import StoreError
from filedrop.infra.db.engine import create_tables, make_engine
from filedrop.infra.db.uow import UnitOfWork

T = TypeVar("T")


class LocalStore:
    role: str = "store"
    table: type[SQLModel]

    def __init__(self, db_path: Path | None = None, *, bind: Engine | None = None) -> None:
        if bind is None and db_path is None:
            raise ValueError(f"{self.role} store needs a db_path or an engine")
        self._engine = bind if bind is not None else make_engine(db_path)  # type: ignore[arg-type]
        with self._translate_errors():
            create_tables(self._engine, (self.table,))

    @property
    def engine(self) -> Engine:
        return self._engine

    def close(self) -> None:
        self._engine.dispose()

    async def _run(self, work: Callable[[UnitOfWork], T]) -> T:
        """Execute ``work`` inside one unit of work, off the event loop."""
        return await asyncio.to_thread(self._run_sync, work)

    def _run_sync(self, work: Callable[[UnitOfWork], T]) -> T:
        with self._unit() as uow:
            return work(uow)

    @contextmanager
    def _unit(self) -> Iterator[UnitOfWork]:
        with self._translate_errors():
            with UnitOfWork(self._engine) as uow:
                yield uow

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            raise StoreError(f"{self.role} store transaction failed: {exc}") from exc
