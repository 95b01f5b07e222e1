"""Repository for staged files, keyed by name."""
from __future__ import annotations

from sqlalchemy import func
from sqlmodel import Session, select

from filedrop.models.client import StagedFileRow


class StagedFileRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get(self, name: str) -> StagedFileRow | None:
        return self._s.get(StagedFileRow, name)

    def list_all(self) -> list[StagedFileRow]:
        return list(self._s.exec(select(StagedFileRow)).all())

    def count(self) -> int:
        return self._s.exec(select(func.count()).select_from(StagedFileRow)).one()

    def upsert(
        self,
        *,
        name: str,
        type: str,
        size: int,
        last_modified: int,
        payload: bytes,
    ) -> StagedFileRow:
        """Insert or replace the row for *name* (last write wins)."""
        row = self._s.merge(
            StagedFileRow(
                name=name,
                type=type,
                size=size,
                last_modified=last_modified,
                payload=payload,
            )
        )
        self._s.flush()
        return row

    def delete(self, name: str) -> bool:
        row = self.get(name)
        if row is None:
            return False
        self._s.delete(row)
        self._s.flush()
        return True

    def delete_all(self) -> int:
        rows = self.list_all()
        for row in rows:
            self._s.delete(row)
        self._s.flush()
        return len(rows)
