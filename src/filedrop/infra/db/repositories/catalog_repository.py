"""Repository for catalog entries, keyed by server-assigned id."""
from __future__ import annotations

from sqlalchemy import func
from sqlmodel import Session, select

from filedrop.models.client import CatalogEntryRow


class CatalogRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get(self, entry_id: str) -> CatalogEntryRow | None:
        return self._s.get(CatalogEntryRow, entry_id)

    def list_all(self) -> list[CatalogEntryRow]:
        return list(self._s.exec(select(CatalogEntryRow)).all())

    def list_by_name(self, name: str) -> list[CatalogEntryRow]:
        return list(
            self._s.exec(select(CatalogEntryRow).where(CatalogEntryRow.name == name)).all()
        )

    def count(self) -> int:
        return self._s.exec(select(func.count()).select_from(CatalogEntryRow)).one()

    def upsert(self, *, id: str, name: str, type: str, url: str) -> CatalogEntryRow:
        row = self._s.merge(CatalogEntryRow(id=id, name=name, type=type, url=url))
        self._s.flush()
        return row

    def delete(self, entry_id: str) -> bool:
        row = self.get(entry_id)
        if row is None:
            return False
        self._s.delete(row)
        self._s.flush()
        return True
