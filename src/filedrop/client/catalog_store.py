"""Local catalog store: files the server has confirmed, keyed by id."""
from __future__ import annotations

from typing import Iterable

from filedrop.client.local_store import LocalStore
from filedrop.config import settings
from filedrop.domain.files import CatalogEntry
from filedrop.infra.db.repositories.catalog_repository import CatalogRepository
from filedrop.models.client import CatalogEntryRow


def _to_domain(row: CatalogEntryRow) -> CatalogEntry:
    return CatalogEntry(id=row.id, name=row.name, mime_type=row.type, url=row.url)


class CatalogStore(LocalStore):
    role = "catalog"
    table = CatalogEntryRow

    @classmethod
    def open_default(cls) -> "CatalogStore":
        return cls(settings.CATALOG_DB)

    async def put(self, entry: CatalogEntry) -> None:
        await self.put_many([entry])

    async def put_many(self, entries: Iterable[CatalogEntry]) -> int:
        """Write all *entries* in one transaction. Re-putting an id overwrites it."""
        entries = list(entries)

        def _put_many(uow):
            repo = CatalogRepository(uow.session)
            for entry in entries:
                repo.upsert(id=entry.id, name=entry.name, type=entry.mime_type, url=entry.url)
            return len(entries)

        return await self._run(_put_many)

    async def get(self, entry_id: str) -> CatalogEntry | None:
        def _get(uow):
            row = CatalogRepository(uow.session).get(entry_id)
            return _to_domain(row) if row is not None else None

        return await self._run(_get)

    async def get_all(self) -> list[CatalogEntry]:
        return await self._run(
            lambda uow: [_to_domain(r) for r in CatalogRepository(uow.session).list_all()]
        )

    async def count(self) -> int:
        return await self._run(lambda uow: CatalogRepository(uow.session).count())

    async def delete(self, entry_id: str) -> None:
        """Delete *entry_id*; absent ids are ignored."""
        await self._run(lambda uow: CatalogRepository(uow.session).delete(entry_id))
