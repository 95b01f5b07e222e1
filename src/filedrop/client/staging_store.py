"""Local staging store: files selected on this device, not yet uploaded."""
from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path
from typing import Iterable

from filedrop.client.local_store import LocalStore
from filedrop.config import settings
from filedrop.domain.files import StagedFile
from filedrop.infra.db.repositories.staged_file_repository import StagedFileRepository
from filedrop.logging import logger
from filedrop.models.client import StagedFileRow


def _to_domain(row: StagedFileRow) -> StagedFile:
    return StagedFile(
        name=row.name,
        mime_type=row.type,
        byte_length=row.size,
        last_modified=row.last_modified,
        payload=row.payload,
    )


def read_staged_file(path: Path, name: str | None = None) -> StagedFile:
    """Build a StagedFile from a file on disk.

    The mime type is guessed from the extension; ``last_modified`` is the
    file's mtime in epoch milliseconds.
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    return StagedFile(
        name=name or path.name,
        mime_type=mime_type or "application/octet-stream",
        last_modified=path.stat().st_mtime_ns // 1_000_000,
        payload=path.read_bytes(),
    )


class StagingStore(LocalStore):
    """Keyed by file name. A second ``put`` with the same name replaces the first."""

    role = "staging"
    table = StagedFileRow

    @classmethod
    def open_default(cls) -> "StagingStore":
        return cls(settings.STAGING_DB)

    async def put(self, file: StagedFile) -> None:
        def _put(uow):
            StagedFileRepository(uow.session).upsert(
                name=file.name,
                type=file.mime_type,
                size=file.byte_length,
                last_modified=file.last_modified,
                payload=file.payload,
            )

        await self._run(_put)
        logger.debug("Staged %s (%d bytes)", file.name, file.byte_length)

    async def stage_path(self, path: Path, name: str | None = None) -> StagedFile:
        staged = await asyncio.to_thread(read_staged_file, path, name)
        await self.put(staged)
        return staged

    async def get(self, name: str) -> StagedFile | None:
        def _get(uow):
            row = StagedFileRepository(uow.session).get(name)
            return _to_domain(row) if row is not None else None

        return await self._run(_get)

    async def get_all(self) -> list[StagedFile]:
        return await self._run(
            lambda uow: [_to_domain(r) for r in StagedFileRepository(uow.session).list_all()]
        )

    async def count(self) -> int:
        return await self._run(lambda uow: StagedFileRepository(uow.session).count())

    async def remove(self, name: str) -> None:
        """Remove *name*; absent names are ignored."""
        await self._run(lambda uow: StagedFileRepository(uow.session).delete(name))

    async def remove_batch(self, files: Iterable[StagedFile]) -> int:
        """Remove the given versions of staged files in one transaction.

        A name whose stored payload no longer matches (re-staged since the
        batch was read) is kept, as is anything not in *files*.
        """
        files = list(files)

        def _remove(uow):
            repo = StagedFileRepository(uow.session)
            removed = 0
            for file in files:
                row = repo.get(file.name)
                if row is None or row.payload != file.payload or row.type != file.mime_type:
                    continue
                repo.delete(file.name)
                removed += 1
            return removed

        removed = await self._run(_remove)
        logger.debug("Removed %d of %d uploaded file(s) from staging", removed, len(files))
        return removed

    async def clear(self) -> int:
        removed = await self._run(lambda uow: StagedFileRepository(uow.session).delete_all())
        logger.debug("Cleared %d staged file(s)", removed)
        return removed
