"""Retrieval use-case service: resolve an identity to stored bytes."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from filedrop.domain.exceptions import NotFoundError
from filedrop.infra.db.repositories.ingest_repository import IngestRepository
from filedrop.infra.db.uow import UnitOfWork
from filedrop.storage.files import ContentStore


@dataclass(frozen=True)
class StoredFile:
    identity: str
    path: Path
    original_name: str
    mime_type: str
    size_bytes: int


class RetrievalService:
    def __init__(self, uow: UnitOfWork, store: ContentStore) -> None:
        self._uow = uow
        self._store = store

    def locate(self, identity: str) -> StoredFile:
        record = IngestRepository(self._uow.session).get_by_identity(identity)
        if record is None or not self._store.exists(identity):
            raise NotFoundError(f"Upload {identity} not found")
        return StoredFile(
            identity=identity,
            path=self._store.path_for(identity),
            original_name=record.original_name,
            mime_type=record.mime_type,
            size_bytes=record.size_bytes,
        )
