"""Ingest use-case service: persist a batch of uploads and assign identities.

Owns ORM→DTO mapping; routers never see ORM objects. A batch is
all-or-nothing: if any file cannot be written, every file already written for
the batch is removed and the transaction rolls back.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Sequence

from filedrop.api.schemas.files import FileDescriptor
from filedrop.domain.exceptions import InvalidRequestError
from filedrop.infra.db.repositories.ingest_repository import IngestRepository
from filedrop.infra.db.uow import UnitOfWork
from filedrop.logging import logger
from filedrop.storage.files import ContentStore, compute_sha256, sanitize_filename


@dataclass(frozen=True)
class UploadPayload:
    name: str
    mime_type: str
    content: bytes
    correlation: str | None = None


# Keeps identities well under the usual 255-byte filename limit.
MAX_NAME_CHARS = 100


def make_identity(seq: int, original_name: str, timestamp_ms: int | None = None) -> str:
    """``{timestamp_ms}-{seq}-{safe_name}``; ``seq`` makes it unique.

    ``safe_name`` is the sanitized name cut to ``MAX_NAME_CHARS``.
    """
    ts = timestamp_ms if timestamp_ms is not None else time.time_ns() // 1_000_000
    return f"{ts}-{seq}-{sanitize_filename(original_name)[:MAX_NAME_CHARS]}"


class IngestService:
    def __init__(self, uow: UnitOfWork, store: ContentStore, base_url: str) -> None:
        self._uow = uow
        self._store = store
        self._base_url = base_url.rstrip("/")

    def retrieval_url(self, identity: str) -> str:
        return f"{self._base_url}/uploads/{identity}"

    def ingest_batch(self, payloads: Sequence[UploadPayload]) -> list[FileDescriptor]:
        if not payloads:
            raise InvalidRequestError("Upload contains no files")

        repo = IngestRepository(self._uow.session)
        written: list[str] = []
        descriptors: list[FileDescriptor] = []
        try:
            for payload in payloads:
                sha256 = compute_sha256(payload.content)
                record = repo.reserve(
                    original_name=payload.name,
                    mime_type=payload.mime_type,
                    size_bytes=len(payload.content),
                    content_hash=sha256,
                )
                identity = make_identity(record.seq, payload.name)
                repo.assign_identity(record, identity)
                self._store.write(identity, payload.content)
                written.append(identity)
                descriptors.append(
                    FileDescriptor(
                        id=identity,
                        name=payload.name,
                        mime_type=payload.mime_type,
                        url=self.retrieval_url(identity),
                        size=len(payload.content),
                        sha256=sha256,
                        correlation=payload.correlation,
                    )
                )
            self._uow.commit()
        except Exception:
            logger.warning(
                "Ingest batch of %d failed; removing %d stored file(s)",
                len(payloads),
                len(written),
            )
            self._uow.rollback()
            for identity in written:
                self._store.delete(identity)
            raise

        logger.info("Ingested batch of %d file(s)", len(descriptors))
        return descriptors
