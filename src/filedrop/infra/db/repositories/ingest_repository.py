"""Repository for IngestRecord rows. No business logic; caller owns the transaction."""
from __future__ import annotations

from sqlmodel import Session, select

from filedrop.models.server import IngestRecord


class IngestRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def get_by_identity(self, identity: str) -> IngestRecord | None:
        return self._s.exec(
            select(IngestRecord).where(IngestRecord.identity == identity)
        ).first()

    def reserve(
        self,
        *,
        original_name: str,
        mime_type: str,
        size_bytes: int,
        content_hash: str,
    ) -> IngestRecord:
        """Insert a record and flush so ``seq`` is allocated."""
        record = IngestRecord(
            original_name=original_name,
            mime_type=mime_type,
            size_bytes=size_bytes,
            content_hash=content_hash,
        )
        self._s.add(record)
        self._s.flush()  # get generated PK without committing
        return record

    def assign_identity(self, record: IngestRecord, identity: str) -> IngestRecord:
        record.identity = identity
        self._s.add(record)
        self._s.flush()
        return record
