"""Server-side tables."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class IngestRecord(SQLModel, table=True):
    """One row per ingested file.

    ``seq`` is allocated by the database before the identity is derived, so
    two records can never end up with the same identity.
    """

    seq: Optional[int] = Field(default=None, primary_key=True)
    identity: Optional[str] = Field(default=None, index=True, unique=True)
    original_name: str
    mime_type: str
    size_bytes: int
    content_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
