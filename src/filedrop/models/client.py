"""Client-side tables. Each lives in its own SQLite database."""
from __future__ import annotations

from sqlmodel import Field, SQLModel


class StagedFileRow(SQLModel, table=True):
    __tablename__ = "stagedfile"  # type: ignore[assignment]

    name: str = Field(primary_key=True)
    type: str
    size: int
    last_modified: int
    payload: bytes


class CatalogEntryRow(SQLModel, table=True):
    __tablename__ = "catalogentry"  # type: ignore[assignment]

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    type: str
    url: str
