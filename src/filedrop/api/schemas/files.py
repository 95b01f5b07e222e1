"""Upload wire DTOs. Pure Pydantic, zero ORM imports."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FileDescriptor(BaseModel):
    """Catalog descriptor for one ingested file.

    Serialized with ``type`` for the mime type, as clients expect.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    mime_type: str = Field(alias="type")
    url: str
    size: int
    sha256: str
    correlation: str | None = None


class UploadResponse(BaseModel):
    files: list[FileDescriptor]
