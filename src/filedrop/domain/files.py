"""Client-side file types: what sits in staging and what sits in the catalog."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StagedFile(BaseModel):
    """A file selected locally and not yet confirmed by the server.

    ``name`` is the staging key. ``byte_length`` always equals
    ``len(payload)`` and is derived from it when omitted.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    mime_type: str = "application/octet-stream"
    byte_length: int = Field(ge=0)
    last_modified: int = 0
    payload: bytes = b""

    @model_validator(mode="before")
    @classmethod
    def _default_length(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("byte_length") is None:
            data = {**data, "byte_length": len(data.get("payload") or b"")}
        return data

    @model_validator(mode="after")
    def _check_length(self) -> "StagedFile":
        if self.byte_length != len(self.payload):
            raise ValueError(
                f"byte_length {self.byte_length} does not match "
                f"payload of {len(self.payload)} bytes"
            )
        return self


class CatalogEntry(BaseModel):
    """A file confirmed by the server, keyed by its server-assigned ``id``."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    mime_type: str
    url: str
