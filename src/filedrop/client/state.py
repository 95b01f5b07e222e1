"""Explicit upload state and its transitions.

``AppState`` is immutable; every transition takes a state and returns a new
one, so the reconciler's lifecycle can be tested without any I/O.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from filedrop.domain.exceptions import UploadInProgressError


class UploadPhase(str, Enum):
    IDLE = "IDLE"
    UPLOADING = "UPLOADING"


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: UploadPhase = UploadPhase.IDLE
    progress: int | None = None  # None while idle
    last_error: str | None = None
    last_uploaded: int = 0

    @property
    def uploading(self) -> bool:
        return self.phase is UploadPhase.UPLOADING


def begin_upload(state: AppState) -> AppState:
    if state.uploading:
        raise UploadInProgressError("An upload batch is already in flight")
    return state.model_copy(
        update={"phase": UploadPhase.UPLOADING, "progress": 0, "last_error": None}
    )


def advance_progress(state: AppState, percent: int) -> AppState:
    """Move progress forward; it never goes backwards and stays in 0..100."""
    if not state.uploading:
        return state
    percent = max(0, min(100, percent))
    if state.progress is not None and percent <= state.progress:
        return state
    return state.model_copy(update={"progress": percent})


def complete_upload(state: AppState, uploaded: int, warning: str | None = None) -> AppState:
    return state.model_copy(
        update={
            "phase": UploadPhase.IDLE,
            "progress": None,
            "last_error": warning,
            "last_uploaded": uploaded,
        }
    )


def fail_upload(state: AppState, reason: str) -> AppState:
    return state.model_copy(
        update={"phase": UploadPhase.IDLE, "progress": None, "last_error": reason}
    )
