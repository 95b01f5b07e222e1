"""FastAPI dependencies."""
from __future__ import annotations

from typing import Generator

from fastapi import Request

from filedrop.infra.db.uow import UnitOfWork
from filedrop.storage.files import ContentStore


def get_uow() -> Generator[UnitOfWork, None, None]:
    """Yield one UnitOfWork per request; commit/rollback in __exit__."""
    with UnitOfWork() as uow:
        yield uow


def get_content_store(request: Request) -> ContentStore:
    return request.app.state.content_store


def get_public_base_url(request: Request) -> str:
    return request.app.state.public_base_url
