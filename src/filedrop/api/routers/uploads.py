"""Retrieval router: serve ingested bytes by identity."""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from filedrop.api.deps import get_content_store, get_uow
from filedrop.infra.db.uow import UnitOfWork
from filedrop.services.retrieval_service import RetrievalService
from filedrop.storage.files import ContentStore

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.get("/{identity}")
def get_upload(
    identity: str,
    uow: UnitOfWork = Depends(get_uow),
    store: ContentStore = Depends(get_content_store),
) -> FileResponse:
    stored = RetrievalService(uow, store).locate(identity)
    return FileResponse(
        stored.path,
        media_type=stored.mime_type,
        filename=stored.original_name,
        content_disposition_type="inline",
    )
