"""Upload router: one multipart batch in, one descriptor per part out."""
from fastapi import APIRouter, Depends, File, Form, UploadFile

from filedrop.api.deps import get_content_store, get_public_base_url, get_uow
from filedrop.api.schemas.files import UploadResponse
from filedrop.domain.exceptions import InvalidRequestError
from filedrop.infra.db.uow import UnitOfWork
from filedrop.services.ingest_service import IngestService, UploadPayload
from filedrop.storage.files import ContentStore

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_files(
    files: list[UploadFile] | None = File(None),
    correlation: list[str] | None = Form(None),
    uow: UnitOfWork = Depends(get_uow),
    store: ContentStore = Depends(get_content_store),
    base_url: str = Depends(get_public_base_url),
) -> UploadResponse:
    files = files or []
    if correlation is not None and len(correlation) != len(files):
        raise InvalidRequestError(
            f"Got {len(correlation)} correlation token(s) for {len(files)} file(s)"
        )

    payloads = []
    for index, upload in enumerate(files):
        payloads.append(
            UploadPayload(
                name=upload.filename or "upload",
                mime_type=upload.content_type or "application/octet-stream",
                content=await upload.read(),
                correlation=correlation[index] if correlation else None,
            )
        )
    descriptors = IngestService(uow, store, base_url).ingest_batch(payloads)
    return UploadResponse(files=descriptors)
