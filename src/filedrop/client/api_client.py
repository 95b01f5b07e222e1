"""Typed async HTTP client for the ingestion API.

Only imports from ``filedrop.api.schemas`` and the domain types, never ORM or
server infrastructure.
"""
from __future__ import annotations

from typing import AsyncIterator, Callable, Sequence

import httpx
from pydantic import ValidationError

from filedrop.api.schemas.files import FileDescriptor, UploadResponse
from filedrop.config import settings
from filedrop.domain.exceptions import BatchMismatchError, UploadError
from filedrop.domain.files import StagedFile

ProgressCallback = Callable[[int], None]

UPLOAD_FIELD = "files"
CORRELATION_FIELD = "correlation"


class APIError(UploadError):
    """Raised when the backend returns a 4xx/5xx response."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.detail = detail
        super().__init__(f"[{status_code}] {detail}", status_code=status_code)


class IngestClient:
    """One method per backend endpoint. Use as an async context manager."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        chunk_size: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._chunk_size = chunk_size or settings.UPLOAD_CHUNK_BYTES
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_URL,
            timeout=timeout or settings.UPLOAD_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "IngestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return
        try:
            detail = resp.json().get("detail", resp.text)
        except Exception:
            detail = resp.text
        raise APIError(resp.status_code, str(detail))

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise UploadError(f"{method} {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise UploadError(f"{method} {url} failed: {exc}") from exc
        self._raise_for_status(resp)
        return resp

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload_batch(
        self,
        files: Sequence[StagedFile],
        on_progress: ProgressCallback | None = None,
    ) -> list[FileDescriptor]:
        """POST every file as one multipart request.

        Each part carries the staged name as its correlation token. The
        encoded body is streamed in chunks and ``on_progress`` receives the
        rounded percentage of bytes handed to the transport.
        """
        encoded = self._client.build_request(
            "POST",
            "/upload",
            files=[(UPLOAD_FIELD, (f.name, f.payload, f.mime_type)) for f in files],
            data={CORRELATION_FIELD: [f.name for f in files]},
        )
        body = await encoded.aread()
        total = len(body)
        chunk_size = self._chunk_size

        async def _stream() -> AsyncIterator[bytes]:
            sent = 0
            for offset in range(0, total, chunk_size):
                chunk = body[offset:offset + chunk_size]
                yield chunk
                sent += len(chunk)
                if on_progress is not None:
                    on_progress(round(sent * 100 / total))

        resp = await self._send(
            "POST",
            "/upload",
            content=_stream(),
            headers={
                "Content-Type": encoded.headers["Content-Type"],
                "Content-Length": str(total),
            },
        )
        try:
            return UploadResponse.model_validate(resp.json()).files
        except (ValueError, ValidationError) as exc:
            raise BatchMismatchError(f"Malformed upload response: {exc}") from exc

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def fetch(self, identity: str) -> tuple[bytes, str]:
        """Return ``(content, content_type)`` for an ingested file."""
        resp = await self._send("GET", f"/uploads/{identity}")
        return resp.content, resp.headers.get("content-type", "application/octet-stream")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> dict:
        resp = await self._send("GET", "/health")
        return resp.json()
