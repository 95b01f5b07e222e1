"""Reconciler: moves staged files into the catalog through the ingestion API.

Protocol for one ``sync()``:

1. Read the whole staging store as the batch. Empty batch → no-op.
2. Send the batch as one request, reporting monotonic progress.
3. Success → match every descriptor to the staged file it came from, write
   all entries to the catalog, then remove the uploaded files from staging.
4. Failure (transport, HTTP, timeout, cancellation, mismatching response)
   → neither store is touched; state returns to idle with the error.

Catalog write and staging removal are two separate transactions. If the
process dies between them the staged batch survives and a later sync
uploads it again, producing duplicate catalog entries under new ids.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Sequence

from pydantic import ValidationError

from filedrop.api.schemas.files import FileDescriptor
from filedrop.client.api_client import IngestClient
from filedrop.client.catalog_store import CatalogStore
from filedrop.client.staging_store import StagingStore
from filedrop.client.state import (
    AppState,
    advance_progress,
    begin_upload,
    complete_upload,
    fail_upload,
)
from filedrop.domain.exceptions import BatchMismatchError, StoreError, UploadError
from filedrop.domain.files import CatalogEntry, StagedFile
from filedrop.logging import logger
from filedrop.storage.files import compute_sha256

StateListener = Callable[[AppState], None]


@dataclass(frozen=True)
class UploadResult:
    """Outcome of one ``sync()``: the new catalog entries or why it failed."""

    ok: bool
    entries: tuple[CatalogEntry, ...] = ()
    error: str | None = None

    @property
    def noop(self) -> bool:
        return self.ok and not self.entries and self.error is None


@dataclass(frozen=True)
class Snapshot:
    """Everything a view needs to render, read without any network call."""

    state: AppState
    staged: list[StagedFile] = field(default_factory=list)
    catalog: list[CatalogEntry] = field(default_factory=list)


def match_descriptors(
    batch: Sequence[StagedFile], descriptors: Sequence[FileDescriptor]
) -> list[CatalogEntry]:
    """Pair every descriptor with the staged file it was produced from.

    Pairing uses the echoed correlation token (the staged name); a
    descriptor without one is paired by position. Size and sha256 must match
    the staged payload. The display name is taken from the staged file, not
    from the server's copy of the multipart filename.
    """
    if len(descriptors) != len(batch):
        raise BatchMismatchError(
            f"Sent {len(batch)} file(s) but the server confirmed {len(descriptors)}"
        )

    staged_by_name = {f.name: f for f in batch}
    seen: set[str] = set()
    entries: list[CatalogEntry] = []
    for position, descriptor in enumerate(descriptors):
        token = descriptor.correlation if descriptor.correlation is not None else batch[position].name
        staged = staged_by_name.get(token)
        if staged is None or token in seen:
            raise BatchMismatchError(f"Unexpected correlation token {token!r}")
        seen.add(token)
        if descriptor.size != staged.byte_length or descriptor.sha256 != compute_sha256(staged.payload):
            raise BatchMismatchError(f"Server stored different bytes for {token!r}")
        try:
            entries.append(
                CatalogEntry(
                    id=descriptor.id,
                    name=staged.name,
                    mime_type=descriptor.mime_type,
                    url=descriptor.url,
                )
            )
        except ValidationError as exc:
            raise BatchMismatchError(f"Invalid descriptor for {token!r}: {exc}") from exc

    ids = {e.id for e in entries}
    if len(ids) != len(entries):
        raise BatchMismatchError("Server returned duplicate ids in one batch")
    return entries


class Reconciler:
    def __init__(
        self,
        staging: StagingStore,
        catalog: CatalogStore,
        client: IngestClient,
        *,
        timeout: float | None = None,
        on_state: StateListener | None = None,
    ) -> None:
        self._staging = staging
        self._catalog = catalog
        self._client = client
        self._timeout = timeout
        self._on_state = on_state
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    def _transition(self, new_state: AppState) -> None:
        if new_state is self._state:
            return
        self._state = new_state
        if self._on_state is not None:
            self._on_state(new_state)

    def _report_progress(self, percent: int) -> None:
        self._transition(advance_progress(self._state, percent))

    def _fail(self, reason: str) -> UploadResult:
        logger.warning("Upload failed, staging kept: %s", reason)
        self._transition(fail_upload(self._state, reason))
        return UploadResult(ok=False, error=reason)

    async def snapshot(self) -> Snapshot:
        return Snapshot(
            state=self._state,
            staged=await self._staging.get_all(),
            catalog=await self._catalog.get_all(),
        )

    async def sync(self) -> UploadResult:
        """Upload everything staged. Raises UploadInProgressError if busy."""
        self._transition(begin_upload(self._state))
        try:
            return await self._sync_batch()
        except Exception as exc:
            if self._state.uploading:
                self._fail(f"unexpected error: {exc!r}")
            raise

    async def _sync_batch(self) -> UploadResult:
        try:
            batch = await self._staging.get_all()
        except StoreError as exc:
            return self._fail(exc.message)
        if not batch:
            self._transition(complete_upload(self._state, uploaded=0))
            return UploadResult(ok=True)

        total_bytes = sum(f.byte_length for f in batch)
        logger.info("Uploading %d staged file(s), %d bytes", len(batch), total_bytes)
        try:
            descriptors = await asyncio.wait_for(
                self._client.upload_batch(batch, on_progress=self._report_progress),
                timeout=self._timeout,
            )
            entries = match_descriptors(batch, descriptors)
        except asyncio.CancelledError:
            self._fail("upload cancelled")
            raise
        except asyncio.TimeoutError:
            return self._fail(f"upload timed out after {self._timeout}s")
        except UploadError as exc:
            return self._fail(exc.message)

        try:
            await self._catalog.put_many(entries)
        except StoreError as exc:
            return self._fail(exc.message)

        # Only the uploaded versions leave staging; anything staged or
        # re-staged while the request was in flight stays for the next sync.
        warning = None
        try:
            await self._staging.remove_batch(batch)
        except StoreError as exc:
            warning = f"uploaded but staging was not cleared: {exc.message}"
            logger.error(warning)

        self._transition(complete_upload(self._state, uploaded=len(entries), warning=warning))
        logger.info("Catalogued %d file(s)", len(entries))
        return UploadResult(ok=True, entries=tuple(entries), error=warning)
