class FileDropError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(FileDropError):
    """Requested resource does not exist."""


class InvalidRequestError(FileDropError):
    """Request is malformed (no files, mismatched correlation tokens)."""


class StorageError(FileDropError):
    """Bytes could not be durably written to the content store."""


class StoreError(FileDropError):
    """A local store transaction failed (database unavailable, disk full)."""


class UploadError(FileDropError):
    """Transmitting a batch failed. ``status_code`` is set for HTTP errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class BatchMismatchError(UploadError):
    """Server response does not correspond to the request that was sent."""


class UploadInProgressError(FileDropError):
    """A batch is already in flight; only one may be uploading at a time."""
