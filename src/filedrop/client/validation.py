"""Pre-flight checks for the client, used by ``filedrop doctor``.

No server infrastructure, only the local paths and the API client.
"""
from __future__ import annotations

from pathlib import Path
from typing import List


def validate_data_dir(data_dir: Path | None = None) -> List[str]:
    """Validate that the data directory exists (or can be created) and is writable."""
    errors = []
    from filedrop.config import settings
    data_dir = Path(data_dir or settings.data_dir)

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        test_file = data_dir / ".write_test"
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        errors.append(f"Cannot write to data directory {data_dir}: {e}")

    return errors


async def validate_backend_connection(base_url: str | None = None) -> List[str]:
    """Validate that the ingestion API is reachable."""
    errors = []
    from filedrop.client.api_client import IngestClient
    from filedrop.domain.exceptions import UploadError
    try:
        async with IngestClient(base_url, timeout=5.0) as client:
            await client.health()
    except UploadError as e:
        errors.append(f"Backend connection failed: {e}")
    return errors


async def run_all_checks() -> List[str]:
    """Run all validation checks."""
    errors = []
    errors.extend(validate_data_dir())
    errors.extend(await validate_backend_connection())
    return errors
