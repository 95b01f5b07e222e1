import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer

from filedrop.config import settings
from filedrop.logging import logger, get_session_id

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main():
    """
    filedrop: stage files, upload them, browse the catalog.
    """
    pass


def _open_stores():
    from filedrop.client.catalog_store import CatalogStore
    from filedrop.client.staging_store import StagingStore
    return StagingStore.open_default(), CatalogStore.open_default()


def _human_size(size: int) -> str:
    return f"{round(size / 1024, 1)} KB"


@app.command(name="serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: HOST)."),
    port: Optional[int] = typer.Option(None, help="Listen port (default: PORT)."),
):
    """
    Run the ingestion and retrieval API.
    """
    import uvicorn
    from filedrop.api.app import create_app

    uvicorn.run(create_app(), host=host or settings.HOST, port=port or settings.PORT)


@app.command(name="stage")
def stage(paths: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True)):
    """
    Stage files for the next upload. A file with an already staged name replaces it.
    """
    staging, _ = _open_stores()

    async def _run():
        for path in paths:
            staged = await staging.stage_path(path)
            print(f"  staged {staged.name} ({staged.mime_type}, {_human_size(staged.byte_length)})")

    asyncio.run(_run())


@app.command(name="staged")
def staged():
    """
    List staged files.
    """
    staging, _ = _open_stores()
    files = asyncio.run(staging.get_all())
    if not files:
        print("No staged files.")
        return
    for f in sorted(files, key=lambda f: f.name):
        print(f"  {f.name:<40} {f.mime_type:<28} {_human_size(f.byte_length)}")
    print(f"Total staged: {len(files)}")


@app.command(name="unstage")
def unstage(
    name: Optional[str] = typer.Argument(None),
    all_: bool = typer.Option(False, "--all", help="Remove every staged file."),
):
    """
    Remove one staged file by name, or all of them.
    """
    staging, _ = _open_stores()
    if all_:
        removed = asyncio.run(staging.clear())
        print(f"Removed {removed} staged file(s).")
    elif name:
        asyncio.run(staging.remove(name))
        print(f"Removed {name}.")
    else:
        print("Give a file name or --all.")
        raise typer.Exit(code=2)


@app.command(name="upload")
def upload(
    api_url: Optional[str] = typer.Option(None, help="Ingestion API base URL (default: API_URL)."),
):
    """
    Upload every staged file as one batch and move the results into the catalog.
    """
    from filedrop.client.api_client import IngestClient
    from filedrop.client.reconciler import Reconciler

    staging, catalog = _open_stores()

    def _show(state):
        if state.uploading and state.progress is not None:
            sys.stderr.write(f"\r  uploading... {state.progress:3d}%")
            sys.stderr.flush()

    async def _run():
        async with IngestClient(api_url) as client:
            reconciler = Reconciler(
                staging, catalog, client,
                timeout=settings.UPLOAD_TIMEOUT_SECONDS,
                on_state=_show,
            )
            return await reconciler.sync()

    result = asyncio.run(_run())
    sys.stderr.write("\n")
    if not result.ok:
        print(f"❌ Upload failed, staged files kept: {result.error}")
        raise typer.Exit(code=1)
    if result.noop:
        print("Nothing staged.")
        return
    for entry in result.entries:
        print(f"  ✅ {entry.name} -> {entry.url}")
    if result.error:
        print(f"⚠️  {result.error}")


@app.command(name="catalog")
def catalog():
    """
    List catalogued files (no network needed).
    """
    _, catalog_store = _open_stores()
    entries = asyncio.run(catalog_store.get_all())
    if not entries:
        print("No files uploaded yet.")
        return
    for e in sorted(entries, key=lambda e: e.id):
        print(f"  {e.id:<48} {e.name:<32} {e.mime_type:<24} {e.url}")
    print(f"Total files: {len(entries)}")


@app.command(name="forget")
def forget(entry_id: str):
    """
    Remove an entry from the local catalog.
    """
    _, catalog_store = _open_stores()
    asyncio.run(catalog_store.delete(entry_id))
    print(f"Removed {entry_id} from the catalog.")


@app.command(name="doctor")
def doctor():
    """
    Check configuration, local storage and API reachability.
    """
    from filedrop.client.validation import validate_backend_connection, validate_data_dir

    logger.info("Running doctor check...")
    print("\n🩺 filedrop doctor\n")
    print(f"  Python:          {sys.version.split()[0]}")
    print(f"  Session:         {get_session_id()}")
    print(f"  DATA_DIR:        {settings.DATA_DIR}")
    print(f"  STAGING_DB:      {settings.STAGING_DB}")
    print(f"  CATALOG_DB:      {settings.CATALOG_DB}")
    print(f"  API_URL:         {settings.API_URL}")
    print(f"  PUBLIC_BASE_URL: {settings.PUBLIC_BASE_URL}")

    failures = validate_data_dir() + asyncio.run(validate_backend_connection())
    print()
    if failures:
        for failure in failures:
            print(f"  ❌ {failure}")
        raise typer.Exit(code=1)
    print("  ✅ All checks passed")


if __name__ == "__main__":
    app()
