"""CLI tests: staging and catalog commands against temp stores."""
import asyncio

import httpx
import pytest
from typer.testing import CliRunner

from filedrop.cli import app
from filedrop.client import api_client
from filedrop.client.catalog_store import CatalogStore
from filedrop.client.staging_store import StagingStore
from filedrop.config import settings
from filedrop.domain.files import CatalogEntry

runner = CliRunner()


@pytest.fixture(autouse=True)
def temp_stores(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STAGING_DB", tmp_path / "staging.db")
    monkeypatch.setattr(settings, "CATALOG_DB", tmp_path / "catalog.db")
    return tmp_path


def _staged_names():
    store = StagingStore.open_default()
    try:
        return sorted(f.name for f in asyncio.run(store.get_all()))
    finally:
        store.close()


def _use_transport(monkeypatch, handler):
    class _MockedClient(api_client.IngestClient):
        def __init__(self, base_url=None, **kwargs):
            kwargs["transport"] = httpx.MockTransport(handler)
            super().__init__(base_url or "http://files.test", **kwargs)

    monkeypatch.setattr(api_client, "IngestClient", _MockedClient)


def test_stage_and_list(tmp_path):
    (tmp_path / "photo.jpg").write_bytes(b"\xff" * 2048)
    (tmp_path / "notes.txt").write_text("hello")

    result = runner.invoke(app, ["stage", str(tmp_path / "photo.jpg"), str(tmp_path / "notes.txt")])
    assert result.exit_code == 0, result.output
    assert "staged photo.jpg (image/jpeg, 2.0 KB)" in result.output

    result = runner.invoke(app, ["staged"])
    assert result.exit_code == 0
    assert "photo.jpg" in result.output
    assert "Total staged: 2" in result.output


def test_stage_missing_file_fails(tmp_path):
    result = runner.invoke(app, ["stage", str(tmp_path / "nope.png")])
    assert result.exit_code != 0
    assert _staged_names() == []


def test_unstage_one_and_all(tmp_path):
    for name in ("a.png", "b.png", "c.png"):
        (tmp_path / name).write_bytes(b"x")
    runner.invoke(app, ["stage", *(str(tmp_path / n) for n in ("a.png", "b.png", "c.png"))])

    result = runner.invoke(app, ["unstage", "b.png"])
    assert result.exit_code == 0
    assert _staged_names() == ["a.png", "c.png"]

    result = runner.invoke(app, ["unstage", "--all"])
    assert result.exit_code == 0
    assert "Removed 2 staged file(s)." in result.output
    assert _staged_names() == []


def test_unstage_needs_a_target():
    result = runner.invoke(app, ["unstage"])
    assert result.exit_code == 2


def test_empty_listings():
    assert "No staged files." in runner.invoke(app, ["staged"]).output
    assert "No files uploaded yet." in runner.invoke(app, ["catalog"]).output


def test_catalog_and_forget():
    store = CatalogStore.open_default()
    asyncio.run(store.put(CatalogEntry(id="1-1-a.png", name="a.png", mime_type="image/png", url="http://x/1")))
    store.close()

    result = runner.invoke(app, ["catalog"])
    assert "1-1-a.png" in result.output
    assert "Total files: 1" in result.output

    result = runner.invoke(app, ["forget", "1-1-a.png"])
    assert result.exit_code == 0
    assert "No files uploaded yet." in runner.invoke(app, ["catalog"]).output


def test_upload_with_nothing_staged(monkeypatch):
    _use_transport(monkeypatch, lambda request: httpx.Response(500))
    result = runner.invoke(app, ["upload"])
    assert result.exit_code == 0
    assert "Nothing staged." in result.output


def test_upload_failure_keeps_staging(tmp_path, monkeypatch):
    (tmp_path / "clip.mp4").write_bytes(b"\x00" * 64)
    runner.invoke(app, ["stage", str(tmp_path / "clip.mp4")])

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _use_transport(monkeypatch, handler)
    result = runner.invoke(app, ["upload"])

    assert result.exit_code == 1
    assert "staged files kept" in result.output
    assert _staged_names() == ["clip.mp4"]
