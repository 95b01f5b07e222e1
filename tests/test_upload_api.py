"""Integration tests for POST /upload."""
import pytest
from sqlmodel import Session, select

from filedrop.domain.exceptions import StorageError
from filedrop.models.server import IngestRecord
from filedrop.services.ingest_service import MAX_NAME_CHARS
from filedrop.storage.files import ContentStore, compute_sha256


def _post(client, parts, correlation=None):
    files = [("files", (name, content, mime)) for name, content, mime in parts]
    data = {"correlation": correlation} if correlation is not None else None
    return client.post("/upload", files=files, data=data)


def test_upload_single_file_returns_descriptor(client, upload_dir):
    resp = _post(client, [("a.png", b"0123456789", "image/png")])

    assert resp.status_code == 200
    files = resp.json()["files"]
    assert len(files) == 1
    desc = files[0]
    assert desc["name"] == "a.png"
    assert desc["type"] == "image/png"
    assert desc["size"] == 10
    assert desc["sha256"] == compute_sha256(b"0123456789")
    assert desc["url"] == f"http://files.test/uploads/{desc['id']}"
    assert (upload_dir / desc["id"]).read_bytes() == b"0123456789"


def test_same_name_in_one_batch_gets_distinct_ids(client):
    resp = _post(client, [
        ("a.png", b"first", "image/png"),
        ("a.png", b"second", "image/png"),
    ])

    ids = [f["id"] for f in resp.json()["files"]]
    assert len(set(ids)) == 2


def test_same_name_across_batches_gets_distinct_ids(client):
    first = _post(client, [("a.png", b"x", "image/png")]).json()["files"][0]["id"]
    second = _post(client, [("a.png", b"x", "image/png")]).json()["files"][0]["id"]
    assert first != second


def test_response_preserves_input_order_and_echoes_correlation(client):
    parts = [
        ("photo.jpg", b"jpg", "image/jpeg"),
        ("clip.mp4", b"mp4", "video/mp4"),
        ("notes.txt", b"txt", "text/plain"),
    ]
    resp = _post(client, parts, correlation=["c1", "c2", "c3"])

    files = resp.json()["files"]
    assert [f["name"] for f in files] == ["photo.jpg", "clip.mp4", "notes.txt"]
    assert [f["correlation"] for f in files] == ["c1", "c2", "c3"]
    assert [f["type"] for f in files] == ["image/jpeg", "video/mp4", "text/plain"]


def test_correlation_is_optional(client):
    resp = _post(client, [("a.txt", b"a", "text/plain")])
    assert resp.json()["files"][0]["correlation"] is None


def test_upload_without_files_returns_400(client):
    resp = client.post("/upload", data={"correlation": ["orphan"]})
    assert resp.status_code == 400


def test_correlation_count_mismatch_returns_400(client, upload_dir):
    resp = _post(
        client,
        [("a.txt", b"a", "text/plain"), ("b.txt", b"b", "text/plain")],
        correlation=["only-one"],
    )
    assert resp.status_code == 400
    assert not upload_dir.exists() or not any(upload_dir.iterdir())


def test_storage_failure_fails_whole_batch(client, upload_dir, use_test_engine, monkeypatch):
    real_write = ContentStore.write
    calls = {"n": 0}

    def flaky_write(self, identity, content):
        calls["n"] += 1
        if calls["n"] == 2:
            raise StorageError("disk full")
        return real_write(self, identity, content)

    monkeypatch.setattr(ContentStore, "write", flaky_write)

    resp = _post(client, [
        ("one.txt", b"1", "text/plain"),
        ("two.txt", b"2", "text/plain"),
        ("three.txt", b"3", "text/plain"),
    ])

    assert resp.status_code == 500
    assert resp.json()["detail"] == "disk full"
    assert not any(p for p in upload_dir.iterdir() if not p.name.startswith("."))
    with Session(use_test_engine) as s:
        assert s.exec(select(IngestRecord)).all() == []


def test_identity_records_are_persisted(client, use_test_engine):
    desc = _post(client, [("doc.pdf", b"%PDF", "application/pdf")]).json()["files"][0]

    with Session(use_test_engine) as s:
        record = s.exec(select(IngestRecord).where(IngestRecord.identity == desc["id"])).one()
    assert record.original_name == "doc.pdf"
    assert record.mime_type == "application/pdf"
    assert record.size_bytes == 4
    assert desc["id"].split("-")[1] == str(record.seq)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_long_name_gets_bounded_identity(client):
    long_name = "n" * 250 + ".txt"
    resp = _post(client, [("ok.txt", b"fine", "text/plain"), (long_name, b"long", "text/plain")])

    assert resp.status_code == 200
    desc = resp.json()["files"][1]
    assert desc["name"] == long_name
    assert len(desc["id"].split("-", 2)[2]) == MAX_NAME_CHARS
    assert client.get(f"/uploads/{desc['id']}").content == b"long"


def test_overlong_lookup_is_404(client):
    assert client.get(f"/uploads/{'z' * 300}").status_code == 404
