import pytest

from filedrop.domain.exceptions import StorageError
from filedrop.storage.files import ContentStore, compute_sha256, sanitize_filename


def test_sanitization():
    assert sanitize_filename("foo bar.txt") == "foo_bar.txt"
    assert sanitize_filename("../foo.txt") == ".._foo.txt"
    assert sanitize_filename("foo/bar") == "foo_bar"
    assert sanitize_filename("") == "upload"


def test_hashing():
    data = b"hello world"
    expected = "b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
    assert compute_sha256(data) == expected


def test_write_then_read_back(tmp_path):
    store = ContentStore(tmp_path / "uploads")
    path = store.write("1-1-a.png", b"\x89PNG")

    assert path == tmp_path / "uploads" / "1-1-a.png"
    assert path.read_bytes() == b"\x89PNG"
    assert store.exists("1-1-a.png")
    # no temp file left behind
    assert [p.name for p in (tmp_path / "uploads").iterdir()] == ["1-1-a.png"]


def test_write_refuses_to_overwrite_identity(tmp_path):
    store = ContentStore(tmp_path)
    store.write("same", b"first")

    with pytest.raises(StorageError):
        store.write("same", b"second")

    assert (tmp_path / "same").read_bytes() == b"first"


@pytest.mark.parametrize("identity", ["", ".", "..", "../escape", "a/b"])
def test_invalid_identities_are_rejected(tmp_path, identity):
    store = ContentStore(tmp_path)
    with pytest.raises(ValueError):
        store.path_for(identity)
    assert store.exists(identity) is False


def test_delete_missing_is_noop(tmp_path):
    store = ContentStore(tmp_path)
    store.delete("never-written")


def test_overlong_identity_raises_storage_error(tmp_path):
    store = ContentStore(tmp_path)
    identity = "x" * 300

    with pytest.raises(StorageError):
        store.write(identity, b"data")
    assert store.exists(identity) is False
    assert list(tmp_path.iterdir()) == []
