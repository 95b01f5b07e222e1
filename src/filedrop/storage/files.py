"""Filesystem content store: one file per identity under a single directory."""
from __future__ import annotations

import contextlib
import hashlib
import os
import re
from pathlib import Path

from filedrop.domain.exceptions import StorageError

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE.sub("_", filename) or "upload"


def compute_sha256(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class ContentStore:
    """Durable byte store addressed purely by identity.

    Writes land in a hidden ``.part`` file that is fsynced and then renamed
    into place, so a reader never sees a half-written file. An identity is
    written at most once.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def ensure(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def path_for(self, identity: str) -> Path:
        if not identity or identity in (".", "..") or Path(identity).name != identity:
            raise ValueError(f"Invalid identity: {identity!r}")
        return self._root / identity

    def exists(self, identity: str) -> bool:
        try:
            return self.path_for(identity).is_file()
        except (ValueError, OSError):
            return False

    def write(self, identity: str, content: bytes) -> Path:
        target = self.path_for(identity)
        partial = self._root / f".{identity}.part"
        try:
            if target.exists():
                raise StorageError(f"Identity {identity} is already stored")
            self.ensure()
            with partial.open("wb") as sink:
                sink.write(content)
                sink.flush()
                os.fsync(sink.fileno())
            os.replace(partial, target)
        except OSError as exc:
            with contextlib.suppress(OSError):
                partial.unlink(missing_ok=True)
            raise StorageError(f"Could not store {identity}: {exc}") from exc
        return target

    def delete(self, identity: str) -> None:
        self.path_for(identity).unlink(missing_ok=True)
