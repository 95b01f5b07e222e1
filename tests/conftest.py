"""Shared test fixtures.

  use_test_engine: redirects the server engine (UoW + lifespan) to a temp-file SQLite DB.
  upload_dir: empty content-store directory.
  app / client: FastAPI app and TestClient wired to both.
  staging / catalog: client stores on their own temp databases.
"""
import os

import pytest
from sqlmodel import SQLModel


def pytest_configure(config):
    """Keep settings-derived paths out of the working tree during collection."""
    os.environ.setdefault("DATA_DIR", str(config.rootpath / ".pytest-data"))
    os.environ.setdefault("PUBLIC_BASE_URL", "http://files.test")


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    """Monkeypatch engine references to an isolated temp-file SQLite DB."""
    from filedrop.infra.db.engine import SERVER_TABLES, create_tables, make_engine

    test_engine = make_engine(tmp_path / "server" / "test_server.db")
    create_tables(test_engine, SERVER_TABLES)

    monkeypatch.setattr("filedrop.infra.db.engine.engine", test_engine)
    monkeypatch.setattr("filedrop.infra.db.uow.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine, tables=[m.__table__ for m in SERVER_TABLES])
    test_engine.dispose()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def app(use_test_engine, upload_dir):
    from filedrop.api.app import create_app

    return create_app(upload_dir=upload_dir, public_base_url="http://files.test")


@pytest.fixture
def client(app):
    """FastAPI TestClient backed by the isolated test engine."""
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c


@pytest.fixture
def staging(tmp_path):
    from filedrop.client.staging_store import StagingStore

    store = StagingStore(tmp_path / "client" / "staging.db")
    yield store
    store.close()


@pytest.fixture
def catalog(tmp_path):
    from filedrop.client.catalog_store import CatalogStore

    store = CatalogStore(tmp_path / "client" / "catalog.db")
    yield store
    store.close()
