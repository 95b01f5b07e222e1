"""Environment-driven settings shared by the server and the client."""
from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    PUBLIC_BASE_URL: str = ""
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    # Storage
    DATA_DIR: Path = Path("data")
    UPLOAD_DIR: Path | None = None
    SERVER_DB: Path | None = None
    STAGING_DB: Path | None = None
    CATALOG_DB: Path | None = None

    # Client
    API_URL: str = "http://127.0.0.1:8000"
    UPLOAD_TIMEOUT_SECONDS: float = 120.0
    UPLOAD_CHUNK_BYTES: int = 64 * 1024

    LOG_LEVEL: str = "INFO"

    @model_validator(mode="after")
    def _fill_derived(self) -> "Settings":
        if not self.PUBLIC_BASE_URL:
            self.PUBLIC_BASE_URL = f"http://localhost:{self.PORT}"
        self.PUBLIC_BASE_URL = self.PUBLIC_BASE_URL.rstrip("/")
        if self.UPLOAD_DIR is None:
            self.UPLOAD_DIR = self.DATA_DIR / "uploads"
        if self.SERVER_DB is None:
            self.SERVER_DB = self.DATA_DIR / "server.db"
        if self.STAGING_DB is None:
            self.STAGING_DB = self.DATA_DIR / "staging.db"
        if self.CATALOG_DB is None:
            self.CATALOG_DB = self.DATA_DIR / "catalog.db"
        return self

    @property
    def data_dir(self) -> Path:
        return self.DATA_DIR

    @property
    def upload_dir(self) -> Path:
        return self.UPLOAD_DIR  # type: ignore[return-value]


settings = Settings()
