"""treeserve configuration — Pydantic BaseSettings loaded from env / .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings; the served root is fixed for the process lifetime."""

    app_name: str = "treeserve"
    debug: bool = False
    log_level: str = "INFO"

    # Network
    host: str = "0.0.0.0"
    port: int = 8080

    # Served tree
    root_dir: str = Field(default=".", validate_default=True)
    random_button: bool = False

    # Auth: empty password disables the session gate entirely
    password: str = ""
    session_ttl_minutes: int = 720  # 12 hours, 0 = never expire
    session_purge_interval_seconds: int = 300

    # Live updates
    live_client_queue_size: int = 16
    watch_use_polling: bool = False

    @property
    def auth_enabled(self) -> bool:
        return bool(self.password)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TREESERVE_",
        extra="ignore",
    )

    @field_validator("root_dir")
    @classmethod
    def _resolve_root(cls, value: str) -> str:
        """Canonicalize the served root once; every path check relies on it."""
        root = Path(value).expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"Directory does not exist: {root}")
        return str(root)

    @field_validator("live_client_queue_size")
    @classmethod
    def _positive_queue(cls, value: int) -> int:
        if value < 1:
            raise ValueError("live_client_queue_size must be at least 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
