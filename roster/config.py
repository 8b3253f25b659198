"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Values above this are rejected by the bucket; chunks stay well below it.
STORE_VALUE_CEILING = 64 * 1024


class Settings(BaseSettings):
    """Roster sync settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ROSTER_",
        extra="ignore",
    )

    # Core
    debug: bool = False
    expose_docs: bool = False

    # Remote bucket
    sync_base_url: str = "https://kvdb.io/MN8x9v6w4q2p5r1t7y3z/employee_master_v7"
    chunk_size: int = Field(default=55_000, ge=1, lt=STORE_VALUE_CEILING)
    sync_interval_seconds: float = Field(default=20.0, gt=0)
    request_timeout_seconds: float = Field(default=20.0, gt=0)

    # Local cache
    state_dir: Path = Path("./data/state")

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=list)
