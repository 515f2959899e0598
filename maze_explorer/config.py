"""Application configuration using Pydantic settings."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, ".env"),
        env_file_encoding="utf-8",
        env_prefix="MAZE_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Maze Explorer"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Remote maze session
    ws_base_url: str = "wss://maze.robanderson.dev/ws"
    open_timeout_seconds: float = 10.0
    move_timeout_seconds: Optional[float] = None  # None waits indefinitely

    # Explorer
    max_recovery_attempts: int = 3

    # Local maze host
    host: str = "127.0.0.1"
    port: int = 8000
    mazes_dir: Optional[Path] = None

    @field_validator("ws_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise the base URL so maze ids can be appended with a single slash."""
        return v.rstrip("/")

    @field_validator("open_timeout_seconds", "move_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Timeouts must be positive when set."""
        if v is not None and v <= 0:
            raise ValueError("Timeouts must be greater than zero")
        return v

    @field_validator("max_recovery_attempts")
    @classmethod
    def validate_recovery_attempts(cls, v: int) -> int:
        """At least one recovery attempt is required."""
        if v < 1:
            raise ValueError("MAX_RECOVERY_ATTEMPTS must be at least 1")
        return v

    def session_url(self, maze_id: str) -> str:
        """Get the WebSocket URL for a maze session."""
        return f"{self.ws_base_url}/{maze_id}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
