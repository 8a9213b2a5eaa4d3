"""Application configuration."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Confessional Engine")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=True)
    logs_dir: Optional[Path] = Field(default=None)

    # API
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8765)

    # Engine config document; None means the per-user application data location
    engine_config_path: Optional[Path] = Field(default=None)

    # Inference server timeouts (seconds)
    probe_timeout: float = Field(default=5.0, gt=0)
    chat_timeout: float = Field(default=90.0, gt=0)
    report_timeout: float = Field(default=120.0, gt=0)
    pull_timeout: float = Field(default=300.0, gt=0)

    # Credential vault
    credential_target: str = Field(default="DataConfessional_APIKey")
    credential_username: str = Field(default="api_key")

    # Monitoring
    enable_metrics: bool = Field(default=False)

    @property
    def resolved_engine_config_path(self) -> Path:
        """Get engine config document path."""
        if self.engine_config_path is not None:
            return self.engine_config_path
        return default_engine_dir() / "engine-config.json"

    @property
    def resolved_logs_dir(self) -> Path:
        """Get logs directory, next to the engine config by default."""
        if self.logs_dir is not None:
            return self.logs_dir
        return default_engine_dir() / "logs"


def default_engine_dir() -> Path:
    """Per-user application data directory of the engine."""
    app_data = (
        os.environ.get("APPDATA")
        or os.environ.get("LOCALAPPDATA")
        or os.environ.get("XDG_DATA_HOME")
    )
    base = Path(app_data) if app_data else Path.home() / ".local" / "share"
    return base / "DataConfessional" / "engine"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
