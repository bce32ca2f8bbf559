"""Configuration management for the personal notes service."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Logging Configuration
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )
    log_file_prefix: str = Field(
        default="personal_notes", description="Prefix for log file names"
    )

    # HTTP API
    api_host: str = Field(default="127.0.0.1", description="API server bind host")
    api_port: int = Field(default=8080, description="API server port")
    allowed_origins_str: str | None = Field(
        default="*",
        alias="ALLOWED_ORIGINS",
        description="Origins allowed by CORS (comma-separated, '*' for any)",
    )
    no_browser: bool = Field(
        default=False,
        description="Do not open the web browser after startup",
    )
    frontend_dir: str = Field(
        default="frontend",
        description="Static web client served under /frontend when the directory exists",
    )

    # Storage
    db_path: str = Field(default="data/db.sqlite3", description="Path to the SQLite database")
    settings_path: str = Field(
        default="settings.json",
        description="Path to the settings record holding the encryption key",
    )
    repair_legacy_notes: bool = Field(
        default=False,
        description="Delete notes with non-base64 fields at startup",
    )

    # Activity log
    audit_queue_size: int = Field(
        default=1000, description="Maximum pending activity-log entries before dropping"
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse and return allowed CORS origins as a list."""
        if self.allowed_origins_str is None:
            return []
        return [o.strip() for o in self.allowed_origins_str.split(",") if o.strip()]

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/{self.log_file_prefix}.log"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is one the logging module knows."""
        level = logging.getLevelName(v.upper())
        if not isinstance(level, int):
            raise ValueError(f"log_level must be a valid logging level, got: {v}")
        return v.upper()

    @field_validator("api_port")
    @classmethod
    def validate_api_port(cls, v: int) -> int:
        """Validate the port is in the TCP range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"api_port must be between 1 and 65535, got: {v}")
        return v

    @field_validator("audit_queue_size")
    @classmethod
    def validate_audit_queue_size(cls, v: int) -> int:
        """Validate the audit queue can hold at least one entry."""
        if v < 1:
            raise ValueError(f"audit_queue_size must be at least 1, got: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
