"""Configuration management for blockscope.

Loads settings from environment variables (or a .env file) using Pydantic.

Usage:
    from blockscope.config import settings

    print(settings.explorer_base_url)
    print(settings.log_level)
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """blockscope configuration from environment variables.

    Attributes:
        explorer_base_url: Base URL of the remote block explorer API
        cache_db_path: Path to the SQLite cache holding the transactions table
        explorer_timeout: Per-request deadline for explorer calls (seconds)
        explorer_max_retries: Retries on transient explorer failures
        default_window: Rows/blocks returned when no valid range is given
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    explorer_base_url: str = Field(
        default="http://localhost:8080",
        min_length=1,
        description="Explorer API base URL",
    )
    cache_db_path: str = Field(
        default="cache/transactions.db",
        description="SQLite cache database path",
    )

    explorer_timeout: float = Field(default=30.0, gt=0, description="Explorer request timeout (s)")
    explorer_max_retries: int = Field(default=3, ge=0, le=10, description="Explorer retry attempts")

    # Safety cap, never an unbounded fetch
    default_window: int = Field(default=100, ge=1, description="Default block window size")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("explorer_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper


# Global settings instance — loaded once at import
settings = Settings()
