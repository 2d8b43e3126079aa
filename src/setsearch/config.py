"""Centralized configuration for setsearch using Pydantic Settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Only process-level concerns live here (store connection, logging,
    segmentation resources). Index namespaces are chosen per call to
    ``create_index``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Store connection
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL for the set store")
    redis_socket_timeout: float = Field(default=5.0, gt=0, description="Redis socket timeout in seconds")

    # Segmentation
    cjk_segmentation: bool = Field(
        default=True, description="Route text containing CJK ideographs through the jieba segmenter"
    )
    jieba_dictionary: str | None = Field(default=None, description="Optional path to a custom jieba dictionary")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("redis_url")
    @classmethod
    def _check_redis_url(cls, value: str) -> str:
        if not value.startswith(("redis://", "rediss://", "unix://")):
            msg = f"redis_url must use redis://, rediss:// or unix:// scheme, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"debug", "info", "warning", "error", "critical"}:
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return normalized

    @field_validator("jieba_dictionary")
    @classmethod
    def _blank_dictionary_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value


def get_settings() -> Settings:
    """Return settings loaded from the current environment."""
    return Settings()
