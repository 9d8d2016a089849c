"""Settings for record-spine.

Configuration is read from ``RECORDSPINE_*`` environment variables and an
optional ``.env`` file through pydantic-settings.

Fields
──────
default_dialect : Dialect used by queries constructed without one
log_level       : Level passed to :func:`recordspine.logging.configure_logging`
log_sql         : Include rendered SQL text in ``query.execute`` log events

Examples:
    >>> import os
    >>> os.environ["RECORDSPINE_DEFAULT_DIALECT"] = "mysql"
    >>> reset_settings()
    >>> get_settings().default_dialect
    'mysql'
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecordSpineSettings(BaseSettings):
    """Environment-driven settings for the builder and model layers."""

    model_config = SettingsConfigDict(
        env_prefix="RECORDSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── SQL ──────────────────────────────────────────────────────
    default_dialect: str = Field(
        default="ansi",
        description="Dialect name resolved through recordspine.dialect.get_dialect",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_sql: bool = False

    @field_validator("default_dialect", "log_level")
    @classmethod
    def _normalise(cls, value: str) -> str:
        return value.strip()


@lru_cache(maxsize=1)
def get_settings() -> RecordSpineSettings:
    """Return the process-wide settings instance."""
    return RecordSpineSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()


__all__ = ["RecordSpineSettings", "get_settings", "reset_settings"]
