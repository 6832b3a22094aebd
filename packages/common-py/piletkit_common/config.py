"""
piletkit Settings
=================

Process-level settings read from ``PILETKIT_*`` environment variables
(and an optional ``.env`` file in the working directory).

Usage:
    from piletkit_common.config import get_settings

    client = get_settings().npm_client  # None -> detect from lock files
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import LOG_LEVELS, SUPPORTED_NPM_CLIENTS, Folders, UpgradeDefaults


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PILETKIT_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = UpgradeDefaults.LOG_LEVEL
    npm_client: Optional[str] = None
    cache_dir_name: str = Folders.CACHE
    command_timeout: Optional[float] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.lower()
        if v == "warn":
            v = "warning"
        if v not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level '{v}'. Supported: {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("npm_client")
    @classmethod
    def validate_npm_client(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip().lower()
        if v not in SUPPORTED_NPM_CLIENTS:
            raise ValueError(
                f"Unsupported npm client '{v}'. Supported: {', '.join(SUPPORTED_NPM_CLIENTS)}"
            )
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache the settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget cached settings (used by tests after changing the environment)."""
    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "clear_settings_cache"]
