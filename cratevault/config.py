"""Runtime configuration — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``CRATEVAULT_*`` environment variables.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cratevault.transport.http import DEFAULT_DOWNLOAD_URL, DEFAULT_USER_AGENT


class VaultSettings(BaseSettings):
    """cratevault settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CRATEVAULT_VAULT_PATH=/srv/crates
        export CRATEVAULT_MAX_WORKERS=32
        export CRATEVAULT_EXCLUSIVE_POPULATE=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CRATEVAULT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage paths
    vault_path: Path = Path(".cratevault/vault")
    index_path: Path = Path(".cratevault/index")

    # Download
    download_url: str = DEFAULT_DOWNLOAD_URL
    request_timeout_seconds: float = 60.0
    user_agent: str = DEFAULT_USER_AGENT

    # Population
    max_workers: int = 8
    # Serialize same-key populate calls within one process.
    exclusive_populate: bool = False

    # Observability
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("max_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for command-line use."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


# Module-level singleton; import as `from cratevault.config import settings`
settings = VaultSettings()
