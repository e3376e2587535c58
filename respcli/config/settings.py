"""
respcli Configuration Settings

This module contains the environment-backed defaults for the client.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    return float(value) if value else None


@dataclass
class Settings:
    """Client configuration settings."""

    # Connection defaults
    HOST: str = os.environ.get("RESPCLI_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("RESPCLI_PORT", "6379"))
    CONNECT_TIMEOUT: Optional[float] = _optional_float("RESPCLI_CONNECT_TIMEOUT")
    READ_BUFFER_SIZE: int = 4096

    # Protocol limits (Redis proto-max-bulk-len default)
    MAX_BULK_LENGTH: int = 512 * 1024 * 1024

    # Authentication
    AUTH_ENV_VAR: str = "REDISCLI_AUTH"

    # SCAN defaults
    SCAN_PATTERN: str = "*"
    SCAN_COUNT: int = 10

    # Logging settings
    DEBUG: bool = os.environ.get("RESPCLI_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("RESPCLI_LOG_LEVEL", "WARNING")


# Global settings instance
settings = Settings()
