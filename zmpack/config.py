"""
Centralized Configuration
=========================
Constants and environment overrides for zmpack.

This module provides:
- The project config file name
- Archive compression level
- Logging defaults
- Staging directory root
"""

import os
import tempfile
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class PackDefaults:
    """Defaults for a packing run."""

    # Looked up in the project directory
    CONFIG_FILENAME: str = "zmpack.json"

    # zlib level, 1 is fast/low compression
    COMPRESSION_LEVEL: int = min(9, max(0, _env_int("ZMPACK_COMPRESSION_LEVEL", 1)))

    # Root under which staging directories are created
    TEMP_ROOT: str = os.getenv("ZMPACK_TEMP_DIR") or tempfile.gettempdir()


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    LEVEL: str = os.getenv("ZMPACK_LOG_LEVEL", "INFO").upper()
    FORMAT: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[component]}</cyan> - <level>{message}</level>"
    )


# Global singleton instances
PACK = PackDefaults()
LOGGING = LoggingConfig()
