"""
Sprocket - Core Package
=======================

Configuration, logging, storage and health monitoring.

DESIGN:
    Core modules are singletons or global instances so every cog and
    service sees the same state:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

Author: Engineering Club Exec Team
Server: McRoberts Engineering Club
"""

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    get_config,
)

from .logger import logger, TreeLogger, LOCAL_TZ


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    # Logger
    "logger",
    "TreeLogger",
    "LOCAL_TZ",
]
