"""
Utility helpers used by the migration tool.

This subpackage exposes configuration loading, logging setup and the
structured per-item reporting functions.
"""

from .config import load_config, validate_config
from .errors import ERRORS, ConfigError, ItemResult, MigrationError, SourceFetchError, report_error, report_ok
from .logger import get_logger, setup_logging

__all__ = [
    "ERRORS",
    "ConfigError",
    "ItemResult",
    "MigrationError",
    "SourceFetchError",
    "get_logger",
    "load_config",
    "report_error",
    "report_ok",
    "setup_logging",
    "validate_config",
]
