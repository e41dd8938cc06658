"""
Utility modules.

This module provides environment-driven settings and logging configuration.
"""

from .config import (
    ENV_PREFIX,
    STORAGE_BACKENDS,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
    SessionSettings,
)

__all__ = [
    "ENV_PREFIX",
    "STORAGE_BACKENDS",
    "EnvironmentConfig",
    "LoggingConfigurator",
    "LogLevel",
    "SessionSettings",
]
