"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
the settings object the session core is built from, and logging
configuration utilities.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exceptions import EnvironmentException

ENV_PREFIX = "VET_SESSION_"

STORAGE_BACKENDS = ("memory", "file", "sql")


class LogLevel(Enum):
    """Enumeration for log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentConfig:
    """Utility class for handling environment variables with type conversion."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        """
        Get a string environment variable.

        Args:
            key: Environment variable key
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            String value or default

        Raises:
            EnvironmentException: If required variable is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise EnvironmentException(
                f"Required environment variable '{key}' is not set", env_var=key
            )

        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            EnvironmentException: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise EnvironmentException(
                    f"Required environment variable '{key}' is not set", env_var=key
                )
            return default

        try:
            return int(value)
        except ValueError:
            raise EnvironmentException(
                f"Environment variable '{key}' must be an integer, got: {value}",
                env_var=key,
                env_value=value,
            )

    @staticmethod
    def get_float(
        key: str, default: Optional[float] = None, required: bool = False
    ) -> Optional[float]:
        """
        Get a float environment variable.

        Raises:
            EnvironmentException: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise EnvironmentException(
                    f"Required environment variable '{key}' is not set", env_var=key
                )
            return default

        try:
            return float(value)
        except ValueError:
            raise EnvironmentException(
                f"Environment variable '{key}' must be a float, got: {value}",
                env_var=key,
                env_value=value,
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """
        Get a boolean environment variable.

        Raises:
            EnvironmentException: If required variable is missing
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise EnvironmentException(
                    f"Required environment variable '{key}' is not set", env_var=key
                )
            return default

        return value.lower() in ("true", "1", "yes", "on", "enabled")


@dataclass
class SessionSettings:
    """Settings the session core is wired from."""

    api_base_url: str = "http://localhost:8080/api"
    timeout: float = 30.0
    slow_call_ms: int = 3000
    storage: str = "file"
    storage_path: str = ".vet_session/credentials.json"
    storage_url: str = "sqlite:///.vet_session/credentials.db"
    notify_logout: bool = False
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self) -> None:
        self.storage = self.storage.strip().lower()
        if self.storage not in STORAGE_BACKENDS:
            raise EnvironmentException(
                f"Storage backend must be one of {list(STORAGE_BACKENDS)}, "
                f"got: {self.storage}",
                env_var=f"{ENV_PREFIX}STORAGE",
                env_value=self.storage,
            )
        if self.timeout <= 0:
            raise EnvironmentException(
                "Timeout must be positive",
                env_var=f"{ENV_PREFIX}TIMEOUT",
                env_value=str(self.timeout),
            )
        if self.slow_call_ms < 0:
            raise EnvironmentException(
                "Slow call threshold cannot be negative",
                env_var=f"{ENV_PREFIX}SLOW_CALL_MS",
                env_value=str(self.slow_call_ms),
            )

    @classmethod
    def from_environment(cls) -> "SessionSettings":
        """
        Load settings from ``VET_SESSION_*`` environment variables.

        Returns:
            Settings with defaults for every unset variable

        Raises:
            EnvironmentException: If a variable holds an invalid value
        """
        defaults = cls()
        level_name = (
            EnvironmentConfig.get_str(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level.value)
            or defaults.log_level.value
        )
        try:
            log_level = LogLevel(level_name.upper())
        except ValueError:
            raise EnvironmentException(
                f"Log level must be one of {[level.value for level in LogLevel]}, "
                f"got: {level_name}",
                env_var=f"{ENV_PREFIX}LOG_LEVEL",
                env_value=level_name,
            )

        return cls(
            api_base_url=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}API_BASE_URL", defaults.api_base_url
            ),
            timeout=EnvironmentConfig.get_float(
                f"{ENV_PREFIX}TIMEOUT", defaults.timeout
            ),
            slow_call_ms=EnvironmentConfig.get_int(
                f"{ENV_PREFIX}SLOW_CALL_MS", defaults.slow_call_ms
            ),
            storage=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}STORAGE", defaults.storage
            ),
            storage_path=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}STORAGE_PATH", defaults.storage_path
            ),
            storage_url=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}STORAGE_URL", defaults.storage_url
            ),
            notify_logout=EnvironmentConfig.get_bool(
                f"{ENV_PREFIX}NOTIFY_LOGOUT", defaults.notify_logout
            ),
            log_level=log_level,
        )


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
        level: Union[str, LogLevel] = LogLevel.INFO,
    ) -> None:
        """
        Configure structured logging using a dictionary or file.

        Args:
            config_dict: Logging configuration dictionary
            config_file: Path to logging configuration file
            level: Level of the ``vet_session`` logger in the default configuration
        """
        if isinstance(level, LogLevel):
            level = level.value

        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
        elif config_dict:
            logging.config.dictConfig(config_dict)
        else:
            default_config = {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                    "detailed": {
                        "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s"
                    },
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "standard",
                        "stream": "ext://sys.stdout",
                    }
                },
                "loggers": {
                    "vet_session": {
                        "level": level,
                        "handlers": ["console"],
                        "propagate": False,
                    }
                },
                "root": {"level": "WARNING", "handlers": ["console"]},
            }
            logging.config.dictConfig(default_config)
