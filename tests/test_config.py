"""
Tests for configuration utilities.
"""

import os
from unittest.mock import patch

import pytest

from vet_session.exceptions import EnvironmentException
from vet_session.utils import EnvironmentConfig, LoggingConfigurator, LogLevel, SessionSettings


class TestEnvironmentConfig:
    """Test cases for typed environment variable access."""

    def test_get_str(self):
        with patch.dict(os.environ, {"TEST_STR": "value"}):
            assert EnvironmentConfig.get_str("TEST_STR") == "value"
        assert EnvironmentConfig.get_str("MISSING_VAR_XYZ", "default") == "default"

    def test_get_str_required(self):
        with pytest.raises(EnvironmentException):
            EnvironmentConfig.get_str("MISSING_VAR_XYZ", required=True)

    def test_get_int(self):
        with patch.dict(os.environ, {"TEST_INT": "42"}):
            assert EnvironmentConfig.get_int("TEST_INT") == 42

    def test_get_int_invalid(self):
        """Test an unparseable integer names the variable."""
        with patch.dict(os.environ, {"TEST_INT": "forty"}):
            with pytest.raises(EnvironmentException) as exc_info:
                EnvironmentConfig.get_int("TEST_INT")

        assert exc_info.value.details["config_key"] == "TEST_INT"

    def test_get_float(self):
        with patch.dict(os.environ, {"TEST_FLOAT": "2.5"}):
            assert EnvironmentConfig.get_float("TEST_FLOAT") == 2.5

        with patch.dict(os.environ, {"TEST_FLOAT": "fast"}):
            with pytest.raises(EnvironmentException):
                EnvironmentConfig.get_float("TEST_FLOAT")

    @pytest.mark.parametrize(
        "raw, expected",
        [("true", True), ("1", True), ("YES", True), ("on", True), ("false", False), ("0", False)],
    )
    def test_get_bool(self, raw, expected):
        with patch.dict(os.environ, {"TEST_BOOL": raw}):
            assert EnvironmentConfig.get_bool("TEST_BOOL") is expected

    def test_get_bool_default(self):
        assert EnvironmentConfig.get_bool("MISSING_VAR_XYZ", False) is False


class TestSessionSettings:
    """Test cases for loading session settings."""

    def test_defaults(self):
        """Test every setting has a default when the environment is empty."""
        with patch.dict(os.environ, {}, clear=True):
            settings = SessionSettings.from_environment()

        assert settings.api_base_url == "http://localhost:8080/api"
        assert settings.timeout == 30.0
        assert settings.slow_call_ms == 3000
        assert settings.storage == "file"
        assert settings.storage_path == ".vet_session/credentials.json"
        assert settings.storage_url == "sqlite:///.vet_session/credentials.db"
        assert settings.notify_logout is False
        assert settings.log_level is LogLevel.INFO

    def test_from_environment(self):
        env = {
            "VET_SESSION_API_BASE_URL": "https://clinic.example.com/api",
            "VET_SESSION_TIMEOUT": "5",
            "VET_SESSION_SLOW_CALL_MS": "1000",
            "VET_SESSION_STORAGE": "SQL",
            "VET_SESSION_STORAGE_URL": "sqlite:///tmp/creds.db",
            "VET_SESSION_NOTIFY_LOGOUT": "true",
            "VET_SESSION_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = SessionSettings.from_environment()

        assert settings.api_base_url == "https://clinic.example.com/api"
        assert settings.timeout == 5.0
        assert settings.slow_call_ms == 1000
        assert settings.storage == "sql"
        assert settings.storage_url == "sqlite:///tmp/creds.db"
        assert settings.notify_logout is True
        assert settings.log_level is LogLevel.DEBUG

    @pytest.mark.parametrize(
        "env",
        [
            {"VET_SESSION_STORAGE": "redis"},
            {"VET_SESSION_TIMEOUT": "soon"},
            {"VET_SESSION_TIMEOUT": "0"},
            {"VET_SESSION_SLOW_CALL_MS": "-5"},
            {"VET_SESSION_LOG_LEVEL": "LOUD"},
        ],
    )
    def test_invalid_values(self, env):
        """Test invalid values raise EnvironmentException."""
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(EnvironmentException):
                SessionSettings.from_environment()

    def test_direct_construction_validates(self):
        with pytest.raises(EnvironmentException):
            SessionSettings(storage="cloud")


class TestLoggingConfigurator:
    """Test cases for logging configuration."""

    def test_configure_basic_logging(self):
        with patch("logging.basicConfig") as mock_basic_config:
            LoggingConfigurator.configure_basic_logging(LogLevel.DEBUG, log_file="session.log")

        kwargs = mock_basic_config.call_args.kwargs
        assert kwargs["level"] == "DEBUG"
        assert kwargs["filename"] == "session.log"
        assert kwargs["format"] == LoggingConfigurator.DEFAULT_FORMAT

    def test_configure_structured_logging_default(self):
        """Test the default configuration sets up the package logger."""
        with patch("logging.config.dictConfig") as mock_dict_config:
            LoggingConfigurator.configure_structured_logging(level=LogLevel.WARNING)

        config = mock_dict_config.call_args.args[0]
        assert config["loggers"]["vet_session"]["level"] == "WARNING"
        assert config["handlers"]["console"]["level"] == "WARNING"

    def test_configure_structured_logging_custom(self):
        custom = {"version": 1, "disable_existing_loggers": False}

        with patch("logging.config.dictConfig") as mock_dict_config:
            LoggingConfigurator.configure_structured_logging(config_dict=custom)

        mock_dict_config.assert_called_once_with(custom)
