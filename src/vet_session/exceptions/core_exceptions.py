"""
Core exceptions for the vet-session package.

This module defines the exception hierarchy used by the authentication and
session core of the veterinary clinic platform.
"""

import logging
import time
import traceback
from typing import Any, Dict, Optional

DEFAULT_LOGIN_ERROR = "Could not sign in"


class VetSessionException(Exception):
    """
    Base exception class for all vet-session package exceptions.

    Provides a consistent interface for error handling across the package.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": time.time(),
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """Get debug information for the exception, including the traceback."""
        debug_info = self.to_dict()
        formatted = traceback.format_exc()
        debug_info.update(
            {
                "traceback": (
                    formatted if formatted.strip() != "NoneType: None" else None
                ),
                "module": self.__class__.__module__,
                "class_name": self.__class__.__name__,
            }
        )
        return debug_info

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """
        Log the exception with appropriate level and context.

        Args:
            logger: Logger instance to use (creates default if None)
            level: Logging level to use
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        log_data = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": log_data},
        )

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class TransportFailure(VetSessionException):
    """Raised when a backend call fails at the network, timeout or server level."""

    def __init__(
        self,
        message: str = "The server could not be reached",
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize transport failure.

        Args:
            message: User-displayable error message
            operation: Name of the backend operation that failed
            status_code: HTTP status code, when the server answered at all
            original_error: Underlying transport exception
        """
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["status_code"] = status_code
        if original_error is not None:
            details["original_error"] = str(original_error)

        super().__init__(
            message=message,
            error_code="TRANSPORT_FAILURE",
            details=details,
        )
        self.operation = operation
        self.status_code = status_code
        self.original_error = original_error


class InvalidCredentials(VetSessionException):
    """Raised when the backend rejects a sign-in attempt."""

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        """
        Initialize invalid credentials error.

        Args:
            message: Backend-supplied message; the generic sign-in message when empty
            status_code: HTTP status code of the rejection
        """
        details: Dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message or DEFAULT_LOGIN_ERROR,
            error_code="INVALID_CREDENTIALS",
            details=details,
        )
        self.status_code = status_code


class InvalidState(VetSessionException):
    """Raised when the session core is used in a way the current state forbids.

    This signals a defect in the calling code and is not meant to be caught.
    """

    def __init__(
        self,
        message: str = "Invalid session state",
        operation: Optional[str] = None,
        active_kind: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if active_kind:
            details["active_kind"] = active_kind

        super().__init__(
            message=message,
            error_code="INVALID_STATE",
            details=details,
        )


class NotInitialized(InvalidState):
    """Raised when the session contract is read before a provider is established."""

    def __init__(
        self,
        message: str = (
            "Session provider not initialized. "
            "Call initialize_session() or use session_provider() first."
        ),
    ):
        super().__init__(message=message)
        self.error_code = "NOT_INITIALIZED"


class StorageUnavailable(VetSessionException):
    """Raised when the durable credential store cannot be read or written."""

    def __init__(
        self,
        message: str = "Credential storage is unavailable",
        key: Optional[str] = None,
        backend: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize storage exception.

        Args:
            message: Error message
            key: Storage key being accessed
            backend: Name of the storage backend
            original_error: Underlying storage exception
        """
        details: Dict[str, Any] = {}
        if key:
            details["key"] = key
        if backend:
            details["backend"] = backend
        if original_error is not None:
            details["original_error"] = str(original_error)

        super().__init__(
            message=message,
            error_code="STORAGE_UNAVAILABLE",
            details=details,
        )
        self.original_error = original_error


class ConfigurationException(VetSessionException):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        """
        Initialize configuration exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            config_value: Configuration value (will be sanitized)
        """
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = self._sanitize_config_value(
                config_key, config_value
            )

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )

    @staticmethod
    def _sanitize_config_value(key: Optional[str], value: str) -> str:
        """Sanitize configuration values to avoid exposing secrets."""
        if not key:
            return "[REDACTED]"

        sensitive_keys = ["password", "secret", "key", "token", "credential"]
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            return "[REDACTED]"

        return value


class EnvironmentException(ConfigurationException):
    """Exception raised when an environment variable holds an invalid value."""

    def __init__(
        self,
        message: str = "Environment configuration error",
        env_var: Optional[str] = None,
        env_value: Optional[str] = None,
    ):
        super().__init__(message, env_var, env_value)
        self.error_code = "ENVIRONMENT_ERROR"


def create_error_response(
    exception: VetSessionException,
    include_debug: bool = False,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Create a standardized error response from an exception.

    Args:
        exception: The exception to format
        include_debug: Whether to include debug information
        include_traceback: Whether to include traceback information

    Returns:
        Standardized error response dictionary
    """
    response: Dict[str, Any] = {
        "success": False,
        "error": {
            "type": exception.__class__.__name__,
            "code": exception.error_code,
            "message": exception.message,
        },
    }

    if exception.details:
        response["error"]["details"] = exception.details

    if include_debug:
        debug_info = exception.get_debug_info()
        response["debug"] = {
            "timestamp": debug_info["timestamp"],
            "module": debug_info["module"],
            "class_name": debug_info["class_name"],
        }

        if include_traceback and debug_info.get("traceback"):
            response["debug"]["traceback"] = debug_info["traceback"]

    return response


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with additional context information.

    Args:
        exception: The exception to log
        context: Additional context information
        logger: Logger instance to use
        level: Logging level
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(exception, VetSessionException):
        log_data = exception.to_dict()
        log_data["context"] = context
        logger.log(
            level,
            f"Exception with context: {exception.message}",
            extra={"exception_data": log_data},
        )
    else:
        logger.log(
            level,
            f"Non-VetSession exception: {str(exception)}",
            extra={
                "exception_type": exception.__class__.__name__,
                "exception_message": str(exception),
                "context": context,
            },
        )
