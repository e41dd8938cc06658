"""
Custom exceptions for the vet session package.

This module defines the exception hierarchy used by the authentication
and session core of the veterinary clinic platform.
"""

from .core_exceptions import (  # Utility functions
    DEFAULT_LOGIN_ERROR,
    ConfigurationException,
    EnvironmentException,
    InvalidCredentials,
    InvalidState,
    NotInitialized,
    StorageUnavailable,
    TransportFailure,
    VetSessionException,
    create_error_response,
    log_exception_context,
)

__all__ = [
    # Exception classes
    "VetSessionException",
    "TransportFailure",
    "InvalidCredentials",
    "InvalidState",
    "NotInitialized",
    "StorageUnavailable",
    "ConfigurationException",
    "EnvironmentException",
    # Constants
    "DEFAULT_LOGIN_ERROR",
    # Utility functions
    "create_error_response",
    "log_exception_context",
]
