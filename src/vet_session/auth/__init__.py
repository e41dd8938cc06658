"""
Backend collaborators of the session core.

This module provides the HTTP client, the session validator, the identity
login gateway, the profile service and password recovery.
"""

from .gateway import (
    CLIENT_LOGIN_PATH,
    LOGIN_PATH,
    LOGOUT_PATH,
    REJECTION_STATUSES,
    IdentityLoginGateway,
)
from .http import CORRELATION_HEADER, ApiClient, error_message, generate_correlation_id
from .password_reset import (
    FORGOT_PASSWORD_PATHS,
    RESET_PASSWORD_PATH,
    VALIDATE_RESET_TOKEN_PATH,
    PasswordResetService,
)
from .profile import PROFILE_PATH, ProfileService
from .validator import CLIENT_VALIDATE_PATH, SYSTEM_VALIDATE_PATH, SessionValidator

__all__ = [
    "ApiClient",
    "CORRELATION_HEADER",
    "generate_correlation_id",
    "error_message",
    "SessionValidator",
    "SYSTEM_VALIDATE_PATH",
    "CLIENT_VALIDATE_PATH",
    "IdentityLoginGateway",
    "LOGIN_PATH",
    "CLIENT_LOGIN_PATH",
    "LOGOUT_PATH",
    "REJECTION_STATUSES",
    "ProfileService",
    "PROFILE_PATH",
    "PasswordResetService",
    "FORGOT_PASSWORD_PATHS",
    "RESET_PASSWORD_PATH",
    "VALIDATE_RESET_TOKEN_PATH",
]
