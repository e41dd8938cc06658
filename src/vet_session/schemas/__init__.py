"""
Pydantic schemas for data validation and serialization.

This module contains the identity payloads exchanged with the backend, the
durable credential record, the password recovery payloads and the session
snapshot exposed to consumers.
"""

from .identity import (
    ClientLoginResult,
    ClientOwner,
    CredentialRecord,
    Identity,
    LoginRequest,
    LoginResult,
    ProfileUpdate,
    SystemUser,
)
from .password_reset import ForgotPasswordRequest, PasswordResetRequest, ResetTokenStatus
from .session import AccessResult, SessionSnapshot

__all__ = [
    # Identity schemas
    "SystemUser",
    "ClientOwner",
    "Identity",
    "LoginRequest",
    "LoginResult",
    "ClientLoginResult",
    "CredentialRecord",
    "ProfileUpdate",
    # Password recovery schemas
    "ForgotPasswordRequest",
    "PasswordResetRequest",
    "ResetTokenStatus",
    # Session schemas
    "SessionSnapshot",
    "AccessResult",
]
