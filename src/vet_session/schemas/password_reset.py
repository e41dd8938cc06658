"""
Password recovery schemas.

Covers the public recovery flow: asking for a reset link, setting a new
password with the emailed token, and checking a token before showing the
reset form.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ForgotPasswordRequest(BaseModel):
    """Email of the account that wants a reset link."""

    email: str = Field(..., min_length=3, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("Email must contain '@'")
        return v.lower()


class PasswordResetRequest(BaseModel):
    """A reset token together with the new password, kept verbatim."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Token cannot be empty")
        return v.strip()


class ResetTokenStatus(BaseModel):
    """What the backend knows about a reset token."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    valid: bool = False
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )
    expires_in_hours: Optional[int] = Field(
        None, validation_alias=AliasChoices("expires_in_hours", "expiresInHours")
    )
