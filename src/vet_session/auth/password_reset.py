"""
Password recovery for both identity kinds.

All endpoints are public: requests never carry the session token, and a
401 from them never expires the active session.
"""

import logging
from typing import Dict, Union

import httpx
from pydantic import ValidationError

from ..exceptions import InvalidCredentials, TransportFailure
from ..models.identity import IdentityKind
from ..schemas.password_reset import (
    ForgotPasswordRequest,
    PasswordResetRequest,
    ResetTokenStatus,
)
from .gateway import REJECTION_STATUSES
from .http import ApiClient, error_message

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_PATHS: Dict[IdentityKind, str] = {
    IdentityKind.SYSTEM: "/public/password/forgot-usuario",
    IdentityKind.CLIENT: "/public/password/forgot-cliente",
}
RESET_PASSWORD_PATH = "/public/password/reset"
VALIDATE_RESET_TOKEN_PATH = "/public/password/validate-token"

FORGOT_PASSWORD_SENT = "If the email exists, a recovery link will arrive shortly."
PASSWORD_RESET_DONE = "Password reset. You can sign in now."


class PasswordResetService:
    """Requests reset links, checks reset tokens and sets new passwords."""

    def __init__(
        self,
        client: ApiClient,
        forgot_paths: Dict[IdentityKind, str] = FORGOT_PASSWORD_PATHS,
        reset_path: str = RESET_PASSWORD_PATH,
        validate_path: str = VALIDATE_RESET_TOKEN_PATH,
    ) -> None:
        self.client = client
        self.forgot_paths = dict(forgot_paths)
        self.reset_path = reset_path
        self.validate_path = validate_path

    async def forgot_password(
        self, email: str, kind: Union[IdentityKind, str] = IdentityKind.SYSTEM
    ) -> str:
        """
        Ask the backend to email a reset link to a staff user or client owner.

        The backend answers the same way whether or not the email exists.

        Args:
            email: Account email
            kind: Which identity kind the account belongs to

        Returns:
            The confirmation message to show

        Raises:
            ValueError: If ``kind`` is not SYSTEM or CLIENT
            InvalidCredentials: If the email is malformed or refused
            TransportFailure: If the backend cannot be reached or fails
        """
        kind = IdentityKind(kind)
        if kind not in self.forgot_paths:
            raise ValueError(f"No password recovery for identity kind {kind.value}")
        try:
            request = ForgotPasswordRequest(email=email)
        except ValidationError:
            raise InvalidCredentials("Enter a valid email")

        response = await self.client.post(
            self.forgot_paths[kind],
            json=request.model_dump(),
            authenticated=False,
            operation="forgot_password",
        )
        self._raise_for_status(response, "forgot_password", "Enter a valid email")

        logger.info(f"Password recovery requested for {kind.value} account {request.email}")
        return error_message(response) or FORGOT_PASSWORD_SENT

    async def forgot_password_system(self, email: str) -> str:
        return await self.forgot_password(email, IdentityKind.SYSTEM)

    async def forgot_password_client(self, email: str) -> str:
        return await self.forgot_password(email, IdentityKind.CLIENT)

    async def reset_password(self, token: str, password: str) -> str:
        """
        Set a new password using an emailed reset token.

        Raises:
            InvalidCredentials: If the token is invalid, expired or already
                used, or the password is too short
            TransportFailure: If the backend cannot be reached or fails
        """
        try:
            request = PasswordResetRequest(token=token, password=password)
        except ValidationError:
            raise InvalidCredentials(
                "Enter the reset token and a password of at least 6 characters"
            )

        response = await self.client.post(
            self.reset_path,
            json=request.model_dump(),
            authenticated=False,
            operation="reset_password",
        )
        self._raise_for_status(
            response, "reset_password", "The reset link is invalid or has expired"
        )

        logger.info("Password reset with recovery token")
        return error_message(response) or PASSWORD_RESET_DONE

    async def validate_reset_token(self, token: str) -> ResetTokenStatus:
        """
        Check a reset token before asking for the new password.

        A blank token or a 4xx answer is reported as invalid.

        Raises:
            TransportFailure: On network errors, 5xx answers and unreadable bodies
        """
        if not token or not token.strip():
            return ResetTokenStatus(valid=False)

        response = await self.client.get(
            self.validate_path,
            params={"token": token.strip()},
            authenticated=False,
            operation="validate_reset_token",
        )
        if 400 <= response.status_code < 500:
            logger.info(f"Reset token rejected ({response.status_code})")
            return ResetTokenStatus(valid=False)
        if response.status_code >= 500:
            raise TransportFailure(
                error_message(response) or "Could not check the reset link",
                operation="validate_reset_token",
                status_code=response.status_code,
            )

        try:
            return ResetTokenStatus.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportFailure(
                "The server sent an unreadable reset token response",
                operation="validate_reset_token",
                status_code=response.status_code,
                original_error=e,
            )

    @staticmethod
    def _raise_for_status(response: httpx.Response, operation: str, rejection: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status in REJECTION_STATUSES:
            logger.info(f"{operation} rejected ({status})")
            raise InvalidCredentials(error_message(response) or rejection, status_code=status)
        raise TransportFailure(
            error_message(response) or "Password recovery is unavailable, try again later",
            operation=operation,
            status_code=status,
        )
