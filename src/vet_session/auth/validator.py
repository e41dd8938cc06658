"""
Session validator.

Asks the backend whether a bearer token is still valid. The answer has two
shapes on purpose: ``False`` means the backend said no, a raised
``TransportFailure`` means nobody could say.
"""

import logging

from ..exceptions import TransportFailure
from .http import ApiClient

logger = logging.getLogger(__name__)

SYSTEM_VALIDATE_PATH = "/auth/validate"
CLIENT_VALIDATE_PATH = "/public/clientes/auth/validate"


class SessionValidator:
    """Validates tokens against one backend endpoint."""

    def __init__(self, client: ApiClient, path: str = SYSTEM_VALIDATE_PATH) -> None:
        self.client = client
        self.path = path

    async def validate(self, token: str) -> bool:
        """
        Check a token with the backend.

        Args:
            token: Bearer token to check

        Returns:
            True if the backend accepts the token, False if it rejects it

        Raises:
            TransportFailure: On network errors, timeouts and 5xx responses
        """
        response = await self.client.get(
            self.path,
            params={"token": token},
            authenticated=False,
            operation="validate_token",
        )

        if response.status_code >= 500:
            raise TransportFailure(
                "Token validation is temporarily unavailable",
                operation="validate_token",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            logger.info(f"Token rejected by {self.path} ({response.status_code})")
            return False

        try:
            body = response.json()
        except ValueError:
            logger.warning(f"Non-JSON answer from {self.path}, treating token as invalid")
            return False

        valid = body is True or (isinstance(body, dict) and body.get("valid") is True)
        if not valid:
            logger.info(f"Token reported invalid by {self.path}")
        return valid
