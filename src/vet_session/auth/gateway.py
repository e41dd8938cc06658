"""
Identity login gateway.

Exchanges an email and password for a token plus identity payload. The
unified endpoint decides which identity kind the credentials belong to; the
client-portal endpoint always answers with a client/owner.
"""

import logging
from typing import Any, Dict, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..exceptions import InvalidCredentials, TransportFailure
from ..schemas.identity import ClientLoginResult, LoginRequest, LoginResult
from .http import ApiClient, error_message

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
CLIENT_LOGIN_PATH = "/public/clientes/auth/login"
LOGOUT_PATH = "/auth/logout"

REJECTION_STATUSES = {400, 401, 403, 404, 422}

ResultT = TypeVar("ResultT", bound=BaseModel)


class IdentityLoginGateway:
    """Sign-in and sign-out calls for both identity kinds."""

    def __init__(
        self,
        client: ApiClient,
        login_path: str = LOGIN_PATH,
        client_login_path: str = CLIENT_LOGIN_PATH,
        logout_path: str = LOGOUT_PATH,
    ):
        self.client = client
        self.login_path = login_path
        self.client_login_path = client_login_path
        self.logout_path = logout_path

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Sign in through the unified endpoint.

        Raises:
            InvalidCredentials: If the backend rejects the credentials
            TransportFailure: If the backend cannot be reached or fails
        """
        return await self._sign_in(self.login_path, email, password, LoginResult)

    async def client_login(self, email: str, password: str) -> ClientLoginResult:
        """
        Sign in through the client-portal endpoint.

        Raises:
            InvalidCredentials: If the backend rejects the credentials
            TransportFailure: If the backend cannot be reached or fails
        """
        return await self._sign_in(
            self.client_login_path, email, password, ClientLoginResult
        )

    async def notify_logout(self, token: str) -> None:
        """Tell the backend a token is no longer in use. Failures are the caller's to ignore."""
        await self.client.post(
            self.logout_path,
            headers={"Authorization": f"Bearer {token}"},
            authenticated=False,
            operation="logout",
        )

    async def _sign_in(
        self, path: str, email: str, password: str, result_type: Type[ResultT]
    ) -> ResultT:
        try:
            credentials = LoginRequest(email=email, password=password)
        except ValidationError:
            raise InvalidCredentials("Enter a valid email and password")

        response = await self.client.post(
            path,
            json=credentials.model_dump(),
            authenticated=False,
            operation="login",
        )
        self._raise_for_status(response)

        try:
            payload: Dict[str, Any] = response.json()
        except ValueError:
            raise TransportFailure(
                "The server sent an unreadable sign-in response",
                operation="login",
                status_code=response.status_code,
            )

        try:
            result = result_type.model_validate(payload)
        except ValidationError as e:
            logger.error(
                f"Sign-in response from {path} did not match the expected shape",
                extra={"error_count": e.error_count()},
            )
            raise InvalidCredentials()

        logger.info(f"Sign-in accepted for {credentials.email}")
        return result

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        if status in REJECTION_STATUSES:
            logger.info(f"Sign-in rejected ({status})")
            raise InvalidCredentials(error_message(response), status_code=status)
        raise TransportFailure(
            error_message(response) or "Could not sign in, try again later",
            operation="login",
            status_code=status,
        )
