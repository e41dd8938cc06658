"""
Profile self-service for the signed-in staff member.
"""

import logging

from ..exceptions import TransportFailure
from ..schemas.identity import ProfileUpdate, SystemUser
from .http import ApiClient, error_message

logger = logging.getLogger(__name__)

PROFILE_PATH = "/usuarios/me"


class ProfileService:
    """Updates the name, email and optionally the password of the current user."""

    def __init__(self, client: ApiClient, path: str = PROFILE_PATH) -> None:
        self.client = client
        self.path = path

    async def update_my_profile(self, update: ProfileUpdate) -> SystemUser:
        """
        Send the profile change and return the user as stored by the backend.

        Raises:
            TransportFailure: On network errors and any error status
        """
        response = await self.client.put(
            self.path, json=update.to_payload(), operation="update_my_profile"
        )
        if response.status_code >= 400:
            raise TransportFailure(
                error_message(response) or "Could not update the profile",
                operation="update_my_profile",
                status_code=response.status_code,
            )

        user = SystemUser.model_validate(response.json())
        logger.info(f"Profile updated for user {user.id}")
        return user
