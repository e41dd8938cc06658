"""
Session consumer contract.

Page and routing code reach the running session through this module: a
process-wide provider is established once with ``initialize_session`` (or the
``session_provider`` context manager) and read with ``get_session``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence, Union

import httpx

from ..auth.gateway import IdentityLoginGateway
from ..auth.http import ApiClient
from ..auth.password_reset import PasswordResetService
from ..auth.profile import ProfileService
from ..auth.validator import CLIENT_VALIDATE_PATH, SYSTEM_VALIDATE_PATH, SessionValidator
from ..exceptions import NotInitialized
from ..models.identity import UserRole
from ..schemas.session import AccessResult, SessionSnapshot
from ..storage.base import CredentialStore
from ..storage.file import JsonFileCredentialStore
from ..storage.memory import MemoryCredentialStore
from ..storage.sql import SqlCredentialStore
from ..utils.config import SessionSettings
from .manager import SessionStateManager

logger = logging.getLogger(__name__)

# Global session manager instance (established by the application)
_session: Optional[SessionStateManager] = None


def initialize_session(manager: SessionStateManager) -> SessionStateManager:
    """
    Establish ``manager`` as the process-wide session.

    Args:
        manager: Session manager to expose to consumers

    Returns:
        The same manager
    """
    global _session
    _session = manager
    logger.info("Session provider initialized")
    return _session


def get_session() -> SessionStateManager:
    """
    Get the process-wide session manager.

    Raises:
        NotInitialized: If no provider has been established
    """
    if _session is None:
        raise NotInitialized()
    return _session


def reset_session() -> None:
    """Tear down the process-wide session provider."""
    global _session
    _session = None


def current_snapshot() -> SessionSnapshot:
    return get_session().snapshot


def has_access(
    allowed_roles: Optional[Sequence[Union[UserRole, str]]] = None,
) -> AccessResult:
    return get_session().has_access(allowed_roles)


@asynccontextmanager
async def session_provider(
    manager: SessionStateManager, restore: bool = True
) -> AsyncGenerator[SessionStateManager, None]:
    """
    Establish ``manager`` for the duration of the block.

    Args:
        manager: Session manager to expose
        restore: Schedule the startup restore on entry

    Yields:
        The established session manager
    """
    initialize_session(manager)
    if restore:
        manager.start()
    try:
        yield manager
    finally:
        reset_session()
        await manager.aclose()


def create_credential_store(settings: SessionSettings) -> CredentialStore:
    """Build the credential store backend selected by ``settings.storage``."""
    if settings.storage == "memory":
        return MemoryCredentialStore()
    if settings.storage == "sql":
        return SqlCredentialStore(database_url=settings.storage_url)
    return JsonFileCredentialStore(settings.storage_path)


def build_session_manager(
    settings: Optional[SessionSettings] = None,
    store: Optional[CredentialStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SessionStateManager:
    """
    Wire a session manager and its backend collaborators from settings.

    Args:
        settings: Settings to use; loaded from the environment when omitted
        store: Credential store overriding the one selected by settings
        transport: Custom httpx transport for the API client

    Returns:
        A session manager whose API client injects its token and expires it on 401
    """
    settings = settings or SessionSettings.from_environment()

    client = ApiClient(
        settings.api_base_url,
        timeout=settings.timeout,
        slow_call_ms=settings.slow_call_ms,
        transport=transport,
    )
    manager = SessionStateManager(
        store if store is not None else create_credential_store(settings),
        validator=SessionValidator(client, SYSTEM_VALIDATE_PATH),
        client_validator=SessionValidator(client, CLIENT_VALIDATE_PATH),
        gateway=IdentityLoginGateway(client),
        profile_service=ProfileService(client),
        notify_logout=settings.notify_logout,
        password_reset=PasswordResetService(client),
    )
    manager.bind_client(client)

    logger.info(
        f"Session manager built for {settings.api_base_url} "
        f"with {settings.storage} credential storage"
    )
    return manager
