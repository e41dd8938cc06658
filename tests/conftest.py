"""
Pytest configuration and fixtures for vet-session tests.

This module provides common fixtures for all tests in the vet-session
package: sample identities and backend payloads, an in-memory credential
store, mocked backend collaborators and a session manager wired to them.
"""

from typing import Any, Callable, Dict
from unittest.mock import AsyncMock

import httpx
import pytest

from vet_session.auth import ApiClient
from vet_session.models import IdentityKind
from vet_session.schemas import ClientOwner, CredentialRecord, LoginResult, SystemUser
from vet_session.session import SessionStateManager, reset_session
from vet_session.storage import CredentialRepository, MemoryCredentialStore

API_BASE_URL = "http://vet.test/api"


@pytest.fixture(autouse=True)
def clear_session_provider():
    """Make sure no test leaks a process-wide session into another."""
    reset_session()
    yield
    reset_session()


@pytest.fixture
def vet_user_payload() -> Dict[str, Any]:
    """Staff user as the backend returns it."""
    return {
        "id": 2,
        "nombre": "Dra. Pérez",
        "email": "vet@example.com",
        "rol": "VET",
        "activo": True,
    }


@pytest.fixture
def client_owner_payload() -> Dict[str, Any]:
    """Client owner as the backend returns it."""
    return {
        "id": 7,
        "nombre": "Ana Gómez",
        "documento": "12345678",
        "email": "ana@example.com",
        "telefono": "3001234567",
        "direccion": "Calle 1 # 2-3",
        "activo": True,
    }


@pytest.fixture
def vet_user(vet_user_payload) -> SystemUser:
    return SystemUser.model_validate(vet_user_payload)


@pytest.fixture
def admin_user() -> SystemUser:
    return SystemUser(id="1", name="Admin", email="admin@example.com", role="ADMIN")


@pytest.fixture
def client_owner(client_owner_payload) -> ClientOwner:
    return ClientOwner.model_validate(client_owner_payload)


@pytest.fixture
def system_login(vet_user) -> LoginResult:
    return LoginResult(token="t1", kind=IdentityKind.SYSTEM, system_user=vet_user)


@pytest.fixture
def client_login_result(client_owner) -> LoginResult:
    return LoginResult(token="c1", kind=IdentityKind.CLIENT, client_owner=client_owner)


@pytest.fixture
def memory_store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def repository(memory_store) -> CredentialRepository:
    return CredentialRepository(memory_store)


@pytest.fixture
def store_system_record(repository, vet_user) -> Callable[..., CredentialRecord]:
    """Persist a SYSTEM record as a previous process would have."""

    def _store(token: str = "stored-system") -> CredentialRecord:
        record = CredentialRecord(token=token, kind=IdentityKind.SYSTEM, identity=vet_user)
        repository.persist(record)
        return record

    return _store


@pytest.fixture
def store_client_record(repository, client_owner) -> Callable[..., CredentialRecord]:
    """Persist a CLIENT record as a previous process would have."""

    def _store(token: str = "stored-client") -> CredentialRecord:
        record = CredentialRecord(
            token=token, kind=IdentityKind.CLIENT, identity=client_owner
        )
        repository.persist(record)
        return record

    return _store


@pytest.fixture
def mock_validator() -> AsyncMock:
    validator = AsyncMock()
    validator.validate.return_value = True
    return validator


@pytest.fixture
def mock_client_validator() -> AsyncMock:
    validator = AsyncMock()
    validator.validate.return_value = True
    return validator


@pytest.fixture
def mock_gateway(system_login) -> AsyncMock:
    gateway = AsyncMock()
    gateway.login.return_value = system_login
    return gateway


@pytest.fixture
def mock_profile_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def manager(
    repository, mock_validator, mock_client_validator, mock_gateway, mock_profile_service
) -> SessionStateManager:
    """Session manager wired to an in-memory store and mocked backend."""
    return SessionStateManager(
        repository,
        validator=mock_validator,
        gateway=mock_gateway,
        client_validator=mock_client_validator,
        profile_service=mock_profile_service,
    )


@pytest.fixture
def make_api_client() -> Callable[..., ApiClient]:
    """Build an ApiClient whose requests are answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> ApiClient:
        return ApiClient(API_BASE_URL, transport=httpx.MockTransport(handler), **kwargs)

    return _make
