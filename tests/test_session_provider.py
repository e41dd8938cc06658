"""
Tests for the session consumer contract and manager wiring.
"""

import httpx
import pytest

from vet_session.exceptions import InvalidState, NotInitialized
from vet_session.models import IdentityKind
from vet_session.session import (
    SessionStateManager,
    build_session_manager,
    create_credential_store,
    current_snapshot,
    get_session,
    has_access,
    initialize_session,
    reset_session,
    session_provider,
)
from vet_session.storage import (
    JsonFileCredentialStore,
    MemoryCredentialStore,
    SqlCredentialStore,
)
from vet_session.utils import SessionSettings


class TestGlobalSession:
    """Test cases for the process-wide session provider."""

    def test_get_session_not_initialized(self):
        """Test reading the session before a provider exists is an error."""
        with pytest.raises(NotInitialized) as exc_info:
            get_session()

        assert isinstance(exc_info.value, InvalidState)

    def test_initialize_and_get(self, manager):
        assert initialize_session(manager) is manager
        assert get_session() is manager

    def test_reset(self, manager):
        initialize_session(manager)
        reset_session()

        with pytest.raises(NotInitialized):
            current_snapshot()

    def test_convenience_functions(self, manager):
        """Test the module helpers read through the established manager."""
        initialize_session(manager)

        assert current_snapshot() is manager.snapshot
        assert has_access(["ADMIN"]).has_access is False

    @pytest.mark.asyncio
    async def test_session_provider_scope(self, manager, mock_validator, store_system_record):
        """Test the provider restores on entry and is torn down on exit."""
        store_system_record()

        async with session_provider(manager) as session:
            assert get_session() is manager
            snapshot = await session.restore()
            assert snapshot.active_kind is IdentityKind.SYSTEM

        mock_validator.validate.assert_awaited_once()
        with pytest.raises(NotInitialized):
            get_session()

    @pytest.mark.asyncio
    async def test_session_provider_without_restore(self, manager, mock_validator):
        async with session_provider(manager, restore=False):
            assert manager.snapshot.is_loading is True

        mock_validator.validate.assert_not_called()


class TestCreateCredentialStore:
    """Test cases for choosing the store backend from settings."""

    def test_memory(self):
        assert isinstance(
            create_credential_store(SessionSettings(storage="memory")), MemoryCredentialStore
        )

    def test_file(self, tmp_path):
        store = create_credential_store(
            SessionSettings(storage="file", storage_path=str(tmp_path / "c.json"))
        )

        assert isinstance(store, JsonFileCredentialStore)
        assert store.path == tmp_path / "c.json"

    def test_sql(self, tmp_path):
        store = create_credential_store(
            SessionSettings(storage="sql", storage_url=f"sqlite:///{tmp_path / 'c.db'}")
        )
        try:
            assert isinstance(store, SqlCredentialStore)
        finally:
            store.close()


class FakeBackend:
    """Minimal stand-in for the clinic backend's auth endpoints."""

    def __init__(self, login_payload):
        self.login_payload = login_payload
        self.valid_tokens = set()
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/auth/login":
            self.valid_tokens.add(self.login_payload["token"])
            return httpx.Response(200, json=self.login_payload)
        if path == "/api/auth/validate":
            return httpx.Response(200, json=request.url.params["token"] in self.valid_tokens)
        if path == "/api/usuarios/me":
            auth = request.headers.get("Authorization", "")
            if auth.removeprefix("Bearer ") not in self.valid_tokens:
                return httpx.Response(401)
            return httpx.Response(200, json=self.login_payload["usuario"])
        if path == "/api/public/password/forgot-usuario":
            return httpx.Response(200, json={"message": "Revisa tu correo"})
        return httpx.Response(404)


class TestBuildSessionManager:
    """Test cases for wiring a manager against a backend."""

    @pytest.fixture
    def backend(self, vet_user_payload):
        return FakeBackend(
            {"token": "t1", "type": "Bearer", "userType": "SISTEMA", "usuario": vet_user_payload}
        )

    @pytest.fixture
    def settings(self):
        return SessionSettings(api_base_url="http://vet.test/api", storage="memory")

    @pytest.mark.asyncio
    async def test_login_then_restore_in_new_process(self, backend, settings):
        """Test a session logged in by one manager is restored by the next."""
        store = MemoryCredentialStore()

        first = build_session_manager(settings, store=store, transport=httpx.MockTransport(backend))
        async with session_provider(first) as session:
            await session.restore()
            await session.login("vet@example.com", "x")

        second = build_session_manager(settings, store=store, transport=httpx.MockTransport(backend))
        async with session_provider(second) as session:
            snapshot = await session.restore()

        assert isinstance(second, SessionStateManager)
        assert snapshot.active_kind is IdentityKind.SYSTEM
        assert snapshot.system_user.name == "Dra. Pérez"

    @pytest.mark.asyncio
    async def test_unauthorized_call_expires_session(self, backend, settings):
        """Test a 401 on an authenticated call signs the session out."""
        manager = build_session_manager(settings, transport=httpx.MockTransport(backend))
        async with session_provider(manager) as session:
            await session.restore()
            await session.login("vet@example.com", "x")
            backend.valid_tokens.clear()

            client = session.gateway.client
            response = await client.get("/usuarios/me")

            assert response.status_code == 401
            assert session.snapshot.active_kind is IdentityKind.NONE
            assert session.repository.read_marker() is IdentityKind.NONE

    @pytest.mark.asyncio
    async def test_authenticated_calls_carry_session_token(self, backend, settings):
        manager = build_session_manager(settings, transport=httpx.MockTransport(backend))
        async with session_provider(manager) as session:
            await session.restore()
            await session.login("vet@example.com", "x")

            await session.gateway.client.get("/usuarios/me")

        assert backend.requests[-1].headers["Authorization"] == "Bearer t1"

    @pytest.mark.asyncio
    async def test_password_recovery_available_before_sign_in(self, backend, settings):
        """Test the built manager exposes password recovery without a session."""
        manager = build_session_manager(settings, transport=httpx.MockTransport(backend))
        async with session_provider(manager) as session:
            await session.restore()

            message = await session.password_reset.forgot_password("vet@example.com")

        assert message == "Revisa tu correo"
        assert "Authorization" not in backend.requests[-1].headers
