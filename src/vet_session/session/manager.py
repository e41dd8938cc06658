"""
Session state manager for the vet-session package.

This module owns the in-memory session of the running application: which
identity (staff user or client owner) is signed in, whether the startup
restore is still loading, and the transitions between those states. The
credential store is written eagerly on every transition so that it is always
the source of truth for the next process start.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Set, Union

from ..auth.gateway import IdentityLoginGateway
from ..auth.http import ApiClient
from ..auth.password_reset import PasswordResetService
from ..auth.profile import ProfileService
from ..auth.validator import SessionValidator
from ..exceptions import (
    InvalidState,
    StorageUnavailable,
    TransportFailure,
    log_exception_context,
)
from ..models.identity import IdentityKind, UserRole
from ..schemas.identity import (
    ClientOwner,
    CredentialRecord,
    LoginResult,
    ProfileUpdate,
    SystemUser,
)
from ..schemas.session import AccessResult, SessionSnapshot
from ..storage.base import CredentialStore
from ..storage.repository import CredentialRepository

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionSnapshot], None]


class SessionStateManager:
    """
    Owns the session state and applies restore, login, logout and update
    transitions to it.

    Login, client login, logout and expiry are serialized through one lock.
    Restore is not: it runs once at startup and is discarded if any other
    transition commits while it waits on the validator.
    """

    def __init__(
        self,
        store: Union[CredentialStore, CredentialRepository],
        validator: SessionValidator,
        gateway: Optional[IdentityLoginGateway] = None,
        client_validator: Optional[SessionValidator] = None,
        profile_service: Optional[ProfileService] = None,
        notify_logout: bool = False,
        password_reset: Optional[PasswordResetService] = None,
    ):
        """
        Initialize the session manager.

        Args:
            store: Durable credential store, or a repository already wrapping one
            validator: Validates stored SYSTEM tokens
            gateway: Exchanges credentials for a token and identity
            client_validator: Validates stored CLIENT tokens (defaults to ``validator``)
            profile_service: Backend for the staff member's profile self-update
            notify_logout: Tell the backend about logouts (best effort)
            password_reset: Public password recovery calls, exposed for sign-in screens
        """
        if isinstance(store, CredentialRepository):
            self.repository = store
        else:
            self.repository = CredentialRepository(store)

        self._validators: Dict[IdentityKind, SessionValidator] = {
            IdentityKind.SYSTEM: validator,
            IdentityKind.CLIENT: client_validator or validator,
        }
        self.gateway = gateway
        self.profile_service = profile_service
        self.notify_logout = notify_logout
        self.password_reset = password_reset

        self._state = SessionSnapshot.loading()
        self._token: Optional[str] = None
        self._generation = 0
        self._lock = asyncio.Lock()
        self._restore_task: Optional["asyncio.Task[SessionSnapshot]"] = None
        self._subscribers: List[Subscriber] = []
        self._background: Set["asyncio.Task[Any]"] = set()
        self._clients: List[ApiClient] = []

    # ── Read side ──────────────────────────────────────────────────────

    @property
    def snapshot(self) -> SessionSnapshot:
        """Current immutable session snapshot."""
        return self._state

    @property
    def active_kind(self) -> IdentityKind:
        return self._state.active_kind

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def active_token(self) -> Optional[str]:
        """Bearer token of the active identity, None when signed out."""
        return self._token

    def has_access(
        self, allowed_roles: Optional[Sequence[Union[UserRole, str]]] = None
    ) -> AccessResult:
        """
        Check whether the active staff user may use a feature.

        Args:
            allowed_roles: Roles that may access; any staff role when omitted.
                Strings that name no known role are ignored, so a list of
                only unknown roles grants nothing

        Returns:
            Access decision together with the active staff user, if any
        """
        user = self._state.system_user
        if user is None:
            return AccessResult(has_access=False, user=None)
        if allowed_roles is None:
            return AccessResult(has_access=True, user=user)

        allowed: Set[str] = set()
        for role in allowed_roles:
            try:
                allowed.add(UserRole(role).value)
            except ValueError:
                logger.debug(f"Ignoring unknown role {role!r} in access check")
        return AccessResult(has_access=UserRole(user.role).value in allowed, user=user)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with the new snapshot after every commit.

        Returns:
            A callable that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def bind_client(self, client: ApiClient) -> ApiClient:
        """Make ``client`` send this session's token and expire it on 401."""
        client.token_provider = self.active_token
        client.on_unauthorized = self.expire
        self._clients.append(client)
        return client

    # ── Commit ─────────────────────────────────────────────────────────

    def _commit(self, state: SessionSnapshot, token: Optional[str]) -> SessionSnapshot:
        self._state = state
        self._token = token
        self._generation += 1
        logger.debug(
            f"Session committed: kind={state.active_kind.value} "
            f"loading={state.is_loading} generation={self._generation}"
        )

        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception as e:
                logger.error(
                    f"Session subscriber {getattr(callback, '__name__', callback)!r} "
                    f"failed: {e}",
                    exc_info=True,
                )
        return state

    def _commit_signed_out(self) -> SessionSnapshot:
        return self._commit(SessionSnapshot(is_loading=False), None)

    @staticmethod
    def _snapshot_for(record: CredentialRecord) -> SessionSnapshot:
        if record.kind is IdentityKind.SYSTEM:
            return SessionSnapshot(system_user=record.identity, is_loading=False)
        return SessionSnapshot(client_owner=record.identity, is_loading=False)

    # ── Restore ────────────────────────────────────────────────────────

    def start(self) -> "asyncio.Task[SessionSnapshot]":
        """Schedule the startup restore; later calls return the same task."""
        if self._restore_task is None:
            self._restore_task = asyncio.get_running_loop().create_task(
                self._restore()
            )
        return self._restore_task

    async def restore(self) -> SessionSnapshot:
        """Run (or join) the startup restore and return the resulting snapshot."""
        return await self.start()

    async def _restore(self) -> SessionSnapshot:
        generation = self._generation

        try:
            kind = self.repository.read_marker()
            record = None if kind is IdentityKind.NONE else self.repository.read(kind)
        except StorageUnavailable as e:
            e.log_error(logger, logging.WARNING)
            return self._commit_signed_out()
        except Exception as e:
            log_exception_context(e, {"operation": "restore", "stage": "read"}, logger)
            return self._commit_signed_out()

        if kind is IdentityKind.NONE:
            logger.info("No stored session to restore")
            return self._commit_signed_out()

        if record is None:
            logger.warning(f"Stored {kind.value} session is incomplete, discarding it")
            self._forget(kind)
            return self._commit_signed_out()

        valid = await self._validate(record)

        if generation != self._generation:
            logger.info(
                f"Stored {kind.value} session check finished after a newer "
                f"transition, ignoring its result"
            )
            return self._state

        if valid:
            logger.info(f"Restored {kind.value} session for identity {record.identity.id}")
            return self._commit(self._snapshot_for(record), record.token)

        self._forget(kind)
        return self._commit_signed_out()

    async def _validate(self, record: CredentialRecord) -> bool:
        validator = self._validators[record.kind]
        try:
            valid = await validator.validate(record.token)
        except TransportFailure as e:
            logger.warning(
                f"Could not validate stored {record.kind.value} session, "
                f"signing out: {e.message}"
            )
            return False
        except Exception as e:
            logger.error(
                f"Unexpected error validating stored {record.kind.value} session, "
                f"signing out: {e}",
                exc_info=True,
            )
            return False

        if not valid:
            logger.info(f"Stored {record.kind.value} session is no longer valid")
        return bool(valid)

    def _forget(self, kind: IdentityKind) -> None:
        try:
            self.repository.remove(kind)
        except StorageUnavailable as e:
            e.log_error(logger, logging.WARNING)
        except Exception as e:
            log_exception_context(
                e, {"operation": "restore", "stage": "forget", "kind": kind.value}, logger
            )

    # ── Login / logout ─────────────────────────────────────────────────

    def _require_gateway(self, operation: str) -> IdentityLoginGateway:
        if self.gateway is None:
            raise InvalidState("No login gateway configured", operation=operation)
        return self.gateway

    async def login(self, email: str, password: str) -> SessionSnapshot:
        """
        Sign in through the unified login; the backend decides the identity kind.

        Raises:
            InvalidCredentials: The backend rejected the credentials
            TransportFailure: The backend could not be reached
            StorageUnavailable: The credential store could not be written
        """
        gateway = self._require_gateway("login")
        async with self._lock:
            result = await gateway.login(email, password)
            return self._apply_login(result)

    async def client_login(self, email: str, password: str) -> SessionSnapshot:
        """Sign in through the client portal; always yields a CLIENT session."""
        gateway = self._require_gateway("client_login")
        async with self._lock:
            result = await gateway.client_login(email, password)
            return self._apply_login(result.to_login_result())

    def _apply_login(self, result: LoginResult) -> SessionSnapshot:
        record = CredentialRecord.from_login(result)
        self.repository.persist(record)
        self.repository.remove(record.kind.other)

        logger.info(f"Signed in as {record.kind.value} identity {record.identity.id}")
        return self._commit(self._snapshot_for(record), record.token)

    async def logout(self) -> SessionSnapshot:
        """
        Sign out of whichever identity is active and clear both kinds from storage.

        Raises:
            StorageUnavailable: The credential store could not be cleared; the
                in-memory session is signed out regardless
        """
        async with self._lock:
            token = self._token
            kind = self._state.active_kind
            try:
                self.repository.clear_all()
            finally:
                state = self._commit_signed_out()

        logger.info(f"Signed out of {kind.value} session")
        if token and self.notify_logout and self.gateway is not None:
            self._spawn(self.gateway.notify_logout(token), "logout notification")
        return state

    async def expire(self, token: Optional[str] = None) -> SessionSnapshot:
        """
        End the session because the backend no longer accepts its token.

        Args:
            token: Token the backend rejected; the call is ignored when a
                different session has been committed since
        """
        async with self._lock:
            if token is not None and token != self._token:
                logger.debug("Ignoring expiry of a token that is no longer active")
                return self._state

            kind = self._state.active_kind
            try:
                self.repository.clear_all()
            except StorageUnavailable as e:
                e.log_error(logger, logging.WARNING)

            if kind is IdentityKind.NONE and not self._state.is_loading:
                return self._state

            logger.info(f"{kind.value} session expired, signing out")
            return self._commit_signed_out()

    # ── Profile updates ────────────────────────────────────────────────

    def update_system_user(
        self, user: Union[SystemUser, Mapping[str, Any]]
    ) -> SessionSnapshot:
        """
        Replace the signed-in staff user's identity payload.

        Raises:
            InvalidState: No staff user is signed in
        """
        if not isinstance(user, SystemUser):
            user = SystemUser.model_validate(user)
        self._require_active(IdentityKind.SYSTEM, "update_system_user")

        self.repository.write_identity(IdentityKind.SYSTEM, user)
        return self._commit(
            SessionSnapshot(system_user=user, is_loading=False), self._token
        )

    def update_client_owner(
        self, owner: Union[ClientOwner, Mapping[str, Any]]
    ) -> SessionSnapshot:
        """
        Replace the signed-in client owner's identity payload.

        Raises:
            InvalidState: No client owner is signed in
        """
        if not isinstance(owner, ClientOwner):
            owner = ClientOwner.model_validate(owner)
        self._require_active(IdentityKind.CLIENT, "update_client_owner")

        self.repository.write_identity(IdentityKind.CLIENT, owner)
        return self._commit(
            SessionSnapshot(client_owner=owner, is_loading=False), self._token
        )

    async def update_my_profile(self, update: ProfileUpdate) -> SessionSnapshot:
        """
        Send the staff member's own profile change to the backend and apply
        the returned identity.

        Raises:
            InvalidState: No staff user is signed in or no profile service is configured
            TransportFailure: The backend refused or could not be reached
        """
        if self.profile_service is None:
            raise InvalidState(
                "No profile service configured", operation="update_my_profile"
            )
        current = self._require_active(IdentityKind.SYSTEM, "update_my_profile")

        user = await self.profile_service.update_my_profile(update)

        active = self._state.system_user
        if active is None or active.id != current.id:
            logger.info("Session changed during profile update, not applying result")
            return self._state
        return self.update_system_user(user)

    def _require_active(self, kind: IdentityKind, operation: str) -> Any:
        if self._state.active_kind is not kind:
            raise InvalidState(
                f"{operation} requires an active {kind.value} session",
                operation=operation,
                active_kind=self._state.active_kind.value,
            )
        if kind is IdentityKind.SYSTEM:
            return self._state.system_user
        return self._state.client_owner

    # ── Lifecycle ──────────────────────────────────────────────────────

    def _spawn(self, coro: Any, description: str) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)

        def done(finished: "asyncio.Task[Any]") -> None:
            self._background.discard(finished)
            if finished.cancelled():
                return
            error = finished.exception()
            if error is not None:
                logger.info(f"Ignoring failed {description}: {error}")

        task.add_done_callback(done)

    async def aclose(self) -> None:
        """Wait for background work and close bound API clients."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        for client in self._clients:
            await client.aclose()
        self._clients.clear()
