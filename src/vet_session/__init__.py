"""
Vet Session Package

The authentication and session core of the veterinary clinic platform.

A process signs in as exactly one of two identity kinds: a clinic staff
member (system user) or a pet owner using the client portal. This package
keeps that session, restores it at startup from durable storage, checks it
against the backend and publishes it to the rest of the application. It
includes:

- A session state manager with restore, login, client login, logout,
  expiry and profile-update transitions
- A process-wide provider through which pages and routes read the session
- Durable credential stores (memory, JSON file, SQL via SQLAlchemy)
- httpx-based backend collaborators: session validator, login gateway,
  profile service, password recovery
- Pydantic schemas for the backend payloads and the session snapshot
- Environment-driven settings and logging configuration

Quick Start:
    >>> from vet_session import build_session_manager, session_provider
    >>> from vet_session.utils import SessionSettings

    >>> manager = build_session_manager(SessionSettings(storage="memory"))
    >>> async with session_provider(manager) as session:
    ...     await session.restore()
    ...     await session.login("vet@example.com", "secret")
    ...     session.has_access(["VET", "ADMIN"]).has_access
    True

Requirements:
    - Python 3.11+
    - httpx 0.27+
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "Vet Clinic Platform Team"
__email__ = "dev@vetclinic.com"
__license__ = "MIT"
__copyright__ = "Copyright 2025 Vet Clinic Platform Team"

from . import auth
from . import exceptions
from . import models
from . import schemas
from . import session
from . import storage
from . import utils

# Convenience imports for common usage patterns
from .exceptions import (
    InvalidCredentials,
    InvalidState,
    NotInitialized,
    StorageUnavailable,
    TransportFailure,
    VetSessionException,
)
from .models import IdentityKind, UserRole
from .schemas import ClientOwner, ProfileUpdate, SessionSnapshot, SystemUser
from .session import (
    SessionStateManager,
    build_session_manager,
    get_session,
    initialize_session,
    reset_session,
    session_provider,
)

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
    # Core modules
    "auth",
    "exceptions",
    "models",
    "schemas",
    "session",
    "storage",
    "utils",
    # Convenience imports
    "InvalidCredentials",
    "InvalidState",
    "NotInitialized",
    "StorageUnavailable",
    "TransportFailure",
    "VetSessionException",
    "IdentityKind",
    "UserRole",
    "ClientOwner",
    "ProfileUpdate",
    "SessionSnapshot",
    "SystemUser",
    "SessionStateManager",
    "build_session_manager",
    "get_session",
    "initialize_session",
    "reset_session",
    "session_provider",
]
