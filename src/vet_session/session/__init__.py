"""
Session state and the consumer contract.

This module provides the session state manager and the process-wide
provider through which consumers reach it.
"""

from .manager import SessionStateManager, Subscriber
from .provider import (
    build_session_manager,
    create_credential_store,
    current_snapshot,
    get_session,
    has_access,
    initialize_session,
    reset_session,
    session_provider,
)

__all__ = [
    "SessionStateManager",
    "Subscriber",
    "build_session_manager",
    "create_credential_store",
    "current_snapshot",
    "get_session",
    "has_access",
    "initialize_session",
    "reset_session",
    "session_provider",
]
