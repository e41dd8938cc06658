"""
Durable credential storage.

This module provides the credential store contract, its memory, JSON-file and
SQL backends, and the repository that maps Credential Records onto store keys.
"""

from .base import CredentialStore
from .file import JsonFileCredentialStore
from .memory import MemoryCredentialStore
from .repository import (
    IDENTITY_KEYS,
    MARKER_KEY,
    TOKEN_KEYS,
    CredentialRepository,
)
from .sql import SqlCredentialStore

__all__ = [
    "CredentialStore",
    "MemoryCredentialStore",
    "JsonFileCredentialStore",
    "SqlCredentialStore",
    "CredentialRepository",
    "MARKER_KEY",
    "TOKEN_KEYS",
    "IDENTITY_KEYS",
]
