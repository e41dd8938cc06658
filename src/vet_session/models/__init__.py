"""
Enumerations and SQLAlchemy models for the vet-session package.
"""

from .base import Base, TimestampedModel
from .credential import CredentialEntry
from .identity import PERSISTED_KINDS, IdentityKind, UserRole

__all__ = [
    "Base",
    "TimestampedModel",
    "CredentialEntry",
    "IdentityKind",
    "UserRole",
    "PERSISTED_KINDS",
]
