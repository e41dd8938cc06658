"""
Identity enumerations for the vet-session package.

This module contains the role and identity-kind enumerations shared by the
schemas, the credential store and the session manager.
"""

import enum


class UserRole(str, enum.Enum):
    """Enumeration of staff roles in the veterinary clinic platform."""

    ADMIN = "ADMIN"
    VET = "VET"
    RECEPTION = "RECEPTION"
    STUDENT = "STUDENT"

    @classmethod
    def _missing_(cls, value):
        # The backend spells two roles in Spanish.
        aliases = {"RECEPCION": cls.RECEPTION, "ESTUDIANTE": cls.STUDENT}
        if isinstance(value, str):
            return aliases.get(value.strip().upper())
        return None


class IdentityKind(str, enum.Enum):
    """Which principal type a session belongs to."""

    SYSTEM = "SYSTEM"
    CLIENT = "CLIENT"
    NONE = "NONE"

    @classmethod
    def _missing_(cls, value):
        aliases = {"SISTEMA": cls.SYSTEM, "CLIENTE": cls.CLIENT}
        if isinstance(value, str):
            return aliases.get(value.strip().upper())
        return None

    @property
    def other(self) -> "IdentityKind":
        """The opposite persisted kind; NONE has no opposite."""
        if self is IdentityKind.SYSTEM:
            return IdentityKind.CLIENT
        if self is IdentityKind.CLIENT:
            return IdentityKind.SYSTEM
        return IdentityKind.NONE


PERSISTED_KINDS = (IdentityKind.SYSTEM, IdentityKind.CLIENT)
