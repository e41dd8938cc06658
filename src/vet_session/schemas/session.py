"""
Session snapshot schemas.

A snapshot is the immutable, read-only projection of the session state handed
to consumers. It never carries both identity kinds at once.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

from ..models.identity import IdentityKind
from .identity import SystemUser, ClientOwner


class SessionSnapshot(BaseModel):
    """Point-in-time view of who is signed in."""

    model_config = ConfigDict(frozen=True)

    system_user: Optional[SystemUser] = None
    client_owner: Optional[ClientOwner] = None
    is_loading: bool = False

    @model_validator(mode="after")
    def validate_exclusive_identity(self) -> "SessionSnapshot":
        """A session belongs to at most one identity kind."""
        if self.system_user is not None and self.client_owner is not None:
            raise ValueError("A session cannot hold a system user and a client owner")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def active_kind(self) -> IdentityKind:
        if self.system_user is not None:
            return IdentityKind.SYSTEM
        if self.client_owner is not None:
            return IdentityKind.CLIENT
        return IdentityKind.NONE

    @property
    def is_authenticated(self) -> bool:
        return self.active_kind is not IdentityKind.NONE

    @classmethod
    def loading(cls) -> "SessionSnapshot":
        """The state every process starts in."""
        return cls(is_loading=True)


class AccessResult(BaseModel):
    """Answer of a role check against the active staff user."""

    model_config = ConfigDict(frozen=True)

    has_access: bool
    user: Optional[SystemUser] = None
