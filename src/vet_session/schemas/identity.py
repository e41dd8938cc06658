"""
Identity Pydantic schemas for API validation and serialization.

This module contains the staff user and client/owner payloads exchanged with
the backend, the login results of both sign-in entry points, the durable
credential record and the profile self-update request.

The backend speaks Spanish field names (``nombre``, ``rol``, ``activo`` ...);
every schema accepts those aliases on input and serializes with the English
field names, which is the form kept in the credential store.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..models.identity import IdentityKind, UserRole


def _coerce_id(value: Any) -> Any:
    """Backend ids may be numeric; identities always carry string ids."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(int(value))
    return value


class IdentityBase(BaseModel):
    """Base schema with the configuration shared by both identity kinds."""

    model_config = ConfigDict(
        populate_by_name=True,  # Accept English names as well as aliases
        use_enum_values=True,  # Serialize enums as values
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: str = Field(..., description="Backend identifier", min_length=1)
    name: str = Field(
        ...,
        description="Display name",
        validation_alias=AliasChoices("name", "nombre"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> Any:
        """Coerce numeric ids to strings."""
        return _coerce_id(v)


class SystemUser(IdentityBase):
    """A staff member of the clinic (admin, vet, reception, student)."""

    email: Optional[str] = Field(None, description="Login email", max_length=255)
    role: UserRole = Field(
        ...,
        description="Staff role",
        validation_alias=AliasChoices("role", "rol"),
    )
    active: bool = Field(
        True,
        description="Whether the account is enabled",
        validation_alias=AliasChoices("active", "activo"),
    )

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v: Any) -> Any:
        """Accept the backend's Spanish role spellings."""
        if isinstance(v, str):
            try:
                return UserRole(v)
            except ValueError:
                raise ValueError(
                    f"Invalid role. Must be one of: {[role.value for role in UserRole]}"
                )
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v:
            return None
        return v.lower()


class ClientOwner(IdentityBase):
    """A pet owner signed in through the client portal."""

    document: Optional[str] = Field(
        None,
        description="National identity document",
        validation_alias=AliasChoices("document", "documento"),
    )
    email: Optional[str] = Field(None, description="Contact email", max_length=255)
    phone: Optional[str] = Field(
        None,
        description="Contact phone number",
        validation_alias=AliasChoices("phone", "telefono"),
    )
    address: Optional[str] = Field(
        None,
        description="Postal address",
        validation_alias=AliasChoices("address", "direccion"),
    )
    active: Optional[bool] = Field(
        None,
        description="Whether the owner record is enabled",
        validation_alias=AliasChoices("active", "activo"),
    )
    patient_ids: Optional[List[str]] = Field(
        None,
        description="Identifiers of the owner's patients",
        validation_alias=AliasChoices("patient_ids", "pacientesIds"),
    )
    created_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("created_at", "createdAt")
    )
    updated_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )

    @field_validator("patient_ids", mode="before")
    @classmethod
    def validate_patient_ids(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_coerce_id(item) for item in v]
        return v


Identity = Union[SystemUser, ClientOwner]


class LoginRequest(BaseModel):
    """Credentials submitted by the sign-in form. Passwords are kept verbatim."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("Email must contain '@'")
        return v.lower()


class LoginResult(BaseModel):
    """
    Outcome of a unified sign-in.

    Exactly one of ``system_user`` / ``client_owner`` is populated, matching
    ``kind``. The backend field ``userType`` (SISTEMA | CLIENTE) maps onto
    ``kind``; ``usuario`` and ``propietario`` map onto the identity fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(..., min_length=1)
    kind: IdentityKind = Field(
        ..., validation_alias=AliasChoices("kind", "userType")
    )
    token_type: Optional[str] = Field(
        "Bearer", validation_alias=AliasChoices("token_type", "type")
    )
    system_user: Optional[SystemUser] = Field(
        None, validation_alias=AliasChoices("system_user", "usuario")
    )
    client_owner: Optional[ClientOwner] = Field(
        None, validation_alias=AliasChoices("client_owner", "propietario")
    )

    @field_validator("kind", mode="before")
    @classmethod
    def validate_kind(cls, v: Any) -> Any:
        """Accept the backend's SISTEMA / CLIENTE spellings."""
        if isinstance(v, str):
            try:
                return IdentityKind(v)
            except ValueError:
                raise ValueError(f"Unknown user type: {v}")
        return v

    @model_validator(mode="after")
    def validate_identity_matches_kind(self) -> "LoginResult":
        """Ensure the populated identity agrees with the declared kind."""
        if self.kind is IdentityKind.SYSTEM:
            if self.system_user is None:
                raise ValueError("SYSTEM login result requires a system user")
            self.client_owner = None
        elif self.kind is IdentityKind.CLIENT:
            if self.client_owner is None:
                raise ValueError("CLIENT login result requires a client owner")
            self.system_user = None
        else:
            raise ValueError("Login result kind must be SYSTEM or CLIENT")
        return self

    @property
    def identity(self) -> Identity:
        if self.kind is IdentityKind.SYSTEM:
            return self.system_user  # type: ignore[return-value]
        return self.client_owner  # type: ignore[return-value]


class ClientLoginResult(BaseModel):
    """Outcome of a client-portal sign-in."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(..., min_length=1)
    token_type: Optional[str] = Field(
        "Bearer", validation_alias=AliasChoices("token_type", "type")
    )
    client_owner: ClientOwner = Field(
        ..., validation_alias=AliasChoices("client_owner", "propietario")
    )

    def to_login_result(self) -> LoginResult:
        """Express this result as a CLIENT-kind unified login result."""
        return LoginResult(
            token=self.token,
            kind=IdentityKind.CLIENT,
            token_type=self.token_type,
            client_owner=self.client_owner,
        )


class CredentialRecord(BaseModel):
    """A token and identity persisted for one identity kind."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1)
    kind: IdentityKind
    identity: Identity

    @model_validator(mode="after")
    def validate_identity_matches_kind(self) -> "CredentialRecord":
        expected = {IdentityKind.SYSTEM: SystemUser, IdentityKind.CLIENT: ClientOwner}
        identity_type = expected.get(self.kind)
        if identity_type is None:
            raise ValueError("Credential records are only kept for SYSTEM or CLIENT")
        if not isinstance(self.identity, identity_type):
            raise ValueError(
                f"{self.kind.value} credential requires a {identity_type.__name__}"
            )
        return self

    @classmethod
    def from_login(cls, result: LoginResult) -> "CredentialRecord":
        return cls(token=result.token, kind=result.kind, identity=result.identity)


class ProfileUpdate(BaseModel):
    """
    Self-service profile change for the signed-in staff member.

    ``password`` left out (or blank) means the password is not changed; it is
    then omitted from the request body entirely.
    """

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: Optional[str] = Field(None, description="New password, if changing")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("Email must contain '@'")
        return v.lower()

    def to_payload(self) -> Dict[str, Any]:
        """Build the backend request body."""
        payload: Dict[str, Any] = {"nombre": self.name, "email": self.email}
        if self.password is not None:
            payload["password"] = self.password
        return payload
