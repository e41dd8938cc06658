"""
Credential repository.

Maps Credential Records onto the keys of a credential store and owns the
write order. The kind marker (``active_kind``) is the commit point:

- persist: write token and identity, then the marker;
- forget: clear the marker first, then the records.

A crash between any two writes therefore leaves either the previous marked
record or no marked record, never a marker pointing at a half-written record.
"""

import logging
from typing import Dict, Optional

from pydantic import ValidationError

from ..models.identity import PERSISTED_KINDS, IdentityKind
from ..schemas.identity import ClientOwner, CredentialRecord, Identity, SystemUser
from .base import CredentialStore

logger = logging.getLogger(__name__)

MARKER_KEY = "active_kind"

TOKEN_KEYS: Dict[IdentityKind, str] = {
    IdentityKind.SYSTEM: "system_token",
    IdentityKind.CLIENT: "client_token",
}

IDENTITY_KEYS: Dict[IdentityKind, str] = {
    IdentityKind.SYSTEM: "system_identity",
    IdentityKind.CLIENT: "client_identity",
}

_IDENTITY_TYPES = {
    IdentityKind.SYSTEM: SystemUser,
    IdentityKind.CLIENT: ClientOwner,
}


def _require_persisted(kind: IdentityKind) -> IdentityKind:
    kind = IdentityKind(kind)
    if kind not in PERSISTED_KINDS:
        raise ValueError(f"No credentials are persisted for kind {kind.value}")
    return kind


class CredentialRepository:
    """Reads and writes whole Credential Records on top of a key/value store."""

    def __init__(self, store: CredentialStore) -> None:
        self.store = store

    # ── Marker ─────────────────────────────────────────────────────────

    def read_marker(self) -> IdentityKind:
        """Kind recorded as last persisted, NONE when absent or unreadable."""
        raw = self.store.get(MARKER_KEY)
        if raw is None:
            return IdentityKind.NONE
        try:
            kind = IdentityKind(raw)
        except ValueError:
            logger.warning(f"Ignoring unknown credential kind marker {raw!r}")
            return IdentityKind.NONE
        return kind if kind in PERSISTED_KINDS else IdentityKind.NONE

    def clear_marker(self) -> None:
        self.store.remove(MARKER_KEY)

    # ── Records ────────────────────────────────────────────────────────

    def has_record(self, kind: IdentityKind) -> bool:
        kind = _require_persisted(kind)
        return (
            self.store.get(TOKEN_KEYS[kind]) is not None
            or self.store.get(IDENTITY_KEYS[kind]) is not None
        )

    def read(self, kind: IdentityKind) -> Optional[CredentialRecord]:
        """
        Load the record of ``kind``.

        Returns:
            The record, or None when the token or identity is missing or the
            stored identity no longer parses.
        """
        kind = _require_persisted(kind)
        token = self.store.get(TOKEN_KEYS[kind])
        blob = self.store.get(IDENTITY_KEYS[kind])
        if not token or not blob:
            return None

        try:
            identity = _IDENTITY_TYPES[kind].model_validate_json(blob)
        except ValidationError as e:
            logger.warning(
                f"Stored {kind.value} identity is unreadable: {e.error_count()} error(s)"
            )
            return None
        return CredentialRecord(token=token, kind=kind, identity=identity)

    def read_active(self) -> Optional[CredentialRecord]:
        """Record of the kind named by the marker; the other kind is not read."""
        kind = self.read_marker()
        if kind is IdentityKind.NONE:
            return None
        return self.read(kind)

    def persist(self, record: CredentialRecord) -> None:
        """Write ``record`` and mark its kind as the active one."""
        kind = _require_persisted(record.kind)
        self.store.set(TOKEN_KEYS[kind], record.token)
        self.store.set(IDENTITY_KEYS[kind], record.identity.model_dump_json())
        self.store.set(MARKER_KEY, kind.value)

    def write_identity(self, kind: IdentityKind, identity: Identity) -> None:
        """Overwrite only the identity blob of ``kind``."""
        kind = _require_persisted(kind)
        self.store.set(IDENTITY_KEYS[kind], identity.model_dump_json())

    def remove(self, kind: IdentityKind) -> None:
        """Delete the record of ``kind``, clearing the marker first if it names it."""
        kind = _require_persisted(kind)
        if self.read_marker() is kind:
            self.clear_marker()
        self.store.remove_many([TOKEN_KEYS[kind], IDENTITY_KEYS[kind]])

    def clear_all(self) -> None:
        """Delete the marker and every record of both kinds."""
        self.clear_marker()
        for kind in PERSISTED_KINDS:
            self.store.remove_many([TOKEN_KEYS[kind], IDENTITY_KEYS[kind]])
