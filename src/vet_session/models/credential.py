"""
Credential entry model for the SQL-backed credential store.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import TimestampedModel


class CredentialEntry(TimestampedModel):
    """One key/value pair of the durable credential store."""

    __tablename__ = "credential_entries"

    key: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Storage key, e.g. system_token or active_kind",
    )

    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Opaque string value (token, JSON identity blob or kind marker)",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(key={self.key})>"
