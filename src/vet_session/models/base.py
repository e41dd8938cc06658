"""
Base model class for the SQLAlchemy tables in the vet-session package.

The only persisted table is the credential key/value table used by the
SQL-backed credential store; this module keeps the declarative base and the
audit timestamp shared by it.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base declarative class for all SQLAlchemy models."""


class TimestampedModel(Base):
    """
    Abstract base model adding an ``updated_at`` audit column.

    The timestamp is set on insert and refreshed on every update so stale
    credential rows can be spotted when inspecting the table by hand.
    """

    __abstract__ = True

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the row to a JSON-serializable dictionary."""
        result: Dict[str, Any] = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[column.name] = value
        return result
