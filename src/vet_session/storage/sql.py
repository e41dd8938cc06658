"""
SQL-backed credential store.

This module keeps the credential key/value pairs in a ``credential_entries``
table through a synchronous SQLAlchemy engine. SQLite is the usual target;
any SQLAlchemy URL with a synchronous driver works.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..exceptions import StorageUnavailable
from ..models import Base, CredentialEntry
from .base import CredentialStore

logger = logging.getLogger(__name__)


class SqlCredentialStore(CredentialStore):
    """Credential store persisted in a relational table."""

    backend_name = "sql"

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[Engine] = None,
        echo: bool = False,
    ):
        """
        Initialize the store and create its table if missing.

        Args:
            database_url: SQLAlchemy URL, e.g. ``sqlite:///credentials.db``
            engine: Existing engine to reuse instead of ``database_url``
            echo: Whether to echo SQL statements

        Raises:
            ValueError: If neither a URL nor an engine is given
            StorageUnavailable: If the table cannot be created
        """
        if engine is None:
            if not database_url:
                raise ValueError("SqlCredentialStore needs a database_url or an engine")
            engine = create_engine(database_url, echo=echo, future=True)

        self.engine = engine
        self.session_factory = sessionmaker(
            bind=engine,
            class_=Session,
            expire_on_commit=False,
        )

        try:
            Base.metadata.create_all(engine, tables=[CredentialEntry.__table__])
        except SQLAlchemyError as e:
            logger.error(f"Credential table creation failed: {e}")
            raise StorageUnavailable(
                "Cannot initialize credential table",
                backend=self.backend_name,
                original_error=e,
            )

    @contextmanager
    def get_transaction(self, key: str) -> Generator[Session, None, None]:
        """
        Context manager for one store operation with automatic commit/rollback.

        Yields:
            Database session within a transaction

        Raises:
            StorageUnavailable: If the database operation fails
        """
        session = self.session_factory()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Credential store operation failed for '{key}': {e}")
            raise StorageUnavailable(
                "Credential storage operation failed",
                key=key,
                backend=self.backend_name,
                original_error=e,
            )
        finally:
            session.close()

    def get(self, key: str) -> Optional[str]:
        with self.get_transaction(key) as session:
            entry = session.get(CredentialEntry, key)
            return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        with self.get_transaction(key) as session:
            entry = session.get(CredentialEntry, key)
            if entry is None:
                session.add(CredentialEntry(key=key, value=value))
            else:
                entry.value = value

    def remove(self, key: str) -> None:
        with self.get_transaction(key) as session:
            entry = session.get(CredentialEntry, key)
            if entry is not None:
                session.delete(entry)

    def dump(self) -> Dict[str, Any]:
        """All rows as dictionaries, for diagnostics."""
        with self.get_transaction("*") as session:
            rows = session.execute(select(CredentialEntry)).scalars().all()
            return {row.key: row.to_dict() for row in rows}

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        self.engine.dispose()
        logger.info("Credential store engine disposed")
