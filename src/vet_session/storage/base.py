"""
Durable credential store contract.

A credential store is a synchronous key -> string map that survives process
restarts. It offers no transaction across keys; callers order their writes.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional


class CredentialStore(ABC):
    """Synchronous, process-external key/value storage for credentials."""

    backend_name = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; removing a missing key is not an error."""

    def remove_many(self, keys: Iterable[str]) -> None:
        """Delete several keys in the given order."""
        for key in keys:
            self.remove(key)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
