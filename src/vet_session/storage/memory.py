"""
In-memory credential store.
"""

from typing import Dict, Optional

from .base import CredentialStore


class MemoryCredentialStore(CredentialStore):
    """Dict-backed store for tests and processes that need no persistence."""

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current contents."""
        return dict(self._data)
