"""
JSON-file credential store.

Storage: a single JSON object on disk, replaced atomically on every mutation.
Schema:
{
  "system_token": "eyJhbGciOi...",
  "system_identity": "{\"id\": \"2\", \"name\": \"Dra. Pérez\", ...}",
  "active_kind": "SYSTEM"
}
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from ..exceptions import StorageUnavailable
from .base import CredentialStore

logger = logging.getLogger(__name__)


class JsonFileCredentialStore(CredentialStore):
    """Credential store persisted to a JSON file."""

    backend_name = "file"

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(
                "Cannot create credential storage directory",
                backend=self.backend_name,
                original_error=e,
            )

    @property
    def path(self) -> Path:
        return self._path

    # ── Private helpers ────────────────────────────────────────────────

    def _load(self) -> Dict[str, str]:
        try:
            if not self._path.exists():
                return {}
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here
            logger.error(f"Credential file {self._path} is corrupt, ignoring it: {e}")
            return {}
        except OSError as e:
            raise StorageUnavailable(
                "Cannot read credential storage",
                backend=self.backend_name,
                original_error=e,
            )
        if not isinstance(data, dict):
            logger.error(f"Credential file {self._path} does not hold an object, ignoring it")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: Dict[str, str]) -> None:
        """Write the whole object to a sibling temp file, then swap it in."""
        tmp_path: Optional[Path] = None
        try:
            fd, name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            tmp_path = Path(name)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageUnavailable(
                "Cannot write credential storage",
                backend=self.backend_name,
                original_error=e,
            )

    # ── Store contract ─────────────────────────────────────────────────

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
