"""
Small key/value stores used for the auth token and the draft autosave.
In-memory for tests and short-lived processes, JSON file for the CLI.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class MemoryStore:
    """Process-local key/value store"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        """Get stored value"""
        value = self._data.get(key)
        if value is None:
            logger.debug(f"❌ Store MISS: {key}")
        else:
            logger.debug(f"✅ Store HIT: {key}")
        return value

    def set(self, key: str, value: Any) -> None:
        """Set stored value"""
        self._data[key] = value
        logger.debug(f"💾 Stored: {key}")

    def delete(self, key: str) -> None:
        """Delete a key (missing keys are ignored)"""
        if self._data.pop(key, None) is not None:
            logger.debug(f"🗑️ Deleted: {key}")

    def has(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(MemoryStore):
    """
    Key/value store persisted as one JSON document.

    The whole file is rewritten on every change; values must be JSON
    serializable. A corrupt or unreadable file starts an empty store.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Could not read store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"⚠️ Ignoring non-object store file {self.path}")
            return {}
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(self._data, fh, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self._flush()

    def delete(self, key: str) -> None:
        if key in self._data:
            super().delete(key)
            self._flush()
