"""
Durable key-value storage used for saved signatures.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pdflyer.utils.resource_loader import get_app_data_dir

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """Minimal interface of a durable key-value slot store."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """Non-durable storage, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """
    Key-value slots kept in one JSON file in the user data directory.

    The file is rewritten on every change, through a temporary file so a
    crash never leaves it half written.
    """

    FILE_NAME = "storage.json"

    def __init__(self, file_path: Optional[Path] = None):
        if file_path is None:
            file_path = get_app_data_dir() / self.FILE_NAME
        self.file_path = Path(file_path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", self.file_path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring malformed storage file %s", self.file_path)
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(suffix='.json', dir=str(self.file_path.parent))
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, self.file_path)
        except OSError:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
