"""Storage collaborators and the repository holding the active configuration"""

from abc import ABC, abstractmethod
import json
import logging
import os
import os.path
import tempfile
from typing import Dict, Optional

from . import FieldTypeError, StorageFailure
from .models import ConfigurationRecord


class Storage(ABC):
    """Key-value storage supplied by the host"""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored under ``key``, or None if there is none"""

    @abstractmethod
    def put(self, key: str, value: bytes):
        """Store ``value`` under ``key``, replacing any previous value"""


class MemoryStorage(Storage):
    """Storage held in a dict. Useful for embedding and in tests"""

    def __init__(self, data: Dict[str, bytes] = None):
        self.data = {} if data is None else data

    def get(self, key):
        return self.data.get(key)

    def put(self, key, value):
        self.data[key] = bytes(value)


class DirectoryStorage(Storage):
    """One file per key inside a directory

    Values are written to a temporary file and renamed into place, so readers
    never observe a partial write.
    """

    def __init__(self, path: str):
        self.path = path

    def _key_path(self, key: str) -> str:
        if not key or os.sep in key or key.startswith("."):
            raise StorageFailure(f"invalid storage key '{key}'")
        return os.path.join(self.path, key)

    def get(self, key):
        try:
            with open(self._key_path(key), "rb") as key_file:
                return key_file.read()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageFailure(f"could not read '{key}': {exc}") from exc

    def put(self, key, value):
        key_path = self._key_path(key)
        try:
            os.makedirs(self.path, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path, prefix=f".{key}.")
            try:
                with os.fdopen(fd, "wb") as tmp_file:
                    tmp_file.write(value)
                os.replace(tmp_path, key_path)
            except OSError:
                os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise StorageFailure(f"could not write '{key}': {exc}") from exc


class ConfigRepository:
    """Loads and saves the one active ConfigurationRecord"""

    _key = "config"

    def __init__(self, storage: Storage):
        self.storage = storage

    def load(self) -> Optional[ConfigurationRecord]:
        """Return the stored record merged over the defaults, or None if unset

        :raises StorageFailure: If storage fails or the record can't be decoded
        """
        try:
            raw = self.storage.get(self._key)
        except StorageFailure:
            raise
        except Exception as exc:  # pylint: disable-msg=broad-except
            raise StorageFailure(f"could not read configuration: {exc}") from exc

        if raw is None:
            logging.debug("No configuration stored")
            return None

        try:
            stored = json.loads(raw)
        except ValueError as exc:
            raise StorageFailure(f"could not decode configuration: {exc}") from exc
        if not isinstance(stored, dict):
            raise StorageFailure("could not decode configuration: not an object")
        try:
            return ConfigurationRecord.from_dict(stored)
        except FieldTypeError as exc:
            raise StorageFailure(
                f"could not decode configuration: {exc.message}"
            ) from exc

    def save(self, record: ConfigurationRecord):
        """Replace the stored record with ``record``

        :raises StorageFailure: If storage fails
        """
        raw = json.dumps(record.to_dict(), sort_keys=True).encode("utf-8")
        try:
            self.storage.put(self._key, raw)
        except StorageFailure:
            raise
        except Exception as exc:  # pylint: disable-msg=broad-except
            raise StorageFailure(f"could not write configuration: {exc}") from exc
        logging.info("Stored configuration for '%s'", record.url)
