"""Read and write entry points for the LDAP server configuration"""

import logging
from typing import Dict, Optional

from addict import Dict as Response

from . import ValidationError
from .connector import DirectoryConnector
from .models import ConfigPatch
from .storage import ConfigRepository, Storage


def error_response(message: str) -> Response:
    """A response carrying a user-facing error"""
    return Response(error=message)


class ConfigBackend:
    """Validates, persists and returns the directory server configuration

    Writes are only stored once a connection to the configured server has
    been established, so the stored configuration was usable when written.
    """

    def __init__(self, storage: Storage, connector: DirectoryConnector = None):
        self.repository = ConfigRepository(storage)
        self.connector = connector if connector is not None else DirectoryConnector()

    def read(self) -> Optional[Response]:
        """Return the stored configuration, or None if it was never written"""
        record = self.repository.load()
        if record is None:
            return None
        return Response(data=record.to_dict())

    def write(self, fields: Dict) -> Optional[Response]:
        """Validate ``fields`` by dialing the server, then store them

        Returns None on success and an error response when validation fails.
        Storage errors are raised.
        """
        try:
            candidate = ConfigPatch.from_fields(fields).apply()
            with self.connector.connect(candidate):
                pass
        except ValidationError as exc:
            logging.warning("Rejected configuration: %s", exc.message)
            return error_response(exc.message)

        self.repository.save(candidate)
        return None
