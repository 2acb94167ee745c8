"""Open connections to a directory server from a stored configuration"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
import logging
from typing import Callable, Iterator, Optional

import ldap3
from ldap3.core.exceptions import LDAPException

from . import ConnectionFailed, UnsupportedScheme
from .models import ConfigurationRecord
from .tls import build_tls
from .url import DirectoryAddress, parse_url

DEFAULT_CONNECT_TIMEOUT = 10

ConnectionFactory = Callable[..., ldap3.Connection]


def default_connection_factory(
    address: DirectoryAddress,
    tls: Optional[ldap3.Tls],
    use_ssl: bool,
    timeout: float,
) -> ldap3.Connection:
    """Create an unopened ldap3 connection for ``address``"""
    server = ldap3.Server(
        address.host,
        port=address.port,
        use_ssl=use_ssl,
        tls=tls,
        get_info=ldap3.NONE,
        connect_timeout=timeout,
    )
    return ldap3.Connection(
        server, auto_bind=ldap3.AUTO_BIND_NONE, receive_timeout=timeout
    )


def close_connection(connection: ldap3.Connection):
    """Close a connection produced by a transport"""
    connection.unbind()


class Transport(ABC):
    """Abstract base class for the ways of reaching a directory server"""

    def __init__(
        self,
        connection_factory: ConnectionFactory = default_connection_factory,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.connection_factory = connection_factory
        self.timeout = timeout

    @abstractmethod
    def dial(
        self, address: DirectoryAddress, record: ConfigurationRecord
    ) -> ldap3.Connection:
        """Return an open connection to ``address``

        :raises ConnectionFailed: If the connection can't be established
        """

    @staticmethod
    def _open(connection: ldap3.Connection, address: DirectoryAddress):
        try:
            connection.open(read_server_info=False)
        except (LDAPException, OSError) as exc:
            raise ConnectionFailed(exc) from exc
        logging.debug("Connection to '%s' opened", address.netloc)


class PlainTransport(Transport):
    """Plain TCP, upgraded in-band with StartTLS when the record asks for it"""

    def dial(self, address, record):
        tls = None
        if record.starttls:
            tls = build_tls(address.host, record.certificate, record.insecure_tls)

        connection = self.connection_factory(
            address, tls=tls, use_ssl=False, timeout=self.timeout
        )
        self._open(connection, address)
        if record.starttls:
            self._start_tls(connection, address)
        return connection

    @staticmethod
    def _start_tls(connection: ldap3.Connection, address: DirectoryAddress):
        """Upgrade the connection, closing it if the upgrade fails"""
        try:
            upgraded = connection.start_tls(read_server_info=False)
        except (LDAPException, OSError) as exc:
            _discard(connection)
            raise ConnectionFailed(exc) from exc
        if not upgraded:
            _discard(connection)
            raise ConnectionFailed(f"StartTLS refused by server: {connection.result}")
        logging.debug("Connection to '%s' upgraded with StartTLS", address.netloc)


class ImplicitTLSTransport(Transport):
    """TLS from the first byte, no upgrade handshake"""

    def dial(self, address, record):
        tls = build_tls(address.host, record.certificate, record.insecure_tls)
        connection = self.connection_factory(
            address, tls=tls, use_ssl=True, timeout=self.timeout
        )
        self._open(connection, address)
        return connection


TRANSPORTS = {
    "ldap": PlainTransport,
    "ldaps": ImplicitTLSTransport,
}


def select_transport(scheme: str) -> type:
    """Pick the transport class for a URL scheme

    :raises UnsupportedScheme: If no transport handles ``scheme``
    """
    try:
        return TRANSPORTS[scheme]
    except KeyError as exc:
        raise UnsupportedScheme(scheme) from exc


def _discard(connection: ldap3.Connection):
    """Close a connection, logging rather than raising close errors"""
    try:
        close_connection(connection)
    except (LDAPException, OSError) as exc:
        logging.debug("Ignoring error closing connection: %s", exc)


class DirectoryConnector:
    """Opens directory connections described by a ConfigurationRecord"""

    def __init__(
        self,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        connection_factory: ConnectionFactory = default_connection_factory,
    ):
        self.timeout = timeout
        self.connection_factory = connection_factory

    def dial(self, record: ConfigurationRecord) -> ldap3.Connection:
        """Open a connection to the server in ``record``. The caller must close it.

        :raises MalformedURL: If the record's URL can't be parsed
        :raises UnsupportedScheme: If the URL is not ldap:// or ldaps://
        :raises InvalidTLSMaterial: If the CA certificate is unusable
        :raises ConnectionFailed: If the server can't be reached
        """
        address = parse_url(record.url)
        transport = select_transport(address.scheme)(
            self.connection_factory, self.timeout
        )
        logging.info(
            "Connecting to '%s://%s' using %s",
            address.scheme,
            address.netloc,
            transport.__class__.__name__,
        )
        return transport.dial(address, record)

    @contextmanager
    def connect(self, record: ConfigurationRecord) -> Iterator[ldap3.Connection]:
        """As dial(), closing the connection when the block exits"""
        connection = self.dial(record)
        try:
            yield connection
        finally:
            _discard(connection)
