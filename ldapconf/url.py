"""Resolve LDAP URLs into the address a transport should dial"""

from typing import NamedTuple
from urllib.parse import urlsplit

from . import MalformedURL, UnsupportedScheme

DEFAULT_PORTS = {
    "ldap": 389,
    "ldaps": 636,
}


class DirectoryAddress(NamedTuple):
    """Scheme, host and port of a directory server"""

    scheme: str
    host: str
    port: int

    @property
    def netloc(self) -> str:
        """host:port, with IPv6 literals bracketed"""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_url(url: str) -> DirectoryAddress:
    """Split an ldap:// or ldaps:// URL into scheme, host and port

    When the URL has no port the scheme's default port is used.

    :raises UnsupportedScheme: If the scheme is neither ldap nor ldaps
    :raises MalformedURL: If the URL can't be parsed or has no host
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError as exc:
        raise MalformedURL(url, str(exc)) from exc

    if parts.scheme not in DEFAULT_PORTS:
        raise UnsupportedScheme(parts.scheme)

    try:
        port = parts.port
    except ValueError as exc:
        raise MalformedURL(url, str(exc)) from exc

    host = parts.hostname
    if not host:
        raise MalformedURL(url, "no host")

    if port is None:
        port = DEFAULT_PORTS[parts.scheme]
    return DirectoryAddress(parts.scheme, host, port)
