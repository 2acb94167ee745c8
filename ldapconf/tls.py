"""Build the TLS trust configuration used when talking to the directory"""

import logging
import ssl

import ldap3

from . import InvalidTLSMaterial


def count_certificates(pem: str) -> int:
    """Count the CA certificates that can be loaded from a PEM blob

    :raises InvalidTLSMaterial: If the blob can't be parsed at all
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        context.load_verify_locations(cadata=pem)
    except (ssl.SSLError, ValueError) as exc:
        raise InvalidTLSMaterial(str(exc)) from exc
    return context.cert_store_stats()["x509"]


def build_tls(
    host: str, certificate: str = "", insecure_tls: bool = False
) -> ldap3.Tls:
    """Return a TLS configuration for connecting to ``host``

    * ``insecure_tls`` turns off certificate and hostname verification.
    * A PEM ``certificate`` restricts trust to the CAs it contains.
    * Otherwise the platform's default trust store is used.

    Both may be set, in which case nothing is verified.

    :raises InvalidTLSMaterial: If ``certificate`` yields no usable certificates
    """
    if certificate:
        if not count_certificates(certificate):
            raise InvalidTLSMaterial("no certificates found")
        if insecure_tls:
            logging.warning(
                "Both a CA certificate and insecure_tls are set for '%s'; "
                "the CA certificate will not be used for verification",
                host,
            )

    if insecure_tls:
        logging.warning("TLS certificate verification disabled for '%s'", host)
        validate = ssl.CERT_NONE
    else:
        validate = ssl.CERT_REQUIRED

    logging.debug(
        "TLS configuration for '%s': verify=%s, custom CA=%s",
        host,
        validate != ssl.CERT_NONE,
        bool(certificate),
    )
    return ldap3.Tls(
        validate=validate,
        ca_certs_data=certificate or None,
        valid_names=[host],
        sni=host,
    )
