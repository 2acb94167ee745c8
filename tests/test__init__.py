""" Basic functionality tests for the ldapconf exceptions """

from ldap3.core.exceptions import LDAPSocketOpenError

import ldapconf


def test_validation_errors():
    """Every user-facing error is a ValidationError, storage errors are not"""
    for exc_class in (
        ldapconf.MalformedURL,
        ldapconf.UnsupportedScheme,
        ldapconf.InvalidTLSMaterial,
        ldapconf.ConnectionFailed,
        ldapconf.FieldUnexpected,
        ldapconf.FieldTypeError,
    ):
        assert issubclass(exc_class, ldapconf.ValidationError)
    assert not issubclass(ldapconf.StorageFailure, ldapconf.ValidationError)
    assert issubclass(ldapconf.StorageFailure, ldapconf.LdapConfException)


def test_connection_failed_message():
    """ConnectionFailed keeps its cause and describes it"""
    cause = LDAPSocketOpenError("unable to open socket")
    exc = ldapconf.ConnectionFailed(cause)
    assert exc.cause is cause
    assert exc.message == "cannot connect to directory server: unable to open socket"
    assert str(exc) == exc.message


def test_messages():
    """Messages name the offending value"""
    assert "'http'" in ldapconf.UnsupportedScheme("http").message
    assert ldapconf.MalformedURL("ldap://", "no host").message == (
        "malformed URL 'ldap://': no host"
    )
    assert ldapconf.InvalidTLSMaterial().message == "invalid CA certificate material"
