"""LDAP server configuration and connection namespace"""


class LdapConfException(Exception):
    """Generic ldapconf exception. Base class for all the others"""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class ValidationError(LdapConfException):
    """A configuration was rejected. The message is safe to show to the user"""


class MalformedURL(ValidationError):
    """Exception caused by a URL that cannot be parsed"""

    def __init__(self, url, reason=""):
        self.url = url
        message = f"malformed URL '{url}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnsupportedScheme(ValidationError):
    """Exception caused by a URL scheme other than ldap or ldaps"""

    def __init__(self, scheme):
        self.scheme = scheme
        super().__init__(
            f"unsupported scheme '{scheme}', expected 'ldap' or 'ldaps'"
        )


class InvalidTLSMaterial(ValidationError):
    """Exception caused by a CA certificate blob with no usable certificates"""

    def __init__(self, reason=""):
        message = "invalid CA certificate material"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ConnectionFailed(ValidationError):
    """Exception caused by a failed dial, TLS handshake or StartTLS upgrade"""

    def __init__(self, cause):
        self.cause = cause
        super().__init__(f"cannot connect to directory server: {cause}")


class FieldUnexpected(ValidationError):
    """Exception caused by write input having unexpected fields"""

    def __init__(self, unexpected_fields):
        self.unexpected_fields = unexpected_fields
        super().__init__(f"unexpected fields '{sorted(unexpected_fields)}'")


class FieldTypeError(ValidationError):
    """Exception caused by a write field holding a value of the wrong type"""

    def __init__(self, field, expected, value):
        self.field = field
        self.value = value
        super().__init__(
            f"field '{field}' expects {expected.__name__}, got '{type(value).__name__}'"
        )


class StorageFailure(LdapConfException):
    """Exception caused by the storage collaborator or an undecodable record"""
