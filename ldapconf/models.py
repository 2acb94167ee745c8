""" ldapconf configuration models """

from dataclasses import asdict, dataclass, fields
from typing import Dict, Optional

from . import FieldTypeError, FieldUnexpected

DEFAULT_URL = "ldap://127.0.0.1"
DEFAULT_USERATTR = "cn"


@dataclass(frozen=True)
class FieldSchema:
    """Type and help text of a single configuration field"""

    type: type
    description: str


FIELDS = {
    "url": FieldSchema(str, f"LDAP URL to connect to (default: {DEFAULT_URL})"),
    "userdn": FieldSchema(
        str, "LDAP domain to use for users (eg: ou=People,dc=example,dc=org)"
    ),
    "groupdn": FieldSchema(
        str, "LDAP domain to use for groups (eg: ou=Groups,dc=example,dc=org)"
    ),
    "upndomain": FieldSchema(
        str, "Enables userPrincipalDomain login with [username]@UPNDomain (optional)"
    ),
    "userattr": FieldSchema(
        str, f"Attribute used for users (default: {DEFAULT_USERATTR})"
    ),
    "certificate": FieldSchema(
        str,
        "CA certificate to use when verifying LDAP server certificate, "
        "must be x509 PEM encoded (optional)",
    ),
    "insecure_tls": FieldSchema(
        bool, "Skip LDAP server SSL certificate verification - VERY insecure (optional)"
    ),
    "starttls": FieldSchema(
        bool,
        "Issue a StartTLS command after establishing unencrypted connection (optional)",
    ),
}

# Lower-cased on input before storage
_CASE_INSENSITIVE_FIELDS = {"url", "userattr"}


class ModelBase:
    """Common class of the configuration models"""

    @classmethod
    def supported_fields(cls):
        """Supported fields are any field that is present in the data model"""
        return {f.name for f in fields(cls)}


@dataclass
class ConfigurationRecord(ModelBase):
    """The single persisted LDAP server configuration"""

    # pylint: disable-msg=too-many-instance-attributes

    url: str = DEFAULT_URL
    userdn: str = ""
    groupdn: str = ""
    upndomain: str = ""
    userattr: str = DEFAULT_USERATTR
    certificate: str = ""
    insecure_tls: bool = False
    starttls: bool = False

    def to_dict(self) -> Dict:
        """Plain dict of every field, as stored and as returned on read"""
        return asdict(self)

    @classmethod
    def from_dict(cls, stored: Dict) -> "ConfigurationRecord":
        """Materialize a record with defaults, then overwrite with stored fields

        Keys that are not part of the model and null values are ignored.

        :raises FieldTypeError: If a stored value has the wrong type
        """
        record = cls()
        for name in sorted(cls.supported_fields() & set(stored.keys())):
            value = stored[name]
            if value is None:
                continue
            expected = FIELDS[name].type
            if not isinstance(value, expected):
                raise FieldTypeError(name, expected, value)
            setattr(record, name, value)
        return record


@dataclass
class ConfigPatch(ModelBase):
    """Write input. ``None`` means the field was not supplied.

    Booleans are tri-state so that ``False`` can be written on purpose.
    """

    # pylint: disable-msg=too-many-instance-attributes

    url: Optional[str] = None
    userdn: Optional[str] = None
    groupdn: Optional[str] = None
    upndomain: Optional[str] = None
    userattr: Optional[str] = None
    certificate: Optional[str] = None
    insecure_tls: Optional[bool] = None
    starttls: Optional[bool] = None

    @classmethod
    def from_fields(cls, data: Dict) -> "ConfigPatch":
        """Build a patch from raw request fields

        :raises FieldUnexpected: If a field is not part of the schema
        :raises FieldTypeError: If a field has the wrong type
        """
        unexpected_fields = set(data.keys()) - set(FIELDS.keys())
        if unexpected_fields:
            raise FieldUnexpected(unexpected_fields)

        values = {}
        for name, value in data.items():
            if value is None:
                continue
            expected = FIELDS[name].type
            if not isinstance(value, expected):
                raise FieldTypeError(name, expected, value)
            if expected is str:
                if value == "":
                    continue
                if name in _CASE_INSENSITIVE_FIELDS:
                    value = value.lower()
            values[name] = value
        return cls(**values)

    def provided(self) -> Dict:
        """Fields that were explicitly supplied"""
        return {
            name: getattr(self, name)
            for name in sorted(self.supported_fields())
            if getattr(self, name) is not None
        }

    def apply(
        self, record: Optional[ConfigurationRecord] = None
    ) -> ConfigurationRecord:
        """Return a new record with the supplied fields set over ``record``

        Without a base record the patch is applied over the defaults.
        """
        base = record.to_dict() if record is not None else {}
        return ConfigurationRecord.from_dict(base | self.provided())
