"""ldapconf main file"""

import argparse
import logging
import sys

import yaml

from . import StorageFailure
from .backend import ConfigBackend
from .config_reader import ConfigReader
from .connector import DirectoryConnector
from .models import FIELDS
from .storage import DirectoryStorage


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Configure the LDAP server to connect to.",
    )
    parser.add_argument(
        "-c",
        "--configcheck",
        action="store_true",
        help="Parse the settings files, replace environment variables, display and exit.",
    )
    parser.add_argument(
        "-r",
        "--configraw",
        action="store_true",
        help="When performing a settings check, do not parse environment variables.",
    )
    parser.add_argument(
        "-f",
        "--file",
        help="settings file location.  Either a single file or a folder of yaml files.",
        default=None,
    )
    parser.add_argument(
        "-d",
        "--debug",
        help="enable debug mode",
        action="store_true",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("read", help="Show the stored configuration")
    write = subparsers.add_parser(
        "write",
        help="Validate a configuration by connecting to the server, then store it",
        description=(
            "The LDAP URL can use either the 'ldap://' or 'ldaps://' scheme. "
            "The former connects unencrypted (optionally upgraded with StartTLS) "
            "on port 389 by default, the latter over TLS on port 636 by default."
        ),
    )
    for name, schema in FIELDS.items():
        if name == "certificate":
            write.add_argument(
                "--certificate-file",
                dest="certificate",
                type=argparse.FileType("r", encoding="utf-8"),
                help=schema.description,
            )
        elif schema.type is bool:
            write.add_argument(
                f"--{name.replace('_', '-')}",
                dest=name,
                action=argparse.BooleanOptionalAction,
                default=None,
                help=schema.description,
            )
        else:
            write.add_argument(f"--{name}", dest=name, help=schema.description)
    return parser.parse_args(argv)


def write_fields(args) -> dict:
    """Collect the fields given to the write command"""
    fields = {}
    for name in FIELDS:
        value = getattr(args, name)
        if value is None:
            continue
        if name == "certificate":
            with value:
                value = value.read()
        fields[name] = value
    return fields


def main(argv=None):
    """Entry point for the ldapconf cli"""
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    config = ConfigReader(args.file, args.configraw)
    if args.configcheck:
        if args.configraw:
            logging.info("Raw settings check requested.  Settings are:\n")
            config.print_raw()
        else:
            logging.info("Settings check requested.  Settings are:\n")
            config.print()
        sys.exit(0)

    if args.command is None:
        logging.error("No command given, expected 'read' or 'write'")
        sys.exit(1)

    try:
        timeout = float(config.config.connect_timeout)
    except (TypeError, ValueError):
        logging.error(
            "connect_timeout must be a number, got '%s'", config.config.connect_timeout
        )
        sys.exit(1)

    backend = ConfigBackend(
        DirectoryStorage(config.config.storage.path),
        DirectoryConnector(timeout=timeout),
    )

    try:
        if args.command == "read":
            response = backend.read()
            if response is None:
                logging.info("LDAP server not configured")
                sys.exit(0)
            print(yaml.dump(response.data.to_dict(), default_flow_style=False))
        else:
            response = backend.write(write_fields(args))
            if response is not None:
                logging.error(response.error)
                sys.exit(1)
            logging.info("Configuration stored")
    except StorageFailure as exc:
        logging.error("Storage failure: %s", exc.message)
        sys.exit(2)


if __name__ == "__main__":
    main()
