"""Settings reader for the ldapconf command line tool"""

from ast import literal_eval
import glob
import logging
import os
import os.path
import string
import sys

from addict import Dict
import yaml

from .connector import DEFAULT_CONNECT_TIMEOUT

DEFAULT_SETTINGS = {
    "storage": {"path": "/var/lib/ldapconf"},
    "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
}


class ConfigReader:
    """Reads a file or folder of yaml settings files

    Later files override earlier ones, and all of them override the defaults.
    ``$VARIABLE`` references are replaced from the environment unless ``raw``
    is set.
    """

    def __init__(self, file=None, raw=False):
        """Parse the specified file or folder into self.config"""
        self.config = None
        self.config_raw = {}

        if file is None:
            filelist = []
        elif os.path.isdir(file):
            filelist = sorted(glob.glob(file + "/*.yml"))
        elif os.path.isfile(file):
            filelist = [file]
        else:
            logging.error("Specified settings file couldn't be found! %s", file)
            sys.exit(1)

        for current_file in filelist:
            with open(current_file, "r", encoding="utf-8") as config_file:
                try:
                    self.config_raw.update(yaml.safe_load(config_file) or {})
                except (yaml.YAMLError, ValueError) as exc:
                    logging.error(
                        "Settings read failed when parsing %s! Error was: %s",
                        current_file,
                        exc,
                    )
                    sys.exit(1)

        config_dict = self.config_raw
        if not raw:
            try:
                config_dict = literal_eval(
                    string.Template(str(self.config_raw)).substitute(**os.environ)
                )
            except KeyError as exc:
                logging.error(
                    "The environment variable %s used in your settings file wasn't provided!",
                    exc,
                )
                sys.exit(1)
        self.config = Dict(DEFAULT_SETTINGS)
        self.config.update(Dict(config_dict))

    def print(self):
        """Print the current settings to the terminal"""
        print(
            yaml.dump(self.config.to_dict(), default_flow_style=False, default_style="")
        )

    def print_raw(self):
        """Print the current settings, without templating environment variables"""
        print(yaml.dump(self.config_raw, default_flow_style=False, default_style=""))
