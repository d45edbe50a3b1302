"""
Command Line Interface Module

This module provides the command-line interface for checking and
converging an OOB controller.
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import yaml

from ..control import OOBManager
from ..errors import ConfigError, OOBError
from ..models import DEFAULT_USER, HostTarget, VendorType

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "/etc/oobsetup/config.yaml"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# config file keys that may be overridden from the command line
CONFIG_KEYS = [
    "host",
    "user",
    "password",
    "type",
    "hostname",
    "network_mode",
    "network_src",
    "key_file",
    "ntp_servers",
    "level",
]


def load_config(path: str, required: bool = False) -> Dict[str, Any]:
    """Load the YAML config file

    Args:
        path: Path to configuration file
        required: Fail if the file does not exist

    Returns:
        Mapping of config keys, empty if the file is absent

    Raises:
        ConfigError: If the file is unreadable, not valid YAML or not a mapping
    """
    if not os.path.exists(path):
        if required:
            raise ConfigError(f"Config file {path} does not exist")
        logger.debug(f"No config file at {path}, using command line only")
        return {}

    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {path}: {e}")

    if not isinstance(config, dict):
        raise ConfigError(f"Config {path} must be a mapping")

    unknown = set(config) - set(CONFIG_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
    return {k: v for k, v in config.items() if k in CONFIG_KEYS}


def read_key(path: str) -> bytes:
    """Read the license private key as raw bytes

    Only a single trailing line ending is dropped; any other byte,
    whitespace included, is part of the key.
    """
    try:
        with open(path, "rb") as f:
            key = f.read()
    except OSError as e:
        raise ConfigError(f"Failed to read key file {path}: {e}")
    for ending in (b"\r\n", b"\n"):
        if key.endswith(ending):
            return key[:-len(ending)]
    return key


def parse_ntp_servers(value: Any) -> Optional[List[str]]:
    """Normalize the ntp_servers setting to a list of names

    A single name given as a scalar becomes a one-element list.

    Raises:
        ConfigError: If the value is neither a string nor a list of strings
    """
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        raise ConfigError(f"ntp_servers must be a list of host names, got {value!r}")
    return value


class CLI:
    """Command-line interface handler"""

    def __init__(self):
        """Initialize CLI handler"""
        self.parser = self._create_parser()
        self.manager: Optional[OOBManager] = None

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create command-line argument parser

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="oobsetup - converge Dell iDRAC and Supermicro IPMI settings"
        )

        parser.add_argument(
            "-c", "--config",
            help="Path to configuration file",
            default=DEFAULT_CONFIG
        )

        parser.add_argument(
            "--check",
            action="store_true",
            help="Only report whether the controller is converged"
        )

        parser.add_argument(
            "-H", "--host",
            help="Controller address (default: localhost)"
        )

        parser.add_argument(
            "-U", "--user",
            help=f"Controller user (default: {DEFAULT_USER})"
        )

        parser.add_argument(
            "-P", "--password",
            help="Desired administrator password, also used to log in"
        )

        parser.add_argument(
            "-t", "--type",
            choices=[v.value for v in VendorType],
            help="Controller type"
        )

        parser.add_argument(
            "--hostname",
            help="Desired controller hostname"
        )

        parser.add_argument(
            "--network-mode",
            dest="network_mode",
            choices=["shared", "dedicated", "failover"],
            help="NIC selection"
        )

        parser.add_argument(
            "--network-src",
            dest="network_src",
            help="'dhcp' or a static address in CIDR notation"
        )

        parser.add_argument(
            "--key-file",
            dest="key_file",
            help="Private key used to activate the Supermicro license"
        )

        parser.add_argument(
            "--ntp-server",
            dest="ntp_servers",
            action="append",
            help="NTP server, may be given twice"
        )

        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug logging"
        )

        return parser

    def _merge(self, args: argparse.Namespace) -> Dict[str, Any]:
        """Config file values overridden by command line flags"""
        settings = load_config(args.config, required=args.config != DEFAULT_CONFIG)
        for key in CONFIG_KEYS:
            value = getattr(args, key, None)
            if value is not None:
                settings[key] = value
        if args.debug:
            settings["level"] = "debug"
        return settings

    def _setup_logging(self, level: Optional[str]) -> None:
        numeric = getattr(logging, str(level or "info").upper(), None)
        if not isinstance(numeric, int):
            raise ConfigError(f"Invalid log level: {level}")
        logging.basicConfig(level=numeric, format=LOG_FORMAT)
        logging.getLogger("oobsetup").setLevel(numeric)

    def build_manager(self, settings: Dict[str, Any]) -> OOBManager:
        """Create the manager from merged settings"""
        if not settings.get("type"):
            raise ConfigError("Controller type is required (smc or drac)")

        target = HostTarget(
            address=settings.get("host") or "localhost",
            vendor=VendorType.parse(settings["type"]),
            username=settings.get("user") or DEFAULT_USER,
            password=settings.get("password"),
        )
        key = read_key(settings["key_file"]) if settings.get("key_file") else None
        ntp_servers = parse_ntp_servers(settings.get("ntp_servers"))
        return OOBManager(
            target,
            desired_hostname=settings.get("hostname"),
            network_mode=settings.get("network_mode"),
            network_src=settings.get("network_src"),
            key=key,
            ntp_servers=ntp_servers,
        )

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run CLI

        Returns:
            Process exit status
        """
        args = self.parser.parse_args(argv)

        try:
            settings = self._merge(args)
            self._setup_logging(settings.get("level"))
            self.manager = self.build_manager(settings)

            if args.check:
                converged = self.manager.check()
                print("converged" if converged else "not converged")
                return 0 if converged else 1

            self.manager.apply()
            return 0

        except OOBError as e:
            logger.error(f"Error: {e}")
            return 1


def main() -> None:
    """Main entry point"""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
