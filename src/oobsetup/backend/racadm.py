"""
Dell iDRAC backend

Reads and writes iDRAC attributes through ``racadm get``/``racadm set``
using dotted attribute paths such as ``iDRAC.NIC.DNSRacName``.
"""

import logging
from typing import Dict, List

from ..errors import UnsupportedTargetError
from ..models import HostTarget
from . import shell
from .codec import parse_key_value_text

logger = logging.getLogger(__name__)


class RacadmBackend:
    """Text-protocol backend driving racadm"""

    TOOL = "racadm"

    def __init__(self, target: HostTarget):
        self.target = target

    def base_command(self) -> List[str]:
        """Command prefix for the target.

        Raises:
            UnsupportedTargetError: For anything but localhost. Remote
                racadm is not implemented.
        """
        if self.target.is_local:
            return [self.TOOL]
        raise UnsupportedTargetError(f"racadm against remote host {self.target.address} is not implemented")

    def _get(self, key: str) -> str:
        return shell.run(self.base_command() + ["get", key]).stdout

    def get(self, key: str) -> str:
        """Get a single attribute value

        racadm prints a ``[Key=...]`` header followed by ``Name=value``,
        so the value is on the second line.
        """
        lines = self._get(key).splitlines()
        if len(lines) < 2:
            logger.warning(f"Unexpected racadm output for {key}: {lines}")
            return ""
        value = lines[1].strip().split("=")
        return value[1] if len(value) > 1 else ""

    def get_multi(self, key: str) -> Dict[str, str]:
        """Get every attribute in a group as a mapping"""
        return parse_key_value_text(self._get(key))

    def list_keys(self, key: str) -> List[str]:
        """List the sub-objects of a group, e.g. ``iDRAC.Users.2``"""
        prefix = f"{key}.".lower()
        keys = []
        for line in self._get(key).splitlines():
            line = line.strip()
            if line.lower().startswith(prefix):
                keys.append(line.split()[0])
        return keys

    def set(self, key: str, value: str) -> None:
        """Set an attribute. Raises ShellExecutionError on failure."""
        shell.run(self.base_command() + ["set", key, str(value)])
