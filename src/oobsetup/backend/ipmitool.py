"""
Supermicro IPMI backend

This module wraps ipmitool for executing raw OEM commands and the
standard ``user``/``lan`` subcommands against a Supermicro BMC.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import InvalidValueError, ShellExecutionError, UnsupportedFeatureError
from ..models import DEFAULT_PASSWORD, DEFAULT_USER, HostTarget, VendorType
from . import shell
from .codec import build_command, format_raw, parse_key_value_text, parse_raw

logger = logging.getLogger(__name__)

# IPMI completion code returned for a request the firmware does not understand
CC_INVALID_DATA_FIELD = 0xCC
INVALID_DATA_FIELD_MESSAGE = "Invalid data field in request"

COMPLETION_CODE_RE = re.compile(r"rsp=0x([0-9a-fA-F]{1,2})")

SUB_ENABLED = [0x00]


def completion_code(stderr: str) -> Optional[int]:
    """Extract the IPMI completion code from an ipmitool raw failure.

    Examples:
        >>> completion_code("Unable to send RAW command (channel=0x0 netfn=0x30 lun=0x0 cmd=0x68 rsp=0xcc): Invalid data field in request")
        204
    """
    match = COMPLETION_CODE_RE.search(stderr or "")
    if match:
        return int(match.group(1), 16)
    return None


class IpmitoolBackend:
    """Binary-protocol backend driving ipmitool"""

    TOOL = "ipmitool"

    def __init__(self, target: HostTarget, default_password: str = DEFAULT_PASSWORD):
        """Initialize backend with connection details

        Args:
            target: Host and credentials to use
            default_password: Factory password, used for writes that must
                happen before the desired password is in place
        """
        self.target = target
        self.default_password = default_password

    @classmethod
    def localhost(cls) -> "IpmitoolBackend":
        """Backend for the local BMC interface, no credentials needed"""
        return cls(HostTarget(address="localhost", vendor=VendorType.SMC))

    def base_command(self, default_password: bool = False) -> List[str]:
        """Command prefix for the target

        Args:
            default_password: Log in with the factory password instead of
                the configured one

        Raises:
            InvalidValueError: If a remote target has no user or password
        """
        if self.target.is_local:
            return [self.TOOL]

        user = self.target.username or DEFAULT_USER
        password = self.default_password if default_password else self.target.password
        if not user or not password:
            raise InvalidValueError(f"No user and password given for host {self.target.address}")
        return [
            self.TOOL,
            "-H", self.target.address,
            "-U", user,
            "-P", password,
        ]

    def run(self, args: Sequence[str], default_password: bool = False,
            force_fail: bool = True, secrets: Sequence[str] = ()) -> shell.ShellResult:
        """Run a non-raw ipmitool subcommand (``user list``, ``lan print 1`` ...)

        ``secrets`` are masked wherever they appear in the logged command.
        """
        return shell.run(self.base_command(default_password) + list(args), force_fail, secrets=secrets)

    def _validate_payload(self, payload: Sequence[int]) -> None:
        if not payload:
            raise InvalidValueError("Empty raw command")
        for value in payload:
            if not isinstance(value, int) or not 0 <= value <= 0xFF:
                raise InvalidValueError(f"Invalid byte in raw command: {value!r}")

    def raw_output(self, payload: Sequence[int], default_password: bool = False) -> str:
        """Run a raw command and return ipmitool's stdout untouched

        Raises:
            UnsupportedFeatureError: If the BMC answers with completion
                code 0xCC (invalid data field in request)
            ShellExecutionError: For any other failure
        """
        self._validate_payload(payload)
        argv = self.base_command(default_password) + ["raw"] + format_raw(payload)
        try:
            return shell.run(argv).stdout
        except ShellExecutionError as e:
            code = completion_code(e.stderr)
            if code == CC_INVALID_DATA_FIELD or (
                    code is None and INVALID_DATA_FIELD_MESSAGE in f"{e.stdout}{e.stderr}"):
                raise UnsupportedFeatureError(
                    f"BMC rejected raw command {' '.join(format_raw(payload))}: {e.stderr.strip()}",
                    completion_code=CC_INVALID_DATA_FIELD,
                ) from e
            raise

    def raw(self, payload: Sequence[int], default_password: bool = False) -> List[int]:
        """Run a raw command and parse the reply into byte values"""
        return parse_raw(self.raw_output(payload, default_password))

    def get(self, command: str, sub_command: Optional[Sequence[int]] = None) -> List[int]:
        """Read an OEM setting"""
        return self.raw(build_command(command, "get", sub_command))

    def set(self, command: str, payload: Sequence[int] = (),
            sub_command: Optional[Sequence[int]] = None) -> List[int]:
        """Write an OEM setting"""
        return self.raw(build_command(command, "set", sub_command) + list(payload))

    def enabled(self, command: str, sub_command: Sequence[int] = SUB_ENABLED) -> Tuple[bool, List[int]]:
        """Check the enabled flag of an OEM feature

        Returns:
            Tuple of (enabled, remaining reply bytes). The remaining bytes
            must be replayed by writes that re-enable the feature.
        """
        out = self.get(command, sub_command)
        enabled = bool(out) and out[0] == 1
        logger.debug(f"{command} enabled: {enabled}")
        return enabled, out[1:]

    def lan_print(self, channel: int = 1) -> Dict[str, str]:
        """Parsed ``lan print`` for a channel"""
        return parse_key_value_text(self.run(["lan", "print", str(channel)]).stdout)
