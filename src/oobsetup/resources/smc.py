"""
Supermicro resources

Each class drives the BMC with raw OEM commands under netfn 0x30 through
an IpmitoolBackend. Several commands deviate from the usual
``<command> <action> <sub-command>`` layout; the quirks are noted inline.
"""

import logging
from typing import List, Optional

from ..backend.codec import build_command, bytes_to_str, format_license, generate_license
from ..backend.ipmitool import IpmitoolBackend
from ..errors import InvalidModeError, LicenseActivationError, AdminUserNotFoundError
from ..models import DEFAULT_USER, HostTarget
from .base import Resource
from .common import (
    DdnsMixin,
    HostnameMixin,
    NetworkModeMixin,
    NetworkSourceMixin,
    NtpMixin,
    PasswordMixin,
)

logger = logging.getLogger(__name__)


class SMCResource(Resource):
    """Resource backed by ipmitool"""

    backend: IpmitoolBackend

    @classmethod
    def from_target(cls, target: HostTarget, data=None) -> "SMCResource":
        return cls(IpmitoolBackend(target), data)

    @property
    def ipmi(self) -> IpmitoolBackend:
        return self.backend


class SMCHostname(HostnameMixin, SMCResource):
    name = "hostname"

    # for hostname, get is 0x02 and set is 0x01
    GET = [0x02]
    SET = [0x01]

    def hostname(self) -> str:
        return bytes_to_str(self.backend.raw(build_command("hostname", sub_command=self.GET)))

    def set_hostname(self) -> None:
        # no terminating NUL for this command
        data = build_command("hostname", sub_command=self.SET) + list(self.desired_hostname.encode("utf-8"))
        self.backend.raw(data)


class SMCNtp(NtpMixin, SMCResource):
    name = "ntp"

    SUB_COMMANDS = {
        "enabled": [0x00],
        "primary": [0x01],
        "secondary": [0x02],
    }
    TYPES = ["primary", "secondary"]

    _magic: Optional[List[int]] = None

    def enabled(self) -> bool:
        enabled, magic = self.backend.enabled("ntp", self.SUB_COMMANDS["enabled"])
        # the bytes after the flag MUST be sent back when enabling NTP,
        # otherwise the other NTP settings get clobbered
        self._magic = magic
        logger.debug(f"NTP enabled: {enabled}, magic bytes: {magic}")
        return enabled

    def enable(self) -> None:
        if self._magic is None:
            self.enabled()
        # 0x01 is "enable"
        self.backend.set("ntp", [0x01] + self._magic, sub_command=self.SUB_COMMANDS["enabled"])

    def get_server(self, idx: int) -> str:
        return bytes_to_str(self.backend.get("ntp", self.SUB_COMMANDS[self.TYPES[idx]]))

    def set_server(self, idx: int) -> None:
        # NUL terminated, unlike hostname
        name_bytes = list(self.servers[idx].encode("utf-8")) + [0x00]
        self.backend.set("ntp", name_bytes, sub_command=self.SUB_COMMANDS[self.TYPES[idx]])


class SMCDdns(DdnsMixin, SMCResource):
    name = "ddns"

    SUB_ENABLED = [0x00]
    # Required follow-up write after enabling. Found empirically; the
    # placeholder host/domain is what the web UI sends.
    ENABLE_PAYLOAD = [0x01, 0x01, 0x00, 0x7F, 0x00, 0x00, 0x01] + list(b"#host.#domain") + [0x00]

    def _command(self, action: str) -> List[int]:
        # this one takes the sub-command before the action
        return build_command("ddns", action, self.SUB_ENABLED, action_first=False)

    def enabled(self) -> bool:
        out = self.backend.raw(self._command("get"))
        enabled = bool(out) and out[0] == 1
        logger.debug(f"DDNS enabled: {enabled}")
        return enabled

    def enable(self) -> None:
        # puts the BMC into some sort of setting mode...
        self.backend.raw(self._command("set"))
        self.backend.raw(build_command("ddns") + self.ENABLE_PAYLOAD)


class SMCNetworkMode(NetworkModeMixin, SMCResource):
    name = "networkmode"

    MODES = {
        "dedicated": 0x00,
        "shared": 0x01,
        "failover": 0x02,
    }

    def mode_val(self) -> int:
        try:
            return self.MODES[self.desired_mode]
        except KeyError:
            raise InvalidModeError(f"No such mode {self.desired_mode}")

    def mode_correct(self) -> bool:
        out = self.backend.get("networkmode")
        current = out[0] if out else None
        logger.debug(f"mode: {current}")
        return current == self.mode_val()

    def set_mode(self) -> None:
        self.backend.set("networkmode", [self.mode_val()])


class SMCNetworkSource(NetworkSourceMixin, SMCResource):
    name = "networksrc"


class SMCPassword(PasswordMixin, SMCResource):
    name = "password"

    PASSWORD_SIZE = "20"

    def admin_id(self) -> str:
        """Find the user id of the ADMIN user. Usually 2, but not guaranteed."""
        if self._admin_id is not None:
            return self._admin_id

        result = self.backend.run(["user", "list"], force_fail=False)
        if result.failed:
            # BMC may still be on its factory password
            result = self.backend.run(["user", "list"], default_password=True)

        for line in result.stdout.splitlines():
            if line.startswith("ID"):
                continue
            bits = line.split()
            if len(bits) > 1 and bits[1] == DEFAULT_USER:
                self._admin_id = bits[0]
                return self._admin_id
        raise AdminUserNotFoundError(f"No {DEFAULT_USER} user in 'user list' output")


class SMCLicense(SMCResource):
    """Activate the out-of-band (SFT-OOB-LIC) license

    The license is derived from the BMC MAC address with the vendor's
    private key. Only activate licenses you are entitled to; the key is
    not shipped with this package.
    """

    name = "license"

    # standard "get LAN configuration parameters" for the MAC, not an OEM command
    GET_MAC = [0x0C, 0x02, 0x01, 0x05, 0x00, 0x00]

    @property
    def key(self):
        return self.data

    def _converged(self) -> bool:
        return self.licensed()

    def _converge(self) -> None:
        if not self.licensed():
            logger.info(" - Setting license")
            self.set_license()

    def licensed(self) -> bool:
        out = self.backend.raw(build_command("isactivated"))
        # a single byte, non-zero when activated
        activated = bool(out) and out[0] > 0
        logger.debug(f"Activated: {activated}")
        return activated

    def mac(self) -> str:
        tokens = self.backend.raw_output(self.GET_MAC).split()
        # first byte is the parameter revision
        mac = ":".join(tokens[1:]).lower()
        logger.debug(f"MAC is {mac}")
        return mac

    def generate_license(self) -> List[int]:
        lic = generate_license(self.mac(), self.key)
        logger.debug(f"Generated license: {format_license(lic)}")
        return lic

    def set_license(self) -> None:
        out = self.backend.raw(build_command("setlicense") + self.generate_license())
        if out and out[0] != 0:
            raise LicenseActivationError(f"Failed to set license key, BMC returned {out[0]:#04x}")
