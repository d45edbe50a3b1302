"""
Capability mixins shared by the vendor resources

Each mixin holds the convergence logic for one attribute and calls a few
device hooks (``hostname()``, ``set_hostname()`` ...) that the vendor
classes in ``smc`` and ``drac`` provide.
"""

import ipaddress
import logging
import time
from typing import Dict, List, Optional

from ..errors import InvalidValueError, PasswordResetExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_NTP_SERVERS = ["0.pool.ntp.org", "1.pool.ntp.org"]
NTP_SLOTS = 2

# Seconds the BMC needs after a factory reset before it accepts commands
PASSWORD_RESET_DELAY = 5


class HostnameMixin:
    """Hostname matches the desired string"""

    @property
    def desired_hostname(self) -> str:
        return self.data

    def _converged(self) -> bool:
        hostname = self.hostname()
        logger.debug(f"'{hostname}' vs '{self.desired_hostname}'")
        return hostname == self.desired_hostname

    def _converge(self) -> None:
        if not self._converged():
            logger.info(f" - Setting hostname ({self.desired_hostname})")
            self.set_hostname()


class NtpMixin:
    """NTP is enabled and each server slot holds the desired server"""

    @property
    def servers(self) -> List[str]:
        if isinstance(self.data, str):
            servers = [self.data]
        else:
            servers = list(self.data) if self.data else list(DEFAULT_NTP_SERVERS)
        if len(servers) > NTP_SLOTS:
            raise InvalidValueError(f"At most {NTP_SLOTS} NTP servers are supported, got {len(servers)}")
        return servers

    def _servers_correct(self) -> bool:
        correct = True
        for idx, server in enumerate(self.servers):
            res = self.get_server(idx) == server
            logger.debug(f" - NTP{idx + 1} correct: {res}")
            correct = correct and res
        return correct

    def _converged(self) -> bool:
        servers_correct = self._servers_correct()
        return self.enabled() and servers_correct

    def _converge(self) -> None:
        logger.debug(" - Checking if enabled")
        if not self.enabled():
            logger.info(" - Enabling NTP")
            self.enable()
        for idx, server in enumerate(self.servers):
            logger.debug(f" - Checking if NTP{idx + 1} is correct")
            if self.get_server(idx) != server:
                logger.info(f" - Setting NTP{idx + 1} server")
                self.set_server(idx)


class DdnsMixin:
    """Dynamic DNS registration is enabled"""

    def _converged(self) -> bool:
        return self.enabled()

    def _converge(self) -> None:
        if not self.enabled():
            logger.info(" - Enabling DDNS")
            self.enable()


class NetworkModeMixin:
    """NIC selection (shared, dedicated, failover) matches"""

    @property
    def desired_mode(self) -> str:
        return str(self.data).lower()

    def _converged(self) -> bool:
        return self.mode_correct()

    def _converge(self) -> None:
        if not self.mode_correct():
            logger.info(f" - Setting network to {self.desired_mode}")
            self.set_mode()


class NetworkSourceMixin:
    """Address source (DHCP or static address) matches

    Both vendors use ``ipmitool lan`` on channel 1 through ``self.ipmi``.
    The current state is read once per instance and cached.
    """

    CHANNEL = "1"

    _current: Optional[Dict[str, str]] = None

    @property
    def desired_mode(self) -> str:
        if self.data == "dhcp":
            return "dhcp"
        self._interface()
        return "static"

    def _interface(self) -> ipaddress.IPv4Interface:
        if self.data == "dhcp":
            raise InvalidValueError("Set to DHCP, but looking for an address")
        try:
            return ipaddress.IPv4Interface(str(self.data))
        except ValueError:
            raise InvalidValueError(f"Network source must be 'dhcp' or an IPv4 address, got '{self.data}'")

    @property
    def desired_address(self) -> str:
        return str(self._interface().ip)

    @property
    def desired_netmask(self) -> str:
        return str(self._interface().netmask)

    @property
    def current(self) -> Dict[str, str]:
        if self._current is None:
            self._current = self.ipmi.lan_print(int(self.CHANNEL))
        return self._current

    @property
    def mode(self) -> str:
        source = self.current.get("IP Address Source", "")
        if "DHCP" in source:
            return "dhcp"
        if "Static" in source:
            return "static"
        return "other"

    @property
    def address(self) -> Optional[str]:
        return self.current.get("IP Address")

    @property
    def netmask(self) -> Optional[str]:
        return self.current.get("Subnet Mask")

    def mode_set(self) -> bool:
        logger.debug(f"  - Checking if network src mode set to {self.desired_mode}")
        return self.mode == self.desired_mode

    def address_set(self) -> bool:
        if self.desired_mode != "static":
            return True
        logger.debug("  - Checking if address is set")
        logger.debug(f"'{self.address}/{self.netmask}' vs '{self.desired_address}/{self.desired_netmask}'")
        # either one matching is enough
        return self.address == self.desired_address or self.netmask == self.desired_netmask

    def _converged(self) -> bool:
        return self.mode_set() and self.address_set()

    def _converge(self) -> None:
        if not self.mode_set():
            logger.info(f" - Setting network src to {self.desired_mode}")
            self._lan_set("ipsrc", self.desired_mode)
        if self.desired_mode == "static":
            logger.info(" - Checking address")
            if self.address != self.desired_address:
                logger.info(f" - Setting network address to {self.desired_address}")
                self._lan_set("ipaddr", self.desired_address)
            if self.netmask != self.desired_netmask:
                logger.info(f" - Setting network mask to {self.desired_netmask}")
                self._lan_set("netmask", self.desired_netmask)

    def _lan_set(self, setting: str, value: str) -> None:
        self.ipmi.run(["lan", "set", self.CHANNEL, setting, value])


class PasswordMixin:
    """The administrator account accepts the desired password

    ``ipmitool user test`` and ``user set password`` work on both vendors,
    so both go through ``self.ipmi``. Vendors supply ``admin_id()``.
    """

    # password size argument to 'user test' (16 or 20 byte IPMI passwords)
    PASSWORD_SIZE = "20"
    # OEM raw command restoring factory defaults, including the password
    RESET_COMMAND = [0x30, 0x48, 0x01]

    _admin_id: Optional[str] = None

    @property
    def password(self) -> str:
        return self.data

    def password_set(self) -> bool:
        result = self.ipmi.run(
            ["user", "test", self.admin_id(), self.PASSWORD_SIZE, self.password],
            force_fail=False,
            secrets=[self.password],
        )
        return not result.failed

    def _converged(self) -> bool:
        return self.password_set()

    def _converge(self) -> None:
        if not self.password_set():
            logger.info(" - Setting password")
            self.set_password()

    def set_password(self) -> None:
        """Set the admin password, resetting the BMC once if it refuses

        A password that is neither the desired one nor the factory default
        (e.g. a per-board serial password) blocks the write. A factory
        reset clears it; this also resets every other setting, which is
        fine because the password is converged before anything else.

        Raises:
            PasswordResetExhaustedError: If the write fails after the reset
        """
        cmd = ["user", "set", "password", self.admin_id(), self.password]
        result = self.ipmi.run(cmd, default_password=True, force_fail=False, secrets=[self.password])
        if not result.failed:
            return

        logger.warning(" - Setting password failed, resetting BMC to factory defaults")
        self.ipmi.raw(self.RESET_COMMAND, default_password=True)
        time.sleep(PASSWORD_RESET_DELAY)

        result = self.ipmi.run(cmd, default_password=True, force_fail=False, secrets=[self.password])
        if result.failed:
            raise PasswordResetExhaustedError(
                f"Failed to set password for user id {self.admin_id()} after factory reset: "
                f"{result.stderr.strip()}"
            )
