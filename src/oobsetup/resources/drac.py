"""
Dell iDRAC resources

Attributes are read and written with racadm. Network source and password
go through the local ipmitool instead, since racadm has no equivalent of
``ipmitool user test``.
"""

import logging
from typing import Dict, Optional

from ..backend.ipmitool import IpmitoolBackend
from ..backend.racadm import RacadmBackend
from ..errors import AdminUserNotFoundError, InvalidModeError
from ..models import HostTarget
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

ENABLED = "Enabled"


class DRACResource(Resource):
    """Resource backed by racadm"""

    backend: RacadmBackend

    def __init__(self, backend: RacadmBackend, data=None, ipmi: Optional[IpmitoolBackend] = None):
        super().__init__(backend, data)
        self.ipmi = ipmi or IpmitoolBackend.localhost()

    @classmethod
    def from_target(cls, target: HostTarget, data=None) -> "DRACResource":
        return cls(RacadmBackend(target), data)


class DRACHostname(HostnameMixin, DRACResource):
    name = "hostname"

    KEY = "iDRAC.NIC.DNSRacName"

    def hostname(self) -> str:
        return self.backend.get(self.KEY)

    def set_hostname(self) -> None:
        self.backend.set(self.KEY, self.desired_hostname)


class DRACNtp(NtpMixin, DRACResource):
    name = "ntp"

    GROUP = "idrac.NTPConfigGroup"

    _vals: Optional[Dict[str, str]] = None

    @property
    def vals(self) -> Dict[str, str]:
        if self._vals is None:
            self._vals = self.backend.get_multi(self.GROUP)
        return self._vals

    def enabled(self) -> bool:
        return self.vals.get("NTPEnable") == ENABLED

    def enable(self) -> None:
        self.backend.set(f"{self.GROUP}.NTPEnable", ENABLED)

    def get_server(self, idx: int) -> Optional[str]:
        return self.vals.get(f"NTP{idx + 1}")

    def set_server(self, idx: int) -> None:
        self.backend.set(f"{self.GROUP}.NTP{idx + 1}", self.servers[idx])


class DRACDdns(DdnsMixin, DRACResource):
    name = "ddns"

    KEY = "iDRAC.NIC.DNSRegister"

    def enabled(self) -> bool:
        return self.backend.get(self.KEY) == ENABLED

    def enable(self) -> None:
        self.backend.set(self.KEY, ENABLED)


class DRACNetworkMode(NetworkModeMixin, DRACResource):
    name = "networkmode"

    KEY = "iDRAC.NIC.Selection"
    MODES = ("shared", "dedicated", "failover")

    def device_mode(self) -> str:
        """The NIC selection token iDRAC uses for the desired mode"""
        if self.desired_mode not in self.MODES:
            raise InvalidModeError(f"Unknown NIC mode: {self.desired_mode}")
        if self.desired_mode == "shared":
            return "LOM1"
        return self.desired_mode.capitalize()

    def mode_correct(self) -> bool:
        logger.debug("  - Checking NIC mode")
        return self.backend.get(self.KEY).lower() == self.device_mode().lower()

    def set_mode(self) -> None:
        self.backend.set(self.KEY, self.device_mode())


class DRACNetworkSource(NetworkSourceMixin, DRACResource):
    name = "networksrc"


class DRACPassword(PasswordMixin, DRACResource):
    name = "password"

    PASSWORD_SIZE = "16"
    USERS = "iDRAC.Users"
    ADMIN_USER = "root"

    def admin_id(self) -> str:
        """Find the index of the root account among iDRAC.Users.N"""
        if self._admin_id is not None:
            return self._admin_id

        for key in self.backend.list_keys(self.USERS):
            info = self.backend.get_multi(key)
            if info.get("UserName") == self.ADMIN_USER:
                self._admin_id = key.split(".")[2]
                return self._admin_id
        raise AdminUserNotFoundError(f"No {self.ADMIN_USER} user found in {self.USERS}")
