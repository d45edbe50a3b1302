"""
Shared data types describing the controller being configured.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ConfigError

DEFAULT_USER = "ADMIN"
DEFAULT_PASSWORD = "ADMIN"


class VendorType(Enum):
    """Supported controller vendors"""
    SMC = "smc"    # Supermicro IPMI, driven with ipmitool raw commands
    DRAC = "drac"  # Dell iDRAC, driven with racadm

    @classmethod
    def parse(cls, value: str) -> "VendorType":
        """Look up a vendor by its config name (case-insensitive)"""
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(v.value for v in cls)
            raise ConfigError(f"Unknown controller type '{value}'. Allowed values: {allowed}")


@dataclass
class HostTarget:
    """Where commands are executed and with which credentials.

    Attributes:
        address: Controller address, or "localhost" to use the local
            interface without credential flags
        vendor: Controller vendor
        username: Login user for remote targets
        password: Login password for remote targets; also the desired
            administrator password
    """
    address: str = "localhost"
    vendor: VendorType = VendorType.SMC
    username: str = DEFAULT_USER
    password: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return self.address == "localhost"
