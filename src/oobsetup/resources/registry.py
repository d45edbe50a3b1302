"""
Resource registry

Maps (vendor, resource name) to the class implementing it for that
vendor.
"""

import logging
from typing import Any, Dict, List, Tuple, Type

from ..errors import UnknownResourceError
from ..models import HostTarget, VendorType
from . import drac, smc
from .base import Resource

logger = logging.getLogger(__name__)

REGISTRY: Dict[Tuple[VendorType, str], Type[Resource]] = {
    (VendorType.SMC, "password"): smc.SMCPassword,
    (VendorType.SMC, "hostname"): smc.SMCHostname,
    (VendorType.SMC, "ntp"): smc.SMCNtp,
    (VendorType.SMC, "networkmode"): smc.SMCNetworkMode,
    (VendorType.SMC, "networksrc"): smc.SMCNetworkSource,
    (VendorType.SMC, "ddns"): smc.SMCDdns,
    (VendorType.SMC, "license"): smc.SMCLicense,
    (VendorType.DRAC, "password"): drac.DRACPassword,
    (VendorType.DRAC, "hostname"): drac.DRACHostname,
    (VendorType.DRAC, "ntp"): drac.DRACNtp,
    (VendorType.DRAC, "networkmode"): drac.DRACNetworkMode,
    (VendorType.DRAC, "networksrc"): drac.DRACNetworkSource,
    (VendorType.DRAC, "ddns"): drac.DRACDdns,
}


def resource_class(vendor: VendorType, name: str) -> Type[Resource]:
    """Look up the resource class for a vendor

    Raises:
        UnknownResourceError: If the vendor has no such resource
    """
    try:
        return REGISTRY[(vendor, name)]
    except KeyError:
        raise UnknownResourceError(f"No resource '{name}' for vendor {vendor.value}")


def build_resource(target: HostTarget, name: str, data: Any = None) -> Resource:
    """Create a resource for the target's vendor"""
    cls = resource_class(target.vendor, name)
    logger.debug(f"Creating {cls.__name__} for {target.address}")
    return cls.from_target(target, data)


def supported_resources(vendor: VendorType) -> List[str]:
    return [name for (v, name) in REGISTRY if v == vendor]
