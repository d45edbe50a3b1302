"""
Convergence Manager Module

This module holds the orchestration logic: decide which resources to
evaluate for a host, run them in a fixed order and either report whether
everything is converged or apply the changes.
"""

import logging
import socket
from collections import OrderedDict
from typing import Any, Callable, List, Optional

from ..errors import UnsupportedFeatureError
from ..models import HostTarget, VendorType
from ..resources import Resource, build_resource
from ..resources.common import DEFAULT_NTP_SERVERS

logger = logging.getLogger(__name__)

# The password MUST come first: everything after it logs in with it
RESOURCE_ORDER = [
    "password",
    "hostname",
    "ntp",
    "networkmode",
    "networksrc",
    "ddns",
    "license",
]

# Resources some firmware does not implement at all
OPTIONALLY_SUPPORTED = ("ntp", "ddns")

ResourceFactory = Callable[[HostTarget, str, Any], Resource]


def default_hostname(target: HostTarget) -> str:
    """``<short hostname>-oob`` locally, otherwise the target address"""
    if target.is_local:
        return f"{socket.gethostname().split('.')[0]}-oob"
    return target.address


class OOBManager:
    """Converges all resources of one controller"""

    def __init__(self, target: HostTarget, desired_hostname: Optional[str] = None,
                 network_mode: Optional[str] = None, network_src: Optional[str] = None,
                 key: Optional[bytes] = None, ntp_servers: Optional[List[str]] = None,
                 resource_factory: ResourceFactory = build_resource):
        """Initialize manager

        Args:
            target: Controller to configure; target.password is also the
                desired administrator password
            desired_hostname: Controller hostname, defaults to
                default_hostname(target)
            network_mode: shared, dedicated or failover
            network_src: "dhcp" or an IPv4 address in CIDR notation
            key: Private key for Supermicro license activation
            ntp_servers: Up to two NTP servers
            resource_factory: Builds a resource from (target, name, data)
        """
        self.target = target
        self.desired_hostname = desired_hostname or default_hostname(target)
        logger.debug(f"Desired hostname set to {self.desired_hostname}")
        self.network_mode = network_mode
        self.network_src = network_src
        self.key = key
        self.ntp_servers = ntp_servers or list(DEFAULT_NTP_SERVERS)
        self.resource_factory = resource_factory

    def plan(self) -> "OrderedDict[str, Any]":
        """Build the ordered resource name -> desired value mapping

        Required inputs that are missing drop their resource with a warning.
        """
        todo = OrderedDict([
            ("password", self.target.password),
            ("hostname", self.desired_hostname),
            ("ntp", self.ntp_servers),
            ("networkmode", self.network_mode),
            ("networksrc", self.network_src),
            ("ddns", None),
        ])

        if self.target.vendor == VendorType.SMC:
            if self.key:
                todo["license"] = self.key
            else:
                logger.warning("Will not check/activate license, no private key available")

        if not self.target.password:
            logger.warning("Will not check/set admin password, no password specified")
            del todo["password"]

        if not self.network_src:
            logger.warning("Will not set network_src, not specified")
            del todo["networksrc"]

        if not self.network_mode:
            logger.warning("Will not set network_mode, not specified")
            del todo["networkmode"]

        return OrderedDict(sorted(todo.items(), key=lambda item: RESOURCE_ORDER.index(item[0])))

    def check(self) -> bool:
        """Check every resource

        Returns:
            True if all resources that were evaluated are converged
        """
        return self._run(converge=False)

    def apply(self) -> None:
        """Converge every resource in order

        Raises:
            OOBError: The first error from a resource. Resources before it
                stay changed.
        """
        self._run(converge=True)

    def _run(self, converge: bool) -> bool:
        ret = True
        for name, data in self.plan().items():
            resource = self.resource_factory(self.target, name, data)
            try:
                if converge:
                    resource.converge()
                else:
                    ret = resource.converged() and ret
            except UnsupportedFeatureError as e:
                if name in OPTIONALLY_SUPPORTED:
                    logger.warning(f"Host does not seem to support {name}, skipping: {e}")
                    continue
                raise
        return ret
