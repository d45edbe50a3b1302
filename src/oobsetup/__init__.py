"""
oobsetup - converge out-of-band management controllers

Drives vendor CLI tools (``racadm`` for Dell iDRAC, ``ipmitool`` for
Supermicro IPMI) to bring a controller's hostname, NTP, DDNS, network
and credential settings in line with a desired state.
"""

__version__ = "0.3.0"
