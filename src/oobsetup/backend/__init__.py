"""
Backends for talking to OOB controllers

- IpmitoolBackend: raw Supermicro OEM commands over ipmitool
- RacadmBackend: Dell iDRAC attributes over racadm
"""

from .ipmitool import IpmitoolBackend
from .racadm import RacadmBackend
from .shell import ShellResult, run

__all__ = [
    'IpmitoolBackend',
    'RacadmBackend',
    'ShellResult',
    'run'
]
