"""
Control package for oobsetup

Orchestrates resource convergence for one controller.
"""

from .manager import OOBManager, OPTIONALLY_SUPPORTED, RESOURCE_ORDER

__all__ = [
    'OOBManager',
    'OPTIONALLY_SUPPORTED',
    'RESOURCE_ORDER'
]
