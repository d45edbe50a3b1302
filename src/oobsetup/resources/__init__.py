"""
Resources: one convergeable attribute of an OOB controller each

Every resource exposes ``converged()`` and ``converge()``. Vendor
implementations live in ``smc`` (Supermicro) and ``drac`` (Dell) and are
looked up through ``registry``.
"""

from .base import Resource
from .registry import REGISTRY, build_resource, resource_class, supported_resources

__all__ = [
    'Resource',
    'REGISTRY',
    'build_resource',
    'resource_class',
    'supported_resources'
]
