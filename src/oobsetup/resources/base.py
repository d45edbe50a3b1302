"""
Resource base class

A resource is one configurable attribute of a controller. It answers
"is the live state what we want?" and, if not, applies the change.
"""

import logging
from typing import Any

from ..models import HostTarget

logger = logging.getLogger(__name__)


class Resource:
    """Base class for a convergeable controller attribute.

    Subclasses implement ``_converged`` (a pure read) and ``_converge``
    (a no-op when already converged, otherwise the mutations needed).
    ``_converge`` does not verify its own work; callers do that with a
    later ``converged`` call on a fresh instance.
    """

    name = "resource"

    def __init__(self, backend: Any, data: Any = None):
        """Initialize resource

        Args:
            backend: Backend used to read and write the device
            data: Desired value, shape depends on the resource
        """
        self.backend = backend
        self.data = data

    @classmethod
    def from_target(cls, target: HostTarget, data: Any = None) -> "Resource":
        """Build the resource with the backend(s) it needs for a target"""
        raise NotImplementedError

    def converged(self) -> bool:
        """Check whether the device already matches the desired value"""
        converged = self._converged()
        logger.info(f"{self}: converged: {converged}")
        return converged

    def converge(self) -> None:
        """Apply whatever changes are needed"""
        logger.info(f"Validating {self}")
        self._converge()

    def _converged(self) -> bool:
        raise NotImplementedError

    def _converge(self) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return type(self).__qualname__
