"""
Command Runner

Thin wrapper around subprocess for invoking the vendor tools. Retry
policy is left to the callers.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..errors import ShellExecutionError

logger = logging.getLogger(__name__)

# Flags whose following argument must never reach the logs
SECRET_FLAGS = {"-P"}


@dataclass
class ShellResult:
    """Captured output of a finished command"""
    stdout: str
    stderr: str
    exit_status: int

    @property
    def failed(self) -> bool:
        return self.exit_status != 0


def mask_secrets(argv: Sequence[str], secrets: Iterable[str] = ()) -> str:
    """Render an argument vector for logging with passwords replaced.

    The argument after any of SECRET_FLAGS is hidden, as is every argument
    equal to one of ``secrets``.

    Examples:
        >>> mask_secrets(["ipmitool", "-H", "bmc1", "-P", "hunter2", "mc", "info"])
        'ipmitool -H bmc1 -P *** mc info'
    """
    hidden = {str(s) for s in secrets if s}
    rendered = []
    hide_next = False
    for arg in argv:
        rendered.append("***" if hide_next or arg in hidden else str(arg))
        hide_next = arg in SECRET_FLAGS
    return " ".join(rendered)


def run(argv: Sequence[str], force_fail: bool = True, secrets: Iterable[str] = ()) -> ShellResult:
    """Run a command and capture its output

    Args:
        argv: Command and arguments
        force_fail: Raise if the command exits non-zero
        secrets: Values to mask wherever they appear in the logged command

    Returns:
        ShellResult with stdout, stderr and exit status

    Raises:
        ShellExecutionError: If the command exits non-zero and force_fail
            is set, or the executable cannot be found
    """
    argv = [str(a) for a in argv]
    logger.debug(f"Running: {mask_secrets(argv, secrets)}")
    try:
        proc = subprocess.run(argv, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise ShellExecutionError(argv, 127, "", str(e)) from e

    result = ShellResult(stdout=proc.stdout or "", stderr=proc.stderr or "", exit_status=proc.returncode)
    if result.failed:
        logger.debug(f"Command exited {result.exit_status}: {result.stderr.strip()}")
        if force_fail:
            raise ShellExecutionError(argv, result.exit_status, result.stdout, result.stderr)
    return result
