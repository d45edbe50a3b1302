"""
Error types raised while querying or converging an OOB controller.
"""

from typing import List, Optional


class OOBError(Exception):
    """Base exception for all oobsetup errors"""
    pass


class ShellExecutionError(OOBError):
    """Raised when an external tool exits non-zero"""

    def __init__(self, argv: List[str], exit_status: int, stdout: str = "", stderr: str = ""):
        self.argv = argv
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command '{argv[0] if argv else ''}' exited with status {exit_status}\n"
            f"STDOUT: {stdout.strip()}\n"
            f"STDERR: {stderr.strip()}"
        )


class UnsupportedFeatureError(OOBError):
    """Raised when controller firmware rejects a command it does not implement"""

    def __init__(self, message: str, completion_code: Optional[int] = None):
        self.completion_code = completion_code
        super().__init__(message)


class UnsupportedTargetError(OOBError):
    """Raised when a backend cannot reach the requested target"""
    pass


class InvalidValueError(OOBError, ValueError):
    """Raised when a desired value cannot be mapped onto the device"""
    pass


class InvalidModeError(InvalidValueError):
    """Raised for an unknown network mode"""
    pass


class PasswordResetExhaustedError(OOBError):
    """Raised when setting the password fails even after a factory reset"""
    pass


class LicenseActivationError(OOBError):
    """Raised when the controller rejects a generated license"""
    pass


class AdminUserNotFoundError(OOBError):
    """Raised when the administrator account cannot be located"""
    pass


class UnknownResourceError(OOBError, KeyError):
    """Raised when no resource is registered for a vendor/name pair"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ConfigError(OOBError):
    """Raised when the configuration file cannot be used"""
    pass
