"""Error taxonomy shared by smurf command handlers."""

from __future__ import annotations


class SmurfError(RuntimeError):
    """Base class for failures surfaced to the CLI layer."""


class BinaryResolutionError(SmurfError):
    """Raised when an external tool cannot be resolved safely."""


class BinaryNotFound(BinaryResolutionError):
    """Raised when a binary is missing from the search path or cannot be stat'ed."""


class InsecureBinary(BinaryResolutionError):
    """Raised when a resolved binary is group- or other-writable."""


class ProcessError(SmurfError):
    """Raised when an external process fails to start, times out or exits non-zero."""

    def __init__(self, message: str, *, stderr: str = "", exit_code: int | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code


class EmptyState(SmurfError):
    """Raised when a state pull succeeds but produces no output."""


class BackendNotConfigured(SmurfError):
    """Raised by the backend precheck; callers treat it as advisory."""


class AuthEncodingError(SmurfError):
    """Raised when registry credentials cannot be encoded into an auth token."""


class PushError(SmurfError):
    """Raised when a registry push fails or reports an error event."""


class FormatError(SmurfError):
    """Raised when a state document cannot be parsed or indented."""


class WriteError(SmurfError):
    """Raised when a state document cannot be persisted."""
