"""Exception hierarchy for futureself."""
from __future__ import annotations

from typing import Optional


class FutureSelfError(Exception):
    """Base class for all futureself errors."""


class InvalidSubmissionError(FutureSelfError, ValueError):
    """Raised when a submission lacks a usable image or profession."""


class TaskInProgressError(FutureSelfError):
    """Raised when a task is started while another one is still active."""


class UnsupportedImageError(FutureSelfError):
    """Raised when a result image has a MIME type the canvas cannot take."""


class HostError(FutureSelfError):
    """
    Failure reported by the design host.

    The host reports failures as a code string; ``from_code`` turns it into
    one of the variants below so callers can branch on the type instead.
    """

    code = "unknown"

    def __init__(self, message: str = "", detail: Optional[str] = None):
        super().__init__(message or self.code)
        self.detail = detail

    @classmethod
    def from_code(cls, code: Optional[str], message: str = "") -> "HostError":
        variant = _VARIANTS_BY_CODE.get(code or "")
        if variant is None:
            return UnknownHostError(message, detail=code or message or None)
        return variant(message)


class PermissionDenied(HostError):
    code = "permission_denied"


class Offline(HostError):
    code = "user_offline"


class Timeout(HostError):
    code = "timeout"


class UnknownHostError(HostError):
    code = "unknown"


_VARIANTS_BY_CODE = {
    variant.code: variant for variant in (PermissionDenied, Offline, Timeout)
}


def describe_host_error(error: HostError) -> str:
    """Diagnostic text for a host error; used for logging only."""
    if isinstance(error, PermissionDenied):
        return "Permission denied: the host rejected the request."
    if isinstance(error, Offline):
        return "The user is offline."
    if isinstance(error, Timeout):
        return "The host request timed out."
    return f"Unknown host error: {error.detail or error}"
