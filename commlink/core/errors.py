"""Error taxonomy shared by the link models and the HTTP layer."""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Result codes exposed to callers that cannot use exceptions."""
    SUCCESS = "success"
    INVALID_PARAMETER = "invalid_parameter"
    NULL_POINTER = "null_pointer"
    CALCULATION_FAILED = "calculation_failed"
    NOT_INITIALIZED = "not_initialized"


class CommLinkError(Exception):
    """Base class for errors raised by the link models."""

    code: ErrorCode = ErrorCode.CALCULATION_FAILED

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class InvalidParameterError(CommLinkError, ValueError):
    """A constructor argument or formula input is outside its valid domain."""

    code = ErrorCode.INVALID_PARAMETER


class CalculationError(CommLinkError):
    """A calculation could not produce a meaningful value."""

    code = ErrorCode.CALCULATION_FAILED


def require_in_range(name: str, value: float, low: float, high: float) -> float:
    """Return ``value`` or raise :class:`InvalidParameterError` when outside [low, high]."""
    if not (low <= value <= high):
        raise InvalidParameterError(f"{name}={value} outside [{low}, {high}]")
    return value
