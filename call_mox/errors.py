"""Exception hierarchy for :mod:`call_mox`."""

from __future__ import annotations


class CallMoxError(Exception):
    """Base class for all call-mox errors."""


class UsageError(CallMoxError):
    """Raised when the mocking API is used incorrectly."""


class InvalidMatcherUsageError(UsageError):
    """Raised when matchers and raw values are mixed in one call."""


class InvalidStubbingError(UsageError):
    """Raised when ``when()`` or an answer is given an unusable argument."""


class UnusedMatchersError(UsageError):
    """Raised when registered matchers were never consumed."""


class CaptureError(UsageError):
    """Raised when arguments are captured from an empty verification."""


class InvalidTimeoutError(UsageError, ValueError):
    """Raised when an eventual verification is given an unusable timeout."""


class ReturnTypeError(CallMoxError, TypeError):
    """Raised when a stubbed value does not fit the declared return type."""


class VerificationError(CallMoxError, AssertionError):
    """Raised when recorded calls do not satisfy a verification."""


class InvocationCountError(VerificationError):
    """Raised when the number of matching calls violates the count policy."""


class InvocationOrderError(VerificationError):
    """Raised when in-order verification detects an out-of-order call."""


__all__ = [
    "CallMoxError",
    "CaptureError",
    "InvalidMatcherUsageError",
    "InvalidStubbingError",
    "InvalidTimeoutError",
    "InvocationCountError",
    "InvocationOrderError",
    "ReturnTypeError",
    "UnusedMatchersError",
    "UsageError",
    "VerificationError",
]
