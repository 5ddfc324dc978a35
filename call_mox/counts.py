"""Invocation-count policies used by verification.

A count policy is a matcher over the number of qualifying calls. ``str()``
renders the expected-count expression used in failure messages.
"""

from __future__ import annotations

import dataclasses as dc
import typing as t


class CountPolicy(t.Protocol):
    """Callable returning ``True`` when a call count is acceptable."""

    def __call__(self, count: int) -> bool:
        """Return ``True`` if *count* satisfies the policy."""
        ...


def _check_non_negative(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer"
        raise TypeError(msg)
    if value < 0:
        msg = f"{name} must be >= 0"
        raise ValueError(msg)


@dc.dataclass(frozen=True, slots=True)
class Times:
    """Require exactly ``count`` calls."""

    count: int

    def __post_init__(self) -> None:
        """Reject negative counts."""
        _check_non_negative(self.count, "count")

    def __call__(self, count: int) -> bool:
        """Return ``True`` if *count* equals the expected count."""
        return count == self.count

    def __str__(self) -> str:
        """Return the expected-count expression."""
        return str(self.count)


@dc.dataclass(frozen=True, slots=True)
class AtLeast:
    """Require ``minimum`` or more calls."""

    minimum: int

    def __post_init__(self) -> None:
        """Reject negative bounds."""
        _check_non_negative(self.minimum, "minimum")

    def __call__(self, count: int) -> bool:
        """Return ``True`` if *count* reaches the minimum."""
        return count >= self.minimum

    def __str__(self) -> str:
        """Return the expected-count expression."""
        return f"at least {self.minimum}"


@dc.dataclass(frozen=True, slots=True)
class AtMost:
    """Allow at most ``maximum`` calls."""

    maximum: int

    def __post_init__(self) -> None:
        """Reject negative bounds."""
        _check_non_negative(self.maximum, "maximum")

    def __call__(self, count: int) -> bool:
        """Return ``True`` if *count* does not exceed the maximum."""
        return count <= self.maximum

    def __str__(self) -> str:
        """Return the expected-count expression."""
        return f"at most {self.maximum}"


def times(count: int) -> Times:
    """Return a policy requiring exactly *count* calls."""
    return Times(count)


def at_least(minimum: int) -> AtLeast:
    """Return a policy requiring *minimum* or more calls."""
    return AtLeast(minimum)


def at_most(maximum: int) -> AtMost:
    """Return a policy allowing up to *maximum* calls."""
    return AtMost(maximum)


def never() -> Times:
    """Return a policy requiring zero calls."""
    return Times(0)


def once() -> Times:
    """Return a policy requiring exactly one call."""
    return Times(1)


__all__ = [
    "AtLeast",
    "AtMost",
    "CountPolicy",
    "Times",
    "at_least",
    "at_most",
    "never",
    "once",
    "times",
]
