"""Shared validation helpers."""

from __future__ import annotations

import math


def validate_positive_finite_timeout(timeout: float, *, name: str = "timeout") -> None:
    """Ensure *timeout* represents a usable duration in seconds."""
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        msg = f"{name} must be a real number"
        raise TypeError(msg)

    if not (timeout > 0 and math.isfinite(timeout)):
        msg = f"{name} must be > 0 and finite"
        raise ValueError(msg)
