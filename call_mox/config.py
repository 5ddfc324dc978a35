"""Runtime settings for eventual verification.

Values come from environment variables and can be overridden at runtime, which
is how the pytest plug-in applies its ini and command-line options.
"""

from __future__ import annotations

import dataclasses as dc
import os
import threading
import typing as t

from ._validators import validate_positive_finite_timeout

POLL_INTERVAL_ENV: t.Final[str] = "CALL_MOX_POLL_INTERVAL"
DEFAULT_TIMEOUT_ENV: t.Final[str] = "CALL_MOX_DEFAULT_TIMEOUT"

DEFAULT_POLL_INTERVAL: t.Final[float] = 0.01
DEFAULT_TIMEOUT: t.Final[float] = 1.0


@dc.dataclass(frozen=True, slots=True)
class Settings:
    """
    Tunables for the eventual-verification poll loop.

    Attributes
    ----------
    poll_interval : float
        Seconds slept between re-checks while waiting for a verification.
    default_timeout : float
        Deadline in seconds used when eventual verification omits a timeout.

    Raises
    ------
    ValueError
        If either value is not positive and finite.
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    default_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """Validate configured durations."""
        validate_positive_finite_timeout(self.poll_interval, name="poll_interval")
        validate_positive_finite_timeout(
            self.default_timeout, name="default_timeout"
        )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValueError(msg) from exc


def load_settings() -> Settings:
    """Build :class:`Settings` from the environment."""
    return Settings(
        poll_interval=_env_float(POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL),
        default_timeout=_env_float(DEFAULT_TIMEOUT_ENV, DEFAULT_TIMEOUT),
    )


_lock = threading.Lock()
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the active settings, loading them on first use."""
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def configure(
    *, poll_interval: float | None = None, default_timeout: float | None = None
) -> Settings:
    """Override selected settings and return the result."""
    global _settings
    current = get_settings()
    changes: dict[str, float] = {}
    if poll_interval is not None:
        changes["poll_interval"] = poll_interval
    if default_timeout is not None:
        changes["default_timeout"] = default_timeout
    updated = dc.replace(current, **changes)
    with _lock:
        _settings = updated
    return updated


def reset_settings() -> None:
    """Forget overrides so the next access reloads from the environment."""
    global _settings
    with _lock:
        _settings = None


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_TIMEOUT_ENV",
    "POLL_INTERVAL_ENV",
    "Settings",
    "configure",
    "get_settings",
    "load_settings",
    "reset_settings",
]
