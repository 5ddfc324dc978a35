"""Pluggable failure reporting.

Every fatal condition detected by the engine is routed through a single hook
so the surrounding test runner decides how a failure is presented. A handler
receives the failure message and the number of stack frames the caller may
skip to point at user code. When no handler is installed the typed
:class:`~call_mox.errors.CallMoxError` is raised directly.
"""

from __future__ import annotations

import threading
import typing as t

from .errors import VerificationError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .errors import CallMoxError

FailHandler = t.Callable[[str, int], None]

_lock = threading.Lock()
_global_handler: FailHandler | None = None


def set_fail_handler(handler: FailHandler | None) -> None:
    """Install *handler* as the process-wide failure hook."""
    global _global_handler
    with _lock:
        _global_handler = handler


def get_fail_handler() -> FailHandler | None:
    """Return the process-wide failure hook, if any."""
    return _global_handler


def reset_fail_handler() -> None:
    """Remove the process-wide failure hook."""
    set_fail_handler(None)


def raise_failure(message: str, caller_skip: int = 0) -> t.NoReturn:
    """Fail handler that raises :class:`VerificationError` with *message*."""
    del caller_skip
    raise VerificationError(message)


def report_failure(
    error: CallMoxError,
    *,
    handler: FailHandler | None = None,
    caller_skip: int = 2,
) -> None:
    """Route *error* through *handler* or the global hook.

    Raises *error* itself when no hook is installed. Returns normally only
    when a hook chose not to raise.
    """
    effective = handler if handler is not None else _global_handler
    if effective is None:
        raise error
    effective(str(error), caller_skip)


__all__ = [
    "FailHandler",
    "get_fail_handler",
    "raise_failure",
    "report_failure",
    "reset_fail_handler",
    "set_fail_handler",
]
