"""Verification checks and failure-message rendering for :class:`GenericMock`."""

from __future__ import annotations

import typing as t
from textwrap import indent

from .errors import InvocationCountError, InvocationOrderError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .counts import CountPolicy
    from .in_order import InOrderContext
    from .invocation import Invocation


def format_params(params: t.Sequence[object]) -> str:
    """Render raw values or matcher labels as a bracketed list."""
    return "[" + ", ".join(repr(param) for param in params) + "]"


def describe_call(method: str, params_repr: str) -> str:
    """Return ``"method" with params [...]`` for failure messages."""
    return f'"{method}" with params {params_repr}'


def _format_invocation(inv: Invocation) -> str:
    args = ", ".join(repr(param) for param in inv.params)
    return f"{inv.method}({args})"


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    return "\n".join(
        f"{index}. {entry}" for index, entry in enumerate(entries, start=start)
    )


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


class CountVerifier:
    """Check the number of qualifying calls against a count policy."""

    def __init__(self, policy: CountPolicy) -> None:
        self._policy = policy

    def verify(
        self,
        method: str,
        params_repr: str,
        matched: t.Sequence[Invocation],
        recorded: t.Sequence[Invocation],
        *,
        waited: float | None = None,
    ) -> None:
        """Raise :class:`InvocationCountError` when *matched* violates the policy."""
        actual = len(matched)
        if self._policy(actual):
            return
        suffix = "" if waited is None else f" after waiting {waited:g}s"
        title = (
            f"Mock invocation count for method {describe_call(method, params_repr)} "
            f"does not match expectation{suffix}.\n\n"
            f"\tExpected: {self._policy}; but got: {actual}"
        )
        msg = _format_sections(
            title,
            [
                (
                    f'Recorded calls of "{method}"',
                    _numbered([_format_invocation(inv) for inv in recorded]),
                )
            ],
        )
        raise InvocationCountError(msg)


class OrderVerifier:
    """Validate that a verification does not reach behind an in-order cursor."""

    def __init__(self, context: InOrderContext) -> None:
        self._context = context

    def verify(
        self, method: str, params_repr: str, matched: t.Sequence[Invocation]
    ) -> None:
        """Raise :class:`InvocationOrderError` on an out-of-order match."""
        if not matched:
            return
        earliest = min(matched, key=lambda inv: inv.seq)
        if not self._context.precedes_cursor(earliest):
            return
        msg = (
            f"Expected function call {describe_call(method, params_repr)} "
            f"before function call {self._context.description}"
        )
        raise InvocationOrderError(msg)

    def advance(
        self, method: str, params_repr: str, matched: t.Sequence[Invocation]
    ) -> None:
        """Move the shared cursor to the last invocation in *matched*."""
        if not matched:
            return
        latest = max(matched, key=lambda inv: inv.seq)
        self._context.advance(latest, describe_call(method, params_repr))


__all__ = ["CountVerifier", "OrderVerifier", "describe_call", "format_params"]
