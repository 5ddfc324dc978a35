"""Argument capture from verified invocations."""

from __future__ import annotations

import typing as t

from .errors import CaptureError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .engine import GenericMock
    from .invocation import Invocation


class OngoingVerification:
    """Result of a verification, giving access to the matched arguments.

    Parameters
    ----------
    engine:
        The engine that produced ``invocations``.
    invocations:
        The qualifying invocations, in call order.
    method:
        Name of the verified method, used in error messages.
    arity:
        Number of parameter positions of the method. Methods with a single
        position return bare values instead of one-element tuples.
    """

    def __init__(
        self,
        engine: GenericMock,
        invocations: t.Sequence[Invocation],
        method: str,
        arity: int,
    ) -> None:
        self._engine = engine
        self._invocations = tuple(sorted(invocations, key=lambda inv: inv.seq))
        self._method = method
        self._arity = arity

    @property
    def invocations(self) -> tuple[Invocation, ...]:
        """Return the qualifying invocations in call order."""
        return self._invocations

    def get_captured_arguments(self) -> t.Any:
        """Return the arguments of the last qualifying invocation."""
        positions = self._positions()
        last = tuple(values[-1] for values in positions)
        return last[0] if self._arity == 1 else last

    def get_all_captured_arguments(self) -> t.Any:
        """Return, per parameter position, the arguments of every invocation."""
        positions = self._positions()
        return positions[0] if self._arity == 1 else tuple(positions)

    def _positions(self) -> list[list[object]]:
        if not self._invocations:
            msg = f"No invocations of {self._method!r} to capture arguments from"
            raise CaptureError(msg)
        return self._engine.get_invocation_params(self._invocations)

    def __len__(self) -> int:
        return len(self._invocations)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"OngoingVerification({self._method!r}, "
            f"invocations={len(self._invocations)})"
        )


__all__ = ["OngoingVerification"]
