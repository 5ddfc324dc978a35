"""Recorded calls and the per-mock invocation log."""

from __future__ import annotations

import dataclasses as dc
import itertools
import threading
import typing as t

_seq_lock = threading.Lock()
_seq_counter = itertools.count(1)


def next_sequence_number() -> int:
    """Return the next process-wide invocation sequence number."""
    with _seq_lock:
        return next(_seq_counter)


@dc.dataclass(frozen=True, slots=True)
class Invocation:
    """One recorded call on a mock.

    ``seq`` is unique across every mock in the process and increases with
    call order, which makes ordering across mocks well defined.
    """

    method: str
    params: tuple[object, ...]
    seq: int = dc.field(default_factory=next_sequence_number)

    def __repr__(self) -> str:
        """Return a compact debug representation."""
        args = ", ".join(repr(param) for param in self.params)
        return f"Invocation(#{self.seq} {self.method}({args}))"


class InvocationLog:
    """Append-only sequence of invocations in occurrence order.

    The log itself is not synchronised; :class:`~call_mox.engine.GenericMock`
    serialises access with its own lock.
    """

    def __init__(self) -> None:
        self._entries: list[Invocation] = []

    def append(self, invocation: Invocation) -> None:
        """Record *invocation* at the end of the log."""
        self._entries.append(invocation)

    def retract(self, invocation: Invocation) -> bool:
        """Remove the arrange-phase *invocation* consumed by ``when()``.

        Returns ``False`` when the invocation is no longer present.
        """
        for index in range(len(self._entries) - 1, -1, -1):
            if self._entries[index] is invocation:
                del self._entries[index]
                return True
        return False

    def for_method(self, method: str) -> list[Invocation]:
        """Return a snapshot of the invocations of *method*."""
        return [inv for inv in self._entries if inv.method == method]

    def snapshot(self) -> list[Invocation]:
        """Return a copy of every recorded invocation."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> t.Iterator[Invocation]:
        return iter(self.snapshot())


__all__ = ["Invocation", "InvocationLog", "next_sequence_number"]
