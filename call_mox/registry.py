"""The matcher side channel used while arranging stubbings and verifications.

Argument positions cannot say "this is a pattern, not a value" without
changing their type. Matcher constructors such as
:func:`call_mox.matchers.any_int` therefore return a placeholder value and
register the real matcher here; the very next ``when()`` or verification call
drains the registry.

The buffer is confined to the current thread. It is meant for the
single-threaded arrange phase of a test: calls made by the system under test
on other threads never see matchers registered by the test thread.
"""

from __future__ import annotations

import contextlib
import dataclasses as dc
import threading
import typing as t

from .errors import InvalidMatcherUsageError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .descriptors import TypeDescriptor
    from .engine import GenericMock
    from .invocation import Invocation

_MIXED_MATCHERS_HINT = (
    "This error may occur if matchers are combined with raw values:\n"
    "    #incorrect:\n"
    '    some_func(any_int(), "raw string")\n'
    "When using matchers, all arguments have to be provided by matchers.\n"
    "For example:\n"
    "    #correct:\n"
    '    some_func(any_int(), eq("string by matcher"))'
)


@dc.dataclass(frozen=True, slots=True)
class RecordedCall:
    """The most recent mock call made on this thread.

    ``when()`` consumes it to learn which method is being stubbed.
    """

    mock: GenericMock
    invocation: Invocation
    return_types: tuple[TypeDescriptor, ...]
    values: tuple[object, ...]


class _ThreadState(threading.local):
    def __init__(self) -> None:
        self.matchers: list[Matcher] = []
        self.last_call: RecordedCall | None = None
        self.trigger_depth = 0


class MatcherRegistry:
    """Thread-confined buffer of pending matchers."""

    def __init__(self) -> None:
        self._state = _ThreadState()

    def register(self, matcher: Matcher) -> None:
        """Append *matcher* for the next drain on this thread."""
        self._state.matchers.append(matcher)

    def pending(self) -> tuple[Matcher, ...]:
        """Return the matchers registered but not yet drained."""
        return tuple(self._state.matchers)

    def drain(self) -> list[Matcher]:
        """Return and clear the pending matchers."""
        matchers = self._state.matchers
        self._state.matchers = []
        return matchers

    def drain_and_validate(self, arity: int) -> list[Matcher]:
        """Drain the buffer and require zero or exactly *arity* matchers.

        Raises
        ------
        InvalidMatcherUsageError
            When some, but not all, argument positions used matchers.
        """
        matchers = self.drain()
        if matchers and len(matchers) != arity:
            msg = (
                "Invalid use of matchers!\n\n"
                f" {arity} matchers expected, {len(matchers)} recorded.\n\n"
                f"{_MIXED_MATCHERS_HINT}"
            )
            raise InvalidMatcherUsageError(msg)
        return matchers

    def arranging(self) -> bool:
        """Return ``True`` while the current call only describes a stubbing.

        That is the case when matchers are pending or a ``when()`` trigger
        is running on this thread.
        """
        return bool(self._state.matchers) or self._state.trigger_depth > 0

    @contextlib.contextmanager
    def arrange(self) -> t.Iterator[None]:
        """Mark calls made inside the block as arrange-phase calls."""
        self._state.trigger_depth += 1
        try:
            yield
        finally:
            self._state.trigger_depth -= 1

    def record_call(self, call: RecordedCall) -> None:
        """Remember *call* as the latest mock call on this thread."""
        self._state.last_call = call

    def last_call(self) -> RecordedCall | None:
        """Return the latest mock call without consuming it."""
        return self._state.last_call

    def take_last_call(self) -> RecordedCall | None:
        """Return and forget the latest mock call."""
        call = self._state.last_call
        self._state.last_call = None
        return call

    def reset(self) -> list[Matcher]:
        """Clear all state for this thread, returning discarded matchers."""
        self._state.last_call = None
        return self.drain()


_default_registry = MatcherRegistry()


def get_registry() -> MatcherRegistry:
    """Return the registry shared by matcher constructors and mocks."""
    return _default_registry


def register_matcher(matcher: Matcher) -> None:
    """Register *matcher* with the shared registry."""
    _default_registry.register(matcher)


__all__ = [
    "MatcherRegistry",
    "RecordedCall",
    "get_registry",
    "register_matcher",
]
