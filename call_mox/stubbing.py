"""Programmed answers and the per-mock stubbing table."""

from __future__ import annotations

import dataclasses as dc
import logging
import threading
import typing as t

from .descriptors import coerce_return
from .errors import InvalidStubbingError, ReturnTypeError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .descriptors import TypeDescriptor
    from .errors import CallMoxError

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ReturnAnswer:
    """Return literal ``values``, already checked against the return types."""

    values: tuple[object, ...]


@dc.dataclass(frozen=True, slots=True)
class RaiseAnswer:
    """Raise ``exception`` to the caller of the mocked method."""

    exception: BaseException | type[BaseException]


@dc.dataclass(frozen=True, slots=True)
class CallbackAnswer:
    """Call ``func`` with the concrete arguments and return its result."""

    func: t.Callable[..., object]


Answer = ReturnAnswer | RaiseAnswer | CallbackAnswer


class Stubbing:
    """A ``(method, matchers)`` key bound to a queue of answers.

    The answer queue saturates: once every answer has been used the last one
    is returned for every further call.
    """

    def __init__(self, method: str, matchers: t.Sequence[Matcher]) -> None:
        self.method = method
        self.matchers: tuple[Matcher, ...] = tuple(matchers)
        self._answers: list[Answer] = []
        self._next = 0
        self._lock = threading.Lock()

    @property
    def answers(self) -> tuple[Answer, ...]:
        """Return the queued answers in order."""
        return tuple(self._answers)

    def has_key(self, method: str, matchers: t.Sequence[Matcher]) -> bool:
        """Return ``True`` when this stubbing has the given key."""
        return self.method == method and self.matchers == tuple(matchers)

    def matches(self, method: str, params: t.Sequence[object]) -> bool:
        """Return ``True`` when every matcher accepts its argument."""
        if method != self.method or len(params) != len(self.matchers):
            return False
        return all(
            matcher(param)
            for matcher, param in zip(self.matchers, params, strict=True)
        )

    def add_answer(self, answer: Answer) -> None:
        """Append *answer* to the queue."""
        with self._lock:
            self._answers.append(answer)

    def next_answer(self) -> Answer | None:
        """Return the next answer, repeating the last one indefinitely."""
        with self._lock:
            if not self._answers:
                return None
            index = min(self._next, len(self._answers) - 1)
            self._next += 1
            return self._answers[index]

    def __repr__(self) -> str:
        """Return a debug representation."""
        matchers = ", ".join(repr(matcher) for matcher in self.matchers)
        return f"Stubbing({self.method}({matchers}), answers={len(self._answers)})"


class StubbingTable:
    """Stubbings of one mock, most recently added last."""

    def __init__(self) -> None:
        self._entries: list[Stubbing] = []

    def replace(self, method: str, matchers: t.Sequence[Matcher]) -> Stubbing:
        """Create a stubbing for the key, discarding any identical one.

        An existing stubbing with the same method and an equal matcher list
        is overwritten rather than extended (last write wins).
        """
        kept = [entry for entry in self._entries if not entry.has_key(method, matchers)]
        if len(kept) != len(self._entries):
            logger.debug("Overriding existing stubbing for %s", method)
        stubbing = Stubbing(method, matchers)
        kept.append(stubbing)
        self._entries = kept
        return stubbing

    def find(self, method: str, params: t.Sequence[object]) -> Stubbing | None:
        """Return the most recent stubbing accepting *params*."""
        for stubbing in reversed(self._entries):
            if stubbing.matches(method, params):
                return stubbing
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> t.Iterator[Stubbing]:
        return iter(list(self._entries))


class OngoingStubbing:
    """Chainable handle returned by ``when()`` to queue answers."""

    def __init__(
        self,
        stubbing: Stubbing,
        return_types: t.Sequence[TypeDescriptor],
        fail: t.Callable[[CallMoxError], t.NoReturn],
    ) -> None:
        self._stubbing = stubbing
        self._return_types = tuple(return_types)
        self._fail = fail

    @property
    def stubbing(self) -> Stubbing:
        """Return the stubbing being configured."""
        return self._stubbing

    def then_return(self, *values: object) -> OngoingStubbing:
        """Queue an answer returning *values*, one per declared return type."""
        expected = len(self._return_types)
        if len(values) != expected:
            msg = (
                f"then_return() for method {self._stubbing.method!r} expects "
                f"{expected} value(s), got {len(values)}"
            )
            self._fail(InvalidStubbingError(msg))
        checked: list[object] = []
        for value, descriptor in zip(values, self._return_types, strict=True):
            try:
                checked.append(coerce_return(value, descriptor))
            except ReturnTypeError as exc:
                self._fail(exc)
        self._stubbing.add_answer(ReturnAnswer(tuple(checked)))
        return self

    def then_raise(
        self, exception: BaseException | type[BaseException]
    ) -> OngoingStubbing:
        """Queue an answer raising *exception* from the mocked method."""
        is_instance = isinstance(exception, BaseException)
        is_class = isinstance(exception, type) and issubclass(exception, BaseException)
        if not (is_instance or is_class):
            msg = (
                "then_raise() expects an exception instance or class, got "
                f"{type(exception).__name__}"
            )
            self._fail(InvalidStubbingError(msg))
        self._stubbing.add_answer(RaiseAnswer(exception))
        return self

    then_panic = then_raise

    def then(self, callback: t.Callable[..., object]) -> OngoingStubbing:
        """Queue an answer computed by *callback* from the call arguments."""
        if not callable(callback):
            msg = f"then() expects a callable, got {type(callback).__name__}"
            self._fail(InvalidStubbingError(msg))
        self._stubbing.add_answer(CallbackAnswer(callback))
        return self


__all__ = [
    "Answer",
    "CallbackAnswer",
    "OngoingStubbing",
    "RaiseAnswer",
    "ReturnAnswer",
    "Stubbing",
    "StubbingTable",
]
