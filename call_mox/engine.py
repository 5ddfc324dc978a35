"""The generic invocation matching and verification engine.

Every mock forwards its method calls into one :class:`GenericMock`, which
records invocations, resolves programmed answers and evaluates verifications
against the recorded history. The engine is passive: all work runs on the
calling thread, and only eventual verification sleeps.
"""

from __future__ import annotations

import logging
import threading
import time
import typing as t

from ._validators import validate_positive_finite_timeout
from .comparators import Eq
from .config import get_settings
from .descriptors import coerce_return
from .errors import (
    InvalidMatcherUsageError,
    InvalidStubbingError,
    InvalidTimeoutError,
    ReturnTypeError,
    VerificationError,
)
from .failures import report_failure
from .invocation import Invocation, InvocationLog
from .registry import RecordedCall, get_registry
from .stubbing import (
    CallbackAnswer,
    OngoingStubbing,
    RaiseAnswer,
    StubbingTable,
)
from .verifiers import CountVerifier, OrderVerifier, format_params

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .counts import CountPolicy
    from .descriptors import TypeDescriptor
    from .errors import CallMoxError
    from .failures import FailHandler
    from .in_order import InOrderContext
    from .registry import MatcherRegistry
    from .stubbing import Answer

logger = logging.getLogger(__name__)


class GenericMock:
    """Invocation log, stubbing table and verification for one mock."""

    def __init__(
        self,
        name: str = "mock",
        *,
        fail_handler: FailHandler | None = None,
        registry: MatcherRegistry | None = None,
    ) -> None:
        self.name = name
        self._fail_handler = fail_handler
        self._registry = registry if registry is not None else get_registry()
        self._lock = threading.RLock()
        self._log = InvocationLog()
        self._stubbings = StubbingTable()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def fail_handler(self) -> FailHandler | None:
        """Return the failure hook used by this mock, if overridden."""
        return self._fail_handler

    def set_fail_handler(self, handler: FailHandler | None) -> None:
        """Override the failure hook for this mock only."""
        self._fail_handler = handler

    @property
    def invocations(self) -> list[Invocation]:
        """Return a snapshot of every recorded invocation."""
        with self._lock:
            return self._log.snapshot()

    @property
    def stubbings(self) -> StubbingTable:
        """Return the stubbing table."""
        return self._stubbings

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------
    def invoke(
        self,
        method: str,
        params: t.Sequence[object],
        return_types: t.Sequence[TypeDescriptor],
    ) -> tuple[object, ...]:
        """Record a call to *method* and return its resolved values.

        Unstubbed calls return the zero value of every declared return type.
        Calls made while matchers are pending, or from a ``when()`` trigger,
        are arrange-phase calls: they are recorded but no answer is consumed.
        """
        params = tuple(params)
        return_types = tuple(return_types)
        with self._lock:
            invocation = Invocation(method, params)
            self._log.append(invocation)
            stubbing = self._stubbings.find(method, params)

        values = tuple(descriptor.zero() for descriptor in return_types)
        if self._registry.arranging():
            logger.debug("Arrange-phase call %s.%s%r", self.name, method, params)
        elif stubbing is None:
            logger.debug("No stubbing for %s.%s%r", self.name, method, params)
        else:
            answer = stubbing.next_answer()
            if answer is not None:
                values = self._resolve(answer, method, params, return_types)

        self._registry.record_call(
            RecordedCall(self, invocation, return_types, values)
        )
        return values

    def _resolve(
        self,
        answer: Answer,
        method: str,
        params: tuple[object, ...],
        return_types: tuple[TypeDescriptor, ...],
    ) -> tuple[object, ...]:
        if isinstance(answer, RaiseAnswer):
            logger.debug(
                "Raising stubbed %r from %s.%s", answer.exception, self.name, method
            )
            raise answer.exception
        if isinstance(answer, CallbackAnswer):
            result = answer.func(*params)
            values = self._callback_values(method, result, return_types)
        else:
            values = answer.values
        try:
            return tuple(
                coerce_return(value, descriptor)
                for value, descriptor in zip(values, return_types, strict=True)
            )
        except ReturnTypeError as exc:
            self._fail_setup(exc)

    def _callback_values(
        self,
        method: str,
        result: object,
        return_types: tuple[TypeDescriptor, ...],
    ) -> tuple[object, ...]:
        if not return_types:
            return ()
        if len(return_types) == 1:
            return (result,)
        if isinstance(result, tuple | list) and len(result) == len(return_types):
            return tuple(result)
        msg = (
            f"Callback for method {method!r} must return {len(return_types)} "
            f"values, got {result!r}"
        )
        self._fail_setup(InvalidStubbingError(msg))

    # ------------------------------------------------------------------
    # Stubbing
    # ------------------------------------------------------------------
    def stub(self, call: RecordedCall) -> OngoingStubbing:
        """Create or replace the stubbing described by the recorded *call*.

        The arrange-phase invocation itself is retracted from the log so it
        is not counted by verification.
        """
        invocation = call.invocation
        self.discard(call)
        matchers = self._drain_matchers(len(invocation.params))
        if not matchers:
            matchers = [Eq(param) for param in invocation.params]
        with self._lock:
            stubbing = self._stubbings.replace(invocation.method, matchers)
        logger.debug("Stubbed %s.%s with %s", self.name, invocation.method, matchers)
        return OngoingStubbing(stubbing, call.return_types, self._fail_setup)

    def discard(self, call: RecordedCall) -> None:
        """Remove the invocation recorded by *call* from the log."""
        with self._lock:
            self._log.retract(call.invocation)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(
        self,
        in_order: InOrderContext | None,
        count: CountPolicy,
        method: str,
        params: t.Sequence[object],
        timeout: float | None = None,
    ) -> list[Invocation]:
        """Return the invocations of *method* matching *params*.

        Failures are routed through the failure hook; when a hook returns
        instead of raising, the qualifying invocations are still returned.
        """
        params = tuple(params)
        matchers = self._drain_matchers(len(params))
        if matchers:
            params_repr = format_params(matchers)
        else:
            matchers = [Eq(param) for param in params]
            params_repr = format_params(params)
        if timeout is not None:
            self._check_timeout(timeout)

        matched = self._matching(method, matchers)
        if timeout is not None and not count(len(matched)):
            matched = self._poll(method, matchers, count, timeout)

        order_verifier = None if in_order is None else OrderVerifier(in_order)
        try:
            if order_verifier is not None:
                order_verifier.verify(method, params_repr, matched)
            with self._lock:
                recorded = self._log.for_method(method)
            CountVerifier(count).verify(
                method, params_repr, matched, recorded, waited=timeout
            )
        except VerificationError as err:
            report_failure(err, handler=self._fail_handler, caller_skip=3)
            return matched

        if order_verifier is not None:
            order_verifier.advance(method, params_repr, matched)
        return matched

    def _matching(
        self, method: str, matchers: t.Sequence[Matcher]
    ) -> list[Invocation]:
        with self._lock:
            candidates = self._log.for_method(method)
        return [
            inv
            for inv in candidates
            if len(inv.params) == len(matchers)
            and all(
                matcher(param)
                for matcher, param in zip(matchers, inv.params, strict=True)
            )
        ]

    def _poll(
        self,
        method: str,
        matchers: t.Sequence[Matcher],
        count: CountPolicy,
        timeout: float,
    ) -> list[Invocation]:
        interval = get_settings().poll_interval
        deadline = time.monotonic() + timeout
        while (remaining := deadline - time.monotonic()) > 0:
            time.sleep(min(interval, remaining))
            matched = self._matching(method, matchers)
            if count(len(matched)):
                return matched
            logger.debug(
                "Waiting for %s.%s: %d matching call(s) so far",
                self.name,
                method,
                len(matched),
            )
        # One last look after the deadline so a call landing exactly at the
        # boundary is not missed.
        return self._matching(method, matchers)

    def get_invocation_params(
        self, invocations: t.Sequence[Invocation]
    ) -> list[list[object]]:
        """Return, per parameter position, the values across *invocations*."""
        if not invocations:
            return []
        arity = len(invocations[0].params)
        return [[inv.params[index] for inv in invocations] for index in range(arity)]

    # ------------------------------------------------------------------
    # Failure routing
    # ------------------------------------------------------------------
    def _drain_matchers(self, arity: int) -> list[Matcher]:
        try:
            return self._registry.drain_and_validate(arity)
        except InvalidMatcherUsageError as err:
            self._fail_setup(err)

    def _check_timeout(self, timeout: float) -> None:
        try:
            validate_positive_finite_timeout(timeout)
        except (TypeError, ValueError) as err:
            self._fail_setup(InvalidTimeoutError(str(err)))

    def _fail_setup(self, error: CallMoxError) -> t.NoReturn:
        """Report a usage or type error, then abort the current operation."""
        report_failure(error, handler=self._fail_handler, caller_skip=3)
        raise error

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"GenericMock({self.name!r}, invocations={len(self._log)})"


__all__ = ["GenericMock"]
