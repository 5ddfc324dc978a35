"""The stubbing and verification DSL and the :class:`CallMox` controller."""

from __future__ import annotations

import inspect
import logging
import types  # noqa: TC003
import typing as t

from .config import get_settings
from .counts import at_least, once
from .doubles import MockBase, Verifier, get_generic_mock, mock
from .errors import InvalidStubbingError, UnusedMatchersError
from .failures import report_failure
from .in_order import InOrderContext
from .registry import get_registry

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .counts import CountPolicy
    from .errors import CallMoxError
    from .failures import FailHandler
    from .stubbing import OngoingStubbing

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_VOID_TRIGGER_MESSAGE = (
    "When using 'when' with function that does not return a value, it expects "
    "a function with no arguments and no return value."
)
_NO_CALL_MESSAGE = (
    "when() requires an argument which has to be 'a method call on a mock'."
)
_VOID_RESULT_MESSAGE = (
    "Method {method!r} does not return a value, so when() cannot stub it "
    "through its result. Pass a function making the call instead: "
    "when(lambda: mock.{method}(...))."
)


def _fail_usage(error: CallMoxError) -> t.NoReturn:
    report_failure(error, caller_skip=3)
    raise error


def _is_recorded_result(value: object) -> bool:
    call = get_registry().last_call()
    return call is not None and any(result is value for result in call.values)


def _requires_arguments(trigger: t.Callable[..., object]) -> bool:
    try:
        signature = inspect.signature(trigger)
    except (TypeError, ValueError):
        return False
    return any(
        param.default is inspect.Parameter.empty
        and param.kind
        not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for param in signature.parameters.values()
    )


def when(call_result: object) -> OngoingStubbing:
    """Begin stubbing the mock call that produced *call_result*.

    Pass the result of a mock call, ``when(mock.method(args))``, or, for
    methods without a return value, a zero-argument function making the call,
    ``when(lambda: mock.method(args))``. Matchers registered while writing
    the arguments become the stubbing key; otherwise the raw arguments are
    matched by equality.

    Raises
    ------
    InvalidStubbingError
        When no mock call was recorded, the trigger takes arguments, or the
        result of a method without a return value is passed directly.
    """
    registry = get_registry()
    triggered = callable(call_result) and not _is_recorded_result(call_result)
    if triggered:
        if _requires_arguments(call_result):
            registry.reset()
            _fail_usage(InvalidStubbingError(_VOID_TRIGGER_MESSAGE))
        registry.take_last_call()
        with registry.arrange():
            call_result()
    call = registry.take_last_call()
    if call is None:
        registry.reset()
        _fail_usage(InvalidStubbingError(_NO_CALL_MESSAGE))
    if not triggered and not call.return_types:
        call.mock.discard(call)
        registry.reset()
        msg = _VOID_RESULT_MESSAGE.format(method=call.invocation.method)
        _fail_usage(InvalidStubbingError(msg))
    return call.mock.stub(call)


def verify(
    obj: T,
    policy: CountPolicy | None = None,
    *,
    in_order: InOrderContext | None = None,
    timeout: float | None = None,
) -> T:
    """Return a proxy of *obj* whose method calls verify recorded calls.

    ``verify(display).flash("Hello", 333)`` requires exactly one matching
    call unless another count *policy* is given. Each verification returns
    an :class:`~call_mox.capture.OngoingVerification`.
    """
    return t.cast(
        "T",
        Verifier(
            obj,
            once() if policy is None else policy,
            in_order=in_order,
            timeout=timeout,
        ),
    )


def verify_was_called_once(obj: T) -> T:
    """Verify that the following method call happened exactly once."""
    return verify(obj, once())


def verify_was_called(obj: T, policy: CountPolicy | None = None) -> T:
    """Verify the following method call against *policy* (at least once)."""
    return verify(obj, at_least(1) if policy is None else policy)


def verify_was_called_in_order(
    obj: T, policy: CountPolicy, in_order: InOrderContext
) -> T:
    """Verify the following method call against *policy* and the cursor."""
    return verify(obj, policy, in_order=in_order)


def verify_was_called_eventually(
    obj: T, policy: CountPolicy | None = None, timeout: float | None = None
) -> T:
    """Verify the following method call, waiting up to *timeout* seconds.

    Without *timeout* the configured default timeout is used.
    """
    if timeout is None:
        timeout = get_settings().default_timeout
    return verify(obj, once() if policy is None else policy, timeout=timeout)


class CallMox:
    """Test-scoped owner of mocks and guard against leftover matchers.

    Used as a context manager, it discards stale matcher state on entry and
    fails on exit when matchers were registered but never consumed by
    ``when()`` or a verification.
    """

    def __init__(
        self,
        *,
        fail_handler: FailHandler | None = None,
        check_on_exit: bool = True,
    ) -> None:
        """Create a new controller.

        Parameters
        ----------
        fail_handler:
            Failure hook installed on every mock created by this controller.
            When omitted the process-wide hook (or a raised exception) is used.
        check_on_exit:
            When ``True`` (the default), :meth:`__exit__` raises
            :class:`UnusedMatchersError` for matchers left in the registry.
        """
        self._fail_handler = fail_handler
        self._check_on_exit = check_on_exit
        self._mocks: list[MockBase] = []
        self._entered = False

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def mocks(self) -> tuple[object, ...]:
        """Return the mocks created by this controller."""
        return tuple(self._mocks)

    @property
    def fail_handler(self) -> FailHandler | None:
        """Return the failure hook used for this controller's mocks."""
        return self._fail_handler

    @fail_handler.setter
    def fail_handler(self, handler: FailHandler | None) -> None:
        self._fail_handler = handler
        for obj in self._mocks:
            get_generic_mock(obj).set_fail_handler(handler)

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> CallMox:
        """Enter context, discarding matcher state left by earlier code."""
        stale = get_registry().reset()
        if stale:
            logger.debug("Discarding %d stale matcher(s): %s", len(stale), stale)
        self._entered = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Exit context, failing when matchers were left unused."""
        self._entered = False
        leftovers = get_registry().reset()
        if leftovers and self._check_on_exit and exc_type is None:
            self._raise_unused(leftovers)

    @staticmethod
    def _raise_unused(leftovers: t.Sequence[Matcher]) -> t.NoReturn:
        msg = (
            f"Unused matchers: {list(leftovers)!r}. Matchers must be used as "
            "arguments of a mock call passed to when() or verify()."
        )
        raise UnusedMatchersError(msg)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def mock(self, interface: type[T], *, name: str | None = None) -> T:
        """Create a mock of *interface* owned by this controller."""
        obj = mock(interface, name=name, fail_handler=self._fail_handler)
        self._mocks.append(t.cast("MockBase", obj))
        return obj

    def in_order(self) -> InOrderContext:
        """Return a fresh cursor for in-order verification."""
        return InOrderContext()

    def check_matchers(self) -> None:
        """Raise :class:`UnusedMatchersError` when matchers are pending."""
        leftovers = get_registry().reset()
        if leftovers:
            self._raise_unused(leftovers)

    when = staticmethod(when)
    verify = staticmethod(verify)
    verify_was_called_once = staticmethod(verify_was_called_once)
    verify_was_called = staticmethod(verify_was_called)
    verify_was_called_in_order = staticmethod(verify_was_called_in_order)
    verify_was_called_eventually = staticmethod(verify_was_called_eventually)


__all__ = [
    "CallMox",
    "verify",
    "verify_was_called",
    "verify_was_called_eventually",
    "verify_was_called_in_order",
    "verify_was_called_once",
    "when",
]
