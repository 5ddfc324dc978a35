"""Unit tests for :class:`call_mox.engine.GenericMock`."""

from __future__ import annotations

import threading
import time
import typing as t

import pytest

from call_mox.counts import at_least, never, once, times
from call_mox.descriptors import describe
from call_mox.engine import GenericMock
from call_mox.errors import (
    InvalidMatcherUsageError,
    InvalidTimeoutError,
    InvocationCountError,
    InvocationOrderError,
    ReturnTypeError,
)
from call_mox.in_order import InOrderContext
from call_mox.invocation import Invocation
from call_mox.matchers import any_int, any_str, eq
from call_mox.registry import get_registry

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from call_mox.descriptors import TypeDescriptor
    from call_mox.stubbing import OngoingStubbing

BOOL = (describe(bool),)
STR = (describe(str),)
VOID: tuple[TypeDescriptor, ...] = ()


def _stub(
    engine: GenericMock,
    method: str,
    params: tuple[object, ...],
    returns: tuple[TypeDescriptor, ...],
) -> OngoingStubbing:
    """Record an arrange-phase call and turn it into a stubbing."""
    engine.invoke(method, params, returns)
    call = get_registry().take_last_call()
    assert call is not None
    return engine.stub(call)


@pytest.fixture
def engine() -> GenericMock:
    """Return a fresh engine."""
    return GenericMock("display")


def test_unstubbed_calls_return_zero_values(engine: GenericMock) -> None:
    """Calls without a stubbing return zero values and never fail."""
    assert engine.invoke("show", ("x",), BOOL) == (False,)
    assert engine.invoke("title", (), STR) == ("",)
    assert engine.invoke("flash", ("x", 1), VOID) == ()


def test_invocations_are_recorded_in_order(engine: GenericMock) -> None:
    """The log records method names and params in call order."""
    engine.invoke("flash", ("a", 1), VOID)
    engine.invoke("show", ("b",), BOOL)
    assert [(inv.method, inv.params) for inv in engine.invocations] == [
        ("flash", ("a", 1)),
        ("show", ("b",)),
    ]


def test_stubbed_values_are_returned(engine: GenericMock) -> None:
    """A matching stubbing supplies the return values."""
    _stub(engine, "show", ("Hello",), BOOL).then_return(True)  # noqa: FBT003
    assert engine.invoke("show", ("Hello",), BOOL) == (True,)
    assert engine.invoke("show", ("Bye",), BOOL) == (False,)


def test_stub_retracts_the_arrange_call(engine: GenericMock) -> None:
    """The call used to describe a stubbing is not counted."""
    _stub(engine, "show", ("Hello",), BOOL).then_return(True)  # noqa: FBT003
    assert engine.invocations == []


def test_raised_exception_propagates_unmodified(engine: GenericMock) -> None:
    """Programmed exceptions reach the caller as they are."""
    error = ConnectionError("offline")
    _stub(engine, "show", ("Hello",), BOOL).then_raise(error)
    with pytest.raises(ConnectionError) as excinfo:
        engine.invoke("show", ("Hello",), BOOL)
    assert excinfo.value is error


def test_callback_receives_concrete_params(engine: GenericMock) -> None:
    """Callback answers compute the result from the actual arguments."""
    _stub(engine, "title", ("x",), STR).then(lambda name: name.upper())
    assert engine.invoke("title", ("x",), STR) == ("X",)


def test_callback_results_are_type_checked(engine: GenericMock) -> None:
    """A callback returning the wrong type fails at call time."""
    _stub(engine, "title", ("x",), STR).then(lambda name: None)
    with pytest.raises(ReturnTypeError, match="Return value 'None'"):
        engine.invoke("title", ("x",), STR)


def test_multiple_return_values(engine: GenericMock) -> None:
    """Methods with several return types take one value per type."""
    returns = (describe(int), describe(str))
    _stub(engine, "pair", (), returns).then_return(1, "one").then(
        lambda: (2, "two")
    )
    assert engine.invoke("pair", (), returns) == (1, "one")
    assert engine.invoke("pair", (), returns) == (2, "two")


def test_arrange_phase_calls_consume_no_answers(engine: GenericMock) -> None:
    """Calls made with pending matchers never trigger answers."""
    _stub(engine, "show", ("Hello",), BOOL).then_raise(RuntimeError)
    any_str()
    assert engine.invoke("show", ("Hello",), BOOL) == (False,)
    get_registry().reset()


def test_verify_returns_matching_invocations(engine: GenericMock) -> None:
    """Verification filters the log by method and params."""
    engine.invoke("flash", ("Hello", 333), VOID)
    engine.invoke("flash", ("Bye", 333), VOID)
    matched = engine.verify(None, once(), "flash", ("Hello", 333))
    assert [inv.params for inv in matched] == [("Hello", 333)]


def test_verify_with_matchers(engine: GenericMock) -> None:
    """Matchers registered before verification replace raw values."""
    engine.invoke("flash", ("Hello", 333), VOID)
    engine.invoke("flash", ("Bye", 1), VOID)
    matched = engine.verify(None, times(2), "flash", (any_str(), any_int()))
    assert len(matched) == 2


def test_count_failure_message(engine: GenericMock) -> None:
    """Count failures name the method, params, policy and actual count."""
    engine.invoke("flash", ("Hello", 333), VOID)
    with pytest.raises(InvocationCountError) as excinfo:
        engine.verify(None, once(), "flash", ("Hello", 666))
    message = str(excinfo.value)
    assert message.startswith(
        'Mock invocation count for method "flash" with params '
        "['Hello', 666] does not match expectation.\n\n"
        "\tExpected: 1; but got: 0"
    )
    assert "Recorded calls of \"flash\":\n  1. flash('Hello', 333)" in message


def test_count_failure_renders_matcher_labels(engine: GenericMock) -> None:
    """With matchers the message shows their labels."""
    with pytest.raises(InvocationCountError) as excinfo:
        engine.verify(None, at_least(1), "flash", (eq("Invalid"), any_int()))
    assert "with params [Eq('Invalid'), Any(int)]" in str(excinfo.value)
    assert "Expected: at least 1; but got: 0" in str(excinfo.value)


def test_never_policy(engine: GenericMock) -> None:
    """``never()`` fails once a matching call happened."""
    engine.verify(None, never(), "flash", ("x", 1))
    engine.invoke("flash", ("x", 1), VOID)
    with pytest.raises(InvocationCountError, match="Expected: 0; but got: 1"):
        engine.verify(None, never(), "flash", ("x", 1))


def test_mixed_matchers_are_rejected(engine: GenericMock) -> None:
    """One matcher for two params is a usage error."""
    with pytest.raises(InvalidMatcherUsageError, match="2 matchers expected"):
        engine.verify(None, once(), "flash", (any_str(), 3))


def test_in_order_verification(engine: GenericMock) -> None:
    """Verifying calls out of order names both calls."""
    engine.invoke("flash", ("Hello", 111), VOID)
    engine.invoke("flash", ("again", 222), VOID)
    context = InOrderContext()
    engine.verify(context, once(), "flash", ("again", 222))
    with pytest.raises(InvocationOrderError) as excinfo:
        engine.verify(context, once(), "flash", ("Hello", 111))
    assert str(excinfo.value) == (
        "Expected function call \"flash\" with params ['Hello', 111] before "
        "function call \"flash\" with params ['again', 222]"
    )


def test_in_order_verification_may_skip_calls(engine: GenericMock) -> None:
    """Calls left out between two in-order verifications are ignored."""
    engine.invoke("flash", ("one", 1), VOID)
    engine.invoke("flash", ("two", 2), VOID)
    engine.invoke("flash", ("three", 3), VOID)
    context = InOrderContext()
    engine.verify(context, once(), "flash", ("one", 1))
    engine.verify(context, once(), "flash", ("three", 3))
    assert context.last_verified is not None
    assert context.last_verified.params == ("three", 3)


def test_in_order_across_mocks() -> None:
    """Ordering uses the process-wide sequence, so it spans mocks."""
    first = GenericMock("first")
    second = GenericMock("second")
    first.invoke("open", (), VOID)
    second.invoke("write", ("x",), VOID)
    first.invoke("close", (), VOID)
    context = InOrderContext()
    first.verify(context, once(), "open", ())
    second.verify(context, once(), "write", ("x",))
    first.verify(context, once(), "close", ())
    with pytest.raises(InvocationOrderError):
        second.verify(context, once(), "write", ("x",))


def test_failed_in_order_verification_keeps_cursor(engine: GenericMock) -> None:
    """A failing verification does not move the cursor."""
    engine.invoke("flash", ("a", 1), VOID)
    engine.invoke("flash", ("b", 2), VOID)
    context = InOrderContext()
    with pytest.raises(InvocationCountError):
        engine.verify(context, times(2), "flash", ("b", 2))
    assert context.cursor is None
    engine.verify(context, once(), "flash", ("a", 1))
    engine.verify(context, once(), "flash", ("b", 2))


def test_fail_handler_receives_message(engine: GenericMock) -> None:
    """A returning failure hook lets verification continue."""
    failures: list[str] = []
    engine.set_fail_handler(lambda message, skip: failures.append(message))
    engine.invoke("flash", ("x", 1), VOID)
    matched = engine.verify(None, times(2), "flash", ("x", 1))
    assert len(matched) == 1
    assert failures
    assert "Expected: 2; but got: 1" in failures[0]


def test_usage_errors_raise_after_the_hook(engine: GenericMock) -> None:
    """Setup errors abort even when the hook returns."""
    failures: list[str] = []
    engine.set_fail_handler(lambda message, skip: failures.append(message))
    with pytest.raises(InvalidMatcherUsageError):
        engine.verify(None, once(), "flash", (any_str(), 3))
    assert failures[0].startswith("Invalid use of matchers!")


def test_get_invocation_params(engine: GenericMock) -> None:
    """Params are regrouped per position across invocations."""
    engine.invoke("flash", ("a", 1), VOID)
    engine.invoke("flash", ("b", 2), VOID)
    assert engine.get_invocation_params(engine.invocations) == [
        ["a", "b"],
        [1, 2],
    ]
    assert engine.get_invocation_params([]) == []


def test_invalid_timeout_is_rejected(engine: GenericMock) -> None:
    """Timeouts must be positive and finite."""
    with pytest.raises(ValueError, match="timeout"):
        engine.verify(None, once(), "flash", (), timeout=0)


def test_invalid_timeout_goes_through_the_hook(engine: GenericMock) -> None:
    """Timeout errors reach the failure hook before aborting."""
    failures: list[str] = []
    bad_timeout: t.Any = "soon"
    engine.set_fail_handler(lambda message, skip: failures.append(message))
    with pytest.raises(InvalidTimeoutError, match="must be a real number"):
        engine.verify(None, once(), "flash", (), timeout=bad_timeout)
    assert failures == ["timeout must be a real number"]


def test_log_order_follows_sequence_numbers(
    engine: GenericMock, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A call delayed after numbering still lands in the log first."""
    numbered = threading.Event()

    def slow_invocation(method: str, params: tuple[object, ...]) -> Invocation:
        invocation = Invocation(method, params)
        if method == "first":
            numbered.set()
            time.sleep(0.05)
        return invocation

    monkeypatch.setattr("call_mox.engine.Invocation", slow_invocation)
    worker = threading.Thread(target=engine.invoke, args=("first", (), VOID))
    worker.start()
    assert numbered.wait(1.0)
    engine.invoke("second", (), VOID)
    worker.join()

    recorded = engine.invocations
    assert [inv.method for inv in recorded] == ["first", "second"]
    assert [inv.seq for inv in recorded] == sorted(inv.seq for inv in recorded)


def test_concurrent_invocations_are_all_recorded(engine: GenericMock) -> None:
    """Calls from many threads are logged once each, in sequence order."""
    barrier = threading.Barrier(8)

    def hammer(index: int) -> None:
        barrier.wait()
        for call in range(50):
            engine.invoke("flash", (f"t{index}", call), VOID)

    workers = [threading.Thread(target=hammer, args=(i,)) for i in range(8)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    recorded = engine.invocations
    assert len(recorded) == 400
    seqs = [inv.seq for inv in recorded]
    assert seqs == sorted(seqs)
    assert len(set(seqs)) == 400
