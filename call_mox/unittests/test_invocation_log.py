"""Unit tests for invocations, the log and the in-order cursor."""

from __future__ import annotations

from call_mox.in_order import InOrderContext
from call_mox.invocation import Invocation, InvocationLog


def test_sequence_numbers_increase() -> None:
    """Every invocation gets a larger sequence number than the last."""
    first = Invocation("flash", ("a",))
    second = Invocation("show", ())
    assert second.seq > first.seq
    assert repr(first) == f"Invocation(#{first.seq} flash('a'))"


def test_log_keeps_occurrence_order() -> None:
    """The log returns invocations in the order they were appended."""
    log = InvocationLog()
    calls = [Invocation("flash", (n,)) for n in range(3)]
    for call in calls:
        log.append(call)
    log.append(Invocation("show", ()))
    assert log.for_method("flash") == calls
    assert len(log) == 4


def test_retract_removes_by_identity() -> None:
    """Only the exact invocation object is removed."""
    log = InvocationLog()
    first = Invocation("flash", ("x",))
    second = Invocation("flash", ("x",))
    log.append(first)
    log.append(second)
    assert log.retract(second)
    assert log.snapshot() == [first]
    assert not log.retract(second)


def test_in_order_cursor_starts_empty() -> None:
    """Nothing precedes an unused cursor."""
    context = InOrderContext()
    assert context.cursor is None
    assert not context.precedes_cursor(Invocation("flash", ()))


def test_in_order_cursor_advances_forward_only() -> None:
    """The cursor only moves to later invocations."""
    context = InOrderContext()
    early = Invocation("flash", (1,))
    late = Invocation("flash", (2,))
    context.advance(late, '"flash" with params [2]')
    context.advance(early, '"flash" with params [1]')
    assert context.cursor == late.seq
    assert context.last_verified is late
    assert context.description == '"flash" with params [2]'
    assert context.precedes_cursor(early)
    assert context.precedes_cursor(late)
