"""Comparator helpers and matcher label tests."""

from __future__ import annotations

import re
import typing as t

import pytest

from call_mox.comparators import (
    Any as AnyComparator,
)
from call_mox.comparators import (
    Contains,
    Eq,
    Predicate,
    Regex,
    StartsWith,
    deep_equal,
)


@pytest.mark.parametrize(
    ("matcher", "good", "bad", "expected_repr"),
    [
        (AnyComparator(), "anything", None, "Any()"),
        (AnyComparator(int), 42, "42", "Any(int)"),
        (Eq("x"), "x", "y", "Eq('x')"),
        (Contains("bar"), "foobarbaz", "qux", "Contains(item='bar')"),
        (StartsWith("bar"), "barfly", "foobar", "StartsWith(prefix='bar')"),
        (Regex(r"\d+"), "abc123", "abc", "Regex(pattern='\\\\d+')"),
    ],
)
def test_matchers_match_and_repr(
    matcher: t.Callable[[object], bool],
    good: object,
    bad: object | None,
    expected_repr: str,
) -> None:
    """Matchers evaluate values and provide the labels used in messages."""
    assert matcher(good)
    if bad is not None:
        assert not matcher(bad)
    assert repr(matcher) == expected_repr


@pytest.mark.parametrize(
    ("expected", "actual", "equal"),
    [
        (1, 1, True),
        (1, 1.0, False),
        (1, True, False),
        ([1, [2, "x"]], [1, [2, "x"]], True),
        ([1, [2, "x"]], [1, (2, "x")], False),
        ({"a": [1]}, {"a": [1]}, True),
        ({"a": 1}, {"a": 1, "b": 2}, False),
        (ValueError("boom"), ValueError("boom"), True),
        (ValueError("boom"), KeyError("boom"), False),
        (None, None, True),
    ],
)
def test_deep_equal_is_type_aware(
    expected: object, actual: object, equal: bool
) -> None:
    """Values only match when their types match, recursively."""
    assert deep_equal(expected, actual) is equal


def test_eq_matchers_compare_by_value() -> None:
    """Equal ``Eq`` matchers identify the same stubbing key."""
    assert Eq([1, 2]) == Eq([1, 2])
    assert Eq(1) != Eq(1.0)
    with pytest.raises(TypeError):
        hash(Eq(1))


@pytest.mark.parametrize(
    ("typ", "value", "accepted"),
    [
        (int, None, False),
        (str, None, False),
        (list, None, True),
        (int | None, None, True),
        (float, 3, False),
        (float, 3.0, True),
        (float, True, False),
        (complex, 2.5j, True),
        (object, 3, True),
        (str, b"bytes", False),
        (Exception, ValueError("x"), True),
        (t.Callable[[int], str], len, True),
        (t.Literal["on", "off"], "off", True),
        (t.Literal["on", "off"], "dim", False),
    ],
)
def test_any_respects_declared_type(
    typ: object, value: object, accepted: bool
) -> None:
    """``Any(typ)`` accepts assignable values and ``None`` only when nilable."""
    assert AnyComparator(typ)(value) is accepted


def test_any_without_type_matches_none() -> None:
    """A bare ``Any()`` matches every value, ``None`` included."""
    assert AnyComparator()(None)


def test_contains_handles_strings_and_containers() -> None:
    """``Contains`` checks substrings and container membership."""
    matcher = Contains(3)
    assert matcher([1, 2, 3])
    assert not matcher("123")
    assert not matcher(None)
    assert Contains("ell")("hello")


def test_string_matchers_reject_non_strings() -> None:
    """String matchers never match non-string values."""
    assert not StartsWith("1")(123)
    assert not Regex("1")(123)


def test_regex_rejects_malformed_patterns() -> None:
    """Malformed patterns fail when the matcher is created."""
    with pytest.raises(re.error):
        Regex("(")


def test_predicate_uses_truthiness() -> None:
    """``Predicate`` treats the function result as a boolean."""
    matcher = Predicate(lambda value: value % 2)
    assert matcher(3)
    assert not matcher(4)
