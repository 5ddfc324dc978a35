"""Matcher constructors for use in argument positions.

Each function registers a matcher with the shared registry and returns a
placeholder value of the expected type, so it can stand in for a real
argument::

    when(display.flash(any_str(), eq(333))).then_return(True)
    verify(display).flash(starts_with("He"), any_int())

Matchers and raw values must not be mixed within one call.
"""

from __future__ import annotations

import typing as t

from .comparators import Any, Contains, Eq, Predicate, Regex, StartsWith
from .descriptors import describe
from .registry import register_matcher

T = t.TypeVar("T")


def eq(value: T) -> T:
    """Match arguments deeply equal to *value*, including their type."""
    register_matcher(Eq(value))
    return t.cast("T", describe(type(value)).zero())


def any_of(typ: type[T]) -> T:
    """Match any argument assignable to *typ*."""
    register_matcher(Any(typ))
    return t.cast("T", describe(typ).zero())


def any_value() -> t.Any:
    """Match every argument, ``None`` included."""
    register_matcher(Any())
    return None


def any_int() -> int:
    """Match any ``int`` argument."""
    return any_of(int)


def any_float() -> float:
    """Match any ``float`` argument (``int`` is accepted as well)."""
    return any_of(float)


def any_bool() -> bool:
    """Match any ``bool`` argument."""
    return any_of(bool)


def any_str() -> str:
    """Match any ``str`` argument."""
    return any_of(str)


def any_bytes() -> bytes:
    """Match any ``bytes`` argument."""
    return any_of(bytes)


def any_list() -> list[t.Any]:
    """Match any ``list`` argument or ``None``."""
    return any_of(list)


def any_dict() -> dict[t.Any, t.Any]:
    """Match any ``dict`` argument or ``None``."""
    return any_of(dict)


def any_tuple() -> tuple[t.Any, ...]:
    """Match any ``tuple`` argument, such as a variadic tail."""
    return any_of(tuple)


def any_error() -> BaseException | None:
    """Match any exception instance or ``None``."""
    register_matcher(Any(BaseException))
    return None


def arg_that(
    predicate: t.Callable[[t.Any], object], placeholder: t.Any = None
) -> t.Any:
    """Match arguments for which *predicate* returns a truthy value."""
    register_matcher(Predicate(predicate))
    return placeholder


def contains(item: object) -> t.Any:
    """Match strings or containers containing *item*."""
    register_matcher(Contains(item))
    return "" if isinstance(item, str) else None


def starts_with(prefix: str) -> str:
    """Match strings beginning with *prefix*."""
    register_matcher(StartsWith(prefix))
    return ""


def matches_regex(pattern: str) -> str:
    """Match strings in which *pattern* is found."""
    register_matcher(Regex(pattern))
    return ""


__all__ = [
    "any_bool",
    "any_bytes",
    "any_dict",
    "any_error",
    "any_float",
    "any_int",
    "any_list",
    "any_of",
    "any_str",
    "any_tuple",
    "any_value",
    "arg_that",
    "contains",
    "eq",
    "matches_regex",
    "starts_with",
]
