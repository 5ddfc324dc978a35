"""Matcher classes used for argument matching.

A matcher is a callable returning ``True`` when a single argument value is
acceptable. Its ``repr()`` doubles as the label shown in failure messages.
Matchers are immutable; two matchers compare equal when they would accept
exactly the same values, which is how identical stubbings are recognised.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
import typing as t

from .descriptors import describe, type_name


class Matcher(t.Protocol):
    """Callable returning ``True`` when a value matches."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""
        ...


def deep_equal(expected: object, actual: object) -> bool:
    """Return ``True`` when *actual* equals *expected* including its type.

    ``1``, ``1.0`` and ``True`` are distinct values here even though Python
    considers them equal. Lists, tuples and dicts are compared element-wise
    with the same rule; exceptions compare by type and ``args``.
    """
    if type(expected) is not type(actual):
        return False
    if isinstance(expected, list | tuple):
        other = t.cast("cabc.Sequence[object]", actual)
        return len(expected) == len(other) and all(
            deep_equal(x, y) for x, y in zip(expected, other, strict=True)
        )
    if isinstance(expected, dict):
        mapping = t.cast("dict[object, object]", actual)
        return expected.keys() == mapping.keys() and all(
            deep_equal(value, mapping[key]) for key, value in expected.items()
        )
    if isinstance(expected, BaseException):
        return deep_equal(expected.args, t.cast("BaseException", actual).args)
    return bool(expected == actual)


@dc.dataclass(frozen=True, slots=True, eq=False, repr=False)
class Eq:
    """Match values deeply equal to ``value``."""

    value: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* equals the expected value."""
        return deep_equal(self.value, value)

    def __eq__(self, other: object) -> bool:
        """Return ``True`` for an :class:`Eq` over an identical value."""
        if not isinstance(other, Eq):
            return NotImplemented
        return deep_equal(self.value, other.value)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        """Return the label used in failure messages."""
        return f"Eq({self.value!r})"


@dc.dataclass(frozen=True, slots=True, repr=False)
class Any:
    """Match any value assignable to ``typ``.

    ``None`` matches only when ``typ`` is nilable (see
    :mod:`call_mox.descriptors`). Without ``typ`` every value matches.
    """

    typ: object = None

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* fits ``typ``."""
        if self.typ is None:
            return True
        return describe(self.typ).matches(value)

    def __repr__(self) -> str:
        """Return the label used in failure messages."""
        if self.typ is None:
            return "Any()"
        return f"Any({type_name(self.typ)})"


@dc.dataclass(frozen=True, slots=True)
class Contains:
    """Match if ``item`` is found in *value*."""

    item: object

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        if isinstance(value, str):
            return isinstance(self.item, str) and self.item in value
        return isinstance(value, cabc.Container) and self.item in value


@dc.dataclass(frozen=True, slots=True)
class StartsWith:
    """Match if *value* is a string beginning with ``prefix``."""

    prefix: str

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)


@dc.dataclass(frozen=True, slots=True)
class Regex:
    """Match if *value* is a string matching ``pattern``."""

    pattern: str
    _compiled: re.Pattern[str] = dc.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Compile the pattern eagerly so malformed patterns fail early."""
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*."""
        return isinstance(value, str) and bool(self._compiled.search(value))


@dc.dataclass(frozen=True, slots=True)
class Predicate:
    """Use a custom ``func`` to determine a match."""

    func: t.Callable[[t.Any], object]

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))


__all__ = [
    "Any",
    "Contains",
    "Eq",
    "Matcher",
    "Predicate",
    "Regex",
    "StartsWith",
    "deep_equal",
]
