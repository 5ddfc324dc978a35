"""Type descriptors for declared parameter and return types.

A :class:`TypeDescriptor` wraps an annotation and answers three questions the
engine needs at runtime: what the zero value of the type is, whether ``None``
may be stored in it, and whether a given value is assignable to it.

Types fall into two shapes:

* *value-shaped* types (``bool``, ``int``, ``float``, ``complex``, ``str``,
  ``bytes``, ``tuple``, enums and ``Literal``) never accept ``None`` and have
  a concrete zero value;
* everything else is *reference-shaped* and accepts ``None``: ``Any`` and
  ``object``, unions containing ``None``, abstract classes and protocols,
  exception classes, containers, callables and ordinary classes.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import inspect
import types
import typing as t

from .errors import ReturnTypeError

_VALUE_TYPES: tuple[type, ...] = (bool, int, float, complex, str, bytes, tuple)
_EMPTY_CONTAINERS: tuple[type, ...] = (list, dict, set, frozenset, bytearray)

# PEP 484 numeric tower: ``int`` is acceptable where ``float`` is expected and
# both are acceptable where ``complex`` is expected.
_PROMOTIONS: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}


def type_name(annotation: object) -> str:
    """Return a short human readable name for *annotation*."""
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, type) and t.get_origin(annotation) is None:
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


def _is_union(annotation: object) -> bool:
    origin = t.get_origin(annotation)
    return origin is t.Union or origin is types.UnionType


def _is_protocol(cls: type) -> bool:
    return bool(getattr(cls, "_is_protocol", False))


@dc.dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Runtime view of a declared type."""

    annotation: object

    @property
    def name(self) -> str:
        """Return the display name of the described type."""
        return type_name(self.annotation)

    @property
    def nilable(self) -> bool:
        """Return ``True`` when ``None`` is assignable to the type."""
        return _nilable(self.annotation)

    def zero(self) -> object:
        """Return the zero value for the type."""
        return _zero(self.annotation)

    def accepts(self, value: object) -> bool:
        """Return ``True`` when *value* is assignable to the type."""
        if value is None:
            return self.nilable
        return _accepts(self.annotation, value)

    def matches(self, value: object) -> bool:
        """Return ``True`` when *value* is a member of the type as passed.

        Unlike :meth:`accepts` no numeric promotion applies: an ``int`` is not
        a ``float`` argument.
        """
        if value is None:
            return self.nilable
        return _accepts(self.annotation, value, promote=False)


def describe(annotation: object) -> TypeDescriptor:
    """Return a :class:`TypeDescriptor` for *annotation*."""
    if isinstance(annotation, str):
        # Unresolved forward references carry no usable runtime information.
        annotation = t.Any
    return TypeDescriptor(annotation)


def _is_unconstrained(annotation: object) -> bool:
    return (
        annotation is t.Any
        or annotation is object
        or isinstance(annotation, t.TypeVar)
        or annotation is inspect.Parameter.empty
    )


def _nilable(annotation: object) -> bool:
    if annotation is None or annotation is type(None):
        return True
    if _is_unconstrained(annotation):
        return True
    if _is_union(annotation):
        return any(_nilable(arg) for arg in t.get_args(annotation))
    origin = t.get_origin(annotation)
    if origin is t.Literal:
        return None in t.get_args(annotation)
    if origin is not None:
        annotation = origin
    if not isinstance(annotation, type):
        return True
    if issubclass(annotation, enum.Enum):
        return False
    return annotation not in _VALUE_TYPES


def _zero(annotation: object) -> object:
    if _nilable(annotation) and not _has_empty_container(annotation):
        return None
    if _is_union(annotation):
        return _zero(t.get_args(annotation)[0])
    origin = t.get_origin(annotation)
    if origin is t.Literal:
        return t.get_args(annotation)[0]
    cls = origin if origin is not None else annotation
    if isinstance(cls, type) and issubclass(cls, enum.Enum):
        return next(iter(cls))
    if isinstance(cls, type):
        return cls()
    return None


def _has_empty_container(annotation: object) -> bool:
    cls = t.get_origin(annotation) or annotation
    return isinstance(cls, type) and cls in _EMPTY_CONTAINERS


def _accepts(annotation: object, value: object, *, promote: bool = True) -> bool:
    if _is_unconstrained(annotation):
        return True
    if annotation is None or annotation is type(None):
        return False
    if _is_union(annotation):
        return any(
            _accepts(arg, value, promote=promote)
            for arg in t.get_args(annotation)
            if arg is not type(None)
        )
    origin = t.get_origin(annotation)
    if origin is t.Literal:
        return value in t.get_args(annotation)
    if origin is cabc.Callable:
        return callable(value)
    cls = origin if origin is not None else annotation
    if not isinstance(cls, type):
        return True
    if _is_protocol(cls) and not getattr(cls, "_is_runtime_protocol", False):
        return True
    if isinstance(value, cls):
        return True
    return promote and _promotable(value, cls)


def _promotable(value: object, cls: type) -> bool:
    return isinstance(value, _PROMOTIONS.get(cls, ())) and not isinstance(
        value, bool
    )


def promote_argument(value: object, descriptor: TypeDescriptor) -> object:
    """Return *value* widened to the numeric type its parameter declares.

    ``3`` passed to a ``float`` parameter is recorded as ``3.0``. Values that
    already fit, and parameters without a numeric type, are left alone.
    """
    if value is None or descriptor.matches(value):
        return value
    annotation = descriptor.annotation
    members = t.get_args(annotation) if _is_union(annotation) else (annotation,)
    for member in members:
        if isinstance(member, type) and _promotable(value, member):
            return member(value)
    return value


def coerce_return(value: object, descriptor: TypeDescriptor) -> object:
    """Return *value* checked against *descriptor*.

    Raises
    ------
    ReturnTypeError
        When *value* is not assignable to the declared return type.
    """
    if value is None:
        if descriptor.nilable:
            return None
        msg = f"Return value 'None' not assignable to return type {descriptor.name}"
        raise ReturnTypeError(msg)
    if not descriptor.accepts(value):
        msg = (
            f"Return value of type {type(value).__name__} not assignable to "
            f"return type {descriptor.name}"
        )
        raise ReturnTypeError(msg)
    target = descriptor.annotation
    if isinstance(target, type) and target in _PROMOTIONS:
        if not isinstance(value, target):
            return target(value)
    return value


__all__ = [
    "TypeDescriptor",
    "coerce_return",
    "describe",
    "promote_argument",
    "type_name",
]
