"""Runtime mock objects built from an interface.

:func:`mock` inspects the public methods of an interface (an ``abc.ABC``, a
``typing.Protocol`` or any plain class) and builds a subclass whose methods
forward every call into a :class:`~call_mox.engine.GenericMock`. The proxy
methods do no work of their own: they bind the arguments against the
interface signature and hand them to the engine.
"""

from __future__ import annotations

import abc
import dataclasses as dc
import inspect
import logging
import types
import typing as t

from .capture import OngoingVerification
from .comparators import Eq
from .descriptors import describe, promote_argument
from .engine import GenericMock
from .errors import UsageError
from .registry import get_registry

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .comparators import Matcher
    from .counts import CountPolicy
    from .descriptors import TypeDescriptor
    from .failures import FailHandler
    from .in_order import InOrderContext

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_SKIPPED_BASES: tuple[object, ...] = (object, abc.ABC, t.Generic, t.Protocol)
_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)
_NAMED = (*_POSITIONAL, inspect.Parameter.KEYWORD_ONLY)


@dc.dataclass(frozen=True, slots=True)
class MethodSpec:
    """Signature and declared return types of one interface method.

    ``signature`` excludes ``self``. ``return_types`` is empty for methods
    annotated ``-> None`` and holds ``Any`` for unannotated methods.
    """

    name: str
    signature: inspect.Signature
    return_types: tuple[TypeDescriptor, ...]

    @classmethod
    def from_function(
        cls, name: str, func: t.Callable[..., object], *, bound: bool = True
    ) -> MethodSpec:
        """Build a spec for *func*, dropping its first parameter when *bound*."""
        signature = inspect.signature(func)
        parameters = list(signature.parameters.values())
        if bound and parameters:
            parameters = parameters[1:]
        hints = _type_hints(func)
        annotated = [
            param.replace(annotation=hints.get(param.name, param.annotation))
            for param in parameters
        ]
        if "return" not in hints:
            return_types: tuple[TypeDescriptor, ...] = (describe(t.Any),)
        elif _is_void(hints["return"]):
            return_types = ()
        else:
            return_types = (describe(hints["return"]),)
        return cls(
            name,
            signature.replace(
                parameters=annotated,
                return_annotation=hints.get("return", inspect.Signature.empty),
            ),
            return_types,
        )

    @property
    def arity(self) -> int:
        """Return the number of parameter positions recorded per call."""
        return len(self.signature.parameters)

    def bind(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> tuple[object, ...]:
        """Return one value per parameter position, defaults applied.

        The ``*args`` tail becomes one tuple-valued position and ``**kwargs``
        one dict-valued position. Integers passed where a ``float`` or
        ``complex`` is declared are widened to that type.

        Raises
        ------
        TypeError
            When the arguments do not fit the signature.
        """
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return tuple(
            _promote_param(param, bound.arguments[name])
            for name, param in self.signature.parameters.items()
        )

    def promote_matchers(self, matchers: t.Sequence[Matcher]) -> list[Matcher]:
        """Widen ``Eq`` values the way :meth:`bind` widens arguments."""
        return [
            Eq(promote_argument(matcher.value, describe(param.annotation)))
            if isinstance(matcher, Eq) and param.kind in _NAMED
            else matcher
            for matcher, param in zip(
                matchers, self.signature.parameters.values(), strict=True
            )
        ]

    def align_matchers(
        self,
        args: t.Sequence[object],
        kwargs: t.Mapping[str, object],
        matchers: t.Sequence[Matcher],
    ) -> list[Matcher] | None:
        """Reorder per-argument *matchers* into parameter order.

        Matchers are registered in the order the caller wrote the arguments.
        When every explicit argument used a matcher, keyword arguments are
        moved to their declared position and omitted parameters are matched
        against their defaults. Returns ``None`` when no such alignment
        exists.
        """
        if len(matchers) != len(args) + len(kwargs):
            return None
        parameters = self.signature.parameters
        positional = [p for p in parameters.values() if p.kind in _POSITIONAL]
        if len(args) > len(positional):
            return None
        by_name: dict[str, Matcher] = {
            param.name: matcher
            for param, matcher in zip(positional, matchers[: len(args)], strict=False)
        }
        for key, matcher in zip(kwargs, matchers[len(args) :], strict=True):
            param = parameters.get(key)
            if param is None or param.kind is inspect.Parameter.POSITIONAL_ONLY:
                return None
            by_name[key] = matcher
        aligned: list[Matcher] = []
        for name, param in parameters.items():
            if name in by_name:
                aligned.append(by_name[name])
            elif param.kind is inspect.Parameter.VAR_POSITIONAL:
                aligned.append(Eq(()))
            elif param.kind is inspect.Parameter.VAR_KEYWORD:
                aligned.append(Eq({}))
            elif param.default is not inspect.Parameter.empty:
                aligned.append(Eq(param.default))
            else:
                return None
        return aligned


def _promote_param(param: inspect.Parameter, value: object) -> object:
    if param.annotation is inspect.Parameter.empty:
        return value
    descriptor = describe(param.annotation)
    if param.kind is inspect.Parameter.VAR_POSITIONAL:
        items = t.cast("tuple[object, ...]", value)
        return tuple(promote_argument(item, descriptor) for item in items)
    if param.kind is inspect.Parameter.VAR_KEYWORD:
        mapping = t.cast("dict[str, object]", value)
        return {
            key: promote_argument(item, descriptor) for key, item in mapping.items()
        }
    return promote_argument(value, descriptor)


def _is_void(annotation: object) -> bool:
    return annotation is None or annotation is type(None) or annotation == "None"


def _type_hints(func: t.Callable[..., object]) -> dict[str, object]:
    try:
        return t.get_type_hints(func)
    except (NameError, TypeError):
        # Forward references that cannot be resolved are treated as ``Any``.
        logger.debug("Could not resolve annotations of %r", func, exc_info=True)
        return dict(getattr(func, "__annotations__", {}))


def _method_specs(interface: type) -> dict[str, MethodSpec]:
    specs: dict[str, MethodSpec] = {}
    for klass in reversed(interface.__mro__):
        if klass in _SKIPPED_BASES:
            continue
        for name, attr in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(attr, staticmethod):
                specs[name] = MethodSpec.from_function(
                    name, attr.__func__, bound=False
                )
            elif isinstance(attr, classmethod):
                specs[name] = MethodSpec.from_function(name, attr.__func__)
            elif inspect.isfunction(attr):
                specs[name] = MethodSpec.from_function(name, attr)
            else:
                specs.pop(name, None)
    return specs


class MockBase:
    """Base class of every generated mock."""

    _call_mox_specs: t.ClassVar[dict[str, MethodSpec]] = {}
    _call_mox_interface: t.ClassVar[type] = object

    def __init__(self, engine: GenericMock) -> None:
        object.__setattr__(self, "_call_mox_engine", engine)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        engine = get_generic_mock(self)
        return f"<mock {engine.name!r} of {self._call_mox_interface.__qualname__}>"


def _align_pending(
    spec: MethodSpec,
    args: tuple[object, ...],
    kwargs: dict[str, object],
    arity: int,
) -> None:
    registry = get_registry()
    pending = registry.pending()
    if not pending:
        return
    if not kwargs and len(pending) == arity:
        aligned: list[Matcher] | None = list(pending)
    else:
        aligned = spec.align_matchers(args, kwargs, pending)
    if aligned is None:
        return
    aligned = spec.promote_matchers(aligned)
    registry.drain()
    for matcher in aligned:
        registry.register(matcher)


def _make_method(spec: MethodSpec) -> t.Callable[..., object]:
    def method(self: MockBase, *args: object, **kwargs: object) -> object:
        params = spec.bind(args, kwargs)
        _align_pending(spec, args, kwargs, len(params))
        values = get_generic_mock(self).invoke(spec.name, params, spec.return_types)
        if not values:
            return None
        return values[0] if len(values) == 1 else values

    method.__name__ = spec.name
    method.__qualname__ = spec.name
    method.__signature__ = spec.signature  # type: ignore[attr-defined]
    return method


def mock(
    interface: type[T],
    *,
    name: str | None = None,
    fail_handler: FailHandler | None = None,
) -> T:
    """Return a mock implementing the public methods of *interface*.

    Parameters
    ----------
    interface:
        The class whose public methods are mocked. The mock is an instance of
        a subclass of *interface*, so ``isinstance`` checks pass.
    name:
        Label used in logs; defaults to the interface name.
    fail_handler:
        Failure hook overriding the process-wide one for this mock only.
    """
    if not isinstance(interface, type):
        msg = f"mock() expects a class, got {type(interface).__name__}"
        raise TypeError(msg)
    specs = _method_specs(interface)
    namespace: dict[str, object] = {
        method_name: _make_method(spec) for method_name, spec in specs.items()
    }
    namespace["_call_mox_specs"] = specs
    namespace["_call_mox_interface"] = interface
    bases: tuple[type, ...] = (MockBase,)
    if interface is not object:
        bases = (MockBase, interface)
    cls = types.new_class(
        f"Mock{interface.__name__}",
        bases,
        exec_body=lambda ns: ns.update(namespace),
    )
    if getattr(cls, "__abstractmethods__", None):
        # Private abstract methods are not mocked but must not block creation.
        cls.__abstractmethods__ = frozenset()  # type: ignore[attr-defined]
    engine = GenericMock(name or interface.__name__, fail_handler=fail_handler)
    logger.debug("Created %r with methods %s", engine, sorted(specs))
    return t.cast("T", cls(engine))


def get_generic_mock(obj: object) -> GenericMock:
    """Return the engine behind the mock *obj*.

    Raises
    ------
    UsageError
        When *obj* is not a mock created by :func:`mock`.
    """
    if not isinstance(obj, MockBase):
        msg = f"{obj!r} is not a mock created by call_mox.mock()"
        raise UsageError(msg)
    return t.cast("GenericMock", object.__getattribute__(obj, "_call_mox_engine"))


def method_specs(obj: object) -> dict[str, MethodSpec]:
    """Return the method specs of the mock *obj*."""
    get_generic_mock(obj)
    return dict(type(obj)._call_mox_specs)  # type: ignore[attr-defined]


class Verifier:
    """Proxy returned by ``verify(mock)`` whose methods run a verification."""

    def __init__(
        self,
        obj: object,
        policy: CountPolicy,
        *,
        in_order: InOrderContext | None = None,
        timeout: float | None = None,
    ) -> None:
        self._engine = get_generic_mock(obj)
        self._specs = method_specs(obj)
        self._policy = policy
        self._in_order = in_order
        self._timeout = timeout

    def __getattr__(self, name: str) -> t.Callable[..., OngoingVerification]:
        specs = self.__dict__.get("_specs", {})
        try:
            spec = specs[name]
        except KeyError:
            msg = f"{type(self).__name__!r} has no mocked method {name!r}"
            raise AttributeError(msg) from None

        def verify_call(*args: object, **kwargs: object) -> OngoingVerification:
            params = spec.bind(args, kwargs)
            _align_pending(spec, args, kwargs, len(params))
            matched = self._engine.verify(
                self._in_order, self._policy, name, params, timeout=self._timeout
            )
            return OngoingVerification(self._engine, matched, name, spec.arity)

        verify_call.__name__ = name
        return verify_call


__all__ = [
    "MethodSpec",
    "MockBase",
    "Verifier",
    "get_generic_mock",
    "method_specs",
    "mock",
]
