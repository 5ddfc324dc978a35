"""Interface mocking built around a generic invocation engine.

Mocks are created from an interface with :func:`mock`, programmed with
:func:`when` and checked afterwards with :func:`verify` and friends. All
mocks share one engine design: calls are recorded in a per-mock log,
matched against stubbings and verified against count policies, optionally in
order across mocks or eventually within a timeout.
"""

from __future__ import annotations

from .capture import OngoingVerification
from .comparators import Any, Contains, Eq, Matcher, Predicate, Regex, StartsWith
from .config import Settings, configure, get_settings, reset_settings
from .controller import (
    CallMox,
    verify,
    verify_was_called,
    verify_was_called_eventually,
    verify_was_called_in_order,
    verify_was_called_once,
    when,
)
from .counts import at_least, at_most, never, once, times
from .doubles import get_generic_mock, mock
from .engine import GenericMock
from .errors import (
    CallMoxError,
    CaptureError,
    InvalidMatcherUsageError,
    InvalidStubbingError,
    InvalidTimeoutError,
    InvocationCountError,
    InvocationOrderError,
    ReturnTypeError,
    UnusedMatchersError,
    UsageError,
    VerificationError,
)
from .failures import (
    get_fail_handler,
    raise_failure,
    reset_fail_handler,
    set_fail_handler,
)
from .in_order import InOrderContext
from .invocation import Invocation
from .matchers import (
    any_bool,
    any_bytes,
    any_dict,
    any_error,
    any_float,
    any_int,
    any_list,
    any_of,
    any_str,
    any_tuple,
    any_value,
    arg_that,
    contains,
    eq,
    matches_regex,
    starts_with,
)
from .registry import register_matcher
from .stubbing import OngoingStubbing

__all__ = [
    "Any",
    "CallMox",
    "CallMoxError",
    "CaptureError",
    "Contains",
    "Eq",
    "GenericMock",
    "InOrderContext",
    "InvalidMatcherUsageError",
    "InvalidStubbingError",
    "InvalidTimeoutError",
    "Invocation",
    "InvocationCountError",
    "InvocationOrderError",
    "Matcher",
    "OngoingStubbing",
    "OngoingVerification",
    "Predicate",
    "Regex",
    "ReturnTypeError",
    "Settings",
    "StartsWith",
    "UnusedMatchersError",
    "UsageError",
    "VerificationError",
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
    "at_least",
    "at_most",
    "configure",
    "contains",
    "eq",
    "get_fail_handler",
    "get_generic_mock",
    "get_settings",
    "matches_regex",
    "mock",
    "never",
    "once",
    "raise_failure",
    "register_matcher",
    "reset_fail_handler",
    "reset_settings",
    "set_fail_handler",
    "starts_with",
    "times",
    "verify",
    "verify_was_called",
    "verify_was_called_eventually",
    "verify_was_called_in_order",
    "verify_was_called_once",
    "when",
]
