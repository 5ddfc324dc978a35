"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

from call_mox.config import configure, get_settings
from call_mox.failures import reset_fail_handler
from call_mox.registry import get_registry

pytest_plugins = ("call_mox.pytest_plugin", "pytester")


@pytest.fixture(autouse=True)
def reset_call_mox_state() -> t.Generator[None, None, None]:
    """Ensure clean matcher, failure-hook and settings state between tests."""
    saved = get_settings()
    get_registry().reset()
    reset_fail_handler()
    yield
    get_registry().reset()
    reset_fail_handler()
    configure(
        poll_interval=saved.poll_interval, default_timeout=saved.default_timeout
    )
