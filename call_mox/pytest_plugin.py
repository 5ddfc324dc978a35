"""Pytest plugin providing the ``call_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .config import configure
from .controller import CallMox

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("call_mox")
    group.addoption(
        "--call-mox-poll-interval",
        action="store",
        dest="call_mox_poll_interval",
        type=float,
        default=None,
        help=(
            "Seconds between re-checks during eventual verification. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--call-mox-default-timeout",
        action="store",
        dest="call_mox_default_timeout",
        type=float,
        default=None,
        help=(
            "Default deadline in seconds for verify_was_called_eventually(). "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "call_mox_poll_interval",
        "Seconds between re-checks during eventual verification.",
        default="",
    )
    parser.addini(
        "call_mox_default_timeout",
        "Default deadline in seconds for verify_was_called_eventually().",
        default="",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers and apply configured settings."""
    config.addinivalue_line(
        "markers",
        (
            "call_mox(report_via_pytest: bool = False): report mock failures "
            "with pytest.fail() instead of raising call_mox errors."
        ),
    )
    overrides = {
        "poll_interval": _setting(config, "call_mox_poll_interval"),
        "default_timeout": _setting(config, "call_mox_default_timeout"),
    }
    if any(value is not None for value in overrides.values()):
        settings = configure(**overrides)
        logger.debug("Applied call_mox settings %s", settings)


def _setting(config: pytest.Config, name: str) -> float | None:
    """Return the CLI value for *name*, falling back to the ini value."""
    # Priority order: CLI option > INI setting > environment
    cli_value = config.getoption(name, default=None)
    if cli_value is not None:
        return float(cli_value)
    raw = str(config.getini(name)).strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        msg = f"{name} must be a number, got {raw!r}"
        raise pytest.UsageError(msg) from exc


def fail_via_pytest(message: str, caller_skip: int = 0) -> None:
    """Failure hook reporting call_mox failures through :func:`pytest.fail`."""
    del caller_skip
    pytest.fail(message, pytrace=False)


def _report_via_pytest(request: pytest.FixtureRequest) -> bool:
    """Return marker override for pytest-style reporting if present."""
    marker = request.node.get_closest_marker("call_mox")
    if marker is None:
        return False
    return bool(marker.kwargs.get("report_via_pytest", False))


@pytest.fixture
def call_mox(request: pytest.FixtureRequest) -> t.Generator[CallMox, None, None]:
    """Provide an entered :class:`CallMox` controller."""
    fail_handler = fail_via_pytest if _report_via_pytest(request) else None
    mox = CallMox(fail_handler=fail_handler)
    try:
        mox.__enter__()
        yield mox
    except Exception:
        logger.exception("Error during call_mox fixture setup or test execution")
        raise
    finally:
        _teardown_call_mox(mox)


def _teardown_call_mox(mox: CallMox) -> None:
    """Exit the controller, failing the test on leftover matchers."""
    try:
        mox.__exit__(None, None, None)
    except Exception as err:
        logger.exception("Error during call_mox fixture cleanup")
        pytest.fail(f"{type(err).__name__}: {err}", pytrace=False)


__all__ = ["call_mox", "fail_via_pytest"]
