"""Interfaces mocked throughout the unit tests."""

from __future__ import annotations

import abc
import enum
import typing as t


class Colour(enum.Enum):
    """Display colours."""

    RED = "red"
    GREEN = "green"


class Display(abc.ABC):
    """A small display device."""

    @abc.abstractmethod
    def flash(self, message: str, times: int) -> None:
        """Flash *message* the given number of *times*."""

    @abc.abstractmethod
    def show(self, message: str) -> bool:
        """Show *message* and report success."""

    @abc.abstractmethod
    def brightness(self) -> float:
        """Return the current brightness."""

    @abc.abstractmethod
    def title(self) -> str:
        """Return the window title."""

    @abc.abstractmethod
    def colour(self) -> Colour:
        """Return the active colour."""

    @abc.abstractmethod
    def lines(self) -> list[str]:
        """Return the visible lines."""

    @abc.abstractmethod
    def lookup(self, key: str) -> str | None:
        """Return the label stored under *key*."""

    @abc.abstractmethod
    def last_error(self) -> Exception | None:
        """Return the last device error."""

    @abc.abstractmethod
    def write(self, *chunks: str) -> int:
        """Write *chunks* and return the number of bytes written."""

    @abc.abstractmethod
    def configure(self, name: str, *, retries: int = 3) -> None:
        """Apply the named configuration."""

    @abc.abstractmethod
    def render(self, template: str, **context: object) -> str:
        """Render *template* with *context*."""

    @abc.abstractmethod
    def mode(self) -> t.Literal["on", "off"]:
        """Return the power mode."""

    def _private_helper(self) -> None:
        """Not part of the mocked surface."""


class Clock(t.Protocol):
    """Protocol-shaped interface."""

    def now(self) -> float:
        """Return the current time."""
        ...

    def sleep(self, seconds: float) -> None:
        """Sleep for *seconds*."""
        ...


class Store:
    """Plain class with a constructor that mocks never call."""

    def __init__(self, path: str) -> None:
        self.path = path

    def get(self, key):  # noqa: ANN001, ANN201
        """Return the value under *key* (unannotated)."""
        return key

    def put(self, key: str, value: object) -> None:
        """Store *value* under *key*."""

    @staticmethod
    def version() -> int:
        """Return the storage format version."""
        return 1


class Mixer(abc.ABC):
    """Audio mixer with numeric and untyped parameters."""

    @abc.abstractmethod
    def set_level(self, level: float) -> None:
        """Set the output level."""

    @abc.abstractmethod
    def send(self, payload: object) -> None:
        """Send an untyped control *payload*."""

    @abc.abstractmethod
    def scale(self, *factors: float) -> None:
        """Scale the channels by *factors*."""
