"""Interfaces shared by the runnable examples."""

from __future__ import annotations

import abc


class Display(abc.ABC):
    """A text display."""

    @abc.abstractmethod
    def flash(self, message: str, times: int) -> None:
        """Flash *message* the given number of *times*."""

    @abc.abstractmethod
    def show(self, message: str) -> bool:
        """Show *message* and report success."""


class Thermometer(abc.ABC):
    """A temperature sensor."""

    @abc.abstractmethod
    def read(self) -> float:
        """Return the temperature in degrees Celsius."""


def warn_if_hot(sensor: Thermometer, display: Display) -> bool:
    """Flash a warning when the sensor reads above 30 degrees."""
    if sensor.read() > 30:
        display.flash("Too hot", 3)
        return True
    return False
