"""Browser session abstractions."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Any


class DisplayMode(str, enum.Enum):
    """How the browser window is presented."""

    HEADLESS = "headless"
    WINDOWED = "windowed"

    def toggled(self) -> "DisplayMode":
        if self is DisplayMode.HEADLESS:
            return DisplayMode.WINDOWED
        return DisplayMode.HEADLESS


class BrowserSessionError(RuntimeError):
    """Raised when the browser session cannot serve a request."""


class BrowserSession(ABC):
    """A single live browser page driven by the relay."""

    @property
    @abstractmethod
    def mode(self) -> DisplayMode:
        """Display mode the session was launched in."""

    @property
    @abstractmethod
    def page(self) -> Any:
        """Return the live page handle.

        Raises :class:`BrowserSessionError` when the session is not launched.
        """

    @abstractmethod
    def launch(self) -> None:
        """Open the browser and navigate to the start destination."""

    @abstractmethod
    def close(self) -> None:
        """Terminate the browser session."""

    @abstractmethod
    def screenshot(self) -> bytes:
        """Capture the current viewport as an encoded image."""
