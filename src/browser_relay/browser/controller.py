"""Lifecycle owner of the single shared browser session."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from ..models import BrowserAction, NotificationEvent, NotificationLevel
from ..notifications.base import Notifier, NullNotifier
from .base import BrowserSession, BrowserSessionError, DisplayMode
from .executor import ActionExecutor

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[DisplayMode], BrowserSession]
T = TypeVar("T")


class SessionController:
    """Own the live :class:`BrowserSession` and serialise all work on it.

    Every browser operation runs on one worker thread, one at a time. Sync
    Playwright objects are bound to the thread that created them, so the
    session must be launched and used on that same worker.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        executor: Optional[ActionExecutor] = None,
        notifier: Optional[Notifier] = None,
        initial_mode: DisplayMode = DisplayMode.HEADLESS,
    ) -> None:
        self._session_factory = session_factory
        self._executor = executor or ActionExecutor()
        self._notifier = notifier or NullNotifier()
        self._mode = initial_mode
        self._session: Optional[BrowserSession] = None
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="browser-session")
        self._closed = False

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def is_ready(self) -> bool:
        return self._session is not None

    def launch(self, mode: Optional[DisplayMode] = None) -> DisplayMode:
        """Replace the current session with a freshly launched one."""

        return self._submit(self._launch, mode or self._mode)

    def toggle_mode(self) -> DisplayMode:
        """Flip between headless and windowed and relaunch."""

        return self._submit(self._toggle)

    def screenshot(self) -> bytes:
        return self._submit(self._screenshot)

    def execute(self, action: BrowserAction) -> bool:
        return self._submit(self._execute, action)

    def shutdown(self) -> None:
        if self._closed:
            return
        try:
            self._submit(self._close_current)
        finally:
            self._closed = True
            self._worker.shutdown(wait=True)

    # Worker-thread helpers --------------------------------------------------

    def _submit(self, fn: Callable[..., T], *args: object) -> T:
        if self._closed:
            raise BrowserSessionError("Session controller has been shut down")
        return self._worker.submit(fn, *args).result()

    def _launch(self, mode: DisplayMode) -> DisplayMode:
        self._close_current()
        session = self._session_factory(mode)
        session.launch()
        self._session = session
        self._mode = mode
        LOGGER.info("Browser session launched in %s mode", mode.value)
        self._notifier.notify(
            NotificationEvent(
                type="session_launched",
                message=f"Browser session ready ({mode.value})",
                level=NotificationLevel.SUCCESS,
                data={"mode": mode.value},
            )
        )
        return mode

    def _toggle(self) -> DisplayMode:
        return self._launch(self._mode.toggled())

    def _screenshot(self) -> bytes:
        if not self._session:
            raise BrowserSessionError("Browser session is not started")
        return self._session.screenshot()

    def _execute(self, action: BrowserAction) -> bool:
        return self._executor.execute(self._session, action)

    def _close_current(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            session.close()
        except Exception:
            LOGGER.exception("Failed to close browser session")
