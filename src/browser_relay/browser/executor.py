"""Apply model-issued actions to the live browser page."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from ..models import ActionKind, BrowserAction
from .base import BrowserSession

LOGGER = logging.getLogger(__name__)

# The destination is a client-rendered app; each mutating action waits a fixed
# time so the following screenshot shows the settled UI.
SETTLE_DELAYS_MS: dict[ActionKind, int] = {
    ActionKind.CLICK: 500,
    ActionKind.TYPE: 500,
    ActionKind.PRESS: 500,
    ActionKind.SCROLL: 700,
    ActionKind.NAVIGATE: 1000,
    ActionKind.SET_VALUE: 500,
    ActionKind.CLEAR_INPUT: 300,
}
KEYSTROKE_DELAY_MS = 50
WAIT_FOR_SELECTOR_TIMEOUT_MS = 5000

_CLEAR_FOCUSED_INPUT = """() => {
    if (document.activeElement) {
        document.activeElement.value = '';
    }
}"""

_SCROLL_BY = "(pixels) => window.scrollBy(0, pixels)"

_SET_VALUE = """({selector, value}) => {
    const element = document.querySelector(selector);
    if (element) {
        element.value = value;
        element.dispatchEvent(new Event('input'));
    }
}"""


class ActionExecutor:
    """Execute one :class:`BrowserAction` against a session's page.

    :meth:`execute` never raises. A payload missing the fields its kind needs
    is skipped and still counts as success; only a failure inside the browser
    yields ``False``.
    """

    def __init__(
        self,
        *,
        settle_delays_ms: Optional[Mapping[ActionKind, int]] = None,
        keystroke_delay_ms: int = KEYSTROKE_DELAY_MS,
        selector_timeout_ms: int = WAIT_FOR_SELECTOR_TIMEOUT_MS,
    ) -> None:
        self._settle_delays = dict(SETTLE_DELAYS_MS)
        if settle_delays_ms:
            self._settle_delays.update(settle_delays_ms)
        self._keystroke_delay_ms = keystroke_delay_ms
        self._selector_timeout_ms = selector_timeout_ms
        self._handlers: dict[ActionKind, Callable[[object, BrowserAction], bool]] = {
            ActionKind.CLICK: self._click,
            ActionKind.TYPE: self._type,
            ActionKind.PRESS: self._press,
            ActionKind.SCROLL: self._scroll,
            ActionKind.NAVIGATE: self._navigate,
            ActionKind.SET_VALUE: self._set_value,
            ActionKind.CLEAR_INPUT: self._clear_input,
            ActionKind.WAIT_FOR_SELECTOR: self._wait_for_selector,
        }

    def execute(self, session: Optional[BrowserSession], action: Optional[BrowserAction]) -> bool:
        if action is None:
            return False
        handler = self._handlers.get(action.action_kind)
        if handler is None:
            LOGGER.info("No browser action needed for %r", action.kind)
            return True
        LOGGER.info("Executing browser action %s", action.to_command_json())
        try:
            if session is None:
                raise RuntimeError("No browser session available")
            page = session.page
            if handler(page, action):
                self._settle(page, action.action_kind)
            else:
                LOGGER.debug("Skipping %s action without its payload", action.kind)
        except Exception:
            LOGGER.exception("Error executing browser action %s", action.kind)
            return False
        return True

    def _settle(self, page, kind: ActionKind) -> None:
        delay = self._settle_delays.get(kind)
        if delay:
            page.wait_for_timeout(delay)

    # Handlers return False when the payload is incomplete and nothing ran.

    def _click(self, page, action: BrowserAction) -> bool:
        if not action.coordinates:
            return False
        page.mouse.click(action.coordinates.x, action.coordinates.y)
        return True

    def _type(self, page, action: BrowserAction) -> bool:
        if not action.text:
            return False
        page.evaluate(_CLEAR_FOCUSED_INPUT)
        page.keyboard.type(action.text, delay=self._keystroke_delay_ms)
        return True

    def _press(self, page, action: BrowserAction) -> bool:
        if not action.key:
            return False
        page.keyboard.press(action.key)
        return True

    def _scroll(self, page, action: BrowserAction) -> bool:
        if not action.pixels:
            return False
        page.evaluate(_SCROLL_BY, action.pixels)
        return True

    def _navigate(self, page, action: BrowserAction) -> bool:
        if not action.url:
            return False
        page.goto(action.url)
        return True

    def _set_value(self, page, action: BrowserAction) -> bool:
        if not (action.selector and action.value):
            return False
        page.evaluate(_SET_VALUE, {"selector": action.selector, "value": action.value})
        return True

    def _clear_input(self, page, action: BrowserAction) -> bool:
        page.evaluate(_CLEAR_FOCUSED_INPUT)
        return True

    def _wait_for_selector(self, page, action: BrowserAction) -> bool:
        if not action.selector:
            return False
        page.wait_for_selector(action.selector, timeout=self._selector_timeout_ms)
        return True
