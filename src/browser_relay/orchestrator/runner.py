"""Request orchestrator that turns a chat message into one browser step."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Optional

from ..browser.controller import SessionController
from ..history.base import HistoryStore
from ..llm.base import LLMClient
from ..llm.reply_parser import parse_reply
from ..models import (
    BrowserAction,
    HistoryEntry,
    ModelReply,
    NotificationEvent,
    NotificationLevel,
)
from ..notifications.base import Notifier, NullNotifier
from .prompt_builder import PromptBuilder

LOGGER = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm having trouble processing that request. Could you try again?"


@dataclass
class ChatResult:
    """Outcome of a single chat request."""

    conversation: str
    screenshot: str
    action: Optional[BrowserAction] = None
    executed: Optional[bool] = None


class ChatOrchestrator:
    """Coordinates the model, the history log and the shared browser session."""

    def __init__(
        self,
        controller: SessionController,
        llm: LLMClient,
        history: HistoryStore,
        notifier: Optional[Notifier] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ) -> None:
        self._controller = controller
        self._llm = llm
        self._history = history
        self._notifier = notifier or NullNotifier()
        self._prompt_builder = prompt_builder or PromptBuilder()

    def handle(self, message: str, username: Optional[str] = None) -> ChatResult:
        """Run one message through the model and apply the resulting action.

        Only screenshot failures propagate; model, history and action failures
        are absorbed here.
        """

        screenshot = self._controller.screenshot()
        reply = self._ask_model(message, screenshot)
        self._record(username or "anonymous", message, reply)

        executed: Optional[bool] = None
        if reply.action is not None:
            executed = self._controller.execute(reply.action)
            if not executed:
                self._notifier.notify(
                    NotificationEvent(
                        type="action_failed",
                        message=f"Browser action '{reply.action.kind}' failed",
                        level=NotificationLevel.WARNING,
                        data={"command": reply.action.to_command_json()},
                    )
                )
            screenshot = self._controller.screenshot()
        return ChatResult(
            conversation=reply.conversation,
            screenshot=base64.b64encode(screenshot).decode("ascii"),
            action=reply.action,
            executed=executed,
        )

    def _ask_model(self, message: str, screenshot: bytes) -> ModelReply:
        prompt = self._prompt_builder.build(message)
        try:
            raw = self._llm.complete(prompt, screenshot)
        except Exception:
            LOGGER.exception("Model request failed")
            return ModelReply(conversation=FALLBACK_REPLY)
        return parse_reply(raw)

    def _record(self, username: str, message: str, reply: ModelReply) -> None:
        entry = HistoryEntry(
            username=username,
            message=message,
            ai_response=reply.conversation,
            command=reply.action.to_command_json() if reply.action else None,
        )
        try:
            self._history.add(entry)
        except Exception:
            LOGGER.exception("Failed to store chat history for %s", username)
