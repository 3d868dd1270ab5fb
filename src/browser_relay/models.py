"""Shared models used across the browser relay."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionKind(str, enum.Enum):
    """Enumerated browser commands that the relay knows how to execute."""

    CLICK = "click"
    TYPE = "type"
    PRESS = "press"
    SCROLL = "scroll"
    NAVIGATE = "navigate"
    SET_VALUE = "setValue"
    CLEAR_INPUT = "clearInput"
    WAIT_FOR_SELECTOR = "waitForSelector"
    NOOP = "noop"


class Coordinates(BaseModel):
    """Viewport position targeted by a click."""

    x: float
    y: float


class BrowserAction(BaseModel):
    """A single instruction for the browser page, as emitted by the model.

    ``kind`` is kept as a free string so that an unknown command from the model
    degrades to a no-op instead of failing validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: str = Field(default=ActionKind.NOOP.value, alias="action")
    coordinates: Optional[Coordinates] = None
    text: Optional[str] = None
    key: Optional[str] = None
    pixels: Optional[float] = Field(
        default=None,
        description="Number of pixels to scroll vertically (positive = down).",
    )
    url: Optional[str] = None
    selector: Optional[str] = None
    value: Optional[str] = None

    @property
    def action_kind(self) -> ActionKind:
        try:
            return ActionKind(self.kind)
        except ValueError:
            return ActionKind.NOOP

    def to_command_json(self) -> str:
        """Serialise using the wire keys the model emits."""

        return self.model_dump_json(by_alias=True, exclude_none=True)


class ModelReply(BaseModel):
    """Parsed reply of the language model."""

    conversation: str
    action: Optional[BrowserAction] = None


class HistoryEntry(BaseModel):
    """One chat exchange stored in the history log."""

    username: str = "anonymous"
    message: str
    ai_response: str
    command: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationLevel(str, enum.Enum):
    """Severity of notification events."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class NotificationEvent(BaseModel):
    """Event emitted to notify operators."""

    type: str
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
