"""Split raw model replies into conversation text and an optional action."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from ..models import BrowserAction, ModelReply

LOGGER = logging.getLogger(__name__)

COMMAND_MARKER = "COMMAND:"


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract the first JSON object found in *text* and return it as a dict."""

    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _strip_code_fence(cleaned)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in model reply")
    data = json.loads(cleaned[start : end + 1])
    if not isinstance(data, dict):
        raise ValueError("Command payload is not a JSON object")
    return data


def parse_reply(text: str) -> ModelReply:
    """Parse raw model output into a :class:`ModelReply`.

    Anything that does not decode into a valid action leaves ``action`` empty;
    the conversation text is always returned.
    """

    parts = text.split(COMMAND_MARKER)
    conversation = parts[0].strip()
    if len(parts) < 2:
        return ModelReply(conversation=conversation)
    payload = parts[1].strip()
    try:
        action = BrowserAction.model_validate(extract_json_object(payload))
    except (ValueError, ValidationError, RecursionError) as exc:
        LOGGER.warning("Ignoring malformed command from model: %s", exc)
        return ModelReply(conversation=conversation)
    return ModelReply(conversation=conversation, action=action)


def _strip_code_fence(block: str) -> str:
    parts = block.split("```")
    if len(parts) >= 3:
        return parts[1]
    return block.strip("`")
