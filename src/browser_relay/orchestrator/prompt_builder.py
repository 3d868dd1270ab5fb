"""Prompt construction utilities."""

from __future__ import annotations

from textwrap import dedent

from ..llm.reply_parser import COMMAND_MARKER
from ..models import ActionKind, BrowserAction, Coordinates

_INSTRUCTIONS = dedent(
    """
    Respond with:
    1. A friendly explanation of what you'll do.
    2. At most one command, on its own after the marker, in this format:
    {marker} {{"action": "{kinds}", ...}}

    Examples of valid commands:
    {examples}

    Coordinates refer to the {width}x{height} screenshot you were given.
    For searches prefer navigating directly to the site's search results URL
    instead of typing into the search box.
    Provide only valid JSON with double quotes after the marker.
    """
).strip()


class PromptBuilder:
    """Build the instruction sent to the model alongside each screenshot."""

    def __init__(
        self,
        destination: str = "https://www.youtube.com",
        viewport: tuple[int, int] = (1280, 800),
    ) -> None:
        self._destination = destination
        self._viewport = viewport

    def build(self, message: str) -> str:
        kinds = "|".join(kind.value for kind in ActionKind if kind is not ActionKind.NOOP)
        width, height = self._viewport
        instructions = _INSTRUCTIONS.format(
            marker=COMMAND_MARKER,
            kinds=kinds,
            examples=self._examples(),
            width=width,
            height=height,
        )
        return (
            f"You are a browser automation assistant working on {self._destination}.\n"
            "Analyze the screenshot and help with the following request:\n\n"
            f'"{message}"\n\n'
            f"{instructions}"
        )

    def _examples(self) -> str:
        examples = [
            BrowserAction(kind=ActionKind.CLICK.value, coordinates=Coordinates(x=640, y=400)),
            BrowserAction(kind=ActionKind.TYPE.value, text="lofi music"),
            BrowserAction(kind=ActionKind.PRESS.value, key="Enter"),
            BrowserAction(kind=ActionKind.SCROLL.value, pixels=400),
            BrowserAction(
                kind=ActionKind.NAVIGATE.value,
                url=f"{self._destination.rstrip('/')}/results?search_query=cats",
            ),
            BrowserAction(
                kind=ActionKind.SET_VALUE.value,
                selector="input[name=search_query]",
                value="cats",
            ),
            BrowserAction(kind=ActionKind.CLEAR_INPUT.value),
            BrowserAction(kind=ActionKind.WAIT_FOR_SELECTOR.value, selector="#contents"),
        ]
        return "\n".join(f"{COMMAND_MARKER} {action.to_command_json()}" for action in examples)
