"""LLM client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import base64
from typing import Any, Optional

import httpx

from ..config import LLMConfig
from .base import LLMClient

_DEFAULT_SYSTEM_PROMPT = (
    "You are an automation assistant that controls a web browser on behalf of a user."
)


class OpenAIChatLLM(LLMClient):
    """Call an OpenAI-compatible chat completion API with a screenshot attached."""

    def __init__(self, config: LLMConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        if not config.model:
            raise ValueError("LLM model must be specified for OpenAIChatLLM")
        self._config = config
        headers = {"Content-Type": "application/json"}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._client = httpx.Client(
            base_url=config.base_url or "https://api.openai.com/v1",
            timeout=config.parameters.get("timeout", 60),
            headers=headers,
            transport=transport,
        )
        self._system_prompt = config.parameters.get("system_prompt", _DEFAULT_SYSTEM_PROMPT)
        self._temperature = config.parameters.get("temperature", 0.0)
        self._mime_type = config.parameters.get("mime_type", "image/jpeg")

    def complete(self, prompt: str, screenshot: bytes) -> str:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": self._build_messages(prompt, screenshot),
            "temperature": self._temperature,
        }
        payload.update(
            {
                k: v
                for k, v in self._config.parameters.items()
                if k not in {"timeout", "system_prompt", "temperature", "mime_type"}
            }
        )
        response = self._client.post("/chat/completions", json=payload)
        response.raise_for_status()
        data = response.json()
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError) as exc:
            raise ValueError(f"Unexpected response format: {data}") from exc

    def _build_messages(self, prompt: str, screenshot: bytes) -> list[dict[str, Any]]:
        image_url = (
            f"data:{self._mime_type};base64,"
            f"{base64.b64encode(screenshot).decode('ascii')}"
        )
        messages: list[dict[str, Any]] = []
        if self._system_prompt:
            messages.append({"role": "system", "content": self._system_prompt})
        messages.append(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        )
        return messages

    def close(self) -> None:
        self._client.close()
