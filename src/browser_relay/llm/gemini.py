"""Client for the Google Generative Language REST API."""

from __future__ import annotations

import base64
from typing import Any, Optional

import httpx

from ..config import LLMConfig
from .base import LLMClient

_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiLLM(LLMClient):
    """Send the prompt and a screenshot to a Gemini model via ``generateContent``."""

    def __init__(self, config: LLMConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        if not config.model:
            raise ValueError("LLM model must be specified for GeminiLLM")
        if not config.api_key:
            raise ValueError("An API key is required for GeminiLLM")
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url or _DEFAULT_BASE_URL,
            timeout=config.parameters.get("timeout", 60),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": config.api_key,
            },
            transport=transport,
        )
        self._mime_type = config.parameters.get("mime_type", "image/jpeg")
        self._generation_config = {
            k: v
            for k, v in config.parameters.items()
            if k not in {"timeout", "mime_type"}
        }

    def complete(self, prompt: str, screenshot: bytes) -> str:
        payload: dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {
                            "inline_data": {
                                "mime_type": self._mime_type,
                                "data": base64.b64encode(screenshot).decode("ascii"),
                            }
                        },
                    ],
                }
            ]
        }
        if self._generation_config:
            payload["generationConfig"] = self._generation_config
        response = self._client.post(f"/models/{self._config.model}:generateContent", json=payload)
        response.raise_for_status()
        data = response.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError) as exc:
            raise ValueError(f"Unexpected response format: {data}") from exc
        return "".join(part.get("text", "") for part in parts)

    def close(self) -> None:
        self._client.close()
