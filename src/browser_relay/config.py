"""Configuration models for the browser relay."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseModel):
    """Settings for the multimodal model provider."""

    provider: str = Field(default="gemini")
    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class BrowserConfig(BaseModel):
    """Settings for the shared browser session."""

    headless: bool = True
    start_url: str = "https://www.youtube.com"
    viewport_width: int = 1280
    viewport_height: int = 800
    blocked_resource_type: str = "image"
    blocked_url_fragment: str = "generate_204"
    screenshot_type: str = Field(default="jpeg", description="Either 'jpeg' or 'png'.")
    launch_args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-gpu",
        ]
    )


class HistoryConfig(BaseModel):
    """Settings for the chat history store."""

    backend: str = Field(default="memory")
    url: Optional[str] = None
    api_key: Optional[str] = None
    table: str = "historyagents"
    max_entries: int = 500


class NotificationConfig(BaseModel):
    """Notification channel settings."""

    channel: str = Field(default="console")


class ServerConfig(BaseModel):
    """Settings for the HTTP API."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)


class RelayConfig(BaseSettings):
    """Top-level configuration for running the relay."""

    model_config = SettingsConfigDict(
        env_prefix="BROWSER_RELAY_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    llm: LLMConfig = Field(default_factory=LLMConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> RelayConfig:
    """Load configuration from an optional YAML file, the environment and overrides.

    Precedence, lowest first: defaults, environment / ``.env``, YAML file,
    keyword overrides.
    """

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = RelayConfig(**settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return RelayConfig.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
