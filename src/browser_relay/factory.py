"""Factories for constructing components from configuration."""

from __future__ import annotations

import os

from .browser.base import BrowserSession, DisplayMode
from .browser.controller import SessionController
from .browser.executor import ActionExecutor
from .browser.playwright_session import PlaywrightBrowserSession
from .config import BrowserConfig, HistoryConfig, LLMConfig, NotificationConfig, RelayConfig
from .history.base import HistoryStore, InMemoryHistoryStore
from .history.supabase import SupabaseHistoryStore
from .llm.base import LLMClient
from .llm.gemini import GeminiLLM
from .llm.mock import ScriptedLLM, StaticResponseLLM
from .llm.openai_client import OpenAIChatLLM
from .notifications.base import ConsoleNotifier, Notifier, NullNotifier
from .orchestrator.prompt_builder import PromptBuilder
from .orchestrator.runner import ChatOrchestrator


DEFAULT_MODELS = {
    "gemini": "gemini-1.5-flash-001",
    "openai": "gpt-4o-mini",
}


def build_llm(config: LLMConfig) -> LLMClient:
    provider = config.provider.lower()
    if not config.model and provider in DEFAULT_MODELS:
        config = config.model_copy(update={"model": DEFAULT_MODELS[provider]})
    if provider == "gemini":
        if not config.api_key and os.environ.get("GEMINI_API_KEY"):
            config = config.model_copy(update={"api_key": os.environ["GEMINI_API_KEY"]})
        return GeminiLLM(config)
    if provider in {"openai", "azure", "openai-compatible"}:
        if not config.api_key and os.environ.get("OPENAI_API_KEY"):
            config = config.model_copy(update={"api_key": os.environ["OPENAI_API_KEY"]})
        return OpenAIChatLLM(config)
    if provider == "mock":
        return ScriptedLLM(config.parameters.get("responses", []))
    if provider == "static":
        return StaticResponseLLM(config.parameters.get("response", ""))
    raise ValueError(f"Unsupported LLM provider: {config.provider}")


def build_session_factory(config: BrowserConfig):
    def factory(mode: DisplayMode) -> BrowserSession:
        return PlaywrightBrowserSession(config, mode)

    return factory


def build_controller(config: BrowserConfig, notifier: Notifier) -> SessionController:
    initial_mode = DisplayMode.HEADLESS if config.headless else DisplayMode.WINDOWED
    return SessionController(
        build_session_factory(config),
        executor=ActionExecutor(),
        notifier=notifier,
        initial_mode=initial_mode,
    )


def build_history(config: HistoryConfig) -> HistoryStore:
    backend = config.backend.lower()
    if backend == "memory":
        return InMemoryHistoryStore(max_entries=config.max_entries)
    if backend == "supabase":
        return SupabaseHistoryStore(config)
    raise ValueError(f"Unsupported history backend: {config.backend}")


def build_notifier(config: NotificationConfig) -> Notifier:
    channel = config.channel.lower()
    if channel == "console":
        return ConsoleNotifier()
    if channel == "none":
        return NullNotifier()
    raise ValueError(f"Unsupported notification channel: {config.channel}")


def build_orchestrator(
    config: RelayConfig,
    controller: SessionController,
    llm: LLMClient,
    history: HistoryStore,
    notifier: Notifier,
) -> ChatOrchestrator:
    prompt_builder = PromptBuilder(
        destination=config.browser.start_url,
        viewport=(config.browser.viewport_width, config.browser.viewport_height),
    )
    return ChatOrchestrator(
        controller=controller,
        llm=llm,
        history=history,
        notifier=notifier,
        prompt_builder=prompt_builder,
    )
