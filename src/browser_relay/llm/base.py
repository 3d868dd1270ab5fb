"""Base classes for multimodal model integrations."""

from __future__ import annotations

from abc import ABC, abstractmethod


class LLMClient(ABC):
    """Abstract interface for model providers."""

    @abstractmethod
    def complete(self, prompt: str, screenshot: bytes) -> str:
        """Return the raw text reply for *prompt* given the current *screenshot*.

        Implementations may raise on transport or provider errors; the caller is
        responsible for turning those into a fallback reply.
        """

    def close(self) -> None:
        """Release network resources held by the client."""

        return None
