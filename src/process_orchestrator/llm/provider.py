"""Abstract base class for chat completion providers."""

from abc import ABC, abstractmethod
from typing import Any

from process_orchestrator.llm.history import ChatHistory


class LLMError(RuntimeError):
    """A completion call failed (network, API or malformed response)."""


class ChatProvider(ABC):
    """Abstract base class for chat completion providers.

    This interface allows pluggable LLM backends (OpenAI, LLaMA, etc.)
    """

    @abstractmethod
    def complete(
        self,
        history: ChatHistory,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate the next assistant message for a chat history.

        Args:
            history: Ordered messages, oldest first.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional provider-specific parameters.

        Returns:
            The generated message content.

        Raises:
            LLMError: If the provider call fails.
        """
        pass
