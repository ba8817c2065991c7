"""OpenAI chat provider implementation."""

import logging
from typing import Any

from openai import OpenAI, OpenAIError

from process_orchestrator.core.config import LLMConfig
from process_orchestrator.llm.history import ChatHistory
from process_orchestrator.llm.provider import ChatProvider, LLMError

logger = logging.getLogger(__name__)


class OpenAIProvider(ChatProvider):
    """OpenAI API provider implementation."""

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: LLM configuration.
            client: Pre-built client (tests inject a mock here).

        Raises:
            ValueError: If API key is not provided.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required (set OPENAI_API_KEY)")

        self.config = config
        self.client = client or OpenAI(api_key=config.openai_api_key)
        self.model = config.openai_model
        self.temperature = config.openai_temperature

        logger.info("OpenAI provider initialized", extra={"model": self.model})

    def complete(
        self,
        history: ChatHistory,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        temp = temperature if temperature is not None else self.temperature

        logger.debug(
            "Requesting chat completion",
            extra={"model": self.model, "messages": len(history.messages)},
        )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=history.to_messages(),  # type: ignore[arg-type]
                max_tokens=max_tokens,
                temperature=temp,
                **kwargs,
            )
        except OpenAIError as e:
            raise LLMError(f"OpenAI completion failed: {e}") from e

        if not response.choices:
            raise LLMError("OpenAI completion returned no choices")

        content = response.choices[0].message.content or ""
        logger.debug(f"Generated {len(content)} characters")

        return content
