"""Factory for creating chat providers."""

import logging

from process_orchestrator.core.config import LLMConfig
from process_orchestrator.llm.provider import ChatProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating chat provider instances."""

    @staticmethod
    def create(config: LLMConfig) -> ChatProvider:
        """Create a chat provider based on configuration.

        Args:
            config: LLM configuration specifying the provider.

        Returns:
            Configured chat provider instance.

        Raises:
            ValueError: If provider type is not supported.
        """
        logger.info("Creating LLM provider", extra={"provider": config.provider})

        if config.provider == "openai":
            from process_orchestrator.llm.openai_provider import OpenAIProvider

            return OpenAIProvider(config)
        elif config.provider == "llama":
            from process_orchestrator.llm.llama_provider import LLaMAProvider

            return LLaMAProvider(config)
        else:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
