"""Local LLaMA chat provider implementation."""

import logging
from typing import Any

from process_orchestrator.core.config import LLMConfig
from process_orchestrator.llm.history import ChatHistory
from process_orchestrator.llm.provider import ChatProvider, LLMError

logger = logging.getLogger(__name__)


class LLaMAProvider(ChatProvider):
    """Local LLaMA model provider implementation.

    Requires llama-cpp-python to be installed:
        pip install 'process-orchestrator[llama]'
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the LLaMA provider.

        Args:
            config: LLM configuration.

        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not config.llama_model_path:
            raise ValueError("LLaMA model path is required")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for LLaMA provider. "
                "Install it with: pip install 'process-orchestrator[llama]'"
            ) from e

        self.config = config

        logger.info("Loading LLaMA model", extra={"model_path": config.llama_model_path})

        self.llm = Llama(
            model_path=config.llama_model_path,
            n_ctx=config.llama_n_ctx,
            verbose=False,
        )

        logger.info("LLaMA model loaded successfully")

    def complete(
        self,
        history: ChatHistory,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        logger.debug(
            "Generating chat completion", extra={"messages": len(history.messages)}
        )

        try:
            result = self.llm.create_chat_completion(
                messages=history.to_messages(),
                max_tokens=max_tokens or 512,
                temperature=temperature if temperature is not None else 0.7,
                **kwargs,
            )
            content = result["choices"][0]["message"]["content"] or ""
        except Exception as e:
            raise LLMError(f"LLaMA completion failed: {e}") from e

        logger.debug(f"Generated {len(content)} characters")
        return content
