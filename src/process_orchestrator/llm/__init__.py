"""LLM package initialization."""

from process_orchestrator.llm.factory import LLMFactory
from process_orchestrator.llm.history import ChatHistory, ChatMessage, ChatRole
from process_orchestrator.llm.provider import ChatProvider, LLMError

__all__ = [
    "ChatHistory",
    "ChatMessage",
    "ChatProvider",
    "ChatRole",
    "LLMError",
    "LLMFactory",
]
