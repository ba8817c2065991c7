"""Core package initialization."""

from process_orchestrator.core.config import (
    EngineConfig,
    GitHubConfig,
    LLMConfig,
    ProcessConfig,
)

__all__ = [
    "EngineConfig",
    "GitHubConfig",
    "LLMConfig",
    "ProcessConfig",
]
