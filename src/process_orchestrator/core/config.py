"""Configuration for the process orchestrator.

Every section is a pydantic-settings class and reads from the environment and
a local `.env` file. The AI and GitHub credentials also accept the plain
`OPENAI_API_KEY` / `GITHUB_TOKEN` variables the demo processes have always used.
"""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from process_orchestrator.logging import configure_logging


class LLMConfig(BaseSettings):
    """Configuration for the chat completion collaborator."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PROCESS_LLM_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4.1-mini",
        description="OpenAI chat model (service id) used by the process steps",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )

    # LLaMA settings
    llama_model_path: str | None = Field(
        default=None,
        description="Path to a local GGUF model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROCESS_LLM_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


class GitHubConfig(BaseSettings):
    """Configuration for the issue-tracker collaborator."""

    token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PROCESS_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="GitHub token with permission to create issues",
    )
    base_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout for GitHub REST calls",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROCESS_GITHUB_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


class EngineConfig(BaseSettings):
    """Runtime limits for the process engine."""

    max_workers: int = Field(
        default=1,
        ge=1,
        description="Concurrent dispatches across different steps (1 = sequential)",
    )
    max_dispatches: int = Field(
        default=1000,
        gt=0,
        description="Upper bound on dispatches per run; guards against runaway cycles",
    )
    fail_fast: bool = Field(
        default=True,
        description="Stop dequeuing as soon as a step function fails",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROCESS_ENGINE_",
        env_file=".env",
        extra="ignore",
    )


class ProcessConfig(BaseSettings):
    """Main configuration for the process orchestrator."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log line format",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )
    github: GitHubConfig = Field(
        default_factory=GitHubConfig,
        description="GitHub configuration",
    )
    engine: EngineConfig = Field(
        default_factory=EngineConfig,
        description="Engine configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROCESS_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = "DEBUG" if self.debug else self.log_level
        configure_logging(level, fmt=self.log_format)
