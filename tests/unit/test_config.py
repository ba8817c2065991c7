"""Unit tests for configuration."""

import pytest
from pydantic import ValidationError

from process_orchestrator.core.config import (
    EngineConfig,
    GitHubConfig,
    LLMConfig,
    ProcessConfig,
)


def test_llm_config_defaults() -> None:
    """Test LLM config default values."""
    config = LLMConfig(openai_api_key="test-key")

    assert config.provider == "openai"
    assert config.openai_model == "gpt-4.1-mini"
    assert config.openai_temperature == 0.7
    assert config.llama_n_ctx == 4096
    assert config.llama_model_path is None


def test_llm_config_reads_plain_openai_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")

    assert LLMConfig().openai_api_key == "sk-from-env"


def test_llm_config_rejects_unknown_provider() -> None:
    with pytest.raises(ValidationError):
        LLMConfig(provider="gpt-neo")


def test_github_config_defaults() -> None:
    """Test GitHub config default values."""
    config = GitHubConfig()

    assert config.token is None
    assert config.base_url == "https://api.github.com"
    assert config.timeout_seconds == 30.0


def test_github_config_reads_github_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")

    assert GitHubConfig().token == "ghp_env"


def test_engine_config_defaults() -> None:
    config = EngineConfig()

    assert config.max_workers == 1
    assert config.max_dispatches == 1000
    assert config.fail_fast is True


def test_engine_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROCESS_ENGINE_MAX_WORKERS", "4")
    monkeypatch.setenv("PROCESS_ENGINE_FAIL_FAST", "false")

    config = EngineConfig()

    assert config.max_workers == 4
    assert config.fail_fast is False


def test_engine_config_rejects_zero_workers() -> None:
    with pytest.raises(ValidationError):
        EngineConfig(max_workers=0)


def test_process_config_composition() -> None:
    """Test process config with nested configs."""
    config = ProcessConfig(
        log_level="DEBUG",
        debug=True,
    )

    assert config.log_level == "DEBUG"
    assert config.debug is True
    assert config.log_format == "json"
    assert isinstance(config.llm, LLMConfig)
    assert isinstance(config.github, GitHubConfig)
    assert isinstance(config.engine, EngineConfig)


def test_process_config_reads_dotenv(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("PROCESS_LOG_LEVEL=WARNING\nPROCESS_LOG_FORMAT=text\n")
    monkeypatch.chdir(tmp_path)

    config = ProcessConfig()

    assert config.log_level == "WARNING"
    assert config.log_format == "text"
