"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator
from unittest.mock import Mock

import pytest

from process_orchestrator.console import ScriptedConsole
from process_orchestrator.core.config import (
    EngineConfig,
    GitHubConfig,
    LLMConfig,
    ProcessConfig,
)
from process_orchestrator.github.client import CreatedIssue, GitHubClient
from process_orchestrator.llm.provider import ChatProvider


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep real credentials and a developer `.env` out of every test."""
    for name in (
        "OPENAI_API_KEY",
        "GITHUB_TOKEN",
        "PROCESS_LLM_OPENAI_API_KEY",
        "PROCESS_LLM_PROVIDER",
        "PROCESS_GITHUB_TOKEN",
        "PROCESS_ENGINE_MAX_WORKERS",
        "PROCESS_ENGINE_MAX_DISPATCHES",
        "PROCESS_ENGINE_FAIL_FAST",
        "PROCESS_LOG_LEVEL",
        "PROCESS_LOG_FORMAT",
        "PROCESS_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provide a test LLM configuration."""
    return LLMConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4.1-mini",
    )


@pytest.fixture
def github_config() -> GitHubConfig:
    """Provide a test GitHub configuration."""
    return GitHubConfig(token="test-token")


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(max_workers=1, max_dispatches=100)


@pytest.fixture
def process_config(
    llm_config: LLMConfig,
    github_config: GitHubConfig,
    engine_config: EngineConfig,
) -> ProcessConfig:
    """Provide a test process configuration."""
    return ProcessConfig(
        log_level="DEBUG",
        debug=True,
        llm=llm_config,
        github=github_config,
        engine=engine_config,
    )


@pytest.fixture
def console() -> ScriptedConsole:
    return ScriptedConsole()


@pytest.fixture
def chat() -> Mock:
    """A chat provider that answers every completion with a fixed document."""
    provider = Mock(spec=ChatProvider)
    provider.complete.return_value = "Generated documentation"
    return provider


@pytest.fixture
def created_issue() -> CreatedIssue:
    return CreatedIssue(
        id=1001,
        number=42,
        url="https://github.com/octo-org/octo-repo/issues/42",
        title="Fix login button",
        body="## Steps\nClick login",
        owner="octo-org",
        repository="octo-repo",
        state="open",
        created_at="2025-01-01T00:00:00Z",
        author="octocat",
        labels=["bug"],
    )


@pytest.fixture
def github(created_issue: CreatedIssue) -> Mock:
    client = Mock(spec=GitHubClient)
    client.create_issue.return_value = created_issue
    return client


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """The CLI reconfigures root logging; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
