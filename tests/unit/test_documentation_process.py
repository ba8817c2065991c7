"""Scenario tests for the documentation processes."""

from unittest.mock import Mock

import pytest

from process_orchestrator.console import ConsoleDecisionProvider, ScriptedConsole
from process_orchestrator.core.config import EngineConfig
from process_orchestrator.llm.history import ChatHistory, ChatRole
from process_orchestrator.llm.provider import LLMError
from process_orchestrator.process import ProcessEngine, RunStatus
from process_orchestrator.processes.documentation import (
    DOC_SYSTEM_PROMPT,
    START_DOCUMENTATION,
    START_DOCUMENTATION_WITH_REVIEW,
    START_QUICK_INFO,
    DocState,
    build_documentation_process,
    build_documentation_with_review_process,
    build_quick_info_process,
)

PRODUCT_INFO = "Product 'Widget' is a revolutionary gadget with cutting-edge features..."


@pytest.fixture
def engine(engine_config: EngineConfig) -> ProcessEngine:
    return ProcessEngine(engine_config)


def test_quick_info_gathers_only(engine: ProcessEngine, console: ScriptedConsole) -> None:
    result = engine.start(build_quick_info_process(console=console), START_QUICK_INFO, "Widget")

    assert result.status is RunStatus.COMPLETED
    assert result.dispatch_count == 1
    assert "[GatherProductInfoStep] Gathering info for 'Widget'" in console.lines


def test_documentation_generates_and_publishes(
    engine: ProcessEngine, console: ScriptedConsole, chat: Mock
) -> None:
    graph = build_documentation_process(chat=chat, console=console)
    state = DocState()

    result = engine.start(
        graph, START_DOCUMENTATION, "Widget", initial_states={"GenerateDocumentation": state}
    )

    assert result.completed
    assert result.dispatch_count == 3
    chat.complete.assert_called_once()
    assert state.last_document == "Generated documentation"
    assert [m.role for m in state.history.messages] == [
        ChatRole.SYSTEM,
        ChatRole.USER,
        ChatRole.ASSISTANT,
    ]
    assert state.history.messages[1].content == f"Product Info: {PRODUCT_INFO}"
    assert "[PublishDocumentationStep] Publishing document:" in console.lines
    assert console.lines[-1] == "Generated documentation"


def test_fresh_state_gets_system_prompt_on_activation(
    engine: ProcessEngine, console: ScriptedConsole, chat: Mock
) -> None:
    state = DocState()
    assert state.history.messages == []

    engine.start(
        build_documentation_process(chat=chat, console=console),
        START_DOCUMENTATION,
        "Widget",
        initial_states={"GenerateDocumentation": state},
    )

    assert state.history.messages[0].role is ChatRole.SYSTEM
    assert state.history.messages[0].content == DOC_SYSTEM_PROMPT


def test_supplied_history_is_continued(
    engine: ProcessEngine, console: ScriptedConsole, chat: Mock
) -> None:
    state = DocState(history=ChatHistory.with_system_prompt("Earlier conversation"))

    engine.start(
        build_documentation_process(chat=chat, console=console),
        START_DOCUMENTATION,
        "Widget",
        initial_states={"GenerateDocumentation": state},
    )

    roles = [m.role for m in state.history.messages]
    assert roles == [ChatRole.SYSTEM, ChatRole.USER, ChatRole.ASSISTANT]
    assert state.history.messages[0].content == "Earlier conversation"


def test_documentation_reports_generation_failure(
    engine: ProcessEngine, console: ScriptedConsole, chat: Mock
) -> None:
    chat.complete.side_effect = LLMError("service unavailable")

    result = engine.start(
        build_documentation_process(chat=chat, console=console), START_DOCUMENTATION, "Widget"
    )

    assert result.completed
    assert console.lines[-1] == "[PublishDocumentationStep] Nothing to publish: service unavailable"


def _review_run(engine: ProcessEngine, chat: Mock, answers: list[str]):
    console = ScriptedConsole(answers)
    graph = build_documentation_with_review_process(
        chat=chat, decisions=ConsoleDecisionProvider(console), console=console
    )
    return engine.start(graph, START_DOCUMENTATION_WITH_REVIEW, "Widget"), console


def test_review_input_fans_out_to_show_and_publish(engine: ProcessEngine, chat: Mock) -> None:
    result, console = _review_run(engine, chat, ["Looks great"])

    assert result.completed
    assert "Generated documentation" in console.lines
    shown = console.lines.index("[UserValidationStep] You entered: Looks great")
    published = console.lines.index("[PublishDocumentationStep] Publishing document:")
    assert shown < published
    assert console.lines[published + 1] == "Looks great"


def test_review_exit_halts_without_publishing(engine: ProcessEngine, chat: Mock) -> None:
    result, console = _review_run(engine, chat, ["exit"])

    assert result.status is RunStatus.HALTED
    assert result.stopped_by == "UserValidation:Exit"
    assert not any("Publishing" in line for line in console.lines)


def test_review_end_of_input_halts(engine: ProcessEngine, chat: Mock) -> None:
    result, _ = _review_run(engine, chat, [])

    assert result.halted


def test_review_empty_input_completes_without_event(engine: ProcessEngine, chat: Mock) -> None:
    result, console = _review_run(engine, chat, ["   "])

    assert result.completed
    assert "[UserValidationStep] Input cannot be empty." in console.lines
    assert not any("Publishing" in line for line in console.lines)
