"""Named catalog of runnable processes.

The catalog is what the CLI talks to: it lists the available processes,
builds a fresh graph per run and hands it to the engine together with the
collaborators the steps need.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from process_orchestrator.console import (
    ConsoleDecisionProvider,
    DecisionProvider,
    OperatorConsole,
    StdConsole,
)
from process_orchestrator.core.config import ProcessConfig
from process_orchestrator.github.client import GitHubClient
from process_orchestrator.llm.factory import LLMFactory
from process_orchestrator.llm.provider import ChatProvider
from process_orchestrator.process import (
    CompositeObserver,
    ProcessEngine,
    ProcessGraph,
    ProcessRoutingError,
    RunObserver,
    RunResult,
)
from process_orchestrator.processes.documentation import (
    START_DOCUMENTATION,
    START_DOCUMENTATION_WITH_REVIEW,
    START_QUICK_INFO,
    build_documentation_process,
    build_documentation_with_review_process,
    build_quick_info_process,
)
from process_orchestrator.processes.github_issue import (
    START_GITHUB_ISSUE,
    build_github_issue_process,
)
from process_orchestrator.processes.progress import IssueProgressTracker

logger = logging.getLogger(__name__)


class Collaborators:
    """Lazily created services shared by the processes of one catalog.

    The chat provider and GitHub client are only constructed when a process
    that needs them is built, so the quick info process runs without any
    credentials.
    """

    def __init__(
        self,
        config: ProcessConfig,
        *,
        console: OperatorConsole | None = None,
        decisions: DecisionProvider | None = None,
        chat: ChatProvider | None = None,
        github: GitHubClient | None = None,
    ) -> None:
        self.config = config
        self.console = console or StdConsole()
        self.decisions = decisions or ConsoleDecisionProvider(self.console)
        self._chat = chat
        self._github = github

    @property
    def chat(self) -> ChatProvider:
        if self._chat is None:
            self._chat = LLMFactory.create(self.config.llm)
        return self._chat

    @property
    def github(self) -> GitHubClient | None:
        """The GitHub client, or None when no token is configured."""

        if self._github is None and self.config.github.token:
            self._github = GitHubClient(
                token=self.config.github.token,
                base_url=self.config.github.base_url,
                timeout=self.config.github.timeout_seconds,
            )
        return self._github

    def close(self) -> None:
        if self._github is not None:
            self._github.close()


@dataclass(frozen=True, slots=True)
class ProcessDefinition:
    name: str
    graph_name: str
    description: str
    default_input: str
    start_event_id: str
    build: Callable[[Collaborators], ProcessGraph]
    observer: Callable[[Collaborators], RunObserver] | None = None


def default_definitions() -> tuple[ProcessDefinition, ...]:
    return (
        ProcessDefinition(
            name="Quick Info Process",
            graph_name="QuickInfoProcess",
            description="Quickly gather basic product information",
            default_input="Quick Product",
            start_event_id=START_QUICK_INFO,
            build=lambda c: build_quick_info_process(console=c.console),
        ),
        ProcessDefinition(
            name="Documentation Process automatically",
            graph_name="DocumentationProcess",
            description=(
                "Generate comprehensive documentation for a product without human intervention"
            ),
            default_input="Sample Product",
            start_event_id=START_DOCUMENTATION,
            build=lambda c: build_documentation_process(chat=c.chat, console=c.console),
        ),
        ProcessDefinition(
            name="Documentation Process with Human in the Loop",
            graph_name="DocumentationWithReviewProcess",
            description="Includes human review and feedback in the documentation generation",
            default_input="Enterprise Product",
            start_event_id=START_DOCUMENTATION_WITH_REVIEW,
            build=lambda c: build_documentation_with_review_process(
                chat=c.chat, decisions=c.decisions, console=c.console
            ),
        ),
        ProcessDefinition(
            name="GitHub Issue Process",
            graph_name="GitHubIssueProcess",
            description="Validate, AI-enhance, review and create a GitHub issue",
            default_input="octocat/hello-world|Login button broken|Clicking login does nothing",
            start_event_id=START_GITHUB_ISSUE,
            build=lambda c: build_github_issue_process(
                chat=c.chat, decisions=c.decisions, github=c.github, console=c.console
            ),
            observer=lambda c: IssueProgressTracker(c.console),
        ),
    )


class ProcessCatalog:
    def __init__(
        self,
        collaborators: Collaborators,
        *,
        definitions: Sequence[ProcessDefinition] | None = None,
        engine: ProcessEngine | None = None,
    ) -> None:
        self.collaborators = collaborators
        self.engine = engine or ProcessEngine(collaborators.config.engine)
        if definitions is None:
            definitions = default_definitions()
        self._definitions = tuple(definitions)

    def __iter__(self) -> Iterator[ProcessDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def definitions(self) -> tuple[ProcessDefinition, ...]:
        return self._definitions

    def get(self, graph_name: str) -> ProcessDefinition:
        for definition in self._definitions:
            if definition.graph_name == graph_name:
                return definition
        known = ", ".join(d.graph_name for d in self._definitions)
        raise ProcessRoutingError(f"Unknown process {graph_name!r} (known: {known})")

    def start(
        self,
        graph_name: str,
        start_event_id: str,
        payload: Any = None,
        *,
        observer: RunObserver | None = None,
    ) -> RunResult:
        """Build a fresh `graph_name` graph and run it from `start_event_id`.

        Raises:
            ProcessRoutingError: unknown process name.
            UnboundEventError: the event does not start this process.
        """

        definition = self.get(graph_name)
        graph = definition.build(self.collaborators)

        observers: list[RunObserver] = []
        if definition.observer is not None:
            observers.append(definition.observer(self.collaborators))
        if observer is not None:
            observers.append(observer)

        logger.info(
            "Starting process",
            extra={"graph": graph_name, "event": start_event_id},
        )
        return self.engine.start(
            graph,
            start_event_id,
            payload,
            observer=CompositeObserver(*observers) if observers else None,
        )
