"""Workflow progress display for the GitHub issue process."""

from __future__ import annotations

from process_orchestrator.console import OperatorConsole, StdConsole
from process_orchestrator.process import (
    Dispatch,
    ProcessEvent,
    ProcessGraph,
    RunObserver,
    RunResult,
)
from process_orchestrator.processes.github_issue import (
    CONFIRMATION_STEP,
    CREATE_STEP,
    ENHANCE_STEP,
    FEEDBACK_STEP,
    REVIEW_STEP,
    VALIDATE_STEP,
    IssueConfirmationStep,
)

STAGES = (
    "Input Validation - Parse and validate repository and issue details",
    "AI Enhancement - Improve title, body formatting, and suggest labels",
    "Human Review - Show enhanced version for user approval",
    "GitHub API Call - Create the issue via REST API",
    "Confirmation - Display success and process summary",
)

_STEP_STAGES = {
    VALIDATE_STEP: 1,
    ENHANCE_STEP: 2,
    REVIEW_STEP: 3,
    FEEDBACK_STEP: 3,
    CREATE_STEP: 4,
    CONFIRMATION_STEP: 5,
}

_STAGE_ACTIONS = {
    1: "Parsing repository and issue details",
    2: "Using AI to improve content",
    3: "Awaiting user approval",
    4: "Calling GitHub REST API",
    5: "Displaying final results",
}

_COMPLETING_EVENTS = {
    "InputValidated": 1,
    "IssueEnhanced": 2,
    "ApprovalReceived": 3,
    "IssueCreated": 4,
}

_CANCELLING_EVENTS = {"RejectionReceived": 3}


class IssueProgressTracker(RunObserver):
    """Prints the five workflow stages and marks them as the run moves through them.

    One tracker per run: stage state lives on the instance, so concurrent runs
    never see each other's progress.
    """

    def __init__(self, console: OperatorConsole | None = None) -> None:
        self._console = console or StdConsole()
        self.completed: set[int] = set()
        self.cancelled: set[int] = set()
        self.current: int | None = None

    def _marker(self, stage: int) -> str:
        if stage in self.cancelled:
            return "[-]"
        if stage in self.completed:
            return "[x]"
        if stage == self.current:
            return "[>]"
        return "[ ]"

    def render(self, action: str = "") -> str:
        lines = ["-" * 65, "WORKFLOW PROGRESS", "-" * 65]
        for stage, text in enumerate(STAGES, start=1):
            if stage == self.current and action and stage not in self.completed:
                text = f"{text} - {action}"
            lines.append(f"   {stage}. {self._marker(stage)} {text}")
        lines.append("-" * 65)
        return "\n".join(lines)

    def on_run_started(self, graph: ProcessGraph, event: ProcessEvent) -> None:
        self._console.write_line("=" * 65)
        self._console.write_line("GITHUB ISSUE CREATION WORKFLOW")
        self._console.write_line("=" * 65)
        for stage, text in enumerate(STAGES, start=1):
            self._console.write_line(f"   {stage}. {text}")
        self._console.write_line("Starting process execution...")

    def on_dispatch_started(self, dispatch: Dispatch) -> None:
        stage = _STEP_STAGES.get(dispatch.step)
        if stage is None or dispatch.function == IssueConfirmationStep.Functions.SHOW_ERROR:
            return
        if stage == self.current:
            return
        self.current = stage
        self._console.write_line(self.render(_STAGE_ACTIONS[stage]))

    def on_event_emitted(self, step_name: str, event: ProcessEvent) -> None:
        if event.id in _COMPLETING_EVENTS:
            self.completed.add(_COMPLETING_EVENTS[event.id])
        elif event.id in _CANCELLING_EVENTS:
            self.cancelled.add(_CANCELLING_EVENTS[event.id])

    def on_dispatch_completed(self, dispatch: Dispatch) -> None:
        if (
            dispatch.step == CONFIRMATION_STEP
            and dispatch.function == IssueConfirmationStep.Functions.SHOW_CONFIRMATION
        ):
            self.completed.add(5)
            self._console.write_line("Workflow completed successfully!")

    def on_run_finished(self, result: RunResult) -> None:
        self.current = None
        self._console.write_line(self.render())
