"""Operator review step shared by the documentation review process."""

from __future__ import annotations

from enum import Enum

from process_orchestrator.console import DecisionProvider, OperatorConsole, StdConsole
from process_orchestrator.process import ProcessStep, StepContext, process_function

EXIT_WORDS = frozenset({"exit", "quit"})


class UserValidationStep(ProcessStep):
    class Functions:
        GET_USER_INPUT = "GetUserInput"
        SHOW_USER_INPUT = "ShowUserInput"

    class OutputEvents(str, Enum):
        USER_INPUT_RECEIVED = "UserInputReceived"
        EXIT = "Exit"

    def __init__(
        self, decisions: DecisionProvider, console: OperatorConsole | None = None
    ) -> None:
        self._decisions = decisions
        self._console = console or StdConsole()

    @process_function(Functions.GET_USER_INPUT)
    def get_user_input(self, context: StepContext, document: str) -> None:
        answer = self._decisions.present(
            "[UserValidationStep] Generated documentation:\n"
            f"{document}\n"
            "Please enter your input (type 'exit' to quit):"
        )
        if answer is None:
            context.emit_event(self.OutputEvents.EXIT)
            return

        answer = answer.strip()
        if not answer:
            # No event: the run drains here and completes without publishing.
            self._console.write_line("[UserValidationStep] Input cannot be empty.")
            return
        if answer.lower() in EXIT_WORDS:
            context.emit_event(self.OutputEvents.EXIT)
            return

        context.emit_event(self.OutputEvents.USER_INPUT_RECEIVED, answer)

    @process_function(Functions.SHOW_USER_INPUT)
    def show_user_input(self, user_input: str) -> None:
        self._console.write_line(f"[UserValidationStep] You entered: {user_input}")
