"""Documentation processes: gather product info, generate docs with an LLM, publish.

Three graphs share the steps in this module:
- quick info: gather only
- documentation: gather -> generate -> publish
- documentation with review: gather -> generate -> operator review -> publish
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, Field

from process_orchestrator.console import DecisionProvider, OperatorConsole, StdConsole
from process_orchestrator.llm.history import ChatHistory
from process_orchestrator.llm.provider import ChatProvider, LLMError
from process_orchestrator.process import (
    ProcessBuilder,
    ProcessGraph,
    ProcessStep,
    StatefulProcessStep,
    StepContext,
    process_function,
)
from process_orchestrator.processes.user_validation import UserValidationStep

logger = logging.getLogger(__name__)

START_QUICK_INFO = "StartQuickInfo"
START_DOCUMENTATION = "StartDocumentationProcess"
START_DOCUMENTATION_WITH_REVIEW = "StartDocumentationWithHitlProcess"

DOC_SYSTEM_PROMPT = "You are an AI documentation writer..."


class GatherProductInfoStep(ProcessStep):
    class Functions:
        GATHER_INFO = "GatherInfo"

    def __init__(self, console: OperatorConsole | None = None) -> None:
        self._console = console or StdConsole()

    @process_function(Functions.GATHER_INFO)
    def gather_info(self, product_name: str) -> str:
        self._console.write_line(f"[GatherProductInfoStep] Gathering info for '{product_name}'")
        # A real implementation would look the product up in a catalog service.
        return f"Product '{product_name}' is a revolutionary gadget with cutting-edge features..."


class DocState(BaseModel):
    history: ChatHistory = Field(default_factory=ChatHistory)
    last_document: str | None = None


class GenerateDocumentationStep(StatefulProcessStep[DocState]):
    """Writes documentation with the chat provider, keeping the conversation in state."""

    state_type = DocState

    class Functions:
        GENERATE_DOC = "GenerateDoc"
        GENERATE_DOC_AFTER_REVIEW = "GenerateDocAfterReview"

    class OutputEvents(str, Enum):
        DOCUMENTATION_GENERATED = "DocumentationGenerated"
        DOCUMENTATION_GENERATED_REQUEST_FEEDBACK = "DocumentationGeneratedRequestFeedback"
        GENERATION_FAILED = "DocumentationGenerationFailed"

    def __init__(self, chat: ChatProvider, console: OperatorConsole | None = None) -> None:
        self._chat = chat
        self._console = console or StdConsole()

    def activate(self, state: DocState) -> None:
        if not state.history.messages:
            state.history.add_system_message(DOC_SYSTEM_PROMPT)

    def _generate(self, context: StepContext, product_info: str) -> str | None:
        history = self.state.history
        history.add_user_message(f"Product Info: {product_info}")
        try:
            document = self._chat.complete(history)
        except LLMError as e:
            logger.warning("Documentation generation failed", extra={"error": str(e)})
            context.emit_event(self.OutputEvents.GENERATION_FAILED, str(e))
            return None

        history.add_assistant_message(document)
        self.state.last_document = document
        return document

    @process_function(Functions.GENERATE_DOC)
    def generate_doc(self, context: StepContext, product_info: str) -> None:
        self._console.write_line("[GenerateDocumentationStep] Generating docs from product info...")
        document = self._generate(context, product_info)
        if document is not None:
            context.emit_event(self.OutputEvents.DOCUMENTATION_GENERATED, document)

    @process_function(Functions.GENERATE_DOC_AFTER_REVIEW)
    def generate_doc_after_review(self, context: StepContext, product_info: str) -> None:
        self._console.write_line("[GenerateDocumentationStep] Generating docs for review...")
        document = self._generate(context, product_info)
        if document is not None:
            context.emit_event(
                self.OutputEvents.DOCUMENTATION_GENERATED_REQUEST_FEEDBACK, document
            )


class PublishDocumentationStep(ProcessStep):
    class Functions:
        PUBLISH_DOC = "PublishDoc"
        REPORT_FAILURE = "ReportFailure"

    def __init__(self, console: OperatorConsole | None = None) -> None:
        self._console = console or StdConsole()

    @process_function(Functions.PUBLISH_DOC)
    def publish(self, docs: str) -> str:
        # Publishing is console output only; a real target would be a docs site or wiki.
        self._console.write_line("[PublishDocumentationStep] Publishing document:\n" + docs)
        return docs

    @process_function(Functions.REPORT_FAILURE)
    def report_failure(self, error: str) -> None:
        self._console.write_line(f"[PublishDocumentationStep] Nothing to publish: {error}")


def build_quick_info_process(*, console: OperatorConsole | None = None) -> ProcessGraph:
    builder = ProcessBuilder("QuickInfoProcess")
    gather = builder.add_step(GatherProductInfoStep, "GatherProductInfo", console=console)

    builder.on_input_event(START_QUICK_INFO).send_event_to(gather)

    return builder.build()


def build_documentation_process(
    *, chat: ChatProvider, console: OperatorConsole | None = None
) -> ProcessGraph:
    builder = ProcessBuilder("DocumentationProcess")
    gather = builder.add_step(GatherProductInfoStep, "GatherProductInfo", console=console)
    generate = builder.add_step(
        GenerateDocumentationStep, "GenerateDocumentation", chat=chat, console=console
    )
    publish = builder.add_step(PublishDocumentationStep, "PublishDocumentation", console=console)

    events = GenerateDocumentationStep.OutputEvents
    builder.on_input_event(START_DOCUMENTATION).send_event_to(gather)
    gather.on_function_result().send_event_to(
        generate,
        function=GenerateDocumentationStep.Functions.GENERATE_DOC,
        parameter="product_info",
    )
    generate.on_event(events.DOCUMENTATION_GENERATED).send_event_to(
        publish, function=PublishDocumentationStep.Functions.PUBLISH_DOC
    )
    generate.on_event(events.GENERATION_FAILED).send_event_to(
        publish, function=PublishDocumentationStep.Functions.REPORT_FAILURE
    )

    return builder.build()


def build_documentation_with_review_process(
    *,
    chat: ChatProvider,
    decisions: DecisionProvider,
    console: OperatorConsole | None = None,
) -> ProcessGraph:
    builder = ProcessBuilder("DocumentationWithReviewProcess")
    gather = builder.add_step(GatherProductInfoStep, "GatherProductInfo", console=console)
    generate = builder.add_step(
        GenerateDocumentationStep, "GenerateDocumentation", chat=chat, console=console
    )
    review = builder.add_step(
        UserValidationStep, "UserValidation", decisions=decisions, console=console
    )
    publish = builder.add_step(PublishDocumentationStep, "PublishDocumentation", console=console)

    doc_events = GenerateDocumentationStep.OutputEvents
    review_events = UserValidationStep.OutputEvents

    builder.on_input_event(START_DOCUMENTATION_WITH_REVIEW).send_event_to(gather)
    gather.on_function_result().send_event_to(
        generate,
        function=GenerateDocumentationStep.Functions.GENERATE_DOC_AFTER_REVIEW,
        parameter="product_info",
    )
    generate.on_event(doc_events.DOCUMENTATION_GENERATED_REQUEST_FEEDBACK).send_event_to(
        review, function=UserValidationStep.Functions.GET_USER_INPUT
    )
    generate.on_event(doc_events.GENERATION_FAILED).send_event_to(
        publish, function=PublishDocumentationStep.Functions.REPORT_FAILURE
    )
    review.on_event(review_events.USER_INPUT_RECEIVED).send_event_to(
        review, function=UserValidationStep.Functions.SHOW_USER_INPUT, parameter="user_input"
    ).send_event_to(publish, function=PublishDocumentationStep.Functions.PUBLISH_DOC)
    review.on_event(review_events.EXIT).stop_process()

    return builder.build()
