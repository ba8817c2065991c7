"""GitHub issue creation process.

    ValidateIssueInput -> EnhanceIssue -> UserReview -> CreateGitHubIssue -> IssueConfirmation
                                            ^     |
                                            |     v
                                      ProcessUserFeedback

The start payload is `owner/repo|title|body` (body optional). Records travel
between steps as JSON text so every hop can be logged and replayed.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from process_orchestrator.console import DecisionProvider, OperatorConsole, StdConsole
from process_orchestrator.github.client import CreatedIssue, GitHubClient, GitHubError
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

logger = logging.getLogger(__name__)

START_GITHUB_ISSUE = "StartGitHubIssueProcess"

VALIDATE_STEP = "ValidateIssueInput"
ENHANCE_STEP = "EnhanceIssue"
REVIEW_STEP = "UserReview"
FEEDBACK_STEP = "ProcessUserFeedback"
CREATE_STEP = "CreateGitHubIssue"
CONFIRMATION_STEP = "IssueConfirmation"

APPROVE_WORDS = frozenset({"y", "yes", "approve"})
EXIT_WORDS = frozenset({"exit", "quit", "q"})

ENHANCE_SYSTEM_PROMPT = """You are an expert GitHub issue assistant. Your job is to improve issue \
titles and descriptions to make them clear, actionable, and well-formatted.

For the title:
- Make it concise but descriptive
- Use imperative mood when appropriate
- Ensure it clearly describes the problem or request

For the body:
- Structure it with clear sections
- Add markdown formatting
- Include relevant details like steps to reproduce, expected behavior, etc.
- Suggest appropriate labels based on content

Respond with a JSON object containing:
{
  "enhancedTitle": "improved title",
  "enhancedBody": "improved body with markdown",
  "suggestedLabels": ["label1", "label2"]
}"""

FEEDBACK_SYSTEM_PROMPT = """You are an expert GitHub issue editor. Your job is to modify GitHub \
issues based on user feedback while preserving the original intent and structure.

When given an issue and user feedback, you should:
1. Carefully analyze what the user wants to change
2. Apply the requested changes while maintaining quality
3. Keep the markdown formatting and structure
4. Preserve important technical details unless explicitly asked to change them

Respond with a JSON object containing the updated issue:
{
  "enhancedTitle": "updated title",
  "enhancedBody": "updated body with markdown",
  "suggestedLabels": ["label1", "label2"]
}

Be precise and only change what the user requested."""


class IssueInput(BaseModel):
    owner: str
    repository: str
    title: str
    body: str = ""
    labels: list[str] = Field(default_factory=list)


class EnhancedIssue(BaseModel):
    owner: str
    repository: str
    original_title: str
    original_body: str = ""
    enhanced_title: str
    enhanced_body: str = ""
    suggested_labels: list[str] = Field(default_factory=list)


class ModificationRequest(BaseModel):
    enhanced_issue: EnhancedIssue
    feedback: str


class CreatedIssueRecord(BaseModel):
    id: int
    number: int
    url: str
    title: str
    body: str = ""
    owner: str
    repository: str
    state: str = "open"
    created_at: str = ""
    author: str = "unknown"
    labels: list[str] = Field(default_factory=list)

    @classmethod
    def from_created_issue(cls, issue: CreatedIssue) -> CreatedIssueRecord:
        return cls(
            id=issue.id,
            number=issue.number,
            url=issue.url,
            title=issue.title,
            body=issue.body,
            owner=issue.owner,
            repository=issue.repository,
            state=issue.state,
            created_at=issue.created_at,
            author=issue.author,
            labels=list(issue.labels),
        )


class IssueDraft(BaseModel):
    title: str
    body: str
    labels: list[str]


def parse_issue_input(raw: str | None) -> IssueInput:
    """Parse `owner/repo|title|body`.

    Raises:
        ValueError: with the operator-facing reason.
    """

    parts = (raw or "").split("|", 2)
    if len(parts) < 2:
        raise ValueError("Invalid input format")

    repo_parts = parts[0].strip().split("/")
    if len(repo_parts) != 2 or not all(p.strip() for p in repo_parts):
        raise ValueError("Invalid repository format")

    title = parts[1].strip()
    if not title:
        raise ValueError("Title cannot be empty")

    return IssueInput(
        owner=repo_parts[0].strip(),
        repository=repo_parts[1].strip(),
        title=title,
        body=parts[2].strip() if len(parts) > 2 else "",
    )


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.splitlines()[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_ai_reply(reply: str, *, title: str, labels: list[str]) -> IssueDraft:
    """Read an `enhancedTitle`/`enhancedBody`/`suggestedLabels` JSON reply.

    A reply that is not a JSON object becomes the body; title and labels fall back.
    """

    try:
        data: Any = json.loads(_strip_code_fence(reply))
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return IssueDraft(title=title, body=reply, labels=list(labels))

    enhanced_title = data.get("enhancedTitle")
    enhanced_body = data.get("enhancedBody")
    suggested = data.get("suggestedLabels")
    if isinstance(suggested, list):
        suggested_labels = [s for s in suggested if isinstance(s, str) and s]
    else:
        suggested_labels = list(labels)

    return IssueDraft(
        title=enhanced_title if isinstance(enhanced_title, str) and enhanced_title else title,
        body=enhanced_body if isinstance(enhanced_body, str) else reply,
        labels=suggested_labels,
    )


def _preview(text: str, limit: int = 50) -> str:
    if not text:
        return "(empty)"
    return f"{text[:limit]}..."


class ValidateIssueInputStep(ProcessStep):
    class Functions:
        VALIDATE_INPUT = "ValidateInput"

    class OutputEvents(str, Enum):
        INPUT_VALIDATED = "InputValidated"
        VALIDATION_FAILED = "ValidationFailed"

    def __init__(self, console: OperatorConsole | None = None) -> None:
        self._console = console or StdConsole()

    @process_function(Functions.VALIDATE_INPUT)
    def validate_input(self, context: StepContext, raw_input: str | None) -> None:
        try:
            issue = parse_issue_input(raw_input)
        except ValueError as e:
            self._console.write_line(f"Validation failed: {e}. Expected 'owner/repo|title|body'")
            context.emit_event(self.OutputEvents.VALIDATION_FAILED, str(e))
            return

        self._console.write_line(f"   Repository: {issue.owner}/{issue.repository}")
        self._console.write_line(f"   Title: {issue.title}")
        self._console.write_line(f"   Body: {_preview(issue.body)}")
        context.emit_event(self.OutputEvents.INPUT_VALIDATED, issue.model_dump_json())


class ChatState(BaseModel):
    history: ChatHistory = Field(default_factory=ChatHistory)


class EnhanceIssueStep(StatefulProcessStep[ChatState]):
    """Asks the chat provider for a clearer title, a structured body and labels."""

    state_type = ChatState

    class Functions:
        ENHANCE_ISSUE = "EnhanceIssue"

    class OutputEvents(str, Enum):
        ISSUE_ENHANCED = "IssueEnhanced"
        ENHANCEMENT_FAILED = "EnhancementFailed"

    def __init__(self, chat: ChatProvider, console: OperatorConsole | None = None) -> None:
        self._chat = chat
        self._console = console or StdConsole()

    def activate(self, state: ChatState) -> None:
        if not state.history.messages:
            state.history.add_system_message(ENHANCE_SYSTEM_PROMPT)

    @process_function(Functions.ENHANCE_ISSUE)
    def enhance_issue(self, context: StepContext, issue_input_json: str) -> None:
        issue = IssueInput.model_validate_json(issue_input_json)
        history = self.state.history
        history.add_user_message(
            "Please enhance this GitHub issue:\n\n"
            f"Title: {issue.title}\n"
            f"Body: {issue.body}\n"
            f"Repository: {issue.owner}/{issue.repository}\n\n"
            "Provide suggestions to make it clearer and more actionable."
        )

        try:
            reply = self._chat.complete(history)
        except LLMError as e:
            logger.warning("Issue enhancement failed", extra={"error": str(e)})
            context.emit_event(self.OutputEvents.ENHANCEMENT_FAILED, f"AI enhancement failed: {e}")
            return
        history.add_assistant_message(reply)

        draft = parse_ai_reply(reply, title=issue.title, labels=["enhancement"])
        enhanced = EnhancedIssue(
            owner=issue.owner,
            repository=issue.repository,
            original_title=issue.title,
            original_body=issue.body,
            enhanced_title=draft.title,
            enhanced_body=draft.body,
            suggested_labels=draft.labels,
        )
        self._console.write_line(f"AI enhancement complete: {enhanced.enhanced_title}")
        context.emit_event(self.OutputEvents.ISSUE_ENHANCED, enhanced.model_dump_json())


class UserReviewStep(ProcessStep):
    class Functions:
        REVIEW_ENHANCEMENT = "ReviewEnhancement"

    class OutputEvents(str, Enum):
        APPROVAL_RECEIVED = "ApprovalReceived"
        REJECTION_RECEIVED = "RejectionReceived"
        MODIFICATION_REQUESTED = "ModificationRequested"

    def __init__(
        self, decisions: DecisionProvider, console: OperatorConsole | None = None
    ) -> None:
        self._decisions = decisions
        self._console = console or StdConsole()

    @staticmethod
    def render(issue: EnhancedIssue) -> str:
        rule = "=" * 60
        return "\n".join(
            [
                rule,
                "ISSUE ENHANCEMENT REVIEW",
                rule,
                f"Repository: {issue.owner}/{issue.repository}",
                "",
                "ORIGINAL TITLE:",
                f"   {issue.original_title}",
                "ENHANCED TITLE:",
                f"   {issue.enhanced_title}",
                "",
                "ORIGINAL BODY:",
                f"   {issue.original_body or '(empty)'}",
                "ENHANCED BODY:",
                f"   {issue.enhanced_body}",
                "",
                "SUGGESTED LABELS:",
                f"   {', '.join(issue.suggested_labels)}",
                rule,
                "REVIEW OPTIONS:",
                "  - 'y' or 'yes' to approve and create the issue",
                "  - 'n' or 'no' to cancel",
                "  - 'exit' to quit",
                "  - or describe the changes you want (e.g. 'make the title shorter')",
                "",
                "What would you like to do?",
            ]
        )

    @process_function(Functions.REVIEW_ENHANCEMENT)
    def review_enhancement(self, context: StepContext, enhanced_issue_json: str) -> None:
        issue = EnhancedIssue.model_validate_json(enhanced_issue_json)
        answer = self._decisions.present(self.render(issue))

        if answer is None:
            self._console.write_line("No more input. Exiting process...")
            context.emit_event(self.OutputEvents.REJECTION_RECEIVED, "Exit requested")
            return

        answer = answer.strip()
        lowered = answer.lower()
        if not answer:
            self._console.write_line("No input provided. Please try again.")
            request = ModificationRequest(enhanced_issue=issue, feedback="No input provided")
            context.emit_event(self.OutputEvents.MODIFICATION_REQUESTED, request.model_dump_json())
            return
        if lowered.startswith("n"):
            self._console.write_line("Issue creation cancelled by user")
            context.emit_event(self.OutputEvents.REJECTION_RECEIVED, "User cancelled")
            return
        if lowered in EXIT_WORDS:
            self._console.write_line("Exiting process...")
            context.emit_event(self.OutputEvents.REJECTION_RECEIVED, "Exit requested")
            return
        if lowered in APPROVE_WORDS:
            self._console.write_line("User approved the enhanced issue")
            context.emit_event(self.OutputEvents.APPROVAL_RECEIVED, enhanced_issue_json)
            return

        self._console.write_line("Processing your modification request...")
        request = ModificationRequest(enhanced_issue=issue, feedback=answer)
        context.emit_event(self.OutputEvents.MODIFICATION_REQUESTED, request.model_dump_json())


class ProcessUserFeedbackStep(StatefulProcessStep[ChatState]):
    """Applies operator feedback to the enhanced issue, keeping the edit conversation."""

    state_type = ChatState

    class Functions:
        PROCESS_FEEDBACK = "ProcessFeedback"

    class OutputEvents(str, Enum):
        ISSUE_MODIFIED = "IssueModified"
        MODIFICATION_FAILED = "ModificationFailed"

    def __init__(self, chat: ChatProvider, console: OperatorConsole | None = None) -> None:
        self._chat = chat
        self._console = console or StdConsole()

    def activate(self, state: ChatState) -> None:
        if not state.history.messages:
            state.history.add_system_message(FEEDBACK_SYSTEM_PROMPT)

    @process_function(Functions.PROCESS_FEEDBACK)
    def process_feedback(self, context: StepContext, modification_request_json: str) -> None:
        self._console.write_line("Processing your feedback with AI...")
        request = ModificationRequest.model_validate_json(modification_request_json)
        current = request.enhanced_issue

        history = self.state.history
        history.add_user_message(
            "Current GitHub Issue:\n"
            f"Title: {current.enhanced_title}\n"
            f"Body: {current.enhanced_body}\n"
            f"Labels: {', '.join(current.suggested_labels)}\n\n"
            f"User Feedback: {request.feedback}\n\n"
            "Please modify the issue based on this feedback while keeping the quality high."
        )

        try:
            reply = self._chat.complete(history)
        except LLMError as e:
            logger.warning("Feedback processing failed", extra={"error": str(e)})
            context.emit_event(
                self.OutputEvents.MODIFICATION_FAILED, f"AI modification failed: {e}"
            )
            return
        history.add_assistant_message(reply)

        draft = parse_ai_reply(
            reply, title=current.enhanced_title, labels=current.suggested_labels
        )
        modified = current.model_copy(
            update={
                "enhanced_title": draft.title,
                "enhanced_body": draft.body,
                "suggested_labels": draft.labels,
            }
        )
        self._console.write_line("Issue modified based on your feedback!")
        context.emit_event(self.OutputEvents.ISSUE_MODIFIED, modified.model_dump_json())


class CreateGitHubIssueStep(ProcessStep):
    class Functions:
        CREATE_ISSUE = "CreateIssue"

    class OutputEvents(str, Enum):
        ISSUE_CREATED = "IssueCreated"
        CREATION_FAILED = "CreationFailed"

    def __init__(
        self, github: GitHubClient | None = None, console: OperatorConsole | None = None
    ) -> None:
        # No client means no token was configured.
        self._github = github
        self._console = console or StdConsole()

    @process_function(Functions.CREATE_ISSUE)
    def create_issue(self, context: StepContext, enhanced_issue_json: str) -> None:
        issue = EnhancedIssue.model_validate_json(enhanced_issue_json)
        if self._github is None:
            self._console.write_line("GITHUB_TOKEN is not set")
            context.emit_event(self.OutputEvents.CREATION_FAILED, "Missing GitHub token")
            return

        try:
            created = self._github.create_issue(
                owner=issue.owner,
                repo=issue.repository,
                title=issue.enhanced_title,
                body=issue.enhanced_body,
                labels=issue.suggested_labels,
            )
        except (GitHubError, ValueError) as e:
            logger.warning(
                "Issue creation failed",
                extra={"repo": f"{issue.owner}/{issue.repository}", "error": str(e)},
            )
            self._console.write_line(f"Failed to create issue: {e}")
            context.emit_event(self.OutputEvents.CREATION_FAILED, str(e))
            return

        record = CreatedIssueRecord.from_created_issue(created)
        self._console.write_line(f"GitHub issue created: #{record.number}")
        context.emit_event(self.OutputEvents.ISSUE_CREATED, record.model_dump_json())


class IssueConfirmationStep(ProcessStep):
    class Functions:
        SHOW_CONFIRMATION = "ShowConfirmation"
        SHOW_ERROR = "ShowError"

    def __init__(self, console: OperatorConsole | None = None) -> None:
        self._console = console or StdConsole()

    @process_function(Functions.SHOW_CONFIRMATION)
    def show_confirmation(self, created_issue_json: str) -> CreatedIssueRecord:
        issue = CreatedIssueRecord.model_validate_json(created_issue_json)
        write = self._console.write_line
        rule = "=" * 70

        write(rule)
        write("GITHUB ISSUE CREATED SUCCESSFULLY")
        write(rule)
        write(f"Repository: {issue.owner}/{issue.repository}")
        write(f"Issue ID: {issue.id}")
        write(f"Issue Number: #{issue.number}")
        write(f"Status: {issue.state.upper()}")
        write(f"Title: {issue.title}")
        write(f"Created by: {issue.author}")
        write(f"Created at: {issue.created_at}")
        write(f"Labels: {', '.join(issue.labels) if issue.labels else 'None'}")
        write(f"URL: {issue.url}")
        write(
            "API URL: https://api.github.com/repos/"
            f"{issue.owner}/{issue.repository}/issues/{issue.number}"
        )

        if issue.body:
            preview = issue.body if len(issue.body) <= 200 else issue.body[:200] + "..."
            lines = preview.split("\n")
            write("Body Preview:")
            for line in lines[:5]:
                write(f"   {line}")
            if len(lines) > 5:
                write(f"   ... ({len(lines) - 5} more lines)")
        write("-" * 70)
        return issue

    @process_function(Functions.SHOW_ERROR)
    def show_error(self, error: str) -> None:
        write = self._console.write_line
        write("=" * 30)
        write("ISSUE CREATION FAILED")
        write("=" * 30)
        write(f"Error: {error}")
        write("Please check:")
        write("   - GITHUB_TOKEN environment variable is set")
        write("   - Token has 'repo' permissions")
        write("   - Repository exists and you have access")
        write("   - Repository format is correct (owner/repo)")


def build_github_issue_process(
    *,
    chat: ChatProvider,
    decisions: DecisionProvider,
    github: GitHubClient | None = None,
    console: OperatorConsole | None = None,
) -> ProcessGraph:
    builder = ProcessBuilder("GitHubIssueProcess")
    validate = builder.add_step(ValidateIssueInputStep, VALIDATE_STEP, console=console)
    enhance = builder.add_step(EnhanceIssueStep, ENHANCE_STEP, chat=chat, console=console)
    review = builder.add_step(UserReviewStep, REVIEW_STEP, decisions=decisions, console=console)
    feedback = builder.add_step(
        ProcessUserFeedbackStep, FEEDBACK_STEP, chat=chat, console=console
    )
    create = builder.add_step(CreateGitHubIssueStep, CREATE_STEP, github=github, console=console)
    confirm = builder.add_step(IssueConfirmationStep, CONFIRMATION_STEP, console=console)

    show_error = IssueConfirmationStep.Functions.SHOW_ERROR

    builder.on_input_event(START_GITHUB_ISSUE).send_event_to(validate)

    validate.on_event(ValidateIssueInputStep.OutputEvents.INPUT_VALIDATED).send_event_to(enhance)
    validate.on_event(ValidateIssueInputStep.OutputEvents.VALIDATION_FAILED).send_event_to(
        confirm, function=show_error
    )

    enhance.on_event(EnhanceIssueStep.OutputEvents.ISSUE_ENHANCED).send_event_to(review)
    enhance.on_event(EnhanceIssueStep.OutputEvents.ENHANCEMENT_FAILED).send_event_to(
        confirm, function=show_error
    )

    review.on_event(UserReviewStep.OutputEvents.APPROVAL_RECEIVED).send_event_to(create)
    review.on_event(UserReviewStep.OutputEvents.REJECTION_RECEIVED).stop_process()
    review.on_event(UserReviewStep.OutputEvents.MODIFICATION_REQUESTED).send_event_to(feedback)

    feedback.on_event(ProcessUserFeedbackStep.OutputEvents.ISSUE_MODIFIED).send_event_to(review)
    feedback.on_event(ProcessUserFeedbackStep.OutputEvents.MODIFICATION_FAILED).send_event_to(
        confirm, function=show_error
    )

    create.on_event(CreateGitHubIssueStep.OutputEvents.ISSUE_CREATED).send_event_to(
        confirm, function=IssueConfirmationStep.Functions.SHOW_CONFIRMATION
    )
    create.on_event(CreateGitHubIssueStep.OutputEvents.CREATION_FAILED).send_event_to(
        confirm, function=show_error
    )

    return builder.build()
