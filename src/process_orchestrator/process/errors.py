"""Error taxonomy for the process engine.

Build-time problems (`GraphValidationError`) and run-level fatal problems
(`UnboundEventError`, `ActivationError`) are raised to the caller. Faults inside
a step function are wrapped in `FunctionExecutionError` and reported on the
`RunResult` instead of propagating.
"""

from __future__ import annotations


class ProcessError(Exception):
    """Base class for all process engine errors."""


class GraphValidationError(ProcessError):
    """Raised by `ProcessBuilder.build()` when the graph is not well formed."""

    def __init__(self, message: str, *, edge: str | None = None) -> None:
        self.edge = edge
        if edge:
            message = f"{message} (edge: {edge})"
        super().__init__(message)


class ProcessRoutingError(ProcessError):
    """Raised when an event cannot be routed through the graph."""


class UnboundEventError(ProcessRoutingError):
    def __init__(self, event_id: str, *, process_name: str) -> None:
        self.event_id = event_id
        self.process_name = process_name
        super().__init__(f"Process {process_name!r} has no input binding for event {event_id!r}")


class ActivationError(ProcessError):
    """A step's state could not be constructed or activated. Fatal to the run."""

    def __init__(self, step_name: str, reason: str) -> None:
        self.step_name = step_name
        super().__init__(f"Activation of step {step_name!r} failed: {reason}")


class StepNotActivatedError(ProcessError):
    """Step state was read before the engine activated the step."""


class UndeclaredEventError(ProcessError):
    """A function emitted an event outside its step's declared vocabulary."""

    def __init__(self, step_name: str, event_id: str) -> None:
        self.step_name = step_name
        self.event_id = event_id
        super().__init__(f"Step {step_name!r} does not declare output event {event_id!r}")


class FunctionExecutionError(ProcessError):
    """An unhandled fault inside a step function body."""

    def __init__(self, step_name: str, function_name: str, cause: BaseException) -> None:
        self.step_name = step_name
        self.function_name = function_name
        self.cause = cause
        super().__init__(f"{step_name}.{function_name} failed: {cause}")
