"""Step-based, event-driven process engine.

A process is a graph of steps wired together by events:
- steps expose functions and may own per-run state
- edges route a function result or a named event to target functions
- the engine drives one run from a start event until the queue drains or a
  stop edge fires
"""

from process_orchestrator.process.builder import ProcessBuilder, RoutingBuilder, StepHandle
from process_orchestrator.process.engine import Dispatch, ProcessEngine, RunResult, RunStatus
from process_orchestrator.process.errors import (
    ActivationError,
    FunctionExecutionError,
    GraphValidationError,
    ProcessError,
    ProcessRoutingError,
    StepNotActivatedError,
    UnboundEventError,
    UndeclaredEventError,
)
from process_orchestrator.process.events import EdgeTrigger, ProcessEvent, TriggerKind
from process_orchestrator.process.graph import Edge, FunctionTarget, ProcessGraph, StepDefinition
from process_orchestrator.process.observer import CompositeObserver, RunObserver
from process_orchestrator.process.steps import (
    FunctionBinding,
    ProcessStep,
    StatefulProcessStep,
    StepContext,
    process_function,
)

__all__ = [
    "ActivationError",
    "CompositeObserver",
    "Dispatch",
    "Edge",
    "EdgeTrigger",
    "FunctionBinding",
    "FunctionExecutionError",
    "FunctionTarget",
    "GraphValidationError",
    "ProcessBuilder",
    "ProcessEngine",
    "ProcessError",
    "ProcessEvent",
    "ProcessGraph",
    "ProcessRoutingError",
    "ProcessStep",
    "RoutingBuilder",
    "RunObserver",
    "RunResult",
    "RunStatus",
    "StatefulProcessStep",
    "StepContext",
    "StepDefinition",
    "StepHandle",
    "StepNotActivatedError",
    "TriggerKind",
    "UnboundEventError",
    "UndeclaredEventError",
    "process_function",
]
