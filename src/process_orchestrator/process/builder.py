"""Append-only builder for process graphs.

    builder = ProcessBuilder("DocumentationProcess")
    gather = builder.add_step(GatherProductInfoStep)
    generate = builder.add_step(GenerateDocumentationStep, chat=provider)

    builder.on_input_event("Start").send_event_to(gather)
    gather.on_function_result().send_event_to(generate, parameter="product_info")
    graph = builder.build()

Routing is only checked when `build()` runs; every problem found there is
reported as a `GraphValidationError` naming the offending edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from process_orchestrator.process.errors import GraphValidationError
from process_orchestrator.process.events import EdgeTrigger, TriggerKind, event_id_of
from process_orchestrator.process.graph import Edge, FunctionTarget, ProcessGraph, StepDefinition
from process_orchestrator.process.steps import FunctionBinding, ProcessStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _PendingTarget:
    step: StepHandle
    function: str | None
    parameter: str | None


class StepHandle:
    """A step registered with a builder. Used as routing source and destination."""

    def __init__(self, builder: ProcessBuilder, definition: StepDefinition) -> None:
        self._builder = builder
        self.definition = definition

    @property
    def name(self) -> str:
        return self.definition.name

    def on_function_result(self, function: str | None = None) -> RoutingBuilder:
        """Route the return value of `function` (or the step's only function)."""

        return self._builder._routing(TriggerKind.FUNCTION_RESULT, function, source=self)

    def on_event(self, event_id: str | Enum) -> RoutingBuilder:
        return self._builder._routing(TriggerKind.EVENT, event_id_of(event_id), source=self)

    def __repr__(self) -> str:
        return f"StepHandle({self.name!r})"


class RoutingBuilder:
    """Collects the destinations of one trigger. Chain `send_event_to` calls to fan out."""

    def __init__(
        self,
        builder: ProcessBuilder,
        kind: TriggerKind,
        name: str | None,
        source: StepHandle | None,
    ) -> None:
        self._builder = builder
        self._kind = kind
        self._name = name
        self._source = source
        self._targets: list[_PendingTarget] = []
        self._stop = False

    def send_event_to(
        self,
        step: StepHandle,
        function: str | None = None,
        parameter: str | None = None,
    ) -> RoutingBuilder:
        self._builder._ensure_open()
        self._targets.append(_PendingTarget(step=step, function=function, parameter=parameter))
        return self

    def stop_process(self) -> RoutingBuilder:
        self._builder._ensure_open()
        self._stop = True
        return self

    def _describe_source(self) -> str:
        if self._source is None:
            return f"input:{self._name}"
        if self._kind is TriggerKind.FUNCTION_RESULT:
            return f"{self._source.name}.{self._name or '?'}:result"
        return f"{self._source.name}:{self._name}"

    def _resolve_trigger(self) -> EdgeTrigger:
        if self._source is None:
            return EdgeTrigger.input(str(self._name))

        definition = self._source.definition
        if self._kind is TriggerKind.FUNCTION_RESULT:
            binding = _resolve_function(definition, self._name, edge=self._describe_source())
            return EdgeTrigger.function_result(definition.name, binding.name)

        if self._name not in definition.output_events:
            raise GraphValidationError(
                f"Step {definition.name!r} does not declare output event {self._name!r}",
                edge=self._describe_source(),
            )
        return EdgeTrigger.event(definition.name, str(self._name))

    def _build_edge(self) -> Edge:
        trigger = self._resolve_trigger()
        edge_name = self._describe_source()
        if not self._targets and not self._stop:
            raise GraphValidationError("Trigger has no destination", edge=edge_name)

        targets: list[FunctionTarget] = []
        for pending in self._targets:
            if pending.step._builder is not self._builder:
                raise GraphValidationError(
                    f"Target step {pending.step.name!r} belongs to another process",
                    edge=edge_name,
                )
            definition = pending.step.definition
            binding = _resolve_function(definition, pending.function, edge=edge_name)
            if pending.parameter is not None and pending.parameter != binding.parameter:
                expected = binding.parameter or "no parameter"
                raise GraphValidationError(
                    f"Parameter {pending.parameter!r} does not match "
                    f"{definition.name}.{binding.name} (expects {expected})",
                    edge=edge_name,
                )
            targets.append(
                FunctionTarget(
                    step=definition.name, function=binding.name, parameter=binding.parameter
                )
            )
        return Edge(trigger=trigger, targets=tuple(targets), stop=self._stop)


def _resolve_function(
    definition: StepDefinition, function: str | None, *, edge: str
) -> FunctionBinding:
    if function is None:
        if len(definition.functions) != 1:
            raise GraphValidationError(
                f"Step {definition.name!r} exposes {len(definition.functions)} functions; "
                "a function name is required",
                edge=edge,
            )
        return next(iter(definition.functions.values()))

    binding = definition.functions.get(function)
    if binding is None:
        raise GraphValidationError(
            f"Step {definition.name!r} has no function {function!r}", edge=edge
        )
    return binding


class ProcessBuilder:
    def __init__(self, name: str) -> None:
        if not name.strip():
            raise GraphValidationError("Process name is required")
        self.name = name
        self._steps: list[StepDefinition] = []
        self._handles: dict[str, StepHandle] = {}
        self._routings: list[RoutingBuilder] = []
        self._built = False

    def _ensure_open(self) -> None:
        if self._built:
            raise GraphValidationError(f"Process {self.name!r} has already been built")

    def add_step(
        self, step_type: type[ProcessStep], name: str | None = None, **init_kwargs: Any
    ) -> StepHandle:
        """Register a step. `init_kwargs` are passed to the step constructor on every run."""

        self._ensure_open()
        if not (isinstance(step_type, type) and issubclass(step_type, ProcessStep)):
            raise GraphValidationError(f"{step_type!r} is not a ProcessStep subclass")

        step_name = name or step_type.__name__
        if step_name in self._handles:
            raise GraphValidationError(f"Duplicate step name {step_name!r} in {self.name!r}")

        functions = step_type.function_bindings()
        if not functions:
            raise GraphValidationError(f"Step {step_name!r} exposes no process functions")
        if step_type.is_stateful() and getattr(step_type, "state_type", None) is None:
            raise GraphValidationError(f"Stateful step {step_name!r} does not declare state_type")

        definition = StepDefinition(
            name=step_name,
            position=len(self._steps),
            step_type=step_type,
            functions=MappingProxyType(dict(functions)),
            output_events=step_type.output_events(),
            init_kwargs=MappingProxyType(dict(init_kwargs)),
        )
        handle = StepHandle(self, definition)
        self._steps.append(definition)
        self._handles[step_name] = handle
        return handle

    def on_input_event(self, event_id: str | Enum) -> RoutingBuilder:
        """Route an external event entering the process."""

        return self._routing(TriggerKind.INPUT, event_id_of(event_id), source=None)

    def _routing(
        self, kind: TriggerKind, name: str | None, *, source: StepHandle | None
    ) -> RoutingBuilder:
        self._ensure_open()
        if source is not None and source._builder is not self:
            raise GraphValidationError(f"Step {source.name!r} belongs to another process")
        routing = RoutingBuilder(self, kind, name, source)
        self._routings.append(routing)
        return routing

    def build(self) -> ProcessGraph:
        self._ensure_open()
        edges = tuple(routing._build_edge() for routing in self._routings)
        if not any(edge.trigger.kind is TriggerKind.INPUT for edge in edges):
            raise GraphValidationError(f"Process {self.name!r} has no input event")

        self._built = True
        graph = ProcessGraph(name=self.name, steps=tuple(self._steps), edges=edges)
        logger.debug(
            "Process graph built",
            extra={"graph": self.name, "steps": len(graph.steps), "edges": len(graph.edges)},
        )
        return graph
