from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from process_orchestrator.process.events import EdgeTrigger, TriggerKind
from process_orchestrator.process.steps import FunctionBinding, ProcessStep


@dataclass(frozen=True, slots=True)
class FunctionTarget:
    """A routing destination: call `step`.`function`, binding the payload to `parameter`."""

    step: str
    function: str
    parameter: str | None = None

    def describe(self) -> str:
        suffix = f"({self.parameter})" if self.parameter else "()"
        return f"{self.step}.{self.function}{suffix}"


@dataclass(frozen=True, slots=True)
class Edge:
    trigger: EdgeTrigger
    targets: tuple[FunctionTarget, ...] = ()
    stop: bool = False

    def describe(self) -> str:
        destinations = [t.describe() for t in self.targets]
        if self.stop:
            destinations.append("StopProcess")
        return f"{self.trigger.describe()} -> {', '.join(destinations) or '(nothing)'}"


@dataclass(frozen=True, slots=True)
class StepDefinition:
    """A step as registered in a graph. Identity is (position, name)."""

    name: str
    position: int
    step_type: type[ProcessStep]
    functions: Mapping[str, FunctionBinding]
    output_events: frozenset[str]
    init_kwargs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_stateful(self) -> bool:
        return self.step_type.is_stateful()

    def create(self) -> ProcessStep:
        return self.step_type(**self.init_kwargs)


@dataclass(frozen=True, slots=True)
class ProcessGraph:
    """An immutable, validated process. Produced by `ProcessBuilder.build()`."""

    name: str
    steps: tuple[StepDefinition, ...]
    edges: tuple[Edge, ...]

    _steps_by_name: Mapping[str, StepDefinition] = field(init=False, repr=False, compare=False)
    _routes: Mapping[EdgeTrigger, tuple[Edge, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        routes: dict[EdgeTrigger, list[Edge]] = {}
        for edge in self.edges:
            routes.setdefault(edge.trigger, []).append(edge)
        object.__setattr__(
            self, "_steps_by_name", MappingProxyType({s.name: s for s in self.steps})
        )
        object.__setattr__(
            self, "_routes", MappingProxyType({k: tuple(v) for k, v in routes.items()})
        )

    def step(self, name: str) -> StepDefinition:
        return self._steps_by_name[name]

    def has_step(self, name: str) -> bool:
        return name in self._steps_by_name

    def edges_for(self, trigger: EdgeTrigger) -> tuple[Edge, ...]:
        return self._routes.get(trigger, ())

    @property
    def input_events(self) -> frozenset[str]:
        return frozenset(
            edge.trigger.name for edge in self.edges if edge.trigger.kind is TriggerKind.INPUT
        )
