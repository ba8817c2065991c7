"""Step model: function bindings, the per-dispatch context and step state.

A step is a class. Its invocable functions are methods marked with
`@process_function`; its output vocabulary is a `str` Enum assigned to the
`OutputEvents` class attribute.

Example:

    class GreetStep(ProcessStep):
        class OutputEvents(str, Enum):
            GREETED = "Greeted"

        @process_function("Greet")
        def greet(self, context: StepContext, name: str) -> None:
            context.emit_event(self.OutputEvents.GREETED, f"Hello {name}")

Stateful steps derive from `StatefulProcessStep[StateT]`, set `state_type`
and may override `activate()` to prepare the state before the first call.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from process_orchestrator.process.errors import (
    GraphValidationError,
    StepNotActivatedError,
    UndeclaredEventError,
)
from process_orchestrator.process.events import ProcessEvent, event_id_of

CONTEXT_PARAMETER = "context"
_BINDING_ATTR = "__process_function__"

F = TypeVar("F", bound=Callable[..., Any])
StateT = TypeVar("StateT")


@dataclass(frozen=True, slots=True)
class FunctionBinding:
    """Metadata mapping a step function to the parameter its payload is bound to."""

    name: str
    method_name: str
    parameter: str | None
    accepts_context: bool


def process_function(name: str | None = None) -> Callable[[F], F]:
    """Mark a step method as an invocable process function.

    The method may take a `context` parameter and at most one data parameter.
    """

    def decorator(func: F) -> F:
        params = [p for p in inspect.signature(func).parameters.values() if p.name != "self"]
        data_params = [p.name for p in params if p.name != CONTEXT_PARAMETER]
        if len(data_params) > 1:
            raise TypeError(
                f"Process function {func.__qualname__} declares more than one data parameter: "
                f"{', '.join(data_params)}"
            )
        binding = FunctionBinding(
            name=name or func.__name__,
            method_name=func.__name__,
            parameter=data_params[0] if data_params else None,
            accepts_context=any(p.name == CONTEXT_PARAMETER for p in params),
        )
        setattr(func, _BINDING_ATTR, binding)
        return func

    return decorator


class StepContext:
    """Handed to a function for the duration of one dispatch.

    Events are collected in emission order and routed by the engine once the
    function returns. Nothing is routed if the function raises.
    """

    def __init__(self, *, step_name: str, function_name: str, vocabulary: frozenset[str]) -> None:
        self.step_name = step_name
        self.function_name = function_name
        self._vocabulary = vocabulary
        self._emitted: list[ProcessEvent] = []

    def emit_event(self, event_id: str | Enum, data: Any = None) -> None:
        eid = event_id_of(event_id)
        if eid not in self._vocabulary:
            raise UndeclaredEventError(self.step_name, eid)
        self._emitted.append(ProcessEvent(id=eid, data=data))

    @property
    def emitted(self) -> tuple[ProcessEvent, ...]:
        return tuple(self._emitted)


class ProcessStep:
    """A stateless step. The engine creates a fresh instance for every run."""

    OutputEvents: ClassVar[type[Enum] | None] = None

    @classmethod
    def is_stateful(cls) -> bool:
        return False

    @classmethod
    def output_events(cls) -> frozenset[str]:
        if cls.OutputEvents is None:
            return frozenset()
        return frozenset(event_id_of(member) for member in cls.OutputEvents)

    @classmethod
    def function_bindings(cls) -> dict[str, FunctionBinding]:
        bindings: dict[str, FunctionBinding] = {}
        owners: dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            for attr_name, attr in vars(klass).items():
                binding = getattr(attr, _BINDING_ATTR, None)
                if not isinstance(binding, FunctionBinding):
                    continue
                owner = owners.get(binding.name)
                # Overrides in a subclass replace the inherited binding.
                if owner is not None and owner != attr_name:
                    raise GraphValidationError(
                        f"Step {cls.__name__} declares function {binding.name!r} twice"
                    )
                bindings[binding.name] = binding
                owners[binding.name] = attr_name
        return bindings


class StatefulProcessStep(ProcessStep, Generic[StateT]):
    """A step owning one state object for the lifetime of a run.

    The engine constructs `state_type()` (or uses an externally supplied state),
    attaches it and calls `activate()` exactly once before the first function call.
    """

    state_type: ClassVar[type[Any] | None] = None

    _state: StateT | None = None

    @classmethod
    def is_stateful(cls) -> bool:
        return True

    @property
    def state(self) -> StateT:
        if self._state is None:
            raise StepNotActivatedError(f"Step {type(self).__name__} has not been activated")
        return self._state

    @property
    def is_activated(self) -> bool:
        return self._state is not None

    def activate(self, state: StateT) -> None:
        """Prepare state before the first function call. No-op by default."""

    def _attach_state(self, state: StateT) -> None:
        self._state = state
