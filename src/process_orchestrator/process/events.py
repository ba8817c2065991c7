from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class ProcessEvent:
    """A named payload moving between steps.

    Ids are unique within a process vocabulary, not globally. The payload is
    opaque to the engine and is handed to every routed target as-is.
    """

    id: str
    data: Any = None


class TriggerKind(str, Enum):
    INPUT = "input"
    FUNCTION_RESULT = "function_result"
    EVENT = "event"


@dataclass(frozen=True, slots=True)
class EdgeTrigger:
    """What fires an edge.

    - INPUT: an external event entering the process (`step` is None)
    - FUNCTION_RESULT: `step`.`name` returned
    - EVENT: `step` emitted the event `name`
    """

    kind: TriggerKind
    name: str
    step: str | None = None

    @classmethod
    def input(cls, event_id: str) -> EdgeTrigger:
        return cls(kind=TriggerKind.INPUT, name=event_id)

    @classmethod
    def function_result(cls, step: str, function: str) -> EdgeTrigger:
        return cls(kind=TriggerKind.FUNCTION_RESULT, name=function, step=step)

    @classmethod
    def event(cls, step: str, event_id: str) -> EdgeTrigger:
        return cls(kind=TriggerKind.EVENT, name=event_id, step=step)

    def describe(self) -> str:
        if self.kind is TriggerKind.INPUT:
            return f"input:{self.name}"
        if self.kind is TriggerKind.FUNCTION_RESULT:
            return f"{self.step}.{self.name}:result"
        return f"{self.step}:{self.name}"


def event_id_of(value: str | Enum) -> str:
    """Normalise an event id given either as a plain string or an `OutputEvents` member."""

    if isinstance(value, Enum):
        return str(value.value)
    return value
