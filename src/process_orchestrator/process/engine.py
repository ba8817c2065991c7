"""Process engine: drives one run of a `ProcessGraph` from a start event.

The control loop owns every piece of run state (pending queue, step
instances, activation flags). Function bodies are the only code that may run
off the control thread, and only when `EngineConfig.max_workers > 1`; even
then a step instance is never handed a second dispatch while one is in flight.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from process_orchestrator.core.config import EngineConfig
from process_orchestrator.process.errors import (
    ActivationError,
    FunctionExecutionError,
    UnboundEventError,
)
from process_orchestrator.process.events import (
    EdgeTrigger,
    ProcessEvent,
    TriggerKind,
    event_id_of,
)
from process_orchestrator.process.graph import FunctionTarget, ProcessGraph, StepDefinition
from process_orchestrator.process.observer import RunObserver
from process_orchestrator.process.steps import ProcessStep, StatefulProcessStep, StepContext

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    COMPLETED = "completed"
    HALTED = "halted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Dispatch:
    """One scheduled invocation of a step function with a payload."""

    sequence: int
    target: FunctionTarget
    event: ProcessEvent

    @property
    def step(self) -> str:
        return self.target.step

    @property
    def function(self) -> str:
        return self.target.function


@dataclass(frozen=True, slots=True)
class RunResult:
    process: str
    status: RunStatus
    reason: str = ""
    dispatch_count: int = 0
    dropped_dispatches: int = 0
    failures: tuple[FunctionExecutionError, ...] = ()
    stopped_by: str | None = None

    @property
    def completed(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def halted(self) -> bool:
        return self.status is RunStatus.HALTED

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED


@dataclass
class _StepInstance:
    definition: StepDefinition
    step: ProcessStep
    activated: bool = False


@dataclass(frozen=True, slots=True)
class _Outcome:
    dispatch: Dispatch
    events: tuple[tuple[EdgeTrigger, ProcessEvent], ...] = ()
    error: FunctionExecutionError | None = None


@dataclass
class _Run:
    graph: ProcessGraph
    observer: RunObserver
    initial_states: Mapping[str, Any]
    pending: deque[Dispatch] = field(default_factory=deque)
    instances: dict[str, _StepInstance] = field(default_factory=dict)
    busy: set[str] = field(default_factory=set)
    failures: list[FunctionExecutionError] = field(default_factory=list)
    dispatch_count: int = 0
    sequence: int = 0
    stopped_by: str | None = None
    limit_exceeded: bool = False
    fail_fast_tripped: bool = False

    @property
    def should_stop(self) -> bool:
        return self.stopped_by is not None or self.limit_exceeded or self.fail_fast_tripped

    def route(self, trigger: EdgeTrigger, event: ProcessEvent) -> None:
        for edge in self.graph.edges_for(trigger):
            for target in edge.targets:
                self.sequence += 1
                self.pending.append(Dispatch(sequence=self.sequence, target=target, event=event))
            if edge.stop and self.stopped_by is None:
                self.stopped_by = trigger.describe()

    def next_ready(self) -> Dispatch | None:
        """Pop the oldest pending dispatch whose step instance is idle."""

        for index, dispatch in enumerate(self.pending):
            if dispatch.step not in self.busy:
                del self.pending[index]
                return dispatch
        return None


class ProcessEngine:
    """Runs process graphs. One engine may run many graphs; runs share nothing."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def start(
        self,
        graph: ProcessGraph,
        event_id: str | Enum,
        payload: Any = None,
        *,
        observer: RunObserver | None = None,
        initial_states: Mapping[str, Any] | None = None,
    ) -> RunResult:
        """Run `graph` from the external event `event_id` until it completes, halts or fails.

        Raises:
            UnboundEventError: `event_id` is not an input event of the graph. Nothing runs.
            ActivationError: a step's state could not be created or activated.
        """

        eid = event_id_of(event_id)
        trigger = EdgeTrigger.input(eid)
        if not graph.edges_for(trigger):
            raise UnboundEventError(eid, process_name=graph.name)

        states = dict(initial_states or {})
        for name in states:
            if not graph.has_step(name) or not graph.step(name).is_stateful:
                raise ActivationError(
                    name, "initial state supplied for an unknown or stateless step"
                )

        run = _Run(graph=graph, observer=observer or RunObserver(), initial_states=states)
        start_event = ProcessEvent(id=eid, data=payload)

        logger.info("Process run started", extra={"graph": graph.name, "event": eid})
        run.observer.on_run_started(graph, start_event)
        run.route(trigger, start_event)

        try:
            if self.config.max_workers <= 1:
                self._run_sequential(run)
            else:
                self._run_concurrent(run)
        except ActivationError:
            logger.exception("Process run aborted", extra={"graph": graph.name})
            raise

        result = self._result(run)
        log = logger.warning if result.failed else logger.info
        log(
            "Process run finished",
            extra={
                "graph": graph.name,
                "status": result.status.value,
                "dispatches": result.dispatch_count,
                "reason": result.reason,
            },
        )
        run.observer.on_run_finished(result)
        return result

    def _run_sequential(self, run: _Run) -> None:
        while run.pending and not run.should_stop:
            if not self._within_limit(run):
                break
            dispatch = run.pending.popleft()
            instance = self._prepare(run, dispatch)
            self._finish(run, self._execute(instance, dispatch))

    def _run_concurrent(self, run: _Run) -> None:
        workers = self.config.max_workers
        in_flight: dict[Future[_Outcome], _StepInstance] = {}

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"process-{run.graph.name}"
        ) as pool:
            while True:
                while not run.should_stop and len(in_flight) < workers:
                    if run.pending and not self._within_limit(run):
                        break
                    dispatch = run.next_ready()
                    if dispatch is None:
                        break
                    instance = self._prepare(run, dispatch)
                    run.busy.add(dispatch.step)
                    in_flight[pool.submit(self._execute, instance, dispatch)] = instance

                if not in_flight:
                    break

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    instance = in_flight.pop(future)
                    run.busy.discard(instance.definition.name)
                    outcome = future.result()
                    if run.should_stop and outcome.error is None:
                        # Work finishing after a stop is not routed any further.
                        logger.debug(
                            "Not routing outcome after stop",
                            extra={
                                "step": outcome.dispatch.step,
                                "function": outcome.dispatch.function,
                            },
                        )
                    self._finish(run, outcome, route=not run.should_stop)

    def _within_limit(self, run: _Run) -> bool:
        if run.dispatch_count < self.config.max_dispatches:
            return True
        run.limit_exceeded = True
        logger.warning(
            "Dispatch limit exceeded",
            extra={"graph": run.graph.name, "max_dispatches": self.config.max_dispatches},
        )
        return False

    def _prepare(self, run: _Run, dispatch: Dispatch) -> _StepInstance:
        instance = self._instance(run, dispatch.step)
        self._activate(run, instance)
        run.dispatch_count += 1
        logger.debug(
            "Dispatching",
            extra={
                "graph": run.graph.name,
                "step": dispatch.step,
                "function": dispatch.function,
                "event": dispatch.event.id,
            },
        )
        run.observer.on_dispatch_started(dispatch)
        return instance

    def _instance(self, run: _Run, step_name: str) -> _StepInstance:
        instance = run.instances.get(step_name)
        if instance is None:
            definition = run.graph.step(step_name)
            try:
                step = definition.create()
            except Exception as e:
                raise ActivationError(step_name, f"could not construct step: {e}") from e
            instance = _StepInstance(definition=definition, step=step)
            run.instances[step_name] = instance
        return instance

    def _activate(self, run: _Run, instance: _StepInstance) -> None:
        if instance.activated or not isinstance(instance.step, StatefulProcessStep):
            return

        name = instance.definition.name
        try:
            if name in run.initial_states:
                state = run.initial_states[name]
            else:
                state_type = instance.definition.step_type.state_type  # type: ignore[attr-defined]
                state = state_type()
            instance.step._attach_state(state)
            instance.step.activate(state)
        except Exception as e:
            raise ActivationError(name, str(e)) from e

        instance.activated = True
        logger.debug("Step activated", extra={"graph": run.graph.name, "step": name})
        run.observer.on_step_activated(name)

    @staticmethod
    def _execute(instance: _StepInstance, dispatch: Dispatch) -> _Outcome:
        definition = instance.definition
        binding = definition.functions[dispatch.function]
        context = StepContext(
            step_name=definition.name,
            function_name=binding.name,
            vocabulary=definition.output_events,
        )

        kwargs: dict[str, Any] = {}
        if binding.accepts_context:
            kwargs["context"] = context
        if binding.parameter is not None:
            kwargs[binding.parameter] = dispatch.event.data

        try:
            result = getattr(instance.step, binding.method_name)(**kwargs)
        except Exception as e:
            return _Outcome(
                dispatch=dispatch,
                error=FunctionExecutionError(definition.name, binding.name, e),
            )

        events = [(EdgeTrigger.event(definition.name, ev.id), ev) for ev in context.emitted]
        events.append(
            (
                EdgeTrigger.function_result(definition.name, binding.name),
                ProcessEvent(id=f"{definition.name}.{binding.name}.Result", data=result),
            )
        )
        return _Outcome(dispatch=dispatch, events=tuple(events))

    def _finish(self, run: _Run, outcome: _Outcome, *, route: bool = True) -> None:
        dispatch = outcome.dispatch
        if outcome.error is not None:
            run.failures.append(outcome.error)
            logger.warning(
                "Step function failed",
                exc_info=outcome.error.cause,
                extra={
                    "graph": run.graph.name,
                    "step": dispatch.step,
                    "function": dispatch.function,
                },
            )
            run.observer.on_dispatch_failed(dispatch, outcome.error)
            if self.config.fail_fast:
                run.fail_fast_tripped = True
            return

        # Route everything this dispatch produced before honouring a stop.
        for trigger, event in outcome.events if route else ():
            if trigger.kind is TriggerKind.EVENT:
                run.observer.on_event_emitted(dispatch.step, event)
            run.route(trigger, event)
        run.observer.on_dispatch_completed(dispatch)

    @staticmethod
    def _result(run: _Run) -> RunResult:
        common: dict[str, Any] = {
            "process": run.graph.name,
            "dispatch_count": run.dispatch_count,
            "dropped_dispatches": len(run.pending),
            "failures": tuple(run.failures),
            "stopped_by": run.stopped_by,
        }
        if run.failures:
            return RunResult(status=RunStatus.FAILED, reason=str(run.failures[0]), **common)
        if run.limit_exceeded:
            return RunResult(status=RunStatus.FAILED, reason="dispatch limit exceeded", **common)
        if run.stopped_by is not None:
            return RunResult(
                status=RunStatus.HALTED, reason=f"Stopped by {run.stopped_by}", **common
            )
        return RunResult(status=RunStatus.COMPLETED, **common)
