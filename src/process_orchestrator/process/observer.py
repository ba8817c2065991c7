"""Run-scoped observers.

An observer is passed into `ProcessEngine.start()` and lives for exactly one
run. All hooks default to no-ops; override the ones you need. With
`max_workers > 1` the dispatch hooks are called from the engine's control
thread, never concurrently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from process_orchestrator.process.events import ProcessEvent

if TYPE_CHECKING:
    from process_orchestrator.process.engine import Dispatch, RunResult
    from process_orchestrator.process.errors import FunctionExecutionError
    from process_orchestrator.process.graph import ProcessGraph


class RunObserver:
    def on_run_started(self, graph: ProcessGraph, event: ProcessEvent) -> None:
        pass

    def on_step_activated(self, step_name: str) -> None:
        pass

    def on_dispatch_started(self, dispatch: Dispatch) -> None:
        pass

    def on_event_emitted(self, step_name: str, event: ProcessEvent) -> None:
        pass

    def on_dispatch_completed(self, dispatch: Dispatch) -> None:
        pass

    def on_dispatch_failed(self, dispatch: Dispatch, error: FunctionExecutionError) -> None:
        pass

    def on_run_finished(self, result: RunResult) -> None:
        pass


class CompositeObserver(RunObserver):
    """Forward every hook to several observers, in order."""

    def __init__(self, *observers: RunObserver) -> None:
        self._observers = observers

    def on_run_started(self, graph: ProcessGraph, event: ProcessEvent) -> None:
        for observer in self._observers:
            observer.on_run_started(graph, event)

    def on_step_activated(self, step_name: str) -> None:
        for observer in self._observers:
            observer.on_step_activated(step_name)

    def on_dispatch_started(self, dispatch: Dispatch) -> None:
        for observer in self._observers:
            observer.on_dispatch_started(dispatch)

    def on_event_emitted(self, step_name: str, event: ProcessEvent) -> None:
        for observer in self._observers:
            observer.on_event_emitted(step_name, event)

    def on_dispatch_completed(self, dispatch: Dispatch) -> None:
        for observer in self._observers:
            observer.on_dispatch_completed(dispatch)

    def on_dispatch_failed(self, dispatch: Dispatch, error: FunctionExecutionError) -> None:
        for observer in self._observers:
            observer.on_dispatch_failed(dispatch, error)

    def on_run_finished(self, result: RunResult) -> None:
        for observer in self._observers:
            observer.on_run_finished(result)
