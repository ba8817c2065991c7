#!/usr/bin/env python3
"""Programmatic process example.

This demonstrates using the engine directly:

* define two steps, one of them stateful
* wire them with `ProcessBuilder`, including a bounded cycle and a stop edge
* run the graph with `ProcessEngine` and inspect the `RunResult`

No credentials are needed; the steps only print to the console.
"""

from __future__ import annotations

import argparse
from enum import Enum
from typing import Sequence

from pydantic import BaseModel

from process_orchestrator.console import StdConsole
from process_orchestrator.core.config import ProcessConfig
from process_orchestrator.process import (
    ProcessBuilder,
    ProcessEngine,
    ProcessStep,
    StatefulProcessStep,
    StepContext,
    process_function,
)

console = StdConsole()


class Countdown(BaseModel):
    remaining: int = 0


class CountdownStep(StatefulProcessStep[Countdown]):
    state_type = Countdown

    class OutputEvents(str, Enum):
        TICK = "Tick"
        LIFTOFF = "Liftoff"
        ABORT = "Abort"

    @process_function("Count")
    def count(self, context: StepContext, start: int | None) -> None:
        if start is not None:
            self.state.remaining = start
        if self.state.remaining < 0:
            context.emit_event(self.OutputEvents.ABORT)
            return
        if self.state.remaining == 0:
            context.emit_event(self.OutputEvents.LIFTOFF, "We have liftoff")
            return
        console.write_line(f"T-{self.state.remaining}")
        self.state.remaining -= 1
        context.emit_event(self.OutputEvents.TICK)


class AnnounceStep(ProcessStep):
    @process_function("Announce")
    def announce(self, message: str) -> None:
        console.write_line(message)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a countdown process (programmatic example).")
    parser.add_argument("--from", dest="start", type=int, default=3, help="Count down from N")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ProcessConfig()
    settings.setup_logging()

    builder = ProcessBuilder("Countdown")
    countdown = builder.add_step(CountdownStep)
    announce = builder.add_step(AnnounceStep)

    builder.on_input_event("Launch").send_event_to(countdown)
    countdown.on_event(CountdownStep.OutputEvents.TICK).send_event_to(countdown)
    countdown.on_event(CountdownStep.OutputEvents.LIFTOFF).send_event_to(announce)
    countdown.on_event(CountdownStep.OutputEvents.ABORT).stop_process()

    result = ProcessEngine(settings.engine).start(builder.build(), "Launch", args.start)

    print(f"Status: {result.status.value}")
    print(f"Dispatches: {result.dispatch_count}")
    if result.reason:
        print(f"Reason: {result.reason}")
    return 0 if result.completed else 1


if __name__ == "__main__":
    raise SystemExit(main())
