"""Operator I/O.

Steps never touch stdin/stdout directly. They receive an `OperatorConsole`
for output and a `DecisionProvider` when they need a human decision, so the
same processes run against a terminal, a script, or a test double.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterable
from typing import Protocol, TextIO


class OperatorConsole(Protocol):
    def read_line(self, prompt: str = "> ") -> str | None:
        """Return one line without its newline, or None at end of input."""
        ...

    def write_line(self, text: str = "") -> None: ...


class DecisionProvider(Protocol):
    """Presents content to an operator and returns their raw answer (None at end of input)."""

    def present(self, content: str) -> str | None: ...


class StdConsole:
    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._lock = threading.Lock()

    def read_line(self, prompt: str = "> ") -> str | None:
        with self._lock:
            if prompt:
                self._stdout.write(prompt)
                self._stdout.flush()
            line = self._stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def write_line(self, text: str = "") -> None:
        with self._lock:
            self._stdout.write(text + "\n")
            self._stdout.flush()


class ScriptedConsole:
    """Replays canned answers and records everything written."""

    def __init__(self, answers: Iterable[str] = ()) -> None:
        self._answers = list(answers)
        self._lock = threading.Lock()
        self.lines: list[str] = []
        self.prompts: list[str] = []

    def read_line(self, prompt: str = "> ") -> str | None:
        with self._lock:
            self.prompts.append(prompt)
            if not self._answers:
                return None
            return self._answers.pop(0)

    def write_line(self, text: str = "") -> None:
        with self._lock:
            self.lines.extend(text.split("\n"))

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


class ConsoleDecisionProvider:
    def __init__(self, console: OperatorConsole, *, prompt: str = "> ") -> None:
        self._console = console
        self._prompt = prompt

    def present(self, content: str) -> str | None:
        self._console.write_line(content)
        return self._console.read_line(self._prompt)
