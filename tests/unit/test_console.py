"""Unit tests for operator I/O."""

import io

from process_orchestrator.console import ConsoleDecisionProvider, ScriptedConsole, StdConsole


def test_std_console_reads_and_writes() -> None:
    stdin = io.StringIO("first\r\nsecond\n")
    stdout = io.StringIO()
    console = StdConsole(stdin, stdout)

    assert console.read_line("? ") == "first"
    console.write_line("done")
    assert console.read_line("") == "second"
    assert console.read_line() is None

    assert stdout.getvalue() == "? done\n> "


def test_scripted_console_replays_answers() -> None:
    console = ScriptedConsole(["y"])
    console.write_line("a\nb")

    assert console.read_line("pick") == "y"
    assert console.read_line() is None
    assert console.lines == ["a", "b"]
    assert console.prompts == ["pick", "> "]
    assert console.output == "a\nb"


def test_console_decision_provider_presents_then_reads() -> None:
    console = ScriptedConsole(["approve"])
    decisions = ConsoleDecisionProvider(console, prompt=">> ")

    assert decisions.present("Review this") == "approve"
    assert console.lines == ["Review this"]
    assert console.prompts == [">> "]
