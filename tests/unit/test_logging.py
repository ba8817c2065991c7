"""Unit tests for structured logging."""

import json
import logging

from process_orchestrator.logging import JsonFormatter, TextFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="process_orchestrator.process.engine",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Process run finished",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra() -> None:
    line = JsonFormatter().format(_record(graph="DocumentationProcess", dispatches=3))

    payload = json.loads(line)
    assert payload["level"] == "INFO"
    assert payload["logger"] == "process_orchestrator.process.engine"
    assert payload["message"] == "Process run finished"
    assert payload["extra"] == {"graph": "DocumentationProcess", "dispatches": 3}


def test_json_formatter_serialises_unknown_types() -> None:
    payload = json.loads(JsonFormatter().format(_record(when=object())))

    assert payload["extra"]["when"].startswith("<object object")


def test_text_formatter_appends_key_values() -> None:
    line = TextFormatter().format(_record(graph="QuickInfoProcess"))

    assert "Process run finished" in line
    assert line.endswith("graph=QuickInfoProcess")


def test_configure_logging_replaces_handlers() -> None:
    configure_logging("debug", fmt="text")
    configure_logging("warning")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.WARNING
    assert logging.getLogger("openai").level == logging.WARNING
