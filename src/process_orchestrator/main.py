"""CLI entrypoint: list the reference processes, run one, or drive the interactive menu."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from process_orchestrator import __version__
from process_orchestrator.console import OperatorConsole, StdConsole
from process_orchestrator.core.config import ProcessConfig
from process_orchestrator.process import ProcessError, RunResult, RunStatus
from process_orchestrator.processes.catalog import Collaborators, ProcessCatalog

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROCESS_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_HALTED = 3
EXIT_FAILED = 4

_STATUS_EXIT_CODES = {
    RunStatus.COMPLETED: EXIT_OK,
    RunStatus.HALTED: EXIT_HALTED,
    RunStatus.FAILED: EXIT_FAILED,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="process-orchestrator",
        description="Run event-driven step processes (documentation, GitHub issue creation)",
    )
    parser.add_argument(
        "--version", action="version", version=f"process-orchestrator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List the available processes")

    run = subparsers.add_parser("run", help="Run one process to completion")
    run.add_argument("process", help="Process graph name, e.g. 'DocumentationProcess'")
    run.add_argument(
        "--input",
        dest="payload",
        default=None,
        help="Start event payload (defaults to the process's sample input)",
    )
    run.add_argument(
        "--event",
        default=None,
        help="Start event id (defaults to the process's start event)",
    )

    subparsers.add_parser("interactive", help="Choose and run processes from a menu")

    return parser


def exit_code_for(result: RunResult) -> int:
    return _STATUS_EXIT_CODES[result.status]


def _print_result(console: OperatorConsole, result: RunResult) -> None:
    if result.completed:
        console.write_line(f"{result.process} completed ({result.dispatch_count} dispatches)")
    elif result.halted:
        console.write_line(f"{result.process} halted: {result.reason}")
    else:
        console.write_line(f"{result.process} failed: {result.reason}")


def _cmd_list(catalog: ProcessCatalog, console: OperatorConsole) -> int:
    for definition in catalog:
        console.write_line(f"{definition.graph_name}")
        console.write_line(f"    {definition.name} - {definition.description}")
        console.write_line(
            f"    start event: {definition.start_event_id}  "
            f"default input: {definition.default_input!r}"
        )
    return EXIT_OK


def _cmd_run(catalog: ProcessCatalog, console: OperatorConsole, args: argparse.Namespace) -> int:
    definition = catalog.get(args.process)
    payload = args.payload if args.payload is not None else definition.default_input
    event_id = args.event or definition.start_event_id

    result = catalog.start(definition.graph_name, event_id, payload)
    _print_result(console, result)
    return exit_code_for(result)


def _goodbye(console: OperatorConsole) -> int:
    console.write_line("Thank you for using the process orchestrator. Goodbye!")
    return EXIT_OK


def run_interactive(catalog: ProcessCatalog, console: OperatorConsole) -> int:
    """Menu loop: pick a process, give it input, run it, repeat."""

    definitions = catalog.definitions
    exit_choice = len(definitions) + 1

    while True:
        console.write_line("=" * 50)
        console.write_line("Available Processes:")
        for index, definition in enumerate(definitions, start=1):
            console.write_line(f"{index}. {definition.name} - {definition.description}")
        console.write_line(f"{exit_choice}. Exit Application")
        console.write_line(f"Select a process (enter number 1-{exit_choice}):")

        choice = console.read_line()
        if choice is None:
            return _goodbye(console)
        choice = choice.strip()
        if not choice.isdigit() or not 1 <= int(choice) <= exit_choice:
            console.write_line("Invalid selection. Please try again.")
            continue
        if int(choice) == exit_choice:
            return _goodbye(console)

        definition = definitions[int(choice) - 1]
        console.write_line(f"Selected: {definition.name}")
        console.write_line(f"Enter the input for {definition.name}:")
        payload = (console.read_line() or "").strip()
        if not payload:
            console.write_line(f"No input provided. Using default: '{definition.default_input}'")
            payload = definition.default_input

        console.write_line(f"Starting {definition.name} for: {payload}")
        try:
            result = catalog.start(definition.graph_name, definition.start_event_id, payload)
        except (ProcessError, ValueError, ImportError) as e:
            logger.exception("Process run failed", extra={"graph": definition.graph_name})
            console.write_line(f"An error occurred: {e}")
            console.write_line("Would you like to try again? (y/n):")
            retry = (console.read_line() or "").strip().lower()
            if retry not in {"y", "yes"}:
                console.write_line("Exiting application...")
                return EXIT_PROCESS_ERROR
            continue

        _print_result(console, result)
        console.write_line("What would you like to do next?")
        console.write_line("1. Run another process")
        console.write_line("2. Exit application")
        next_choice = console.read_line()
        if next_choice is None or next_choice.strip().lower() in {"2", "exit"}:
            return _goodbye(console)
        console.write_line("Let's run another process...")


def main(argv: list[str] | None = None, *, console: OperatorConsole | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ProcessConfig()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG_ERROR

    config.setup_logging()

    console = console or StdConsole()
    collaborators = Collaborators(config, console=console)
    catalog = ProcessCatalog(collaborators)

    try:
        if args.command == "list":
            return _cmd_list(catalog, console)
        if args.command == "run":
            return _cmd_run(catalog, console, args)
        if args.command == "interactive":
            return run_interactive(catalog, console)

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_CONFIG_ERROR

    except (ValueError, ImportError) as e:
        # Missing credentials or an uninstalled provider surface while building a process.
        logger.error("Process could not be configured", extra={"error": str(e)})
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ProcessError:
        logger.exception("Process failed")
        return EXIT_PROCESS_ERROR
    finally:
        collaborators.close()


if __name__ == "__main__":
    raise SystemExit(main())
