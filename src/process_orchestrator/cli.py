"""Console script entrypoint (`process-orchestrator`)."""

from __future__ import annotations

from process_orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
