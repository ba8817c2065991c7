"""Process Orchestrator.

A small step-based, event-driven process engine plus reference processes:
- documentation generation (automatic and operator-reviewed)
- AI-assisted GitHub issue creation with human review
"""

__version__ = "0.1.0"

from process_orchestrator.core.config import ProcessConfig

__all__ = ["__version__", "ProcessConfig"]
