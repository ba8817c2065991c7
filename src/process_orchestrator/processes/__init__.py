"""Reference processes built on the process engine."""

from process_orchestrator.processes.catalog import (
    Collaborators,
    ProcessCatalog,
    ProcessDefinition,
    default_definitions,
)
from process_orchestrator.processes.documentation import (
    build_documentation_process,
    build_documentation_with_review_process,
    build_quick_info_process,
)
from process_orchestrator.processes.github_issue import build_github_issue_process
from process_orchestrator.processes.progress import IssueProgressTracker

__all__ = [
    "Collaborators",
    "IssueProgressTracker",
    "ProcessCatalog",
    "ProcessDefinition",
    "build_documentation_process",
    "build_documentation_with_review_process",
    "build_github_issue_process",
    "build_quick_info_process",
    "default_definitions",
]
