"""GitHub issue-tracker integration."""

from process_orchestrator.github.client import (
    CreatedIssue,
    GitHubApiError,
    GitHubClient,
    GitHubError,
)

__all__ = ["CreatedIssue", "GitHubApiError", "GitHubClient", "GitHubError"]
