"""GitHub REST client for issue creation.

Kept deliberately small: the process steps only need `create_issue`. The
session carries the GitHub REST headers so tests can inject a mock session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"


class GitHubError(RuntimeError):
    """A GitHub call failed before a usable response was received."""


class GitHubApiError(GitHubError):
    """GitHub answered with a non-success status."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body}")


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Issue metadata returned from GitHub after creation."""

    id: int
    number: int
    url: str
    title: str
    body: str
    owner: str
    repository: str
    state: str
    created_at: str
    author: str
    labels: list[str] = field(default_factory=list)


class GitHubClient:
    """Thin wrapper around the GitHub issues REST endpoint."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "process-orchestrator",
            }
        )

    def _issues_url(self, *, owner: str, repo: str) -> str:
        return f"{self._rest_base_url}/repos/{owner}/{repo}/issues"

    @staticmethod
    def _parse_labels(value: object) -> list[str]:
        # Labels come back as objects with a name; older payloads may be plain strings.
        if not isinstance(value, list):
            return []
        names: list[str] = []
        for label in value:
            if isinstance(label, str):
                name = label
            elif isinstance(label, dict) and isinstance(label.get("name"), str):
                name = label["name"]
            else:
                continue
            if name:
                names.append(name)
        return names

    @staticmethod
    def _safe_login(value: object) -> str:
        if isinstance(value, dict):
            login = value.get("login")
            if isinstance(login, str) and login.strip():
                return login
        return "unknown"

    def create_issue(
        self,
        *,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: list[str] | None = None,
    ) -> CreatedIssue:
        """Create an issue in `owner/repo`.

        Raises:
            GitHubApiError: GitHub rejected the request (status and raw body attached).
            GitHubError: the request could not be sent or the response was malformed.
        """

        if not title.strip():
            raise ValueError("Issue title is required")

        url = self._issues_url(owner=owner, repo=repo)
        payload = {"title": title, "body": body, "labels": list(labels or [])}
        logger.info("Creating issue", extra={"repo": f"{owner}/{repo}", "title": title})

        try:
            resp = self._session.post(url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise GitHubError(f"Request to {url} failed: {e}") from e

        if not resp.ok:
            raise GitHubApiError(resp.status_code, resp.text)

        try:
            data: dict[str, Any] = resp.json()
        except ValueError as e:
            raise GitHubError("Issue response is not valid JSON") from e

        issue_id = data.get("id")
        number = data.get("number")
        if not isinstance(issue_id, int) or not isinstance(number, int) or number <= 0:
            raise GitHubError("Invalid issue response: missing id/number")

        html_url = data.get("html_url")
        created_at = data.get("created_at")
        state = data.get("state")
        issue_body = data.get("body")
        issue_title = data.get("title")

        created = CreatedIssue(
            id=issue_id,
            number=number,
            url=html_url if isinstance(html_url, str) else "",
            title=issue_title if isinstance(issue_title, str) else title,
            body=issue_body if isinstance(issue_body, str) else "",
            owner=owner,
            repository=repo,
            state=state if isinstance(state, str) and state else "open",
            created_at=(
                created_at
                if isinstance(created_at, str) and created_at
                else datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
            ),
            author=self._safe_login(data.get("user")),
            labels=self._parse_labels(data.get("labels")),
        )
        logger.info("Issue created", extra={"repo": f"{owner}/{repo}", "number": created.number})
        return created

    def close(self) -> None:
        self._session.close()
