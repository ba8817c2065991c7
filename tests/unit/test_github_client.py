"""Unit tests for the GitHub issue client."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest
import requests

from process_orchestrator.github import GitHubApiError, GitHubClient, GitHubError


def _response(status: int, payload: Any = None, text: str = "") -> Mock:
    resp = Mock(spec=requests.Response)
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def _client(resp: Mock) -> tuple[GitHubClient, Mock]:
    session = Mock(spec=requests.Session)
    session.headers = {}
    session.post.return_value = resp
    return GitHubClient(token="t0k", session=session), session


ISSUE_PAYLOAD = {
    "id": 555,
    "number": 7,
    "html_url": "https://github.com/octo-org/octo-repo/issues/7",
    "title": "Fix login",
    "body": "Body",
    "state": "open",
    "created_at": "2025-02-03T04:05:06Z",
    "user": {"login": "octocat"},
    "labels": [{"name": "bug"}, "triage", {"color": "fff"}],
}


def test_client_requires_token() -> None:
    with pytest.raises(ValueError):
        GitHubClient(token="")


def test_session_headers() -> None:
    client, session = _client(_response(201, ISSUE_PAYLOAD))

    assert session.headers["Authorization"] == "Bearer t0k"
    assert session.headers["Accept"] == "application/vnd.github+json"
    assert session.headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_create_issue_posts_and_parses() -> None:
    client, session = _client(_response(201, ISSUE_PAYLOAD))

    issue = client.create_issue(
        owner="octo-org", repo="octo-repo", title="Fix login", body="Body", labels=["bug"]
    )

    url = session.post.call_args.args[0]
    assert url == "https://api.github.com/repos/octo-org/octo-repo/issues"
    assert session.post.call_args.kwargs["json"] == {
        "title": "Fix login",
        "body": "Body",
        "labels": ["bug"],
    }
    assert issue.id == 555
    assert issue.number == 7
    assert issue.author == "octocat"
    assert issue.owner == "octo-org"
    assert issue.repository == "octo-repo"
    assert issue.labels == ["bug", "triage"]


def test_create_issue_defaults_missing_fields() -> None:
    payload = {"id": 1, "number": 2, "body": None, "user": None}
    client, _ = _client(_response(201, payload))

    issue = client.create_issue(owner="o", repo="r", title="T", body="B")

    assert issue.body == ""
    assert issue.title == "T"
    assert issue.state == "open"
    assert issue.author == "unknown"
    assert issue.created_at.endswith("Z")
    assert issue.labels == []


def test_create_issue_http_error() -> None:
    client, _ = _client(_response(404, text='{"message":"Not Found"}'))

    with pytest.raises(GitHubApiError) as exc_info:
        client.create_issue(owner="o", repo="missing", title="T", body="")

    assert exc_info.value.status == 404
    assert str(exc_info.value) == 'HTTP 404: {"message":"Not Found"}'


def test_create_issue_network_error() -> None:
    client, session = _client(_response(201))
    session.post.side_effect = requests.ConnectionError("offline")

    with pytest.raises(GitHubError, match="offline"):
        client.create_issue(owner="o", repo="r", title="T", body="")


def test_create_issue_invalid_json() -> None:
    client, _ = _client(_response(201, ValueError("bad json")))

    with pytest.raises(GitHubError, match="not valid JSON"):
        client.create_issue(owner="o", repo="r", title="T", body="")


def test_create_issue_rejects_blank_title() -> None:
    client, session = _client(_response(201, ISSUE_PAYLOAD))

    with pytest.raises(ValueError):
        client.create_issue(owner="o", repo="r", title="  ", body="")
    session.post.assert_not_called()
