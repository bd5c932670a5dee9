"""GitHub API client wrapper for series runs.

Wraps PyGithub (issue creation) and a requests session (the remaining REST calls and
GraphQL) so that the series logic never touches HTTP directly and tests can inject mocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse, urlunparse

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)

# Classic projects were only ever served under this preview media type.
_PROJECTS_ACCEPT = "application/vnd.github.inertia-preview+json"


@dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Identifiers of a freshly created issue."""

    number: int
    id: int
    node_id: str
    title: str


@dataclass(frozen=True, slots=True)
class IssueSummary:
    """Minimal issue metadata returned from a label search."""

    number: int
    node_id: str
    assignees: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ProjectSummary:
    id: int
    number: int
    name: str


@dataclass(frozen=True, slots=True)
class ProjectColumn:
    id: int
    name: str


class GitHubClient:
    """Small wrapper around PyGithub and the REST/GraphQL endpoints a series run needs."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository or not repository.strip("/ "):
            raise ValueError("GitHub repository is required")

        self._token = token
        self._repository_name = repository.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "issue-series",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

        self._repo = self._github.get_repo(self._repository_name)
        logger.info(
            "Authenticated with GitHub and connected to repository",
            extra={"repo": self._repository_name},
        )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _issues_url(self, *, issue_number: int, suffix: str = "") -> str:
        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        if suffix and not suffix.startswith("/"):
            suffix = "/" + suffix
        return f"{self._rest_base_url}/repos/{self._repository_name}/issues/{issue_number}{suffix}"

    def _repo_url(self, *, path: str) -> str:
        path = path.strip("/")
        root = f"{self._rest_base_url}/repos/{self._repository_name}"
        return f"{root}/{path}" if path else root

    def _api_url(self, *, path: str) -> str:
        return f"{self._rest_base_url}/{path.lstrip('/')}"

    def _graphql_url(self) -> str:
        """Derive the GitHub GraphQL endpoint from the configured REST base URL.

        GitHub.com:
            REST: https://api.github.com
            GQL:  https://api.github.com/graphql

        GitHub Enterprise typically exposes REST as:
            https://github.example.com/api/v3
        and GraphQL as:
            https://github.example.com/api/graphql
        """

        parsed = urlparse(self._rest_base_url)
        path = parsed.path.rstrip("/")

        if path.endswith("/api/v3"):
            path = path[: -len("/api/v3")] + "/api/graphql"
        elif path.endswith("/api"):
            path = path[: -len("/api")] + "/api/graphql"
        elif path == "":
            path = "/graphql"
        else:
            path = path + "/graphql"

        return urlunparse(parsed._replace(path=path))

    def repository_web_url(self) -> str:
        """Return the repository's web URL, as GraphQL `resource(url:)` expects it.

        https://api.github.com            -> https://github.com/owner/repo
        https://github.example.com/api/v3 -> https://github.example.com/owner/repo
        """

        parsed = urlparse(self._rest_base_url)
        host = parsed.netloc
        if host.startswith("api."):
            host = host[len("api.") :]
        return urlunparse(parsed._replace(netloc=host, path=f"/{self._repository_name}"))

    def _graphql(self, *, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        url = self._graphql_url()
        resp = self._session.post(url, json={"query": query, "variables": variables}, timeout=30)
        resp.raise_for_status()
        payload: dict[str, Any] = resp.json()
        errors = payload.get("errors")
        if errors:
            messages = []
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict):
                        msg = item.get("message")
                        if isinstance(msg, str):
                            messages.append(msg)
            message = "; ".join(messages) if messages else "Unknown GraphQL error"
            raise RuntimeError(f"GitHub GraphQL error: {message}")
        return payload

    def _get_paginated_json_list(
        self, url: str, *, headers: dict[str, str] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch a REST endpoint that returns a JSON list, following basic pagination.

        Fetches at most 10 pages of 100 items each.
        """

        items: list[dict[str, Any]] = []
        per_page = 100
        for page in range(1, 11):
            resp = self._session.get(
                url,
                params={"per_page": per_page, "page": page},
                headers=headers,
                timeout=30,
            )
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                break

            items.extend(p for p in payload if isinstance(p, dict))

            if len(payload) < per_page:
                break
        return items

    @staticmethod
    def _parse_assignees(data: dict[str, Any]) -> list[str]:
        raw_assignees = data.get("assignees")
        if not isinstance(raw_assignees, list):
            return []
        logins: list[str] = []
        for assignee in raw_assignees:
            if isinstance(assignee, dict):
                login = assignee.get("login")
                if isinstance(login, str) and login.strip():
                    logins.append(login)
        return logins

    def create_issue(
        self,
        *,
        title: str,
        body: str | None = None,
        labels: list[str] | None = None,
        assignees: list[str] | None = None,
    ) -> CreatedIssue:
        """Create an issue, sending only the fields that were provided."""

        if not title.strip():
            raise ValueError("Issue title is required")

        fields: dict[str, Any] = {}
        if body is not None:
            fields["body"] = body
        if labels is not None:
            fields["labels"] = labels
        if assignees is not None:
            fields["assignees"] = assignees

        issue = self._repo.create_issue(title=title, **fields)

        return CreatedIssue(
            number=int(issue.number),
            id=int(issue.id),
            node_id=issue.node_id,
            title=issue.title,
        )

    def find_latest_issue(self, *, labels: list[str]) -> IssueSummary | None:
        """Return the first open issue carrying all `labels`, in GitHub's default order."""

        if not labels:
            raise ValueError("At least one label is required")

        url = self._repo_url(path="issues")
        resp = self._session.get(
            url,
            params={"labels": ",".join(labels), "state": "open", "per_page": 1},
            timeout=30,
        )
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            return None

        data: dict[str, Any] = payload[0]
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            raise ValueError("Invalid issue response: missing number")

        node_id = data.get("node_id")
        if not isinstance(node_id, str):
            node_id = ""

        return IssueSummary(number=number, node_id=node_id, assignees=self._parse_assignees(data))

    def update_issue(self, *, issue_number: int, **changes: Any) -> dict[str, Any]:
        """PATCH an issue (state, milestone, ...) and return the response body."""

        url = self._issues_url(issue_number=issue_number)
        resp = self._session.patch(url, json=changes, timeout=30)
        resp.raise_for_status()
        if not resp.content:
            return {}
        data = resp.json()
        return data if isinstance(data, dict) else {}

    def create_comment(self, *, issue_number: int, body: str) -> int:
        """Comment on an issue and return the comment id."""

        url = self._issues_url(issue_number=issue_number, suffix="comments")
        resp = self._session.post(url, json={"body": body}, timeout=30)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        comment_id = data.get("id")
        if not isinstance(comment_id, int):
            raise ValueError("Unexpected create comment response: missing id")
        return comment_id

    def list_projects(self) -> list[ProjectSummary]:
        url = self._repo_url(path="projects")
        raw = self._get_paginated_json_list(url, headers={"Accept": _PROJECTS_ACCEPT})
        projects: list[ProjectSummary] = []
        for item in raw:
            project_id = item.get("id")
            number = item.get("number")
            if not isinstance(project_id, int) or not isinstance(number, int):
                continue
            name = item.get("name")
            projects.append(
                ProjectSummary(id=project_id, number=number, name=name if isinstance(name, str) else "")
            )
        return projects

    def list_project_columns(self, *, project_id: int) -> list[ProjectColumn]:
        url = self._api_url(path=f"projects/{project_id}/columns")
        raw = self._get_paginated_json_list(url, headers={"Accept": _PROJECTS_ACCEPT})
        columns: list[ProjectColumn] = []
        for item in raw:
            column_id = item.get("id")
            name = item.get("name")
            if isinstance(column_id, int) and isinstance(name, str):
                columns.append(ProjectColumn(id=column_id, name=name))
        return columns

    def create_project_card(
        self, *, column_id: int, content_id: int, content_type: str = "Issue"
    ) -> int:
        """Create a card in a classic project column and return the card id."""

        url = self._api_url(path=f"projects/columns/{column_id}/cards")
        resp = self._session.post(
            url,
            json={"content_id": content_id, "content_type": content_type},
            headers={"Accept": _PROJECTS_ACCEPT},
            timeout=30,
        )
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
        card_id = data.get("id")
        if not isinstance(card_id, int):
            raise ValueError("Unexpected create card response: missing id")
        return card_id

    def get_pinned_issue_ids(self) -> list[str] | None:
        """Return node ids of the (at most 3) pinned issues.

        Returns None when the repository resource does not resolve.
        """

        query = """
        query($url: URI!) {
          resource(url: $url) {
            ... on Repository {
              pinnedIssues(last: 3) {
                nodes {
                  issue {
                    id
                  }
                }
              }
            }
          }
        }
        """
        payload = self._graphql(query=query, variables={"url": self.repository_web_url()})
        logger.debug("Pinned issues response", extra={"payload": payload})

        data = payload.get("data")
        resource = data.get("resource") if isinstance(data, dict) else None
        if not isinstance(resource, dict):
            return None

        pinned = resource.get("pinnedIssues")
        nodes = pinned.get("nodes") if isinstance(pinned, dict) else None
        ids: list[str] = []
        for node in nodes or []:
            issue = node.get("issue") if isinstance(node, dict) else None
            issue_id = issue.get("id") if isinstance(issue, dict) else None
            if isinstance(issue_id, str):
                ids.append(issue_id)
        return ids

    def pin_issue(self, *, node_id: str) -> None:
        mutation = """
        mutation($issueId: ID!) {
          pinIssue(input: {issueId: $issueId}) {
            issue {
              id
            }
          }
        }
        """
        self._graphql(query=mutation, variables={"issueId": node_id})

    def unpin_issue(self, *, node_id: str) -> None:
        mutation = """
        mutation($issueId: ID!) {
          unpinIssue(input: {issueId: $issueId}) {
            issue {
              id
            }
          }
        }
        """
        self._graphql(query=mutation, variables={"issueId": node_id})

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
