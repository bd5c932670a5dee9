"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from unittest.mock import Mock

import pytest

from issue_series.orchestrator.github.client import (
    CreatedIssue,
    GitHubClient,
    ProjectColumn,
    ProjectSummary,
)
from issue_series.orchestrator.github.series_service import SeriesService
from issue_series.orchestrator.inputs import ACTION_INPUTS

_HOST_ENV = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "GITHUB_API_URL",
    "GITHUB_OUTPUT",
    "LOG_LEVEL",
    "RUNNER_DEBUG",
    "GITHUB_ACTIONS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's or CI runner's GitHub variables out of the tests."""
    for name in _HOST_ENV:
        monkeypatch.delenv(name, raising=False)
    for name in ACTION_INPUTS:
        monkeypatch.delenv(f"INPUT_{name.upper()}", raising=False)


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """configure_logging replaces root handlers; put the test runner's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def mock_github() -> Mock:
    """Provide a GitHub client mock with a successful create_issue."""
    github = Mock(spec=GitHubClient)
    github.repository = "octo-org/octo-repo"
    github.create_issue.return_value = CreatedIssue(
        number=20,
        id=2000,
        node_id="N20",
        title="Weekly sync",
    )
    github.find_latest_issue.return_value = None
    github.get_pinned_issue_ids.return_value = []
    github.update_issue.return_value = {"number": 20}
    github.list_projects.return_value = [ProjectSummary(id=501, number=5, name="Board")]
    github.list_project_columns.return_value = [ProjectColumn(id=9001, name="To do")]
    return github


@pytest.fixture
def service(mock_github: Mock) -> SeriesService:
    return SeriesService(github=mock_github)
