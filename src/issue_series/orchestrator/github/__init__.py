"""GitHub access for series runs."""

from issue_series.orchestrator.github.client import GitHubClient
from issue_series.orchestrator.github.series_service import NewIssue, PreviousIssue, SeriesService

__all__ = ["GitHubClient", "NewIssue", "PreviousIssue", "SeriesService"]
