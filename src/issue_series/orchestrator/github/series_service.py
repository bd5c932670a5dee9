"""Issue-series operations expressed over an injected `GitHubClient`.

Each method is one feature of a series run: finding the previous issue, creating the new
one, linking, closing, pinning, and filing into a project column or milestone. Lookup
misses (no previous issue, unknown project/column, empty milestone response) are logged
as warnings and never raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from issue_series.orchestrator.github.client import GitHubClient
from issue_series.orchestrator.inputs import SeriesInputs
from issue_series.orchestrator.rotation import NO_ISSUE, remove_empty_props

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreviousIssue:
    """The prior issue of the series; `number == NO_ISSUE` means there is none."""

    number: int = NO_ISSUE
    node_id: str | None = None
    assignees: list[str] = field(default_factory=list)

    @classmethod
    def absent(cls) -> PreviousIssue:
        return cls()


@dataclass(frozen=True, slots=True)
class NewIssue:
    number: int
    id: int
    node_id: str


class SeriesService:
    """High-level, testable series operations."""

    def __init__(self, *, github: GitHubClient) -> None:
        self._github = github

    @property
    def repository(self) -> str:
        return self._github.repository

    def is_pinned(self, node_id: str) -> bool:
        """Is the issue with `node_id` currently pinned to the repository?"""

        logger.info("Checking if issue is pinned", extra={"node_id": node_id})

        pinned_ids = self._github.get_pinned_issue_ids()
        if pinned_ids is None:
            return False
        return node_id in pinned_ids

    def unpin(self, node_id: str) -> bool:
        """Unpin the issue if it is pinned. Returns whether a mutation was sent."""

        if not self.is_pinned(node_id):
            return False

        logger.info("Unpinning issue", extra={"node_id": node_id})
        self._github.unpin_issue(node_id=node_id)
        return True

    def pin(self, node_id: str) -> None:
        # TODO: GitHub caps pinned issues at 3; check the count before pinning so the
        # failure names the cap instead of surfacing a raw GraphQL error.
        logger.info("Pinning issue", extra={"node_id": node_id})
        self._github.pin_issue(node_id=node_id)

    def create_new_issue(self, inputs: SeriesInputs) -> NewIssue:
        # Empty fields are invalid API values; leave them out of the request entirely.
        options = remove_empty_props(
            {
                "title": inputs.title,
                "labels": inputs.labels or None,
                "assignees": inputs.assignees or None,
                "body": inputs.body,
            }
        )

        logger.info("Creating new issue", extra={"options": options})

        created = self._github.create_issue(**options)
        new_issue = NewIssue(number=int(created.number), id=created.id, node_id=created.node_id)

        logger.debug(
            "New issue created",
            extra={
                "issue_number": new_issue.number,
                "issue_id": new_issue.id,
                "node_id": new_issue.node_id,
            },
        )
        return new_issue

    def close_issue(self, issue_number: int) -> None:
        logger.info("Closing issue", extra={"issue_number": issue_number})
        self._github.update_issue(issue_number=issue_number, state="closed")

    def make_linked_comments(self, new_issue_number: int, previous_issue_number: int) -> None:
        logger.info(
            "Making linked comments",
            extra={
                "new_issue_number": new_issue_number,
                "previous_issue_number": previous_issue_number,
            },
        )

        self._github.create_comment(
            issue_number=new_issue_number,
            body=f"Previous in series: #{previous_issue_number}",
        )
        self._github.create_comment(
            issue_number=previous_issue_number,
            body=f"Next in series: #{new_issue_number}",
        )

    def get_previous_issue(self, labels: list[str]) -> PreviousIssue:
        """Return the most recent open issue carrying all `labels`, or `PreviousIssue.absent()`."""

        logger.info("Finding previous issue", extra={"labels": labels})

        found = self._github.find_latest_issue(labels=labels)
        if found is None:
            logger.warning(
                "Couldn't find previous issue with labels. Proceeding anyway.",
                extra={"labels": labels},
            )
            return PreviousIssue.absent()

        previous = PreviousIssue(
            number=int(found.number),
            node_id=found.node_id or None,
            assignees=list(found.assignees),
        )
        logger.debug(
            "Previous issue found",
            extra={
                "issue_number": previous.number,
                "node_id": previous.node_id,
                "assignees": previous.assignees,
            },
        )
        return previous

    def add_issue_to_project_column(
        self, issue_id: int, project_number: int, column_name: str
    ) -> bool:
        """File the issue into a classic project column. Returns whether a card was created."""

        logger.info(
            "Adding issue to project column",
            extra={"issue_id": issue_id, "project_number": project_number, "column": column_name},
        )

        projects = self._github.list_projects()
        logger.debug(
            "Found repository projects", extra={"project_numbers": [p.number for p in projects]}
        )

        project = next((p for p in projects if p.number == int(project_number)), None)
        if project is None:
            logger.warning(
                "Project could not be found in this repository. "
                "Proceeding without adding issue to project...",
                extra={"project_number": project_number},
            )
            return False

        columns = self._github.list_project_columns(project_id=project.id)
        logger.debug(
            "Found project columns",
            extra={"project_id": project.id, "columns": [c.name for c in columns]},
        )

        column = next((c for c in columns if c.name == column_name), None)
        if column is None:
            logger.warning(
                "Column could not be found in repository project. "
                "Proceeding without adding issue to project...",
                extra={"project_number": project_number, "column": column_name},
            )
            return False

        logger.debug("Column resolved", extra={"column": column_name, "column_id": column.id})
        self._github.create_project_card(column_id=column.id, content_id=issue_id)
        return True

    def add_issue_to_milestone(self, issue_number: int, milestone_number: int) -> bool:
        """Set the issue's milestone. Returns False (after warning) on an empty response."""

        logger.info(
            "Adding issue to milestone",
            extra={"issue_number": issue_number, "milestone_number": milestone_number},
        )

        issue = self._github.update_issue(issue_number=issue_number, milestone=milestone_number)
        if not issue:
            logger.warning(
                "Couldn't add issue to milestone. Proceeding without adding issue to milestone...",
                extra={"issue_number": issue_number, "milestone_number": milestone_number},
            )
            return False
        return True
