"""The series run: one linear pass of lookups and mutations driven by input flags.

Mutations are independent API calls with no atomicity. Each step runs through a
`SeriesSaga`, which records what already happened so that a failure reports exactly
which steps completed; completed steps are never rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from issue_series.orchestrator.github.series_service import NewIssue, PreviousIssue, SeriesService
from issue_series.orchestrator.inputs import (
    InvalidInputsError,
    SeriesInputs,
    check_inputs,
    input_problems,
)
from issue_series.orchestrator.rotation import issue_exists, need_previous_issue, next_assignee
from issue_series.orchestrator.template import render_body

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SeriesStepError(Exception):
    """A series step failed; `completed_steps` lists what had already been applied."""

    step: str
    completed_steps: tuple[str, ...]
    cause: BaseException

    def __str__(self) -> str:
        completed = ", ".join(self.completed_steps) or "none"
        return f"Step {self.step!r} failed (completed steps: {completed}): {self.cause}"


class SeriesSaga:
    """Runs named steps in order and remembers which ones completed."""

    def __init__(self) -> None:
        self._completed: list[str] = []

    @property
    def completed_steps(self) -> tuple[str, ...]:
        return tuple(self._completed)

    def step(self, name: str, action: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        logger.debug("Running series step", extra={"step": name})
        try:
            result = action(*args, **kwargs)
        except Exception as e:
            logger.error(
                "Series step failed; earlier steps were not rolled back",
                extra={"step": name, "completed_steps": list(self._completed), "error": str(e)},
            )
            raise SeriesStepError(step=name, completed_steps=self.completed_steps, cause=e) from e
        self._completed.append(name)
        return result


@dataclass(frozen=True, slots=True)
class SeriesRunResult:
    new_issue: NewIssue
    previous_issue: PreviousIssue
    assignees: list[str]
    body: str
    completed_steps: tuple[str, ...] = field(default_factory=tuple)


def run(inputs: SeriesInputs, *, service: SeriesService) -> SeriesRunResult:
    """Create the next issue of the series and update the previous one.

    Raises:
        InvalidInputsError: before any API call, when the option combination is unusable.
        SeriesStepError: when any API step fails; later steps are skipped.
    """

    logger.info("Running with inputs", extra={"inputs": inputs.model_dump(mode="json")})

    if not check_inputs(inputs):
        raise InvalidInputsError(tuple(input_problems(inputs)))

    saga = SeriesSaga()
    previous = PreviousIssue.absent()
    assignees = list(inputs.assignees)

    lookup_needed = need_previous_issue(
        inputs.pinned, inputs.close_previous, inputs.rotate_assignees, inputs.linked_comments
    )
    if lookup_needed:
        previous = saga.step("find_previous_issue", service.get_previous_issue, inputs.labels)

    has_previous = issue_exists(previous.number)

    if has_previous and inputs.rotate_assignees:
        previous_assignee = previous.assignees[0] if previous.assignees else None
        assignees = next_assignee(inputs.assignees, previous_assignee)

    body = render_body(
        inputs.body,
        # A skipped lookup renders NO_ISSUE (-1); a lookup that found nothing renders empty.
        previous_issue_number=previous.number if has_previous or not lookup_needed else None,
        assignees=assignees,
    )
    effective = inputs.model_copy(update={"assignees": assignees, "body": body})

    new_issue = saga.step("create_issue", service.create_new_issue, effective)

    if inputs.project and inputs.column:
        saga.step(
            "add_to_project_column",
            service.add_issue_to_project_column,
            new_issue.id,
            inputs.project,
            inputs.column,
        )

    if inputs.milestone:
        saga.step(
            "add_to_milestone", service.add_issue_to_milestone, new_issue.number, inputs.milestone
        )

    if has_previous and inputs.linked_comments:
        saga.step(
            "link_comments", service.make_linked_comments, new_issue.number, previous.number
        )

    if has_previous and inputs.close_previous:
        saga.step("close_previous", service.close_issue, previous.number)

        if inputs.pinned:
            if previous.node_id:
                saga.step("unpin_previous", service.unpin, previous.node_id)
            saga.step("pin_new", service.pin, new_issue.node_id)

    logger.info(
        "Series run complete",
        extra={"issue_number": new_issue.number, "completed_steps": list(saga.completed_steps)},
    )
    return SeriesRunResult(
        new_issue=new_issue,
        previous_issue=previous,
        assignees=assignees,
        body=body,
        completed_steps=saga.completed_steps,
    )
