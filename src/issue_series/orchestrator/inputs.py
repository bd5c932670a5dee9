"""Run inputs for one series invocation, plus the option-combination checks."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Action input name -> SeriesInputs field name.
ACTION_INPUTS: dict[str, str] = {
    "title": "title",
    "body": "body",
    "labels": "labels",
    "assignees": "assignees",
    "pinned": "pinned",
    "close-previous": "close_previous",
    "linked-comments": "linked_comments",
    "rotate-assignees": "rotate_assignees",
    "project": "project",
    "column": "column",
    "milestone": "milestone",
}


class SeriesInputs(BaseModel):
    """Every option a series run recognises.

    Construction validates types only. Whether the combination of options makes
    sense is answered by `check_inputs`, so an incomplete record can still be
    built and reported on.
    """

    title: str = Field(default="")
    body: str = Field(default="", description="Jinja2 template for the issue body")
    labels: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list, description="Ordered rotation list")

    pinned: bool = Field(default=False)
    close_previous: bool = Field(default=False)
    linked_comments: bool = Field(default=False)
    rotate_assignees: bool = Field(default=False)

    project: int | None = Field(default=None, description="Classic project number")
    column: str = Field(default="", description="Project column name (case-sensitive)")
    milestone: int | None = Field(default=None, description="Milestone number")

    @field_validator("labels", "assignees", mode="before")
    @classmethod
    def _split_csv(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("project", "milestone", mode="before")
    @classmethod
    def _blank_number_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("pinned", "close_previous", "linked_comments", "rotate_assignees", mode="before")
    @classmethod
    def _blank_flag_is_false(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
        return value


@dataclass(frozen=True, slots=True)
class InvalidInputsError(Exception):
    """Raised when a run is started with an unusable option combination."""

    problems: tuple[str, ...]

    def __str__(self) -> str:
        return "Invalid inputs: " + "; ".join(self.problems)


def input_problems(inputs: SeriesInputs) -> list[str]:
    """Return one message per failed option-combination rule."""

    problems: list[str] = []
    if not inputs.title:
        problems.append("title is required")
    if inputs.pinned and not inputs.labels:
        problems.append("pinned requires labels to find the previous issue")
    if inputs.close_previous and not inputs.labels:
        problems.append("close-previous requires labels to find the previous issue")
    if inputs.linked_comments and not inputs.labels:
        problems.append("linked-comments requires labels to find the previous issue")
    if inputs.rotate_assignees and not (inputs.labels and inputs.assignees):
        problems.append("rotate-assignees requires both labels and assignees")
    return problems


def check_inputs(inputs: SeriesInputs) -> bool:
    logger.info("Checking inputs", extra={"inputs": inputs.model_dump(mode="json")})

    problems = input_problems(inputs)
    for problem in problems:
        logger.warning("Input check failed", extra={"problem": problem})
    return not problems


def read_action_inputs(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect GitHub Actions inputs (`INPUT_<NAME>`) keyed by SeriesInputs field.

    Only inputs that are present and non-blank are returned, values trimmed.
    """

    env = os.environ if environ is None else environ
    found: dict[str, str] = {}
    for name, field in ACTION_INPUTS.items():
        value = env.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
        if value:
            found[field] = value
    return found
