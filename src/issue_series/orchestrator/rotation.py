"""Small pure helpers used while sequencing a series run."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

logger = logging.getLogger(__name__)

# Issue number standing in for "there is no previous issue".
NO_ISSUE = -1


def issue_exists(issue_number: int | None) -> bool:
    return isinstance(issue_number, int) and issue_number >= 0


def need_previous_issue(*conditions: bool) -> bool:
    return any(condition is True for condition in conditions)


def remove_empty_props(props: Mapping[str, Any]) -> dict[str, Any]:
    """Drop entries whose value is "" or None.

    {"a": "", "b": "some string", "c": None} -> {"b": "some string"}
    """

    return {key: value for key, value in props.items() if value != "" and value is not None}


def next_assignee(assignees: Sequence[str], previous_assignee: str | None) -> list[str]:
    """Pick the assignee after `previous_assignee`, wrapping around.

    An unknown (or empty) previous assignee restarts the rotation at the first entry.
    """

    if not assignees:
        raise ValueError("At least one assignee is required to rotate")

    logger.info(
        "Getting next assignee",
        extra={"assignees": list(assignees), "previous_assignee": previous_assignee},
    )

    try:
        index = list(assignees).index(previous_assignee or "")
    except ValueError:
        index = -1
    chosen = assignees[(index + 1) % len(assignees)]

    logger.info("Next assignee selected", extra={"assignee": chosen})
    return [chosen]
