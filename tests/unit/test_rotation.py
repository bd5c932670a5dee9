"""Unit tests for assignee rotation and the small series helpers."""

from __future__ import annotations

import pytest

from issue_series.orchestrator.rotation import (
    NO_ISSUE,
    issue_exists,
    need_previous_issue,
    next_assignee,
    remove_empty_props,
)


@pytest.mark.parametrize(
    ("assignees", "previous", "expected"),
    [
        (["alice", "bob"], "alice", ["bob"]),
        (["alice", "bob"], "bob", ["alice"]),
        (["alice", "bob", "carol"], "bob", ["carol"]),
        (["alice"], "alice", ["alice"]),
    ],
)
def test_next_assignee_advances_and_wraps(
    assignees: list[str], previous: str, expected: list[str]
) -> None:
    assert next_assignee(assignees, previous) == expected


@pytest.mark.parametrize("previous", ["mallory", "", None])
def test_next_assignee_restarts_when_previous_unknown(previous: str | None) -> None:
    assert next_assignee(["alice", "bob", "carol"], previous) == ["alice"]


def test_next_assignee_requires_candidates() -> None:
    with pytest.raises(ValueError):
        next_assignee([], "alice")


def test_issue_exists() -> None:
    assert issue_exists(0)
    assert issue_exists(42)
    assert not issue_exists(NO_ISSUE)
    assert not issue_exists(None)


def test_need_previous_issue() -> None:
    assert not need_previous_issue(False, False, False, False)
    assert need_previous_issue(False, True, False, False)
    assert not need_previous_issue()


def test_remove_empty_props_drops_blank_and_missing_values() -> None:
    assert remove_empty_props({"a": "", "b": "x", "c": None}) == {"b": "x"}


def test_remove_empty_props_keeps_falsy_non_empty_values() -> None:
    props = {"count": 0, "flag": False, "labels": []}

    assert remove_empty_props(props) == props
