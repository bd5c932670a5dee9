"""CLI entrypoint: create the next issue of a series.

Every option defaults to the matching GitHub Actions input (`INPUT_<NAME>`), so the same
command works from a workflow step and from a terminal.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from issue_series import __version__
from issue_series.orchestrator.config import SeriesSettings
from issue_series.orchestrator.github.client import GitHubClient
from issue_series.orchestrator.github.series_service import SeriesService
from issue_series.orchestrator.inputs import SeriesInputs, read_action_inputs
from issue_series.orchestrator.logging import configure_logging
from issue_series.orchestrator.runner import run

logger = logging.getLogger(__name__)

OUTPUT_NAME = "issue-number"

_FLAGS = ("pinned", "close_previous", "linked_comments", "rotate_assignees")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-series",
        description="Create the next issue of a recurring series",
    )
    parser.add_argument("--version", action="version", version=f"issue-series {__version__}")

    parser.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        default=None,
        help="Target repository in the form 'owner/repo' (defaults to GITHUB_REPOSITORY)",
    )
    parser.add_argument("--title", default="", help="Issue title")
    parser.add_argument(
        "--body",
        default="",
        help="Issue body template; {{ previousIssueNumber }} and {{ assignees }} are available",
    )
    parser.add_argument(
        "--labels",
        default="",
        help="Comma-separated labels identifying the series, e.g. 'recurring,standup'",
    )
    parser.add_argument(
        "--assignees",
        default="",
        help="Comma-separated assignee logins (the rotation order with --rotate-assignees)",
    )
    parser.add_argument(
        "--pinned",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Pin the new issue and unpin the previous one (requires --close-previous)",
    )
    parser.add_argument(
        "--close-previous",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Close the previous issue of the series",
    )
    parser.add_argument(
        "--linked-comments",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Comment on the new and previous issues linking them to each other",
    )
    parser.add_argument(
        "--rotate-assignees",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Assign only the person after the previous issue's assignee",
    )
    parser.add_argument("--project", default=None, help="Classic project number")
    parser.add_argument("--column", default="", help="Project column name (case-sensitive)")
    parser.add_argument("--milestone", default=None, help="Milestone number")
    return parser


def _action_defaults(environ: Mapping[str, str]) -> dict[str, object]:
    defaults: dict[str, object] = {}
    for field, value in read_action_inputs(environ).items():
        if field in _FLAGS:
            defaults[field] = value.lower() == "true"
        else:
            defaults[field] = value
    return defaults


def set_output(name: str, value: str, *, output_file: Path | None) -> None:
    """Publish a step output (GITHUB_OUTPUT when available) and echo it to stdout."""

    if output_file is not None:
        with output_file.open("a", encoding="utf-8") as f:
            f.write(f"{name}={value}\n")
    print(f"{name}={value}")


def set_failed(message: str) -> int:
    """Report the run as failed; under Actions this becomes an ::error:: annotation."""

    logger.error(message)
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    parser.set_defaults(**_action_defaults(os.environ))
    args = parser.parse_args(argv)

    try:
        settings = SeriesSettings()
    except ValidationError as e:
        # Logging isn't configured yet.
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.effective_log_level, actions=settings.github_actions)

    try:
        inputs = SeriesInputs(
            title=args.title,
            body=args.body,
            labels=args.labels,
            assignees=args.assignees,
            pinned=args.pinned,
            close_previous=args.close_previous,
            linked_comments=args.linked_comments,
            rotate_assignees=args.rotate_assignees,
            project=args.project,
            column=args.column,
            milestone=args.milestone,
        )
    except ValidationError as e:
        return set_failed(f"Error encountered: {e}.")

    repository = args.repository or settings.github_repository
    github: GitHubClient | None = None
    try:
        github = GitHubClient(
            token=settings.github_token,
            repository=repository,
            base_url=settings.github_api_url,
        )
        result = run(inputs, service=SeriesService(github=github))
    except Exception as e:
        logger.debug("Series run failed", exc_info=True)
        return set_failed(f"Error encountered: {e}.")
    finally:
        if github is not None:
            github.close()

    logger.info("New issue number", extra={"issue_number": result.new_issue.number})
    set_output(OUTPUT_NAME, str(result.new_issue.number), output_file=settings.github_output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
