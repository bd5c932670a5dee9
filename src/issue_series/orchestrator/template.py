"""Issue body rendering.

Bodies are Jinja2 templates. Plain `{{previousIssueNumber}}` / `{{assignees}}`
placeholders substitute the same values Handlebars did: lists come out
comma-joined and missing values come out empty. Unlike Handlebars `{{x}}`,
values are not HTML-escaped, since issue bodies are Markdown.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from jinja2 import Environment, StrictUndefined, Undefined


def _finalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return value


def build_environment(*, strict: bool = False) -> Environment:
    return Environment(
        autoescape=False,
        keep_trailing_newline=True,
        finalize=_finalize,
        undefined=StrictUndefined if strict else Undefined,
    )


_ENVIRONMENT = build_environment()


def render_body(
    template: str,
    *,
    previous_issue_number: int | None,
    assignees: Sequence[str],
    environment: Environment | None = None,
) -> str:
    """Render an issue body template.

    Context:
        previousIssueNumber: number of the previous issue in the series, or empty.
        assignees: the assignees the new issue will be created with.
    """

    if not template:
        return ""
    env = environment or _ENVIRONMENT
    compiled = env.from_string(template)
    return compiled.render(previousIssueNumber=previous_issue_number, assignees=list(assignees))
