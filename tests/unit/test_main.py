"""Unit tests for the CLI / action entrypoint."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from issue_series.orchestrator import main as main_module
from issue_series.orchestrator.github.client import IssueSummary


@pytest.fixture
def host(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, mock_github: Mock) -> Path:
    """Simulate an Actions runner: token, repository and an output file."""
    monkeypatch.chdir(tmp_path)
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo-org/octo-repo")
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))
    monkeypatch.setenv("GITHUB_ACTIONS", "true")

    def fake_client(**kwargs: object) -> Mock:
        mock_github.init_kwargs = kwargs
        return mock_github

    monkeypatch.setattr(main_module, "GitHubClient", fake_client)
    return output


def test_cli_creates_issue_and_writes_output(
    host: Path, mock_github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main_module.main(["--title", "Weekly sync", "--body", "Hello"])

    assert exit_code == 0
    assert host.read_text(encoding="utf-8") == "issue-number=20\n"
    assert "issue-number=20" in capsys.readouterr().out
    assert mock_github.init_kwargs == {
        "token": "test-token",
        "repository": "octo-org/octo-repo",
        "base_url": "https://api.github.com",
    }
    mock_github.close.assert_called_once()


def test_action_inputs_supply_defaults(
    host: Path, mock_github: Mock, monkeypatch: pytest.MonkeyPatch
) -> None:
    mock_github.find_latest_issue.return_value = IssueSummary(
        number=42, node_id="N42", assignees=["alice"]
    )
    monkeypatch.setenv("INPUT_TITLE", "Weekly sync")
    monkeypatch.setenv("INPUT_LABELS", "recurring")
    monkeypatch.setenv("INPUT_ASSIGNEES", "alice,bob")
    monkeypatch.setenv("INPUT_ROTATE-ASSIGNEES", "true")
    monkeypatch.setenv("INPUT_CLOSE-PREVIOUS", "false")

    exit_code = main_module.main([])

    assert exit_code == 0
    mock_github.create_issue.assert_called_once_with(
        title="Weekly sync", labels=["recurring"], assignees=["bob"]
    )
    mock_github.update_issue.assert_not_called()


def test_cli_option_overrides_action_input(
    host: Path, mock_github: Mock, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("INPUT_TITLE", "From action")

    assert main_module.main(["--title", "From CLI", "--repo", "other/repo"]) == 0
    assert mock_github.create_issue.call_args.kwargs["title"] == "From CLI"
    assert mock_github.init_kwargs["repository"] == "other/repo"


def test_invalid_inputs_fail_without_output(
    host: Path, mock_github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main_module.main(["--title", "T", "--pinned"])

    assert exit_code == 1
    assert "::error::Error encountered: Invalid inputs: pinned requires labels" in capsys.readouterr().out
    assert not host.exists()
    mock_github.create_issue.assert_not_called()


def test_api_failure_is_reported(
    host: Path, mock_github: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    mock_github.create_issue.side_effect = RuntimeError("boom")

    exit_code = main_module.main(["--title", "T"])

    assert exit_code == 1
    assert "Step 'create_issue' failed" in capsys.readouterr().out
    mock_github.close.assert_called_once()


def test_non_numeric_milestone_fails(host: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main_module.main(["--title", "T", "--milestone", "next"]) == 1
    assert "::error::" in capsys.readouterr().out


def test_missing_token_is_a_configuration_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)

    assert main_module.main(["--title", "T"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_negated_flag_overrides_action_input(
    host: Path, mock_github: Mock, monkeypatch: pytest.MonkeyPatch
) -> None:
    mock_github.find_latest_issue.return_value = IssueSummary(number=10, node_id="N10")
    monkeypatch.setenv("INPUT_LABELS", "recurring")
    monkeypatch.setenv("INPUT_PINNED", "true")
    monkeypatch.setenv("INPUT_CLOSE-PREVIOUS", "true")

    assert main_module.main(["--title", "T", "--no-pinned"]) == 0

    mock_github.update_issue.assert_called_once_with(issue_number=10, state="closed")
    mock_github.pin_issue.assert_not_called()


def test_lookup_miss_becomes_warning_annotation(
    host: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main_module.main(["--title", "T", "--labels", "recurring", "--close-previous"]) == 0

    out = capsys.readouterr().out
    assert "::warning::Couldn't find previous issue with labels. Proceeding anyway." in out


def test_failure_outside_actions_is_a_json_error_line(
    host: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("GITHUB_ACTIONS")

    assert main_module.main(["--title", "T", "--pinned"]) == 1

    out = capsys.readouterr().out
    assert "::error::" not in out
    errors = [json.loads(line) for line in out.splitlines() if '"level": "ERROR"' in line]
    assert errors[-1]["message"].startswith("Error encountered: Invalid inputs:")
