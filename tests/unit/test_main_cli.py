"""Unit tests for the alignment_verifier.main CLI module.

This module tests:
- verify: output formats, exit codes and error handling
- projects: listing and error handling
- configuration loading
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from alignment_verifier.engine.report import build_report
from alignment_verifier.enums import AlignmentVerdict
from alignment_verifier.exceptions import ConfigurationError, ExternalServiceError
from alignment_verifier.main import cli
from alignment_verifier.models.domain import Evidence, Task, TrackerProject
from alignment_verifier.models.report import TaskAlignmentResult

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI invocations from reconfiguring global logging."""
    with patch("alignment_verifier.main.configure_logging"):
        yield


@pytest.fixture
def missing_config(tmp_path):
    """Path to a configuration file that does not exist."""
    return str(tmp_path / "missing.yaml")


def _report(verdict: AlignmentVerdict):
    result = TaskAlignmentResult(
        task=Task(key="SCRUM-5", summary="Fix login bug", status_label="Done"),
        evidence=Evidence(),
        verdict=verdict,
        rule="test_rule",
    )
    return build_report("app", None, [result])


# =============================================================================
# verify
# =============================================================================


class TestVerifyCommand:
    """Tests for the verify command."""

    def test_all_aligned_exits_zero(self, cli_runner, missing_config):
        with patch(
            "alignment_verifier.main.run_verification",
            new=AsyncMock(return_value=_report(AlignmentVerdict.ALIGNED)),
        ) as mock_run:
            result = cli_runner.invoke(cli, ["--config", missing_config, "verify", "app", "--project", "SCRUM"])

        assert result.exit_code == 0
        assert "# Alignment Report: app" in result.output
        kwargs = mock_run.await_args.kwargs
        assert kwargs["project_hint"] == "SCRUM"
        assert kwargs["status_filter"] is None
        assert kwargs["max_tasks"] is None

    def test_misaligned_exits_one(self, cli_runner, missing_config):
        with patch(
            "alignment_verifier.main.run_verification",
            new=AsyncMock(return_value=_report(AlignmentVerdict.MISALIGNED)),
        ):
            result = cli_runner.invoke(cli, ["--config", missing_config, "verify", "app"])

        assert result.exit_code == 1

    def test_json_output_and_options(self, cli_runner, missing_config):
        with patch(
            "alignment_verifier.main.run_verification",
            new=AsyncMock(return_value=_report(AlignmentVerdict.ALIGNED)),
        ) as mock_run:
            result = cli_runner.invoke(
                cli,
                [
                    "--config",
                    missing_config,
                    "verify",
                    "app",
                    "--status",
                    "done",
                    "--status",
                    "progress",
                    "--max-tasks",
                    "10",
                    "--json",
                ],
            )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["repository"] == "app"
        assert data["alignment_score"] == 100
        kwargs = mock_run.await_args.kwargs
        assert kwargs["status_filter"] == ["done", "progress"]
        assert kwargs["max_tasks"] == 10

    def test_output_file(self, cli_runner, missing_config, tmp_path):
        output = tmp_path / "report.md"
        with patch(
            "alignment_verifier.main.run_verification",
            new=AsyncMock(return_value=_report(AlignmentVerdict.ALIGNED)),
        ):
            result = cli_runner.invoke(cli, ["--config", missing_config, "verify", "app", "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_text().startswith("# Alignment Report: app")
        assert "1/1 tasks aligned (100%)" in result.output

    def test_rejects_zero_max_tasks(self, cli_runner, missing_config):
        result = cli_runner.invoke(cli, ["--config", missing_config, "verify", "app", "--max-tasks", "0"])

        assert result.exit_code == 2

    def test_configuration_error_exits_two(self, cli_runner, missing_config):
        with patch(
            "alignment_verifier.main.run_verification",
            new=AsyncMock(side_effect=ConfigurationError("Jira is not configured", service="tracker")),
        ):
            result = cli_runner.invoke(cli, ["--config", missing_config, "verify", "app"])

        assert result.exit_code == 2
        assert "Error: Jira is not configured" in result.output

    def test_requires_repo(self, cli_runner, missing_config):
        result = cli_runner.invoke(cli, ["--config", missing_config, "verify"])

        assert result.exit_code == 2
        assert "Missing argument" in result.output


# =============================================================================
# projects
# =============================================================================


class TestProjectsCommand:
    """Tests for the projects command."""

    def test_lists_projects(self, cli_runner, missing_config):
        tracker = MagicMock()
        tracker.__aenter__ = AsyncMock(return_value=tracker)
        tracker.__aexit__ = AsyncMock(return_value=None)
        tracker.list_projects = AsyncMock(
            return_value=[
                TrackerProject(id="1", key="SCRUM", name="Scrum"),
                TrackerProject(id="2", key="BKND", name="Backend Team"),
            ]
        )

        with patch("alignment_verifier.main.create_task_tracker", return_value=tracker):
            result = cli_runner.invoke(cli, ["--config", missing_config, "projects"])

        assert result.exit_code == 0
        assert "SCRUM" in result.output
        assert "Backend Team" in result.output

    def test_tracker_failure(self, cli_runner, missing_config):
        tracker = MagicMock()
        tracker.__aenter__ = AsyncMock(return_value=tracker)
        tracker.__aexit__ = AsyncMock(return_value=None)
        tracker.list_projects = AsyncMock(side_effect=ExternalServiceError("Jira request failed", status_code=401))

        with patch("alignment_verifier.main.create_task_tracker", return_value=tracker):
            result = cli_runner.invoke(cli, ["--config", missing_config, "projects"])

        assert result.exit_code == 2
        assert "Jira request failed" in result.output


# =============================================================================
# Configuration loading
# =============================================================================


class TestConfigLoading:
    """Tests for configuration handling in the CLI group."""

    def test_invalid_config_file(self, cli_runner, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("verification:\n  display_limit: 0\n")

        result = cli_runner.invoke(cli, ["--config", str(config_file), "verify", "app"])

        assert result.exit_code == 2
        assert "Failed to validate configuration" in result.output

    def test_valid_config_file(self, cli_runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("code_host:\n  owner: acme\n")

        with patch(
            "alignment_verifier.main.run_verification",
            new=AsyncMock(return_value=_report(AlignmentVerdict.ALIGNED)),
        ) as mock_run:
            result = cli_runner.invoke(cli, ["--config", str(config_file), "verify", "app"])

        assert result.exit_code == 0
        settings = mock_run.await_args.args[0]
        assert settings.code_host.owner == "acme"
