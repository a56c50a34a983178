"""Tests for the pageperf command line."""

import pytest
from unittest.mock import AsyncMock, patch
from click.testing import CliRunner

from pageperf import __version__
from pageperf.cli.app import (
    EXIT_OK,
    EXIT_RUN_ABORTED,
    EXIT_SCENARIO_FAILURES,
    main,
)
from pageperf.models.perf_models import (
    Condition,
    RunReport,
    ScenarioOutcome,
    ScenarioStatus,
)

SUITE_YAML = """
name: cli
pages:
  - name: Home
    url: /
scenarios:
  - name: "[N]_Home--cold"
    page: Home
  - name: "[N]_Home--warm"
    page: Home
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def suite_file(tmp_path):
    path = tmp_path / "suite.yaml"
    path.write_text(SUITE_YAML)
    return str(path)


def _report(*statuses, aborted=False):
    return RunReport(
        outcomes=[
            ScenarioOutcome(
                name=f"[N]_Home--cold_{i}",
                condition=Condition.COLD,
                status=status,
                error_type="NoPriorSessionError" if status == ScenarioStatus.FAILED else None,
            )
            for i, status in enumerate(statuses)
        ],
        aborted=aborted,
        abort_reason="SessionTeardownError: stuck" if aborted else None,
    )


class TestRunCommand:
    """Tests for `pageperf run`."""

    def test_success(self, runner, suite_file, tmp_path):
        """Test a passing run writes a report and exits 0."""
        report = _report(ScenarioStatus.PASSED, ScenarioStatus.PASSED)
        with patch("pageperf.cli.app.run_suite", AsyncMock(return_value=report)) as mock_run:
            result = runner.invoke(
                main,
                ["run", suite_file, "--report-dir", str(tmp_path / "reports"), "--timeout", "900"],
            )

        assert result.exit_code == EXIT_OK, result.output
        assert "Run report:" in result.output
        assert list((tmp_path / "reports").glob("run_*.json"))

        suite, config = mock_run.call_args.args[:2]
        assert suite.name == "cli"
        assert [s.condition for s in suite.scenarios] == [Condition.COLD, Condition.WARM]
        assert config.test_time_ms == 900

    def test_scenario_failures(self, runner, suite_file, tmp_path):
        """Test that failed scenarios exit 1."""
        report = _report(ScenarioStatus.PASSED, ScenarioStatus.FAILED)
        with patch("pageperf.cli.app.run_suite", AsyncMock(return_value=report)):
            result = runner.invoke(
                main, ["run", suite_file, "--report-dir", str(tmp_path)]
            )

        assert result.exit_code == EXIT_SCENARIO_FAILURES

    def test_aborted_run(self, runner, suite_file, tmp_path):
        """Test that an aborted run exits 2."""
        report = _report(ScenarioStatus.FAILED, ScenarioStatus.SKIPPED, aborted=True)
        with patch("pageperf.cli.app.run_suite", AsyncMock(return_value=report)):
            result = runner.invoke(
                main, ["run", suite_file, "--report-dir", str(tmp_path)]
            )

        assert result.exit_code == EXIT_RUN_ABORTED

    def test_flags_reach_config(self, runner, suite_file, tmp_path):
        """Test that CLI flags override configuration."""
        report = _report(ScenarioStatus.PASSED)
        with patch("pageperf.cli.app.run_suite", AsyncMock(return_value=report)) as mock_run:
            runner.invoke(
                main,
                [
                    "run",
                    suite_file,
                    "--headed",
                    "--strict-order",
                    "--base-url",
                    "https://staging.test",
                    "--report-dir",
                    str(tmp_path),
                ],
            )

        suite, config = mock_run.call_args.args[:2]
        assert config.headless is False
        assert config.strict_order is True
        assert suite.pages["Home"].get_url() == "https://staging.test/"

    def test_demo_suite_by_default(self, runner, tmp_path):
        """Test that the demo suite runs when no suite is given."""
        report = _report(ScenarioStatus.PASSED)
        with patch("pageperf.cli.app.run_suite", AsyncMock(return_value=report)) as mock_run:
            runner.invoke(main, ["run", "--report-dir", str(tmp_path)])

        suite = mock_run.call_args.args[0]
        assert suite.name == "demoqa"

    def test_bad_suite(self, runner, tmp_path):
        """Test that an invalid suite exits 2 before running anything."""
        path = tmp_path / "bad.yaml"
        path.write_text("scenarios:\n  - name: '[N]_X--cold'\n    page: X\n")
        with patch("pageperf.cli.app.run_suite", AsyncMock()) as mock_run:
            result = runner.invoke(main, ["run", str(path), "--report-dir", str(tmp_path)])

        assert result.exit_code == EXIT_RUN_ABORTED
        mock_run.assert_not_called()

    def test_bad_config(self, runner, suite_file, tmp_path):
        """Test that a missing config file exits 2."""
        result = runner.invoke(
            main, ["run", suite_file, "--config", str(tmp_path / "missing.yaml")]
        )
        assert result.exit_code == EXIT_RUN_ABORTED


class TestListCommand:
    """Tests for `pageperf list`."""

    def test_list(self, runner, suite_file):
        """Test listing a suite's scenarios."""
        result = runner.invoke(main, ["list", suite_file])

        assert result.exit_code == 0
        assert "[N]_Home--cold" in result.output
        assert "warm" in result.output

    def test_version(self, runner):
        """Test the version option."""
        result = runner.invoke(main, ["--version"])
        assert __version__ in result.output
