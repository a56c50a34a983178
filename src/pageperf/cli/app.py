"""Main CLI application entry point."""

import asyncio
import logging
import sys
from typing import Optional

import click

from pageperf import __version__
from pageperf.config.harness_config import HarnessConfig, load_config
from pageperf.exceptions import PagePerfError
from pageperf.pages.demoqa import build_demo_suite
from pageperf.reporting.sinks import JsonLinesSink, write_run_report
from pageperf.runner import run_suite
from pageperf.suites.loader import load_suite
from pageperf.suites.suite import Suite
from pageperf.cli.output import ReportRenderer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SCENARIO_FAILURES = 1
EXIT_RUN_ABORTED = 2


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Playwright's asyncio transport is chatty at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def _load_suite(suite_path: Optional[str], config: HarnessConfig) -> Suite:
    if suite_path:
        return load_suite(suite_path, config)
    return build_demo_suite(config)


@click.group()
@click.version_option(version=__version__, prog_name="pageperf")
def main() -> None:
    """pageperf - page load and interaction performance harness."""


@main.command("run")
@click.argument("suite_path", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(), help="YAML config file path")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option("--timeout", "timeout_ms", type=int, help="Per-scenario timeout (ms)")
@click.option("--report-dir", help="Directory for samples and the run report")
@click.option("--base-url", help="Base URL relative page paths resolve against")
@click.option("--strict-order", is_flag=True, help="Reject mis-ordered scenarios up front")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def run_command(
    suite_path: Optional[str],
    config_path: Optional[str],
    headed: bool,
    timeout_ms: Optional[int],
    report_dir: Optional[str],
    base_url: Optional[str],
    strict_order: bool,
    log_level: Optional[str],
) -> None:
    """
    Run a suite and report every scenario.

    Without SUITE_PATH the built-in demoqa.com suite runs.
    """
    try:
        config = load_config(
            config_path,
            headless=False if headed else None,
            test_time_ms=timeout_ms,
            report_dir=report_dir,
            base_url=base_url,
            strict_order=True if strict_order else None,
            log_level=log_level.upper() if log_level else None,
        )
        _configure_logging(config.log_level)
        suite = _load_suite(suite_path, config)
    except PagePerfError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_RUN_ABORTED)

    sink = JsonLinesSink(config.report_dir)
    try:
        report = asyncio.run(run_suite(suite, config, sink=sink))
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
        sys.exit(EXIT_RUN_ABORTED)

    ReportRenderer().render_report(report)
    report_path = write_run_report(report, config.report_dir)
    click.echo(f"Run report: {report_path}")

    if report.aborted:
        sys.exit(EXIT_RUN_ABORTED)
    if report.failed:
        sys.exit(EXIT_SCENARIO_FAILURES)
    sys.exit(EXIT_OK)


@main.command("list")
@click.argument("suite_path", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(), help="YAML config file path")
def list_command(suite_path: Optional[str], config_path: Optional[str]) -> None:
    """List the scenarios of a suite without running them."""
    try:
        config = load_config(config_path)
        suite = _load_suite(suite_path, config)
    except PagePerfError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_RUN_ABORTED)

    ReportRenderer().render_suite(suite)


if __name__ == "__main__":
    main()
