"""Rich rendering of run reports and scenario listings."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pageperf.models.perf_models import RunReport, ScenarioStatus
from pageperf.suites.suite import Suite

_STATUS_STYLE = {
    ScenarioStatus.PASSED: "green",
    ScenarioStatus.FAILED: "red",
    ScenarioStatus.SKIPPED: "yellow",
}


def _ms(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.0f}"


class ReportRenderer:
    """Render harness output to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_suite(self, suite: Suite) -> None:
        table = Table(title=f"Suite {escape(suite.name)}", show_header=True)
        table.add_column("#", justify="right")
        table.add_column("Scenario")
        table.add_column("Condition")
        table.add_column("Page")
        table.add_column("Action")

        for index, scenario in enumerate(suite.scenarios, start=1):
            table.add_row(
                str(index),
                escape(scenario.name),
                scenario.condition.value,
                scenario.page_name,
                scenario.action_name or "",
            )
        self.console.print(table)

    def render_report(self, report: RunReport) -> None:
        table = Table(title=f"Run {report.run_id}", show_header=True)
        table.add_column("Scenario")
        table.add_column("Condition")
        table.add_column("Status")
        table.add_column("Session")
        table.add_column("Duration (ms)", justify="right")
        table.add_column("TTFB", justify="right")
        table.add_column("FCP", justify="right")
        table.add_column("LCP", justify="right")
        table.add_column("Load", justify="right")
        table.add_column("Error")

        for outcome in report.outcomes:
            style = _STATUS_STYLE[outcome.status]
            sample = outcome.sample
            timing = sample.timing if sample else None
            error = f"{outcome.error_type}: {outcome.error_message}" if outcome.error_type else ""
            table.add_row(
                escape(outcome.name),
                outcome.condition.value,
                f"[{style}]{outcome.status.value}[/{style}]",
                sample.session_id if sample else "",
                _ms(timing.duration_ms) if timing else "-",
                _ms(timing.ttfb) if timing else "-",
                _ms(timing.fcp) if timing else "-",
                _ms(timing.lcp) if timing else "-",
                _ms(timing.load_complete) if timing else "-",
                escape(error),
            )
        self.console.print(table)

        summary = (
            f"{len(report.passed)} passed, {len(report.failed)} failed, "
            f"{len(report.skipped)} skipped"
        )
        if report.aborted:
            reason = escape(report.abort_reason or "")
            self.console.print(f"[bold red]Run aborted:[/bold red] {reason}")
            self.console.print(f"[red]{summary}[/red]")
        elif report.failed:
            self.console.print(f"[red]{summary}[/red]")
        else:
            self.console.print(f"[green]{summary}[/green]")
