"""Run lifecycle: hook registration and sequential scenario execution.

LifecycleOrchestrator binds the validator and the recorder to four ordered
extension points and runs declared scenarios one at a time against the
shared session.
"""

import logging
import time
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

from pageperf.browser.driver import BLANK_URL
from pageperf.browser.session_manager import BrowserSessionManager
from pageperf.config.harness_config import HarnessConfig
from pageperf.exceptions import RunAbortedError
from pageperf.models.perf_models import (
    Condition,
    MetricsSample,
    RunReport,
    ScenarioDescriptor,
    ScenarioOutcome,
    ScenarioStatus,
)
from pageperf.pages.base import PageObject
from pageperf.reporting.sinks import MetricsSink
from pageperf.scenarios.declaration import check_order
from pageperf.scenarios.interaction import InteractionTimespanRecorder
from pageperf.scenarios.navigation import NavigationValidator

logger = logging.getLogger(__name__)


class LifecycleHook(str, Enum):
    """Extension points, in the order they fire during a run."""

    RUN_START = "run_start"
    SCENARIO_START = "scenario_start"
    SCENARIO_END = "scenario_end"
    RUN_END = "run_end"


class RunState(str, Enum):
    """Session state over the course of a run."""

    UNINITIALIZED = "uninitialized"
    SESSION_LIVE = "session_live"
    NAVIGATED = "navigated"
    TORN_DOWN = "torn_down"
    INIT_FAILED = "init_failed"


class HookContext(BaseModel):
    """What a lifecycle callback gets to see."""

    hook: LifecycleHook
    report: RunReport
    scenario: Optional[ScenarioDescriptor] = None
    outcome: Optional[ScenarioOutcome] = None
    session_manager: Any = None

    class Config:
        """Pydantic config."""

        arbitrary_types_allowed = True


HookCallback = Callable[[HookContext], Awaitable[None]]


class LifecycleOrchestrator:
    """Run scenarios in order against one shared browser session.

    Built-in behaviour per hook:
    - run_start: validate declared order, start the session, bind pages
    - scenario_start: nothing; each scenario declares its own condition
    - scenario_end: clear transient UI state without touching the session
    - run_end: tear the session down, always

    Registered callbacks run after the built-in step, except on run_end
    where they run before teardown so they can still use the browser.

    Scenario failures are recorded and the run continues. A RunAbortedError
    (e.g. a stuck browser on reset) stops the run; remaining scenarios are
    reported as skipped.
    """

    def __init__(
        self,
        session_manager: BrowserSessionManager,
        config: HarnessConfig,
        sink: Optional[MetricsSink] = None,
        pages: Optional[Iterable[PageObject]] = None,
        validator: Optional[NavigationValidator] = None,
        recorder: Optional[InteractionTimespanRecorder] = None,
    ):
        """Initialize the orchestrator.

        Args:
            session_manager: Owner of the shared browser session
            config: Harness configuration
            sink: Receiver for samples (used by the default validator/recorder)
            pages: Page objects rebound on every reset (defaults to the
                page objects the scenarios target)
            validator: Navigation validator (built from the above if omitted)
            recorder: Timespan recorder (built from the above if omitted)
        """
        self.session_manager = session_manager
        self.config = config
        self.sink = sink
        self.pages: List[PageObject] = list(pages or [])
        self.validator = validator or NavigationValidator(session_manager, config, sink)
        self.recorder = recorder or InteractionTimespanRecorder(session_manager, config, sink)
        self._hooks: Dict[LifecycleHook, List[HookCallback]] = {hook: [] for hook in LifecycleHook}
        self.state = RunState.UNINITIALIZED
        self.state_history: List[RunState] = [self.state]

    def register(self, hook: LifecycleHook, callback: HookCallback) -> None:
        """Register an async callback for a lifecycle hook."""
        self._hooks[LifecycleHook(hook)].append(callback)

    async def run(self, scenarios: Iterable[ScenarioDescriptor]) -> RunReport:
        """Execute scenarios sequentially and report every outcome.

        Returns:
            Run report; ``aborted`` is set when the run stopped early
        """
        scenarios = list(scenarios)
        report = RunReport()
        if not self.pages:
            for scenario in scenarios:
                if scenario.page_object not in self.pages:
                    self.pages.append(scenario.page_object)

        logger.info(f"Run {report.run_id} starting with {len(scenarios)} scenarios")
        try:
            try:
                await self._run_start(scenarios, report)
            except Exception as e:
                logger.error(f"Run {report.run_id} failed to initialize: {e}")
                self._transition(RunState.INIT_FAILED)
                report.aborted = True
                report.abort_reason = f"{type(e).__name__}: {e}"
                report.outcomes.extend(self._skipped(s) for s in scenarios)
                return report

            for index, scenario in enumerate(scenarios):
                if report.aborted:
                    report.outcomes.append(self._skipped(scenario))
                    continue
                outcome = await self.run_scenario(scenario, report, index)
                report.outcomes.append(outcome)
        finally:
            await self._run_end(report)
            report.finished_at = datetime.now()
            logger.info(
                f"Run {report.run_id} finished: {len(report.passed)} passed, "
                f"{len(report.failed)} failed, {len(report.skipped)} skipped"
                + (f", aborted ({report.abort_reason})" if report.aborted else "")
            )

        return report

    async def run_scenario(
        self, scenario: ScenarioDescriptor, report: RunReport, index: int = 0
    ) -> ScenarioOutcome:
        """Run one scenario, attributing any failure to it.

        A RunAbortedError marks the report aborted instead of propagating.
        """
        scenario = scenario.model_copy(
            update={
                "context": {
                    **scenario.context,
                    "run_id": report.run_id,
                    "scenario_index": index,
                }
            }
        )
        await self._fire(LifecycleHook.SCENARIO_START, report, scenario=scenario)

        before = self.session_manager.session
        before_id = before.session_id if before else None
        start = time.perf_counter()
        try:
            sample = await self._execute(scenario)
            outcome = ScenarioOutcome(
                name=scenario.name,
                condition=scenario.condition,
                status=ScenarioStatus.PASSED,
                sample=sample,
            )
            logger.info(f"{scenario.name}: passed")
        except RunAbortedError as e:
            logger.error(f"{scenario.name}: run aborted: {e}")
            report.aborted = True
            report.abort_reason = f"{type(e).__name__}: {e}"
            outcome = self._failed(scenario, e)
        except Exception as e:
            logger.error(f"{scenario.name}: failed: {type(e).__name__}: {e}")
            outcome = self._failed(scenario, e)
        outcome.duration_ms = (time.perf_counter() - start) * 1000

        self._sync_state(before_id)
        if not report.aborted:
            await self._scenario_end(scenario, outcome, report)
        return outcome

    async def _execute(self, scenario: ScenarioDescriptor) -> MetricsSample:
        if scenario.condition == Condition.TIMESPAN:
            return await self.recorder.record_timespan(
                scenario.page_object, scenario.action_name, scenario
            )

        prior_url = scenario.prior_url
        if prior_url is None and scenario.preserve_url:
            prior_url = self._current_url()
        return await self.validator.validate_navigation(
            scenario.condition,
            scenario.page_object,
            scenario,
            prior_url=prior_url,
            known_pages=self.pages,
        )

    async def _run_start(self, scenarios: List[ScenarioDescriptor], report: RunReport) -> None:
        check_order(scenarios, strict=self.config.strict_order)
        await self.session_manager.ensure_session()
        page = await self.session_manager.current_page()
        for page_object in self.pages:
            page_object.init(page)
        self._transition(RunState.SESSION_LIVE)
        for callback in self._hooks[LifecycleHook.RUN_START]:
            await callback(self._context(LifecycleHook.RUN_START, report))

    async def _scenario_end(
        self, scenario: ScenarioDescriptor, outcome: ScenarioOutcome, report: RunReport
    ) -> None:
        session = self.session_manager.session
        if session is not None and session.page is not None and session.has_navigated:
            await self.session_manager.driver.clear_transient_state(session.page)
        await self._fire(LifecycleHook.SCENARIO_END, report, scenario=scenario, outcome=outcome)

    async def _run_end(self, report: RunReport) -> None:
        await self._fire(LifecycleHook.RUN_END, report)
        try:
            await self.session_manager.teardown()
        except Exception as e:
            logger.error(f"Run-end teardown failed: {e}")
        if self.state != RunState.INIT_FAILED:
            self._transition(RunState.TORN_DOWN)
        if self.sink is not None:
            try:
                self.sink.close()
            except Exception as e:
                logger.warning(f"Failed to close sink: {e}")

    async def _fire(self, hook: LifecycleHook, report: RunReport, **details: Any) -> None:
        """Invoke callbacks for a per-scenario or run-end hook; failures are logged."""
        for callback in self._hooks[hook]:
            try:
                await callback(self._context(hook, report, **details))
            except Exception as e:
                name = getattr(callback, "__name__", callback)
                logger.warning(f"{hook.value} callback {name} failed: {e}")

    def _context(self, hook: LifecycleHook, report: RunReport, **details: Any) -> HookContext:
        return HookContext(
            hook=hook, report=report, session_manager=self.session_manager, **details
        )

    def _current_url(self) -> Optional[str]:
        session = self.session_manager.session
        if session is None or session.page is None:
            return None
        url = session.page.url
        return None if url == BLANK_URL else url

    def _sync_state(self, before_id: Optional[str]) -> None:
        session = self.session_manager.session
        if session is None:
            return
        if session.session_id != before_id:
            self._transition(RunState.SESSION_LIVE)
        target = RunState.NAVIGATED if session.has_navigated else RunState.SESSION_LIVE
        if target != self.state:
            self._transition(target)

    def _transition(self, state: RunState) -> None:
        logger.debug(f"Run state {self.state.value} -> {state.value}")
        self.state = state
        self.state_history.append(state)

    @staticmethod
    def _failed(scenario: ScenarioDescriptor, error: Exception) -> ScenarioOutcome:
        return ScenarioOutcome(
            name=scenario.name,
            condition=scenario.condition,
            status=ScenarioStatus.FAILED,
            error_type=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def _skipped(scenario: ScenarioDescriptor) -> ScenarioOutcome:
        return ScenarioOutcome(
            name=scenario.name,
            condition=scenario.condition,
            status=ScenarioStatus.SKIPPED,
        )
