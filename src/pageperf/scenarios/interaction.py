"""Timed in-page interactions (timespans)."""

import asyncio
import logging
import time
from typing import Optional

from pageperf.browser.driver import BLANK_URL
from pageperf.browser.session_manager import BrowserSessionManager
from pageperf.browser.timing import build_timespan_breakdown
from pageperf.config.harness_config import HarnessConfig
from pageperf.exceptions import (
    DriverTimeoutError,
    InteractionTimeoutError,
    NoActiveSessionError,
    StalePageStateError,
)
from pageperf.models.perf_models import (
    Condition,
    MetricsSample,
    PageAction,
    ScenarioDescriptor,
)
from pageperf.pages.base import PageObject
from pageperf.reporting.sinks import MetricsSink, emit_sample

logger = logging.getLogger(__name__)


class InteractionTimespanRecorder:
    """Time a single page action on an already-navigated page.

    The recorder never navigates and never retries: re-firing a stateful
    interaction such as a form submission would corrupt the measurement.
    """

    def __init__(
        self,
        session_manager: BrowserSessionManager,
        config: HarnessConfig,
        sink: Optional[MetricsSink] = None,
    ):
        self.session_manager = session_manager
        self.driver = session_manager.driver
        self.config = config
        self.sink = sink

    async def record_timespan(
        self,
        page_object: PageObject,
        action_name: str,
        scenario: Optional[ScenarioDescriptor] = None,
    ) -> MetricsSample:
        """Perform a named action and capture its timing as a timespan sample.

        Raises:
            UnknownActionError: The page object has no such action
            NoActiveSessionError: No live browser session
            StalePageStateError: The page has not navigated yet
            InteractionTimeoutError: The scenario timeout ran out
        """
        action = page_object.get_action(action_name)
        timeout_ms = (scenario.timeout_ms if scenario else None) or self.config.test_time_ms
        name = scenario.name if scenario else f"[T]_{page_object.name}_{action_name}"

        try:
            return await asyncio.wait_for(
                self._record(page_object, action, name, scenario, timeout_ms),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"{name}: interaction exceeded {timeout_ms}ms")
            raise InteractionTimeoutError(
                f"{name}: action {action_name!r} exceeded {timeout_ms}ms"
            ) from e

    async def _record(
        self,
        page_object: PageObject,
        action: PageAction,
        name: str,
        scenario: Optional[ScenarioDescriptor],
        timeout_ms: int,
    ) -> MetricsSample:
        session = self.session_manager.session
        if session is None:
            raise NoActiveSessionError(f"{name}: timespan needs a live browser session")
        page = await self.session_manager.current_page()
        if not session.has_navigated or page.url == BLANK_URL:
            raise StalePageStateError(f"{name}: timespan needs a navigated page")
        if page_object.page is not page:
            page_object.init(page)

        logger.info(
            f"{name}: timing {action.name!r} on {page_object.name} (session {session.session_id})"
        )
        await self.driver.start_timespan(page)
        start = time.perf_counter()
        try:
            await self.driver.perform_action(page, action, timeout_ms=timeout_ms)
        except DriverTimeoutError as e:
            raise InteractionTimeoutError(f"{name}: {e}") from e
        duration_ms = (time.perf_counter() - start) * 1000
        raw = await self.driver.end_timespan(page)

        if not session.is_live:
            raise NoActiveSessionError(
                f"{name}: session {session.session_id} ended mid-interaction"
            )

        sample = MetricsSample(
            scenario_name=name,
            condition=Condition.TIMESPAN,
            page_name=page_object.name,
            url=page.url,
            timing=build_timespan_breakdown(raw, duration_ms),
            session_id=session.session_id,
            page_id=session.page_id,
            context=dict(scenario.context) if scenario else {},
        )
        logger.info(f"{name}: captured in {duration_ms:.0f}ms")
        emit_sample(self.sink, sample)
        return sample
