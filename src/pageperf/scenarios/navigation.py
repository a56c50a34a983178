"""Cold, warm and reset navigation measurement.

NavigationValidator decides what a navigation condition requires of the
shared browser session, drives the navigation through a PageObject and
turns the driver's raw timing into a MetricsSample.
"""

import asyncio
import logging
import time
from typing import Iterable, Optional, Union

from pageperf.browser.driver import BLANK_URL
from pageperf.browser.session_manager import BrowserSessionManager
from pageperf.browser.timing import build_navigation_breakdown
from pageperf.config.harness_config import HarnessConfig
from pageperf.exceptions import (
    DriverTimeoutError,
    NavigationTimeoutError,
    NoActiveSessionError,
    NoPriorSessionError,
    SessionTeardownError,
    StalePageStateError,
)
from pageperf.models.perf_models import (
    Condition,
    MetricsSample,
    NAVIGATION_CONDITIONS,
    ScenarioDescriptor,
)
from pageperf.pages.base import PageObject
from pageperf.reporting.sinks import MetricsSink, emit_sample

logger = logging.getLogger(__name__)


class NavigationValidator:
    """Measure page navigations under cold, warm and reset conditions.

    - cold: first visit on a page handle that has not navigated anywhere
    - warm: repeat visit on the same session and page handle
    - reset: visit after the session has been destroyed and relaunched

    Navigations are never retried: a hung navigation is reported as a
    NavigationTimeoutError against the scenario.
    """

    def __init__(
        self,
        session_manager: BrowserSessionManager,
        config: HarnessConfig,
        sink: Optional[MetricsSink] = None,
    ):
        """Initialize the validator.

        Args:
            session_manager: Owner of the shared browser session
            config: Harness configuration (default timeout)
            sink: Receiver for produced samples
        """
        self.session_manager = session_manager
        self.driver = session_manager.driver
        self.config = config
        self.sink = sink

    async def validate_navigation(
        self,
        condition: Union[Condition, str],
        page_object: PageObject,
        scenario: Optional[ScenarioDescriptor] = None,
        prior_url: Optional[str] = None,
        known_pages: Optional[Iterable[PageObject]] = None,
    ) -> MetricsSample:
        """Navigate to a page object under a condition and capture a sample.

        Args:
            condition: cold, warm or reset
            page_object: Navigation target
            scenario: Declaring scenario (name, context, timeout)
            prior_url: For reset, URL to reopen instead of the page object's URL
            known_pages: For reset, page objects to rebind to the new page handle

        Returns:
            The emitted sample

        Raises:
            NoPriorSessionError: warm without an earlier navigation in a live session
            StalePageStateError: cold on a page handle that already navigated
            NavigationTimeoutError: The scenario timeout ran out
            SessionTeardownError: reset could not close the previous browser,
                including when the scenario timeout cut the close short
            ValueError: condition is not a navigation condition
        """
        condition = Condition(condition)
        if condition not in NAVIGATION_CONDITIONS:
            raise ValueError(f"{condition.value!r} is not a navigation condition")

        timeout_ms = (scenario.timeout_ms if scenario else None) or self.config.test_time_ms
        name = scenario.name if scenario else f"[N]_{page_object.name}--{condition.value}"

        try:
            return await asyncio.wait_for(
                self._navigate(
                    condition, page_object, name, scenario, prior_url, known_pages, timeout_ms
                ),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            failure = self.session_manager.teardown_failure
            if failure is not None:
                raise SessionTeardownError(f"{name}: {failure}") from e
            logger.error(f"{name}: navigation exceeded {timeout_ms}ms")
            raise NavigationTimeoutError(
                f"{name}: navigation to {page_object.name!r} exceeded {timeout_ms}ms"
            ) from e

    async def _navigate(
        self,
        condition: Condition,
        page_object: PageObject,
        name: str,
        scenario: Optional[ScenarioDescriptor],
        prior_url: Optional[str],
        known_pages: Optional[Iterable[PageObject]],
        timeout_ms: int,
    ) -> MetricsSample:
        url = page_object.get_url()

        if condition == Condition.COLD:
            session = await self.session_manager.ensure_session()
            page = await self.session_manager.current_page()
            if session.has_navigated or page.url != BLANK_URL:
                raise StalePageStateError(
                    f"{name}: cold navigation needs a fresh page, but page "
                    f"{session.page_id} already shows {page.url!r}"
                )
            self._bind(page_object, page)

        elif condition == Condition.WARM:
            current = self.session_manager.session
            if current is None or not current.has_navigated:
                raise NoPriorSessionError(
                    f"{name}: warm navigation needs a live session with an earlier navigation"
                )
            session = await self.session_manager.ensure_session()
            page = await self.session_manager.current_page()
            if session.last_url != url:
                logger.warning(
                    f"{name}: previous navigation was {session.last_url!r}, "
                    f"not {url!r}; cache reuse may be partial"
                )
            self._bind(page_object, page)

        else:
            session = await self.session_manager.reset_session()
            page = await self.session_manager.current_page()
            rebound = list(known_pages or [])
            if page_object not in rebound:
                rebound.append(page_object)
            for known in rebound:
                known.init(page)
            url = prior_url or url

        logger.info(f"{name}: {condition.value} navigation to {url} (session {session.session_id})")
        start = time.perf_counter()
        try:
            raw = await self.driver.navigate(page, url, timeout_ms=timeout_ms)
        except DriverTimeoutError as e:
            raise NavigationTimeoutError(f"{name}: {e}") from e
        duration_ms = (time.perf_counter() - start) * 1000

        if not session.is_live:
            raise NoActiveSessionError(f"{name}: session {session.session_id} ended mid-navigation")
        await self.session_manager.record_navigation(url)

        sample = MetricsSample(
            scenario_name=name,
            condition=condition,
            page_name=page_object.name,
            url=url,
            timing=build_navigation_breakdown(raw, duration_ms),
            session_id=session.session_id,
            page_id=session.page_id,
            context=dict(scenario.context) if scenario else {},
        )
        logger.info(
            f"{name}: captured in {duration_ms:.0f}ms "
            f"(ttfb={sample.timing.ttfb}, lcp={sample.timing.lcp})"
        )
        emit_sample(self.sink, sample)
        return sample

    @staticmethod
    def _bind(page_object: PageObject, page) -> None:
        if page_object.page is not page:
            page_object.init(page)
