"""Playwright browser automation driver.

This module provides the PlaywrightDriver class, the only code that talks
to Playwright directly. It launches browser instances, opens pages,
navigates, performs page actions and extracts raw timing data.

CRITICAL: stop() must be called at the end of a run to avoid leaking the
Playwright process.
"""

from typing import Optional, Dict, Any
import logging

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)
from pydantic import BaseModel

from pageperf.browser.timing import TimingCollector
from pageperf.config.harness_config import HarnessConfig
from pageperf.exceptions import DriverError, DriverTimeoutError
from pageperf.models.perf_models import ActionKind, PageAction

logger = logging.getLogger(__name__)

BLANK_URL = "about:blank"


class DriverHandle(BaseModel):
    """Browser instance plus the context pages are opened in."""

    browser: Any
    context: Any

    class Config:
        """Pydantic config."""

        arbitrary_types_allowed = True


class PlaywrightDriver:
    """Drive a Playwright browser on behalf of the session manager.

    PATTERN: One browser and one context per session. Reusing the context
    between navigations keeps the HTTP cache and connections warm; closing
    the browser throws both away.
    """

    def __init__(
        self,
        config: HarnessConfig,
        timing: Optional[TimingCollector] = None,
    ):
        """Initialize the driver.

        Args:
            config: Harness configuration
            timing: Timing collector (a default one is created if omitted)
        """
        self.config = config
        self.timing = timing or TimingCollector()
        self.playwright: Optional[Playwright] = None
        self._initialized = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()

    async def initialize(self) -> None:
        """Start Playwright. Idempotent.

        Raises:
            DriverError: If Playwright fails to start
        """
        if self._initialized:
            return

        try:
            self.playwright = await async_playwright().start()
            self._initialized = True
            logger.info("Playwright initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize Playwright: {e}")
            raise DriverError(f"Playwright initialization failed: {e}") from e

    async def launch(self) -> DriverHandle:
        """Launch a fresh browser instance with a single context.

        Returns:
            Handle for the launched browser

        Raises:
            DriverError: If the browser fails to launch
        """
        if not self._initialized:
            await self.initialize()

        browser_type = self.config.browser.value
        browser: Optional[Browser] = None
        try:
            browser_launcher = getattr(self.playwright, browser_type)
            browser = await browser_launcher.launch(headless=self.config.headless)
            viewport = self.config.viewport
            context: BrowserContext = await browser.new_context(
                viewport={"width": viewport.width, "height": viewport.height}
            )
            logger.info(f"Launched {browser_type} browser (headless={self.config.headless})")
            return DriverHandle(browser=browser, context=context)
        except Exception as e:
            logger.error(f"Failed to launch {browser_type} browser: {e}")
            if browser is not None:
                try:
                    await browser.close()
                except Exception as close_error:
                    logger.warning(f"Error closing half-launched browser: {close_error}")
            raise DriverError(f"Browser launch failed: {e}") from e

    async def new_page(self, handle: DriverHandle) -> Page:
        """Open a blank page in the handle's context.

        Raises:
            DriverError: If page creation fails
        """
        try:
            page = await handle.context.new_page()
            logger.debug("Created page")
            return page
        except Exception as e:
            logger.error(f"Failed to create page: {e}")
            raise DriverError(f"Page creation failed: {e}") from e

    async def navigate(
        self, page: Page, url: str, timeout_ms: Optional[int] = None
    ) -> Dict[str, Any]:
        """Navigate page to URL and return raw load timing data.

        Args:
            page: Page instance
            url: Target URL
            timeout_ms: Navigation timeout in milliseconds

        Returns:
            Raw timing dictionary (see TimingCollector)

        Raises:
            DriverTimeoutError: If the page does not reach the load state in time
            DriverError: If navigation fails
        """
        timeout = timeout_ms or self.config.test_time_ms
        try:
            await page.goto(url, wait_until=self.config.wait_until, timeout=timeout)
            logger.debug(f"Navigated to {url}")
        except PlaywrightTimeoutError as e:
            logger.error(f"Navigation to {url} timed out after {timeout}ms")
            raise DriverTimeoutError(f"Navigation timed out: {e}") from e
        except Exception as e:
            logger.error(f"Navigation to {url} failed: {e}")
            raise DriverError(f"Navigation failed: {e}") from e

        return await self.timing.collect_navigation(page)

    async def perform_action(
        self, page: Page, action: PageAction, timeout_ms: Optional[int] = None
    ) -> None:
        """Perform a page action and wait until the page settles.

        Completion means: the action returned, the optional ``wait_for``
        selector is visible, and the ``settle`` load state was reached.
        A settle wait that runs out is logged and treated as settled, since
        pages with long-polling connections never go network-idle.

        Raises:
            DriverTimeoutError: If the action or its wait_for selector times out
            DriverError: If the action fails
        """
        timeout = timeout_ms or self.config.test_time_ms
        try:
            if action.kind == ActionKind.CLICK:
                await page.click(action.selector, timeout=timeout)
            elif action.kind == ActionKind.FILL:
                await page.fill(action.selector, action.value, timeout=timeout)
            elif action.kind == ActionKind.PRESS:
                await page.press(action.selector, action.value, timeout=timeout)
            elif action.kind == ActionKind.HOVER:
                await page.hover(action.selector, timeout=timeout)
            else:
                await action.handler(page)

            if action.wait_for:
                await page.wait_for_selector(action.wait_for, state="visible", timeout=timeout)
            logger.debug(f"Performed action {action.name!r}")
        except PlaywrightTimeoutError as e:
            logger.error(f"Action {action.name!r} timed out after {timeout}ms")
            raise DriverTimeoutError(f"Action timed out: {e}") from e
        except Exception as e:
            logger.error(f"Action {action.name!r} failed: {e}")
            raise DriverError(f"Action failed: {e}") from e

        if action.settle:
            try:
                await page.wait_for_load_state(
                    action.settle, timeout=min(timeout, self.config.settle_timeout_ms)
                )
            except PlaywrightTimeoutError:
                logger.warning(
                    f"Page did not reach {action.settle!r} after {action.name!r}, continuing"
                )

    async def start_timespan(self, page: Page) -> None:
        await self.timing.start_timespan(page)

    async def end_timespan(self, page: Page) -> Dict[str, Any]:
        return await self.timing.end_timespan(page)

    async def clear_transient_state(self, page: Page) -> None:
        """Drop focus and hover state left over by an interaction."""
        try:
            await page.evaluate(
                "() => { if (document.activeElement) { document.activeElement.blur(); } }"
            )
            await page.mouse.move(0, 0)
        except Exception as e:
            logger.warning(f"Failed to clear transient page state: {e}")

    async def close(self, handle: DriverHandle) -> None:
        """Close the context and browser behind a handle.

        Raises:
            DriverError: If the browser could not be closed
        """
        errors = []

        try:
            await handle.context.close()
        except Exception as e:
            errors.append(f"Failed to close context: {e}")

        try:
            await handle.browser.close()
        except Exception as e:
            errors.append(f"Failed to close browser: {e}")

        if errors:
            error_msg = "; ".join(errors)
            logger.error(f"Browser teardown failed: {error_msg}")
            raise DriverError(f"Teardown errors: {error_msg}")
        logger.debug("Closed browser")

    async def stop(self) -> None:
        """Stop Playwright. Safe to call more than once."""
        if self.playwright:
            try:
                await self.playwright.stop()
                logger.info("Playwright stopped successfully")
            except Exception as e:
                logger.error(f"Failed to stop Playwright: {e}")
            self.playwright = None
        self._initialized = False
