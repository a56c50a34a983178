"""Shared fixtures: a fake browser driver that never starts a real browser."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from pageperf.browser.driver import BLANK_URL, DriverHandle, PlaywrightDriver
from pageperf.browser.session_manager import BrowserSessionManager
from pageperf.config.harness_config import HarnessConfig
from pageperf.exceptions import DriverError, DriverTimeoutError
from pageperf.models.perf_models import PageAction
from pageperf.pages.base import PageObject
from pageperf.reporting.sinks import InMemorySink


class FakePage:
    """Stands in for a Playwright page."""

    def __init__(self):
        self.url = BLANK_URL
        self.actions: List[str] = []


class FakeDriver(PlaywrightDriver):
    """PlaywrightDriver that records calls instead of driving a browser."""

    def __init__(self, config: HarnessConfig):
        super().__init__(config)
        self.launch_count = 0
        self.live_handles: List[DriverHandle] = []
        self.max_live = 0
        self.closed: List[DriverHandle] = []
        self.navigations: List[str] = []
        self.close_delay: float = 0.0
        self.fail_close = False
        self.navigate_delay: float = 0.0
        self.navigate_timeout = False
        self.action_timeout = False
        self.action_delay: float = 0.0
        self.new_page_failures = 0
        self.cleared: List[Any] = []
        self.stopped = False

    async def launch(self) -> DriverHandle:
        self.launch_count += 1
        handle = DriverHandle(browser=f"browser-{self.launch_count}", context=object())
        self.live_handles.append(handle)
        self.max_live = max(self.max_live, len(self.live_handles))
        return handle

    async def new_page(self, handle: DriverHandle) -> FakePage:
        if self.new_page_failures:
            self.new_page_failures -= 1
            raise DriverError("Page creation failed: context closed")
        return FakePage()

    async def navigate(
        self, page: FakePage, url: str, timeout_ms: Optional[int] = None
    ) -> Dict[str, Any]:
        if self.navigate_delay:
            await asyncio.sleep(self.navigate_delay)
        if self.navigate_timeout:
            raise DriverTimeoutError("Navigation timed out")
        page.url = url
        self.navigations.append(url)
        return {
            "ttfb": 12.0,
            "fcp": 80.0,
            "lcp": 120.0,
            "cls": 0.01,
            "dom_content_loaded": 100.0,
            "load_complete": 200.0,
            "total_requests": 4,
            "transfer_size_bytes": 2048,
        }

    async def perform_action(
        self, page: FakePage, action: PageAction, timeout_ms: Optional[int] = None
    ) -> None:
        if self.action_delay:
            await asyncio.sleep(self.action_delay)
        if self.action_timeout:
            raise DriverTimeoutError("Action timed out")
        page.actions.append(action.name)

    async def start_timespan(self, page: FakePage) -> None:
        pass

    async def end_timespan(self, page: FakePage) -> Dict[str, Any]:
        return {"in_page_duration_ms": 5.0, "cls": 0.0, "total_requests": 1}

    async def clear_transient_state(self, page: FakePage) -> None:
        self.cleared.append(page)

    async def close(self, handle: DriverHandle) -> None:
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        if self.fail_close:
            raise DriverError("Teardown errors: browser crashed")
        self.live_handles.remove(handle)
        self.closed.append(handle)

    async def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def config():
    """Harness config with short timeouts."""
    return HarnessConfig(
        base_url="https://example.test",
        test_time_ms=2000,
        teardown_timeout_ms=200,
        settle_timeout_ms=100,
        strict_order=False,
    )


@pytest.fixture
def driver(config):
    """Fake browser driver."""
    return FakeDriver(config)


@pytest.fixture
def session_manager(driver):
    """Session manager over the fake driver."""
    return BrowserSessionManager(driver)


@pytest.fixture
def sink():
    """In-memory metrics sink."""
    return InMemorySink()


@pytest.fixture
def home_page():
    """Home page object with a clickable button."""
    return PageObject(
        name="Home",
        url="https://example.test/",
        actions=[PageAction(name="click_button", selector="#button", wait_for="#result")],
    )


@pytest.fixture
def text_box_page():
    """TextBox page object."""
    return PageObject(
        name="TextBox",
        url="https://example.test/text-box",
        actions=[PageAction(name="fill_name", kind="fill", selector="#userName", value="Jane")],
    )
