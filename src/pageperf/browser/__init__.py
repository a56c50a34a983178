"""Browser layer: Playwright driver, timing extraction and session ownership."""

from pageperf.browser.driver import BLANK_URL, DriverHandle, PlaywrightDriver
from pageperf.browser.session_manager import BrowserSessionManager
from pageperf.browser.timing import TimingCollector

__all__ = [
    "BLANK_URL",
    "BrowserSessionManager",
    "DriverHandle",
    "PlaywrightDriver",
    "TimingCollector",
]
