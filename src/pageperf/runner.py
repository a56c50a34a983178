"""Wire the driver, session manager and orchestrator together for a suite."""

import logging
from typing import Dict, List, Optional

from pageperf.browser.driver import PlaywrightDriver
from pageperf.browser.session_manager import BrowserSessionManager
from pageperf.config.harness_config import HarnessConfig
from pageperf.models.perf_models import RunReport
from pageperf.reporting.sinks import MetricsSink
from pageperf.scenarios.orchestrator import (
    HookCallback,
    LifecycleHook,
    LifecycleOrchestrator,
)
from pageperf.suites.suite import Suite

logger = logging.getLogger(__name__)


def create_orchestrator(
    suite: Suite,
    config: HarnessConfig,
    sink: Optional[MetricsSink] = None,
    driver: Optional[PlaywrightDriver] = None,
) -> LifecycleOrchestrator:
    """Build an orchestrator for a suite with a fresh session manager."""
    driver = driver or PlaywrightDriver(config)
    session_manager = BrowserSessionManager(driver, config.teardown_timeout_ms)
    return LifecycleOrchestrator(
        session_manager,
        config,
        sink=sink,
        pages=suite.known_pages,
    )


async def run_suite(
    suite: Suite,
    config: HarnessConfig,
    sink: Optional[MetricsSink] = None,
    driver: Optional[PlaywrightDriver] = None,
    hooks: Optional[Dict[LifecycleHook, List[HookCallback]]] = None,
) -> RunReport:
    """
    Run every scenario of a suite in declaration order.

    Args:
        suite: Pages and scenarios to run
        config: Harness configuration
        sink: Receiver for samples
        driver: Browser driver (a PlaywrightDriver from config if omitted)
        hooks: Extra lifecycle callbacks to register

    Returns:
        Run report
    """
    orchestrator = create_orchestrator(suite, config, sink=sink, driver=driver)
    for hook, callbacks in (hooks or {}).items():
        for callback in callbacks:
            orchestrator.register(hook, callback)

    logger.info(f"Running suite {suite.name!r} against {config.base_url}")
    return await orchestrator.run(suite.scenarios)
