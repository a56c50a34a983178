"""Models package for the performance harness."""

from .perf_models import (
    ActionKind,
    BrowserSession,
    BrowserType,
    Condition,
    MetricsSample,
    NAVIGATION_CONDITIONS,
    PageAction,
    RunReport,
    ScenarioDescriptor,
    ScenarioOutcome,
    ScenarioStatus,
    TimingBreakdown,
    Viewport,
    condition_from_name,
)

__all__ = [
    "ActionKind",
    "BrowserSession",
    "BrowserType",
    "Condition",
    "MetricsSample",
    "NAVIGATION_CONDITIONS",
    "PageAction",
    "RunReport",
    "ScenarioDescriptor",
    "ScenarioOutcome",
    "ScenarioStatus",
    "TimingBreakdown",
    "Viewport",
    "condition_from_name",
]
