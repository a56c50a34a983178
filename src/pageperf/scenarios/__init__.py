"""Scenario execution: navigation, timespans and the run lifecycle."""

from pageperf.scenarios.declaration import (
    check_order,
    cold,
    navigation,
    reset,
    timespan,
    validate_order,
    warm,
)
from pageperf.scenarios.interaction import InteractionTimespanRecorder
from pageperf.scenarios.navigation import NavigationValidator
from pageperf.scenarios.orchestrator import (
    HookContext,
    LifecycleHook,
    LifecycleOrchestrator,
    RunState,
)

__all__ = [
    "HookContext",
    "InteractionTimespanRecorder",
    "LifecycleHook",
    "LifecycleOrchestrator",
    "NavigationValidator",
    "RunState",
    "check_order",
    "cold",
    "navigation",
    "reset",
    "timespan",
    "validate_order",
    "warm",
]
