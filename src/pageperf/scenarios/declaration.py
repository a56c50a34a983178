"""Scenario declaration helpers and ordering validation.

The builders produce ScenarioDescriptors whose display names carry the
intent tag (``[N]_Home--cold``, ``[T]_Click_on_Elements``), mirroring the
naming used in reports.
"""

import logging
from typing import Any, Iterable, List, Optional, Set

from pageperf.exceptions import ScenarioOrderError
from pageperf.models.perf_models import Condition, ScenarioDescriptor

logger = logging.getLogger(__name__)


def _page_name(page_object: Any) -> str:
    return getattr(page_object, "name", str(page_object))


def navigation(
    condition: Condition, page_object: Any, name: Optional[str] = None, **options: Any
) -> ScenarioDescriptor:
    """Declare a navigation scenario under the given condition."""
    condition = Condition(condition)
    if condition == Condition.TIMESPAN:
        raise ValueError("Use timespan() to declare interaction scenarios")
    return ScenarioDescriptor(
        name=name or f"[N]_{_page_name(page_object)}--{condition.value}",
        condition=condition,
        page_object=page_object,
        **options,
    )


def cold(page_object: Any, name: Optional[str] = None, **options: Any) -> ScenarioDescriptor:
    return navigation(Condition.COLD, page_object, name, **options)


def warm(page_object: Any, name: Optional[str] = None, **options: Any) -> ScenarioDescriptor:
    return navigation(Condition.WARM, page_object, name, **options)


def reset(page_object: Any, name: Optional[str] = None, **options: Any) -> ScenarioDescriptor:
    return navigation(Condition.RESET, page_object, name, **options)


def timespan(
    page_object: Any, action_name: str, name: Optional[str] = None, **options: Any
) -> ScenarioDescriptor:
    """Declare a timed interaction on an already-navigated page."""
    return ScenarioDescriptor(
        name=name or f"[T]_{_page_name(page_object)}_{action_name}",
        condition=Condition.TIMESPAN,
        page_object=page_object,
        action_name=action_name,
        **options,
    )


def validate_order(scenarios: Iterable[ScenarioDescriptor]) -> List[str]:
    """
    Check declared scenarios against the state each one expects.

    Walks the declarations in order, tracking which page objects have been
    navigated in the current (simulated) session:
    - cold needs a page that has not navigated yet in the session
    - warm needs an earlier navigation of the same page object
    - timespan needs some earlier navigation
    - reset starts a new session
    - ``requires`` must name a scenario declared earlier

    Args:
        scenarios: Scenarios in execution order

    Returns:
        Human-readable problems, empty when the order is consistent
    """
    problems: List[str] = []
    seen_names: Set[str] = set()
    navigated: Set[str] = set()

    for scenario in scenarios:
        page = scenario.page_name

        if scenario.name in seen_names:
            problems.append(f"{scenario.name}: duplicate scenario name")
        if scenario.requires and scenario.requires not in seen_names:
            problems.append(
                f"{scenario.name}: requires {scenario.requires!r} which is not declared earlier"
            )

        if scenario.condition == Condition.COLD:
            if navigated:
                problems.append(
                    f"{scenario.name}: cold navigation after {sorted(navigated)} "
                    f"in the same session"
                )
            navigated.add(page)
        elif scenario.condition == Condition.WARM:
            if page not in navigated:
                problems.append(
                    f"{scenario.name}: warm navigation without an earlier "
                    f"navigation of {page!r} in the session"
                )
            navigated.add(page)
        elif scenario.condition == Condition.RESET:
            navigated = {page}
        elif not navigated:
            problems.append(f"{scenario.name}: timespan before any navigation")

        seen_names.add(scenario.name)

    return problems


def check_order(scenarios: Iterable[ScenarioDescriptor], strict: bool = False) -> List[str]:
    """Validate scenario order, logging problems or raising in strict mode.

    Raises:
        ScenarioOrderError: In strict mode, if any problem is found
    """
    problems = validate_order(scenarios)
    if problems and strict:
        raise ScenarioOrderError("; ".join(problems))
    for problem in problems:
        logger.warning(f"Scenario order: {problem}")
    return problems
