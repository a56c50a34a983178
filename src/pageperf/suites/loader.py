"""Load suites from YAML files.

Example::

    name: demoqa
    pages:
      - name: Home
        url: /
        actions:
          - name: click_on_elements
            selector: "div.card:has-text('Elements')"
            wait_for: .element-group
    scenarios:
      - name: "[N]_Home--cold"
        page: Home
      - name: "[T]_Click_on_Elements"
        page: Home
        action: click_on_elements

Page URLs and prior_url values without a scheme are resolved against the
configured base URL.
A scenario's condition is taken from its name unless ``condition`` is set.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from pageperf.config.harness_config import HarnessConfig, load_config
from pageperf.exceptions import SuiteLoadError
from pageperf.models.perf_models import ScenarioDescriptor
from pageperf.pages.base import PageObject
from pageperf.suites.suite import Suite

logger = logging.getLogger(__name__)

_SCENARIO_KEYS = {
    "name",
    "page",
    "condition",
    "action",
    "prior_url",
    "preserve_url",
    "requires",
    "timeout_ms",
    "context",
}


def load_suite(path: str, config: Optional[HarnessConfig] = None) -> Suite:
    """
    Load a suite definition from a YAML file.

    Args:
        path: Suite file path
        config: Harness configuration used to resolve relative page URLs

    Returns:
        Suite with page objects and scenarios in file order

    Raises:
        SuiteLoadError: If the file is missing, malformed or inconsistent
        ConfigurationError: If no config is given and the environment is invalid
    """
    config = config or load_config()
    suite_path = Path(path)
    if not suite_path.exists():
        raise SuiteLoadError(f"Suite file not found: {suite_path}")

    try:
        with open(suite_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SuiteLoadError(f"Invalid YAML in {suite_path}: {e}") from e

    if not isinstance(data, dict):
        raise SuiteLoadError(f"Suite file {suite_path} must contain a mapping")

    suite = parse_suite(data, config, default_name=suite_path.stem)
    logger.info(
        f"Loaded suite {suite.name!r} from {suite_path}: "
        f"{len(suite.pages)} pages, {len(suite.scenarios)} scenarios"
    )
    return suite


def parse_suite(
    data: Dict[str, Any], config: HarnessConfig, default_name: str = "suite"
) -> Suite:
    """Build a Suite from an already-parsed mapping."""
    pages = _parse_pages(data.get("pages") or [], config)
    scenarios = _parse_scenarios(data.get("scenarios") or [], pages, config)
    return Suite(name=data.get("name", default_name), pages=pages, scenarios=scenarios)


def _parse_pages(entries: List[Any], config: HarnessConfig) -> Dict[str, PageObject]:
    pages: Dict[str, PageObject] = {}
    for entry in entries:
        if not isinstance(entry, dict) or "name" not in entry or "url" not in entry:
            raise SuiteLoadError(f"Page entry needs 'name' and 'url': {entry!r}")
        name = entry["name"]
        if name in pages:
            raise SuiteLoadError(f"Duplicate page {name!r}")
        try:
            pages[name] = PageObject(
                name=name,
                url=config.resolve_url(entry["url"]),
                actions=entry.get("actions") or [],
            )
        except (ValidationError, ValueError) as e:
            raise SuiteLoadError(f"Invalid page {name!r}: {e}") from e
    return pages


def _parse_scenarios(
    entries: List[Any], pages: Dict[str, PageObject], config: HarnessConfig
) -> List[ScenarioDescriptor]:
    scenarios: List[ScenarioDescriptor] = []
    for entry in entries:
        if not isinstance(entry, dict) or "name" not in entry or "page" not in entry:
            raise SuiteLoadError(f"Scenario entry needs 'name' and 'page': {entry!r}")
        unknown = set(entry) - _SCENARIO_KEYS
        if unknown:
            raise SuiteLoadError(
                f"Scenario {entry['name']!r} has unknown keys: {', '.join(sorted(unknown))}"
            )
        page = pages.get(entry["page"])
        if page is None:
            raise SuiteLoadError(
                f"Scenario {entry['name']!r} targets undeclared page {entry['page']!r}"
            )

        fields = {k: v for k, v in entry.items() if k not in ("page", "action")}
        fields["page_object"] = page
        fields["action_name"] = entry.get("action")
        if entry.get("prior_url"):
            fields["prior_url"] = config.resolve_url(entry["prior_url"])
        try:
            scenarios.append(ScenarioDescriptor(**fields))
        except (ValidationError, ValueError) as e:
            raise SuiteLoadError(f"Invalid scenario {entry['name']!r}: {e}") from e
    return scenarios
