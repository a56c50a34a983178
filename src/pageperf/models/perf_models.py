"""Data models for navigation and interaction performance runs.

This module defines the Pydantic models shared across the harness:
scenario conditions, browser session bookkeeping, page actions, scenario
declarations, timing breakdowns, metrics samples and run reports.
"""

import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class BrowserType(str, Enum):
    """Supported browser engines."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class Condition(str, Enum):
    """Navigation state a scenario is measured under."""

    COLD = "cold"
    WARM = "warm"
    RESET = "reset"
    TIMESPAN = "timespan"


NAVIGATION_CONDITIONS = (Condition.COLD, Condition.WARM, Condition.RESET)

_SUFFIX_RE = re.compile(r"--(cold|warm|reset)\s*$", re.IGNORECASE)
_TIMESPAN_RE = re.compile(r"^\s*\[T\]", re.IGNORECASE)
_NAVIGATION_RE = re.compile(r"^\s*\[N\]", re.IGNORECASE)


def condition_from_name(name: str) -> Condition:
    """Derive the intent tag encoded in a scenario display name.

    ``[N]_Home--warm`` is a warm navigation, ``[T]_Click`` is a timespan and
    a bare ``[N]_Home`` is treated as a cold navigation.

    Raises:
        ValueError: If the name carries no recognisable tag
    """
    match = _SUFFIX_RE.search(name)
    if match:
        return Condition(match.group(1).lower())
    if _TIMESPAN_RE.match(name):
        return Condition.TIMESPAN
    if _NAVIGATION_RE.match(name):
        return Condition.COLD
    raise ValueError(f"Cannot derive condition from scenario name: {name!r}")


class Viewport(BaseModel):
    """Browser viewport configuration."""

    width: int = Field(default=1350, description="Viewport width")
    height: int = Field(default=940, description="Viewport height")


class ActionKind(str, Enum):
    """Kinds of page interactions a PageAction can describe."""

    CLICK = "click"
    FILL = "fill"
    PRESS = "press"
    HOVER = "hover"
    CUSTOM = "custom"


class PageAction(BaseModel):
    """Executable interaction registered on a page object."""

    name: str = Field(description="Action identifier")
    kind: ActionKind = Field(default=ActionKind.CLICK, description="Interaction type")
    selector: Optional[str] = Field(default=None, description="Target selector")
    value: Optional[str] = Field(default=None, description="Fill text or key to press")
    wait_for: Optional[str] = Field(
        default=None, description="Selector that appears once the interaction completes"
    )
    settle: Optional[Literal["load", "domcontentloaded", "networkidle"]] = Field(
        default="networkidle", description="Load state awaited after the interaction"
    )
    handler: Optional[Callable[[Any], Awaitable[None]]] = Field(
        default=None, description="Coroutine run against the page for custom actions"
    )

    class Config:
        """Pydantic config."""

        frozen = True

    @model_validator(mode="after")
    def _check_shape(self) -> "PageAction":
        if not self.name:
            raise ValueError("Action name must not be empty")
        if self.kind == ActionKind.CUSTOM:
            if self.handler is None:
                raise ValueError(f"Custom action {self.name!r} needs a handler")
        elif not self.selector:
            raise ValueError(f"Action {self.name!r} needs a selector")
        if self.kind in (ActionKind.FILL, ActionKind.PRESS) and self.value is None:
            raise ValueError(f"Action {self.name!r} needs a value")
        return self


class BrowserSession(BaseModel):
    """One live automation-controlled browser instance.

    Only BrowserSessionManager creates, mutates or destroys sessions.
    """

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    handle: Any = Field(description="Driver handle for the browser instance")
    created_at: datetime = Field(default_factory=datetime.now)
    page: Any = Field(default=None, description="Active page handle")
    page_id: Optional[str] = Field(default=None, description="Active page handle id")
    destroyed_at: Optional[datetime] = Field(default=None)
    navigation_count: int = Field(default=0, description="Navigations served")
    last_url: Optional[str] = Field(default=None, description="Last navigated URL")

    class Config:
        """Pydantic config."""

        arbitrary_types_allowed = True

    @property
    def is_live(self) -> bool:
        return self.destroyed_at is None

    @property
    def has_navigated(self) -> bool:
        return self.navigation_count > 0


class ScenarioDescriptor(BaseModel):
    """One declared test case."""

    name: str = Field(description="Display name encoding the intent tag")
    condition: Condition = Field(description="Navigation state measured")
    page_object: Any = Field(description="Target PageObject")
    action_name: Optional[str] = Field(
        default=None, description="Action to time for timespan scenarios"
    )
    prior_url: Optional[str] = Field(
        default=None, description="URL to navigate to after a reset"
    )
    preserve_url: bool = Field(
        default=False,
        description="Resolve prior_url from the current page at execution time",
    )
    requires: Optional[str] = Field(
        default=None, description="Name of a scenario that must run earlier"
    )
    context: Dict[str, Any] = Field(
        default_factory=dict, description="Runner context used for report correlation"
    )
    timeout_ms: Optional[int] = Field(
        default=None, gt=0, description="Scenario timeout (config default if unset)"
    )

    class Config:
        """Pydantic config."""

        arbitrary_types_allowed = True

    @model_validator(mode="before")
    @classmethod
    def _derive_condition(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("condition") is None and "name" in data:
            data = dict(data)
            data["condition"] = condition_from_name(data["name"])
        return data

    @model_validator(mode="after")
    def _check_timespan(self) -> "ScenarioDescriptor":
        if self.condition == Condition.TIMESPAN and not self.action_name:
            raise ValueError(f"Timespan scenario {self.name!r} needs an action_name")
        return self

    @property
    def page_name(self) -> str:
        return getattr(self.page_object, "name", str(self.page_object))


class TimingBreakdown(BaseModel):
    """Semantic timing fields of a sample, in milliseconds unless noted."""

    ttfb: Optional[float] = Field(default=None, description="Time to First Byte")
    fcp: Optional[float] = Field(default=None, description="First Contentful Paint")
    lcp: Optional[float] = Field(default=None, description="Largest Contentful Paint")
    cls: Optional[float] = Field(default=None, description="Cumulative Layout Shift")
    dom_content_loaded: Optional[float] = Field(default=None)
    load_complete: Optional[float] = Field(default=None)
    tti: Optional[float] = Field(default=None, description="Time to Interactive")
    total_requests: Optional[int] = Field(default=None)
    transfer_size_kb: Optional[float] = Field(default=None)
    in_page_duration_ms: Optional[float] = Field(
        default=None, description="Duration measured by the page clock"
    )
    duration_ms: float = Field(description="Wall-clock duration of the operation")

    class Config:
        """Pydantic config."""

        frozen = True


class MetricsSample(BaseModel):
    """Output unit handed to the reporting sink."""

    scenario_name: str
    condition: Condition
    page_name: str
    url: str
    timing: TimingBreakdown
    session_id: str
    page_id: str
    context: Dict[str, Any] = Field(default_factory=dict)
    captured_at: datetime = Field(default_factory=datetime.now)

    class Config:
        """Pydantic config."""

        frozen = True


class ScenarioStatus(str, Enum):
    """Result of executing a scenario."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScenarioOutcome(BaseModel):
    """Result of one scenario, attributed individually."""

    name: str
    condition: Condition
    status: ScenarioStatus
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    sample: Optional[MetricsSample] = None
    duration_ms: float = 0.0


class RunReport(BaseModel):
    """Summary of a whole run."""

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    outcomes: List[ScenarioOutcome] = Field(default_factory=list)
    aborted: bool = False
    abort_reason: Optional[str] = None

    @property
    def samples(self) -> List[MetricsSample]:
        return [o.sample for o in self.outcomes if o.sample is not None]

    @property
    def passed(self) -> List[ScenarioOutcome]:
        return [o for o in self.outcomes if o.status == ScenarioStatus.PASSED]

    @property
    def failed(self) -> List[ScenarioOutcome]:
        return [o for o in self.outcomes if o.status == ScenarioStatus.FAILED]

    @property
    def skipped(self) -> List[ScenarioOutcome]:
        return [o for o in self.outcomes if o.status == ScenarioStatus.SKIPPED]

    @property
    def succeeded(self) -> bool:
        return not self.aborted and not self.failed
