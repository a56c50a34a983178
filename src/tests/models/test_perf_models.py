"""Tests for the harness data models."""

import pytest
from pydantic import ValidationError

from pageperf.models.perf_models import (
    ActionKind,
    BrowserSession,
    Condition,
    MetricsSample,
    PageAction,
    RunReport,
    ScenarioDescriptor,
    ScenarioOutcome,
    ScenarioStatus,
    TimingBreakdown,
    condition_from_name,
)


def _sample(condition=Condition.COLD, name="[N]_Home--cold"):
    return MetricsSample(
        scenario_name=name,
        condition=condition,
        page_name="Home",
        url="https://example.test/",
        timing=TimingBreakdown(duration_ms=10.0),
        session_id="abc",
        page_id="page_1",
    )


class TestConditionFromName:
    """Tests for deriving the intent tag from a display name."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("[N]_Home--cold", Condition.COLD),
            ("[N]_Home--warm", Condition.WARM),
            ("[N]_Home--reset", Condition.RESET),
            ("[N]_TextBox--RESET", Condition.RESET),
            ("[T]_Click_on_Elements", Condition.TIMESPAN),
            ("[N]_Home", Condition.COLD),
        ],
    )
    def test_known_tags(self, name, expected):
        """Test every supported naming form."""
        assert condition_from_name(name) == expected

    def test_untagged_name(self):
        """Test that a name without a tag is rejected."""
        with pytest.raises(ValueError, match="Cannot derive condition"):
            condition_from_name("open the home page")


class TestPageAction:
    """Tests for PageAction validation."""

    def test_click_defaults(self):
        """Test a click action with defaults."""
        action = PageAction(name="click", selector="#btn")
        assert action.kind == ActionKind.CLICK
        assert action.settle == "networkidle"

    def test_missing_selector(self):
        """Test that non-custom actions need a selector."""
        with pytest.raises(ValidationError, match="needs a selector"):
            PageAction(name="click")

    def test_fill_needs_value(self):
        """Test that fill actions need a value."""
        with pytest.raises(ValidationError, match="needs a value"):
            PageAction(name="fill", kind="fill", selector="#input")

    def test_custom_needs_handler(self):
        """Test that custom actions need a handler."""
        with pytest.raises(ValidationError, match="needs a handler"):
            PageAction(name="scroll", kind="custom")

    def test_custom_with_handler(self):
        """Test a custom action with a coroutine handler."""

        async def scroll(page):
            pass

        action = PageAction(name="scroll", kind="custom", handler=scroll)
        assert action.handler is scroll


class TestScenarioDescriptor:
    """Tests for ScenarioDescriptor."""

    def test_condition_derived_from_name(self):
        """Test that the condition defaults to the name's tag."""
        scenario = ScenarioDescriptor(name="[N]_Home--warm", page_object="Home")
        assert scenario.condition == Condition.WARM

    def test_explicit_condition_wins(self):
        """Test that an explicit condition is kept."""
        scenario = ScenarioDescriptor(
            name="[N]_Home--warm", condition=Condition.RESET, page_object="Home"
        )
        assert scenario.condition == Condition.RESET

    def test_timespan_needs_action(self):
        """Test that timespan scenarios must name an action."""
        with pytest.raises(ValidationError, match="needs an action_name"):
            ScenarioDescriptor(name="[T]_Click", page_object="Home")

    def test_untagged_name_rejected(self):
        """Test that an untagged name without condition is invalid."""
        with pytest.raises(ValidationError):
            ScenarioDescriptor(name="home", page_object="Home")

    def test_timeout_must_be_positive(self):
        """Test that timeouts must be positive."""
        with pytest.raises(ValidationError):
            ScenarioDescriptor(name="[N]_Home--cold", page_object="Home", timeout_ms=0)


class TestBrowserSession:
    """Tests for BrowserSession bookkeeping."""

    def test_new_session_is_live(self):
        """Test a freshly created session."""
        session = BrowserSession(handle=object())
        assert session.is_live
        assert not session.has_navigated
        assert len(session.session_id) == 12

    def test_session_ids_unique(self):
        """Test that session ids differ."""
        ids = {BrowserSession(handle=None).session_id for _ in range(50)}
        assert len(ids) == 50


class TestMetricsSample:
    """Tests for MetricsSample immutability."""

    def test_sample_is_frozen(self):
        """Test that samples cannot be modified."""
        sample = _sample()
        with pytest.raises(ValidationError):
            sample.condition = Condition.WARM

    def test_serializes_condition_value(self):
        """Test JSON output uses the condition value."""
        assert '"condition":"cold"' in _sample().model_dump_json()


class TestRunReport:
    """Tests for RunReport views."""

    def test_views(self):
        """Test passed/failed/skipped partitioning and samples."""
        report = RunReport(
            outcomes=[
                ScenarioOutcome(
                    name="a", condition=Condition.COLD,
                    status=ScenarioStatus.PASSED, sample=_sample(),
                ),
                ScenarioOutcome(name="b", condition=Condition.WARM, status=ScenarioStatus.FAILED),
                ScenarioOutcome(name="c", condition=Condition.RESET, status=ScenarioStatus.SKIPPED),
            ]
        )
        assert [o.name for o in report.passed] == ["a"]
        assert [o.name for o in report.failed] == ["b"]
        assert [o.name for o in report.skipped] == ["c"]
        assert len(report.samples) == 1
        assert report.succeeded is False

    def test_empty_report_succeeds(self):
        """Test that an empty, non-aborted report succeeded."""
        assert RunReport().succeeded is True
