"""Page objects for demoqa.com and the reference demo suite."""

from typing import Optional

from pageperf.config.harness_config import HarnessConfig, load_config
from pageperf.models.perf_models import ActionKind, PageAction
from pageperf.pages.base import PageObject
from pageperf.scenarios.declaration import cold, reset, timespan, warm
from pageperf.suites.suite import Suite


class HomePage(PageObject):
    """demoqa.com landing page with its category cards."""

    def __init__(self, config: HarnessConfig):
        super().__init__(
            name="Home",
            url=config.resolve_url("/"),
            actions=[
                PageAction(
                    name="click_on_elements",
                    kind=ActionKind.CLICK,
                    selector="div.card:has-text('Elements')",
                    wait_for=".element-group",
                    settle="domcontentloaded",
                ),
            ],
        )


class TextBoxPage(PageObject):
    """demoqa.com text box form."""

    def __init__(self, config: HarnessConfig):
        super().__init__(
            name="TextBox",
            url=config.resolve_url("/text-box"),
            actions=[
                PageAction(
                    name="fill_full_name",
                    kind=ActionKind.FILL,
                    selector="#userName",
                    value="Jane Doe",
                    settle=None,
                ),
                PageAction(
                    name="submit",
                    kind=ActionKind.CLICK,
                    selector="#submit",
                    wait_for="#output",
                    settle=None,
                ),
            ],
        )


def build_demo_suite(config: Optional[HarnessConfig] = None) -> Suite:
    """Build the reference demo run.

    Home is opened cold, then warm, then after a browser restart; the
    Elements card is clicked as a timespan; finally the TextBox page is
    opened from scratch after another restart.
    """
    config = config or load_config()
    home = HomePage(config)
    text_box = TextBoxPage(config)

    return Suite(
        name="demoqa",
        pages={home.name: home, text_box.name: text_box},
        scenarios=[
            cold(home),
            warm(home),
            reset(home, preserve_url=True),
            timespan(home, "click_on_elements", name="[T]_Click_on_Elements"),
            reset(text_box, prior_url=text_box.get_url()),
        ],
    )
