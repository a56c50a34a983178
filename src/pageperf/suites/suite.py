"""Suite model: the page objects and scenarios of one run."""

from typing import Dict, List

from pydantic import BaseModel, Field

from pageperf.models.perf_models import ScenarioDescriptor
from pageperf.pages.base import PageObject


class Suite(BaseModel):
    """Declared page objects and scenarios, in execution order."""

    name: str = Field(description="Suite name")
    pages: Dict[str, PageObject] = Field(default_factory=dict)
    scenarios: List[ScenarioDescriptor] = Field(default_factory=list)

    class Config:
        """Pydantic config."""

        arbitrary_types_allowed = True

    @property
    def known_pages(self) -> List[PageObject]:
        return list(self.pages.values())
