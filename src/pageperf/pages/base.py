"""Page object base class.

A PageObject names one navigable page: its canonical URL and the actions
that can be performed on it. Actions are a name -> PageAction mapping
validated when the page object is built, so asking for an action that
does not exist is a lookup failure rather than a missing method.
"""

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from playwright.async_api import Page

from pageperf.exceptions import UnknownActionError
from pageperf.models.perf_models import PageAction

logger = logging.getLogger(__name__)

InitHook = Callable[["PageObject", Page], None]


class PageObject:
    """One navigable page and the interactions available on it.

    Everything except the bound page handle is fixed at construction. The
    handle is rebound whenever the session manager opens a new page, e.g.
    after a session reset.
    """

    def __init__(
        self,
        name: str,
        url: str,
        actions: Iterable[Union[PageAction, Dict[str, Any]]] = (),
        init_hook: Optional[InitHook] = None,
    ):
        """Initialize the page object.

        Args:
            name: Page name used in samples and reports
            url: Canonical absolute URL of the page
            actions: Actions available on the page
            init_hook: Called with (page_object, page) each time a page is bound

        Raises:
            ValueError: If the name or URL is empty, an action is malformed or
                action names collide
        """
        if not name:
            raise ValueError("Page object name must not be empty")
        if not url:
            raise ValueError(f"Page object {name!r} needs a URL")

        registry: Dict[str, PageAction] = {}
        for action in actions:
            if isinstance(action, Mapping):
                action = PageAction(**action)
            elif not isinstance(action, PageAction):
                raise ValueError(
                    f"Action on page {name!r} must be a PageAction or a mapping, got {action!r}"
                )
            if action.name in registry:
                raise ValueError(f"Duplicate action {action.name!r} on page {name!r}")
            registry[action.name] = action

        self._name = name
        self._url = url
        self._actions: Mapping[str, PageAction] = MappingProxyType(registry)
        self._init_hook = init_hook
        self._page: Optional[Page] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, url={self._url!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return self._url

    @property
    def page(self) -> Optional[Page]:
        """Currently bound page handle, None until init() is called."""
        return self._page

    @property
    def actions(self) -> Mapping[str, PageAction]:
        return self._actions

    @property
    def action_names(self) -> List[str]:
        return list(self._actions)

    def get_url(self) -> str:
        return self._url

    def init(self, page: Page) -> None:
        """Bind a page handle and run the init hooks."""
        self._page = page
        self.on_init(page)
        if self._init_hook is not None:
            self._init_hook(self, page)
        logger.debug(f"Bound page object {self._name!r} to a new page handle")

    def on_init(self, page: Page) -> None:
        """Subclass hook run after a page handle is bound."""
        pass

    def has_action(self, action_name: str) -> bool:
        return action_name in self._actions

    def get_action(self, action_name: str) -> PageAction:
        """Look up a registered action.

        Raises:
            UnknownActionError: If no action with that name is registered
        """
        try:
            return self._actions[action_name]
        except KeyError:
            raise UnknownActionError(
                f"Page {self._name!r} has no action {action_name!r} "
                f"(available: {', '.join(self._actions) or 'none'})"
            ) from None
