"""Exception hierarchy for the performance harness.

Scenario-scoped errors are caught at the scenario boundary and reported
against that scenario. Run-scoped errors abort the whole run.
"""


class PagePerfError(Exception):
    """Base class for all harness errors."""

    pass


class ConfigurationError(PagePerfError):
    """Raised when harness configuration is invalid."""

    pass


class SuiteLoadError(PagePerfError):
    """Raised when a suite file cannot be loaded."""

    pass


class ScenarioOrderError(PagePerfError):
    """Raised when declared scenarios violate their ordering requirements."""

    pass


class DriverError(PagePerfError, RuntimeError):
    """Raised on browser driver failures."""

    pass


class DriverTimeoutError(DriverError):
    """Raised when the driver gives up waiting on the browser."""

    pass


class ScenarioError(PagePerfError):
    """Failure confined to a single scenario."""

    pass


class NoActiveSessionError(ScenarioError):
    """Raised when a session is required but none was ever started."""

    pass


class NoPriorSessionError(ScenarioError):
    """Raised when a warm navigation has no prior navigated session to reuse."""

    pass


class StalePageStateError(ScenarioError):
    """Raised when the page handle is not in the state the condition requires."""

    pass


class NavigationTimeoutError(ScenarioError):
    """Raised when a navigation exceeds the scenario timeout."""

    pass


class InteractionTimeoutError(ScenarioError):
    """Raised when an interaction exceeds the scenario timeout."""

    pass


class UnknownActionError(ScenarioError, KeyError):
    """Raised when a page object has no action with the requested name."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class RunAbortedError(PagePerfError):
    """Failure that compromises the shared session and stops the run."""

    pass


class SessionTeardownError(RunAbortedError):
    """Raised when the browser session could not be torn down in time."""

    pass
