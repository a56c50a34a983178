"""Ownership of the single shared browser session.

BrowserSessionManager is the only component allowed to create, replace or
destroy a BrowserSession. Everything else asks it for the current session
or page and reports navigations back to it.
"""

import asyncio
import uuid
import logging
from datetime import datetime
from typing import List, Optional

from playwright.async_api import Page

from pageperf.browser.driver import PlaywrightDriver
from pageperf.exceptions import NoActiveSessionError, SessionTeardownError
from pageperf.models.perf_models import BrowserSession

logger = logging.getLogger(__name__)


class BrowserSessionManager:
    """Create, reuse and recreate the run's browser session.

    At most one session is live at a time. Every operation holds an
    asyncio.Lock, so two callers can never mutate the browser concurrently.

    Once a teardown fails the manager refuses further work: a browser that
    could not be closed cannot be trusted to produce clean measurements.
    """

    def __init__(self, driver: PlaywrightDriver, teardown_timeout_ms: Optional[int] = None):
        """Initialize the session manager.

        Args:
            driver: Browser driver used to launch and close sessions
            teardown_timeout_ms: Bounded wait for closing a session
        """
        self.driver = driver
        self.teardown_timeout_ms = (
            teardown_timeout_ms or driver.config.teardown_timeout_ms
        )
        self._session: Optional[BrowserSession] = None
        self._lock = asyncio.Lock()
        self._observed_ids: List[str] = []
        self._teardown_failure: Optional[str] = None

    @property
    def session(self) -> Optional[BrowserSession]:
        """The live session, or None."""
        if self._session is not None and self._session.is_live:
            return self._session
        return None

    @property
    def has_live_session(self) -> bool:
        return self.session is not None

    @property
    def observed_session_ids(self) -> List[str]:
        """Every session id created during this run, oldest first."""
        return list(self._observed_ids)

    async def ensure_session(self) -> BrowserSession:
        """Return the live session, launching one if none exists.

        Raises:
            SessionTeardownError: If an earlier teardown left the browser stuck
        """
        async with self._lock:
            self._check_usable()
            if self.session is not None:
                return self._session
            return await self._create_session()

    async def reset_session(self) -> BrowserSession:
        """Destroy the live session (if any) and launch a new one.

        Returns:
            The new session; its id was never seen before in this run

        Raises:
            SessionTeardownError: If the old session could not be closed in time
        """
        async with self._lock:
            self._check_usable()
            previous = self.session
            if previous is not None:
                await self._destroy_session(previous)
            session = await self._create_session()
            logger.info(
                f"Session reset: {previous.session_id if previous else None} -> "
                f"{session.session_id}"
            )
            return session

    async def current_page(self) -> Page:
        """Return the session's active page, opening a blank one if needed.

        Raises:
            NoActiveSessionError: If no session has been started
        """
        async with self._lock:
            session = self.session
            if session is None:
                raise NoActiveSessionError(
                    "No active browser session, ensure_session() was never called"
                )
            if session.page is None:
                await self._attach_page(session)
            return session.page

    async def record_navigation(self, url: str) -> None:
        """Note that the active page finished navigating to url."""
        async with self._lock:
            session = self.session
            if session is None:
                raise NoActiveSessionError("Navigation recorded without a live session")
            session.navigation_count += 1
            session.last_url = url

    async def teardown(self) -> None:
        """Destroy the live session at the end of a run.

        Best effort and idempotent: a failed close is logged, never raised,
        and the session is considered gone either way.
        """
        async with self._lock:
            session = self._session
            self._session = None
            if session is not None and session.is_live:
                try:
                    await asyncio.wait_for(
                        self.driver.close(session.handle),
                        timeout=self.teardown_timeout_ms / 1000,
                    )
                    logger.info(f"Session {session.session_id} torn down")
                except Exception as e:
                    logger.error(f"Run-end teardown of {session.session_id} failed: {e}")
                session.destroyed_at = datetime.now()
            await self.driver.stop()

    @property
    def teardown_failure(self) -> Optional[str]:
        """Why the manager stopped accepting work, or None while usable."""
        return self._teardown_failure

    def _check_usable(self) -> None:
        if self._teardown_failure is not None:
            raise SessionTeardownError(
                f"Session manager unusable after failed teardown: {self._teardown_failure}"
            )

    async def _create_session(self) -> BrowserSession:
        handle = await self.driver.launch()
        session = BrowserSession(handle=handle)
        while session.session_id in self._observed_ids:
            session = BrowserSession(handle=handle)
        try:
            await self._attach_page(session)
        except Exception:
            # A launched browser without a page is never registered, close it now
            try:
                await self.driver.close(handle)
            except Exception as close_error:
                logger.error(f"Failed to close browser after page creation failed: {close_error}")
            raise
        self._session = session
        self._observed_ids.append(session.session_id)
        logger.info(f"Session {session.session_id} created")
        return session

    async def _attach_page(self, session: BrowserSession) -> None:
        page = await self.driver.new_page(session.handle)
        session.page = page
        session.page_id = f"page_{uuid.uuid4().hex[:8]}"
        session.navigation_count = 0
        session.last_url = None

    async def _destroy_session(self, session: BrowserSession) -> None:
        try:
            await asyncio.wait_for(
                self.driver.close(session.handle),
                timeout=self.teardown_timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            self._teardown_failure = (
                f"session {session.session_id} did not close within "
                f"{self.teardown_timeout_ms}ms"
            )
            logger.error(f"Teardown failed: {self._teardown_failure}")
            raise SessionTeardownError(self._teardown_failure) from e
        except asyncio.CancelledError:
            # The caller gave up mid-close, the browser state is unknown
            self._teardown_failure = f"teardown of session {session.session_id} was cancelled"
            logger.error(f"Teardown failed: {self._teardown_failure}")
            raise
        except Exception as e:
            self._teardown_failure = f"session {session.session_id}: {e}"
            logger.error(f"Teardown failed: {self._teardown_failure}")
            raise SessionTeardownError(self._teardown_failure) from e

        session.destroyed_at = datetime.now()
        self._session = None
        logger.info(f"Session {session.session_id} destroyed")
