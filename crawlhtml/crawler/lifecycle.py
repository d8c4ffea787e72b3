"""
Navigation lifecycle controller.

Drives one browser session through a fixed sequence of states:

    LAUNCHING -> PRE_NAVIGATE -> NAVIGATING -> CHALLENGE -> SETTLING
              -> CAPTURED | BLOCKED | FAILED

Features:
- Blocking of heavy assets (images, stylesheets, fonts, media)
- Randomized delays before navigation and before capture
- Best-effort interstitial challenge solving and network-idle settle
- Outcome classification feeding session quality scoring
- Guaranteed teardown on every exit path

The controller makes exactly one navigation attempt; retry policy belongs
to the caller.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from enum import Enum

from crawlhtml.crawler.engine import BrowserEngine
from crawlhtml.crawler.errors import (
    BlockedResponse,
    CrawlError,
    EngineFault,
    ErrorCode,
    NavigationTimeout,
)
from crawlhtml.crawler.models import LaunchProfile, SessionOutcome
from crawlhtml.crawler.session_pool import Session
from crawlhtml.utils.config import CrawlerConfig, get_settings
from crawlhtml.utils.logging import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class LifecycleState(str, Enum):
    """States of one navigation lifecycle run."""

    LAUNCHING = "launching"
    PRE_NAVIGATE = "pre_navigate"
    NAVIGATING = "navigating"
    CHALLENGE = "challenge"
    SETTLING = "settling"
    CAPTURED = "captured"
    BLOCKED = "blocked"
    FAILED = "failed"


TERMINAL_STATES = frozenset(
    {LifecycleState.CAPTURED, LifecycleState.BLOCKED, LifecycleState.FAILED}
)


class NavigationLifecycleController:
    """
    Runs one navigation attempt against an injected browser engine.

    A controller instance is single-use: it owns the engine for the
    duration of ``run`` and closes it before returning.
    """

    def __init__(
        self,
        engine: BrowserEngine,
        profile: LaunchProfile,
        *,
        session: Session | None = None,
        settings: CrawlerConfig | None = None,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._engine = engine
        self._profile = profile
        self._session = session
        self._settings = settings or get_settings().crawler
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._blocked_types = frozenset(self._settings.blocked_resource_types)
        self.state: LifecycleState | None = None
        self.history: list[LifecycleState] = []
        self.warnings: list[str] = []

    def _transition(self, state: LifecycleState) -> None:
        logger.debug(
            "Lifecycle transition",
            from_state=self.state.value if self.state else None,
            to_state=state.value,
        )
        self.state = state
        self.history.append(state)

    def _warn(self, message: str, **kwargs) -> None:
        logger.warning(message, state=self.state.value if self.state else None, **kwargs)
        self.warnings.append(message)

    def should_block(self, resource_type: str) -> bool:
        """Resource filter installed before navigation."""
        return resource_type in self._blocked_types

    async def _jitter(self, low: float, high: float) -> float:
        delay = self._rng.uniform(low, high)
        await self._sleep(delay)
        return delay

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _pre_navigate(self, wait_until: str | None) -> str:
        await self._engine.install_resource_filter(self.should_block)

        headers = {"Accept-Language": self._settings.accept_language}
        if self._settings.do_not_track:
            headers["DNT"] = "1"
        await self._engine.set_extra_headers(headers)

        # Uniform timing is a bot signature
        delay = await self._jitter(
            self._settings.pre_navigation_delay_min,
            self._settings.pre_navigation_delay_max,
        )
        logger.debug("Pre-navigation delay", delay=round(delay, 3))

        return wait_until or self._settings.wait_until

    async def _handle_challenge(self) -> None:
        solver = getattr(self._engine, "solve_challenge", None)
        if solver is None:
            return
        try:
            await solver()
        except Exception as e:
            self._warn(f"Challenge handling failed: {e}", error_type=type(e).__name__)

    async def _settle(self) -> None:
        try:
            await self._engine.wait_for_network_idle(self._settings.network_idle_timeout)
        except NavigationTimeout as e:
            self._warn(f"Settle skipped: {e.message}")
        await self._jitter(
            self._settings.post_navigation_delay_min,
            self._settings.post_navigation_delay_max,
        )

    async def _handle_response(self, navigation_status: int | None) -> SessionOutcome:
        self._transition(LifecycleState.CHALLENGE)
        await self._handle_challenge()

        self._transition(LifecycleState.SETTLING)
        await self._settle()

        status = self._engine.response_status()
        if status is None:
            status = navigation_status

        if status is not None and status >= 400:
            if self._session is not None:
                self._session.mark_bad()
            raise BlockedResponse(status)

        html = await self._engine.content()
        if self._session is not None:
            self._session.mark_good()

        self._transition(LifecycleState.CAPTURED)
        return SessionOutcome.success(html, status_code=status)

    async def _drive(self, url: str, timeout: float, wait_until: str | None) -> SessionOutcome:
        self._transition(LifecycleState.LAUNCHING)
        await self._engine.launch(self._profile)

        self._transition(LifecycleState.PRE_NAVIGATE)
        wait_until = await self._pre_navigate(wait_until)

        self._transition(LifecycleState.NAVIGATING)
        status = await self._engine.navigate(url, timeout=timeout, wait_until=wait_until)

        try:
            return await asyncio.wait_for(self._handle_response(status), timeout)
        except asyncio.TimeoutError:
            raise NavigationTimeout(
                f"Request handler timed out after {timeout}s", timeout_seconds=timeout
            ) from None

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def _teardown(self) -> None:
        try:
            await self._engine.close()
        except Exception as e:
            self._warn(f"Teardown failed: {e}", error_type=type(e).__name__)

    async def run(
        self,
        url: str,
        *,
        timeout: float | None = None,
        wait_until: str | None = None,
    ) -> SessionOutcome:
        """Run the lifecycle to a terminal outcome.

        Args:
            url: Target URL.
            timeout: Navigation and request-handling timeout in seconds.
            wait_until: Navigation wait condition; defaults to
                ``domcontentloaded``.

        Returns:
            SessionOutcome. Never raises for navigation or engine failures.
        """
        if self.history:
            raise RuntimeError("NavigationLifecycleController is single-use")

        timeout = timeout or self._settings.navigation_timeout
        failed_in = None

        try:
            outcome = await self._drive(url, timeout, wait_until)
        except BlockedResponse as e:
            failed_in = self.state
            self._transition(LifecycleState.BLOCKED)
            outcome = SessionOutcome.blocked(e.status_code)
        except CrawlError as e:
            failed_in = self.state
            self._transition(LifecycleState.FAILED)
            outcome = SessionOutcome.failed(e.message, error_code=e.code)
        except asyncio.TimeoutError as e:
            failed_in = self.state
            self._transition(LifecycleState.FAILED)
            outcome = SessionOutcome.failed(
                f"Timed out: {e}", error_code=ErrorCode.NAVIGATION_TIMEOUT
            )
        except Exception as e:
            failed_in = self.state
            self._transition(LifecycleState.FAILED)
            fault = EngineFault(f"{type(e).__name__}: {e}")
            outcome = SessionOutcome.failed(fault.message, error_code=ErrorCode.ENGINE_FAULT)
        finally:
            await self._teardown()

        outcome.warnings = list(self.warnings)

        if outcome.ok:
            logger.info(
                "Navigation captured",
                status=outcome.status_code,
                content_length=len(outcome.html or ""),
            )
        else:
            logger.warning(
                "Navigation failed",
                failed_state=failed_in.value if failed_in else None,
                **outcome.to_dict(),
            )
        return outcome
