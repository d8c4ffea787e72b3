"""
Playwright-based browser engine for crawlhtml.

Implements the BrowserEngine interface on top of Playwright's Firefox
driver. The standard variant launches Playwright's bundled Firefox; the
hardened variant launches the Camoufox build whose executable and prefs
arrive through the launch profile.
"""

import asyncio
import time
from typing import TYPE_CHECKING, Any

from crawlhtml.crawler.challenge_detector import (
    detect_challenge_type,
    is_auto_resolving,
    is_challenge_page,
)
from crawlhtml.crawler.engine import ResourceFilter
from crawlhtml.crawler.errors import EngineFault, NavigationTimeout
from crawlhtml.crawler.models import LaunchProfile
from crawlhtml.utils.config import get_settings
from crawlhtml.utils.logging import get_logger

if TYPE_CHECKING:
    from playwright.async_api import (
        Browser,
        BrowserContext,
        Page,
        Playwright,
        Response,
        Route,
    )

logger = get_logger(__name__)


class PlaywrightEngine:
    """
    Browser engine implementation using Playwright (Firefox).

    One instance drives one browser process and one page; it is not reused
    across fetches.
    """

    def __init__(
        self,
        *,
        challenge_timeout: float | None = None,
        challenge_poll_interval: float = 1.0,
    ) -> None:
        if challenge_timeout is None:
            challenge_timeout = get_settings().crawler.challenge_timeout
        self._challenge_timeout = challenge_timeout
        self._challenge_poll_interval = challenge_poll_interval
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._last_response: Response | None = None
        self._last_status: int | None = None
        self.solve_challenge = self._solve_challenge

    @property
    def page(self) -> "Page":
        if self._page is None:
            raise RuntimeError("Engine not launched")
        return self._page

    async def launch(self, profile: LaunchProfile) -> None:
        """Start Playwright, launch Firefox and open a page."""
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.firefox.launch(**profile.to_launch_kwargs())
        self._context = await self._browser.new_context(**dict(profile.context_options))
        self._page = await self._context.new_page()
        self._page.on("response", self._on_response)

        logger.info(
            "Browser launched",
            engine_variant=profile.engine_variant.value,
            headless=profile.headless,
            proxy=profile.proxy.server if profile.proxy else None,
        )

    def _on_response(self, response: "Response") -> None:
        # Track the latest main-frame document so a resolved challenge
        # reports the status of the page that replaced it
        if self._page is None or response.frame != self._page.main_frame:
            return
        if response.request.is_navigation_request():
            self._last_response = response
            self._last_status = response.status

    async def install_resource_filter(self, should_block: ResourceFilter) -> None:
        """Route every request through should_block."""

        async def handle_route(route: "Route") -> None:
            if should_block(route.request.resource_type):
                await route.abort()
            else:
                await route.continue_()

        await self.page.route("**/*", handle_route)

    async def set_extra_headers(self, headers: dict[str, str]) -> None:
        await self.page.set_extra_http_headers(headers)

    async def navigate(self, url: str, *, timeout: float, wait_until: str) -> int | None:
        """Navigate to url and return the main response status."""
        from playwright.async_api import TimeoutError as PlaywrightTimeout

        try:
            response = await self.page.goto(
                url,
                timeout=int(timeout * 1000),
                wait_until=wait_until,  # type: ignore[arg-type]
            )
        except PlaywrightTimeout as e:
            raise NavigationTimeout(
                f"Navigation timed out after {timeout}s: {url}", timeout_seconds=timeout
            ) from e

        if response is None:
            return None
        self._last_response = response
        self._last_status = response.status
        return response.status

    def response_status(self) -> int | None:
        return self._last_status

    async def _response_headers(self) -> dict[str, str]:
        if self._last_response is None:
            return {}
        try:
            return await self._last_response.all_headers()
        except Exception as e:
            logger.debug("Response headers unavailable", error=str(e))
            return {}

    async def _solve_challenge(self) -> None:
        """Wait out an interstitial challenge if the page shows one.

        Raises:
            EngineFault: The challenge needs human interaction.
            NavigationTimeout: The challenge did not clear in time.
        """
        from playwright.async_api import Error as PlaywrightError

        content = await self.page.content()
        if not is_challenge_page(content, await self._response_headers()):
            return

        challenge_type = detect_challenge_type(content)
        logger.info("Challenge detected", challenge_type=challenge_type, url=self.page.url)
        if not is_auto_resolving(challenge_type):
            raise EngineFault(
                f"Challenge requires interaction: {challenge_type}",
                challenge_type=challenge_type,
            )

        deadline = time.monotonic() + self._challenge_timeout
        while time.monotonic() < deadline:
            await asyncio.sleep(self._challenge_poll_interval)
            try:
                content = await self.page.content()
            except PlaywrightError as e:
                # Content is unavailable while the challenge redirects
                logger.debug("Page busy during challenge", error=str(e))
                continue
            if not is_challenge_page(content):
                logger.info("Challenge resolved", challenge_type=challenge_type)
                return

        raise NavigationTimeout(
            f"Challenge not resolved within {self._challenge_timeout}s",
            timeout_seconds=self._challenge_timeout,
        )

    async def wait_for_network_idle(self, timeout: float) -> None:
        from playwright.async_api import TimeoutError as PlaywrightTimeout

        try:
            await self.page.wait_for_load_state("networkidle", timeout=int(timeout * 1000))
        except PlaywrightTimeout as e:
            raise NavigationTimeout(
                f"Network did not go idle within {timeout}s", timeout_seconds=timeout
            ) from e

    async def content(self) -> str:
        return await self.page.content()

    async def close(self) -> None:
        """Close page, context, browser and driver.

        Every step is attempted; the first failure is re-raised afterwards
        as an EngineFault.
        """
        errors: list[str] = []
        steps: list[tuple[str, Any]] = [
            ("page", self._page),
            ("context", self._context),
            ("browser", self._browser),
        ]
        for name, resource in steps:
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug("Close failed", resource=name, error=str(e))
                errors.append(f"{name}: {e}")

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug("Close failed", resource="playwright", error=str(e))
                errors.append(f"playwright: {e}")

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        if errors:
            raise EngineFault(f"Teardown incomplete: {'; '.join(errors)}")
        logger.debug("Browser closed")
