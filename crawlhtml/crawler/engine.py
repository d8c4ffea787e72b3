"""
Browser engine abstraction.

The navigation lifecycle controller drives an engine only through this
interface, so it can run against Playwright in production and an
in-memory double in tests.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from crawlhtml.crawler.models import LaunchProfile

# Given a request's resource type, return True to abort the request
ResourceFilter = Callable[[str], bool]

# Optional interstitial challenge solver exposed by an engine
ChallengeSolver = Callable[[], Awaitable[None]]


@runtime_checkable
class BrowserEngine(Protocol):
    """
    Capability interface of a browser automation engine.

    Engines raise crawlhtml.crawler.errors.NavigationTimeout for timeouts
    and may raise any other exception for faults; the controller classifies
    both.

    Attributes:
        solve_challenge: Interstitial challenge solver, or None when the
            engine has none.
    """

    solve_challenge: ChallengeSolver | None

    async def launch(self, profile: LaunchProfile) -> None:
        """Start the browser process and open a page."""
        ...

    async def install_resource_filter(self, should_block: ResourceFilter) -> None:
        """Abort requests whose resource type matches, continue the rest."""
        ...

    async def set_extra_headers(self, headers: dict[str, str]) -> None:
        """Send these headers with every request from the page."""
        ...

    async def navigate(self, url: str, *, timeout: float, wait_until: str) -> int | None:
        """Navigate and return the main response status (None if no response)."""
        ...

    def response_status(self) -> int | None:
        """Status of the latest main-frame navigation response."""
        ...

    async def wait_for_network_idle(self, timeout: float) -> None:
        """Wait until the network is idle; raise NavigationTimeout on expiry."""
        ...

    async def content(self) -> str:
        """Return the rendered document as HTML."""
        ...

    async def close(self) -> None:
        """Close the page, browser and driver."""
        ...


EngineFactory = Callable[[], BrowserEngine]
