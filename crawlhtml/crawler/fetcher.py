"""
Fetch orchestrator for crawlhtml.

Coordinates one fetch: cache read, then on a miss launch profile, a single
navigation lifecycle run and cache write. Side effects are strictly
ordered (read -> engine -> write) so a partial capture is never cached.
"""

from dataclasses import dataclass, field
from typing import Any

from crawlhtml.crawler.cache import ContentCache
from crawlhtml.crawler.engine import EngineFactory
from crawlhtml.crawler.errors import CrawlError
from crawlhtml.crawler.launch_profile import HardeningProvider, build_launch_profile
from crawlhtml.crawler.lifecycle import NavigationLifecycleController
from crawlhtml.crawler.models import EngineVariant, FetchRequest, SessionOutcome
from crawlhtml.crawler.playwright_engine import PlaywrightEngine
from crawlhtml.crawler.session_pool import SessionPool
from crawlhtml.utils.config import Settings, get_settings
from crawlhtml.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass
class FetchResult:
    """
    Result of a fetch.

    Attributes:
        ok: Whether HTML is available.
        url: Requested URL.
        html: Captured or cached HTML (None on failure).
        from_cache: Whether html came from the content cache.
        outcome: Lifecycle outcome (None on a cache hit).
        warnings: Best-effort steps that failed (cache, teardown, challenge).
    """

    ok: bool
    url: str
    html: str | None = None
    from_cache: bool = False
    outcome: SessionOutcome | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def reason(self) -> str | None:
        if self.ok or self.outcome is None:
            return None
        return self.outcome.reason

    @property
    def status_code(self) -> int | None:
        return self.outcome.status_code if self.outcome else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (HTML summarised by length)."""
        return {
            "ok": self.ok,
            "url": self.url,
            "from_cache": self.from_cache,
            "content_length": len(self.html) if self.html is not None else None,
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "warnings": list(self.warnings),
        }


class FetchOrchestrator:
    """Top-level coordinator for a single-URL fetch."""

    def __init__(
        self,
        cache: ContentCache,
        *,
        engine_factory: EngineFactory = PlaywrightEngine,
        session_pool: SessionPool | None = None,
        hardening: HardeningProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._cache = cache
        self._engine_factory = engine_factory
        self._settings = settings or get_settings()
        self._session_pool = session_pool or SessionPool(self._settings.session_pool)
        self._hardening = hardening

    @property
    def cache(self) -> ContentCache:
        return self._cache

    async def fetch(self, request: FetchRequest) -> FetchResult:
        """Fetch the rendered HTML for request.url.

        Never raises for cache, navigation or engine failures; inspect
        ``FetchResult.ok``.
        """
        with LogContext(url=request.url):
            warnings: list[str] = []

            if request.use_cache:
                lookup = self._cache.get(request.url)
                if lookup.warning:
                    warnings.append(lookup.warning)
                if lookup.hit:
                    logger.info("Serving from cache", path=str(lookup.path))
                    return FetchResult(
                        ok=True,
                        url=request.url,
                        html=lookup.html,
                        from_cache=True,
                        warnings=warnings,
                    )

            try:
                profile = build_launch_profile(request, hardening=self._hardening)
            except CrawlError as e:
                outcome = SessionOutcome.failed(e.message, error_code=e.code)
            except Exception as e:
                outcome = SessionOutcome.failed(f"{type(e).__name__}: {e}")
            else:
                session = self._session_pool.get_session()
                controller = NavigationLifecycleController(
                    self._engine_factory(),
                    profile,
                    session=session,
                    settings=self._settings.crawler,
                )
                outcome = await controller.run(request.url, timeout=request.timeout_seconds)
            warnings.extend(outcome.warnings)

            if not outcome.ok:
                logger.error(
                    "Fetch failed",
                    kind=outcome.kind.value,
                    reason=outcome.reason,
                    status_code=outcome.status_code,
                )
                return FetchResult(ok=False, url=request.url, outcome=outcome, warnings=warnings)

            if request.use_cache and outcome.html is not None:
                written = self._cache.put(request.url, outcome.html)
                if written.warning:
                    warnings.append(written.warning)

            return FetchResult(
                ok=True,
                url=request.url,
                html=outcome.html,
                outcome=outcome,
                warnings=warnings,
            )


async def fetch_html(
    url: str,
    *,
    proxy_url: str | None = None,
    timeout_seconds: float | None = None,
    headless: bool | None = None,
    engine_variant: EngineVariant | str | None = None,
    use_cache: bool = True,
) -> FetchResult:
    """Fetch url with settings-backed defaults.

    Raises:
        ValidationError: If url, proxy_url or timeout_seconds is malformed.
    """
    settings = get_settings()
    request = FetchRequest.create(
        url,
        proxy_url=proxy_url,
        timeout_seconds=(
            settings.crawler.navigation_timeout if timeout_seconds is None else timeout_seconds
        ),
        headless=settings.browser.default_headless if headless is None else headless,
        engine_variant=engine_variant or settings.browser.default_engine,
        use_cache=use_cache,
    )
    orchestrator = FetchOrchestrator(ContentCache.from_settings(), settings=settings)
    return await orchestrator.fetch(request)


def clear_cache() -> bool:
    """Remove the settings-backed content cache."""
    return ContentCache.from_settings().clear().ok
