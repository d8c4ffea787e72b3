"""
Pytest fixtures and configuration for crawlhtml tests.

Test Classification:

- @pytest.mark.unit: Single class/function, no external dependencies.
  DEFAULT: Tests without marker are auto-classified as unit.
- @pytest.mark.integration: Multiple components wired together, browser
  replaced by FakeEngine.
- @pytest.mark.e2e: Real browser and network. Excluded by default
  (pyproject addopts); run with ``pytest -m e2e``.

Mock Strategy:

- Browser engine: FakeEngine (in-memory BrowserEngine implementation)
- Playwright objects: AsyncMock / MagicMock
- File I/O: tmp_path
- Delays: recorded by a fake sleep, never actually awaited
"""

import asyncio
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

# Point settings at the repository config before anything loads it
os.environ["CRAWLHTML_CONFIG_DIR"] = str(Path(__file__).parent.parent / "config")

from crawlhtml.crawler.cache import ContentCache  # noqa: E402
from crawlhtml.crawler.engine import ResourceFilter  # noqa: E402
from crawlhtml.crawler.errors import NavigationTimeout  # noqa: E402
from crawlhtml.crawler.models import (  # noqa: E402
    EngineVariant,
    LaunchProfile,
)
from crawlhtml.utils.config import get_settings  # noqa: E402
from crawlhtml.utils.logging import configure_logging  # noqa: E402

# Route structlog through stdlib logging to stderr for the whole session
configure_logging()

SAMPLE_HTML = (
    "<!DOCTYPE html><html><head><title>Example Domain</title></head>"
    "<body><h1>Example Domain</h1><p>This domain is for use in examples.</p></body></html>"
)


def pytest_collection_modifyitems(config, items):
    """Tests without a classification marker are unit tests."""
    for item in items:
        has_classification = any(
            marker.name in ("unit", "integration", "e2e") for marker in item.iter_markers()
        )
        if not has_classification:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Settings are lru_cached; every test starts from a fresh load."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Fake browser engine
# =============================================================================


class FakeEngine:
    """In-memory BrowserEngine.

    Records every call and can be told to fail at a named step:
    launch, filter, headers, navigate, challenge, settle, content, close.
    """

    def __init__(
        self,
        *,
        status: int | None = 200,
        html: str = SAMPLE_HTML,
        fail_at: str | None = None,
        error: Exception | None = None,
        with_solver: bool = True,
        settle_times_out: bool = False,
        hang_on_content: bool = False,
        final_status: int | None = None,
    ) -> None:
        self.status = status
        self.html = html
        self.fail_at = fail_at
        self.error = error
        self.settle_times_out = settle_times_out
        self.hang_on_content = hang_on_content
        self.final_status = final_status
        self.calls: list[str] = []
        self.close_count = 0
        self.profile: LaunchProfile | None = None
        self.resource_filter: ResourceFilter | None = None
        self.headers: dict[str, str] = {}
        self.navigations: list[dict[str, Any]] = []
        self.solve_challenge = self._solve_challenge if with_solver else None

    def _step(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_at == name:
            raise self.error or RuntimeError(f"simulated fault in {name}")

    async def launch(self, profile: LaunchProfile) -> None:
        self._step("launch")
        self.profile = profile

    async def install_resource_filter(self, should_block: ResourceFilter) -> None:
        self._step("filter")
        self.resource_filter = should_block

    async def set_extra_headers(self, headers: dict[str, str]) -> None:
        self._step("headers")
        self.headers.update(headers)

    async def navigate(self, url: str, *, timeout: float, wait_until: str) -> int | None:
        self._step("navigate")
        self.navigations.append({"url": url, "timeout": timeout, "wait_until": wait_until})
        return self.status

    def response_status(self) -> int | None:
        return self.final_status

    async def _solve_challenge(self) -> None:
        self._step("challenge")

    async def wait_for_network_idle(self, timeout: float) -> None:
        self._step("settle")
        if self.settle_times_out:
            raise NavigationTimeout("network busy", timeout_seconds=timeout)

    async def content(self) -> str:
        self._step("content")
        if self.hang_on_content:
            await asyncio.sleep(30)
        return self.html

    async def close(self) -> None:
        self.close_count += 1
        self._step("close")


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def standard_profile() -> LaunchProfile:
    return LaunchProfile(
        engine_variant=EngineVariant.STANDARD,
        headless=True,
        extra_args=("--no-sandbox",),
    )


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def content_cache(cache_root: Path) -> ContentCache:
    return ContentCache(cache_root)

