"""
crawlhtml crawler module.

Provides the content cache, launch profile builder, navigation lifecycle
controller and fetch orchestrator.
"""

from crawlhtml.crawler.cache import CacheLookup, CacheWriteResult, ContentCache
from crawlhtml.crawler.errors import (
    BlockedResponse,
    CacheError,
    CrawlError,
    EngineFault,
    ErrorCode,
    NavigationTimeout,
    ValidationError,
)
from crawlhtml.crawler.fetcher import FetchOrchestrator, FetchResult, clear_cache, fetch_html
from crawlhtml.crawler.launch_profile import build_launch_profile, parse_proxy
from crawlhtml.crawler.lifecycle import LifecycleState, NavigationLifecycleController
from crawlhtml.crawler.models import (
    EngineVariant,
    FetchRequest,
    LaunchProfile,
    OutcomeKind,
    ProxyConfig,
    SessionOutcome,
)
from crawlhtml.crawler.session_pool import Session, SessionPool

__all__ = [
    # Cache
    "CacheLookup",
    "CacheWriteResult",
    "ContentCache",
    # Errors
    "BlockedResponse",
    "CacheError",
    "CrawlError",
    "EngineFault",
    "ErrorCode",
    "NavigationTimeout",
    "ValidationError",
    # Fetch
    "FetchOrchestrator",
    "FetchResult",
    "clear_cache",
    "fetch_html",
    # Launch profile
    "build_launch_profile",
    "parse_proxy",
    # Lifecycle
    "LifecycleState",
    "NavigationLifecycleController",
    # Models
    "EngineVariant",
    "FetchRequest",
    "LaunchProfile",
    "OutcomeKind",
    "ProxyConfig",
    "SessionOutcome",
    # Sessions
    "Session",
    "SessionPool",
]
