"""
Command-line entry point for crawlhtml.

Prints the rendered HTML of one URL to stdout. Diagnostics and logs go to
stderr.
"""

import argparse
import asyncio
import os
import sys

from crawlhtml import __version__
from crawlhtml.crawler.errors import ValidationError
from crawlhtml.crawler.fetcher import FetchOrchestrator
from crawlhtml.crawler.cache import ContentCache
from crawlhtml.crawler.models import EngineVariant, FetchRequest
from crawlhtml.utils.config import get_settings
from crawlhtml.utils.logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_INVALID_ARGUMENT = 2

# Preferred name first; the legacy name is kept for existing deployments
PROXY_ENV_VARS = ("CRAWL_PROXY_URL", "CRAWLER_PROXY_URL")


def default_proxy_url() -> str | None:
    """Proxy URL from the environment, if set."""
    for name in PROXY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crawlhtml",
        description="Fetch the rendered HTML of a URL through a stealth browser session.",
    )
    parser.add_argument("url", nargs="?", help="HTTP/HTTPS URL to fetch")
    parser.add_argument(
        "--proxy", "-p",
        dest="proxy_url",
        help="Proxy URL (http/https/socks5). Falls back to CRAWL_PROXY_URL, "
        "then the legacy CRAWLER_PROXY_URL",
    )
    parser.add_argument(
        "--timeout",
        help="Navigation timeout in seconds (default from settings, 60)",
    )
    parser.add_argument(
        "--headful",
        action="store_true",
        help="Launch the browser with its UI visible",
    )
    parser.add_argument(
        "--engine",
        choices=[v.value for v in EngineVariant],
        help="Browser engine: standard Firefox or the hardened Camoufox build",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Bypass the HTML cache for this fetch",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Remove all cached pages before fetching (or alone, without a URL)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s v{__version__}",
    )
    return parser


def request_from_args(args: argparse.Namespace) -> FetchRequest:
    """Translate parsed arguments into a validated FetchRequest.

    Raises:
        ValidationError: On a malformed URL, proxy URL or timeout.
    """
    settings = get_settings()
    proxy_url = args.proxy_url if args.proxy_url is not None else default_proxy_url()
    timeout = args.timeout if args.timeout is not None else settings.crawler.navigation_timeout

    return FetchRequest.create(
        args.url,
        proxy_url=proxy_url,
        timeout_seconds=timeout,
        headless=False if args.headful else settings.browser.default_headless,
        engine_variant=args.engine or settings.browser.default_engine,
        use_cache=not args.no_cache,
    )


async def run(args: argparse.Namespace) -> int:
    """Run one CLI invocation and return the exit code."""
    logger = get_logger(__name__)
    cache = ContentCache.from_settings()
    request = request_from_args(args) if args.url is not None else None

    if args.clear_cache:
        cleared = cache.clear()
        if not cleared.ok:
            print(f"Error: {cleared.warning}", file=sys.stderr)
            return EXIT_FETCH_FAILED

    if request is None:
        return EXIT_OK

    result = await FetchOrchestrator(cache).fetch(request)

    if not result.ok or not result.html:
        reason = result.reason or "empty document"
        print(f"Failed to load {request.url}: {reason}", file=sys.stderr)
        return EXIT_FETCH_FAILED

    logger.info("Fetch complete", **result.to_dict())
    sys.stdout.write(result.html)
    sys.stdout.flush()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.url is None and not args.clear_cache:
        parser.print_usage(sys.stderr)
        return EXIT_INVALID_ARGUMENT

    configure_logging(log_level="INFO" if args.verbose else None)

    try:
        return asyncio.run(run(args))
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_INVALID_ARGUMENT


if __name__ == "__main__":
    sys.exit(main())
