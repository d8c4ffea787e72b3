"""
Data classes for a single fetch: request, proxy, launch profile and outcome.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any
from urllib.parse import urlsplit

from crawlhtml.crawler.errors import ErrorCode, ValidationError

URL_SCHEMES = ("http", "https")
PROXY_SCHEMES = ("http", "https", "socks5")

DEFAULT_TIMEOUT_SECONDS = 60.0


class EngineVariant(str, Enum):
    """Browser engine flavour."""

    STANDARD = "standard"
    HARDENED = "hardened"


class OutcomeKind(str, Enum):
    """Terminal outcome of one fetch attempt."""

    SUCCESS = "success"
    BLOCKED = "blocked"
    FAILED = "failed"


# ============================================================================
# Validation helpers
# ============================================================================


def _has_scheme(candidate: str | None, schemes: tuple[str, ...]) -> bool:
    if not candidate:
        return False
    try:
        parsed = urlsplit(candidate)
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return parsed.scheme.lower() in schemes and bool(parsed.hostname)


def is_valid_url(candidate: str | None) -> bool:
    """Check that candidate is an absolute http(s) URL."""
    return _has_scheme(candidate, URL_SCHEMES)


def is_valid_proxy_url(candidate: str | None) -> bool:
    """Check that candidate is an http, https or socks5 proxy URL."""
    return _has_scheme(candidate, PROXY_SCHEMES)


def validate_timeout(value: Any) -> float:
    """Parse a positive timeout in seconds.

    Raises:
        ValidationError: If the value is not a positive number.
    """
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            "--timeout must be a positive number of seconds.", param_name="timeout"
        ) from None
    # NaN fails both comparisons
    if not timeout > 0 or timeout == float("inf"):
        raise ValidationError(
            "--timeout must be a positive number of seconds.", param_name="timeout"
        )
    return timeout


# ============================================================================
# Request
# ============================================================================


@dataclass(frozen=True)
class FetchRequest:
    """
    One fetch invocation.

    Attributes:
        url: Absolute http(s) URL to fetch.
        proxy_url: Optional http/https/socks5 proxy URL.
        timeout_seconds: Navigation and request-handling timeout.
        headless: Launch the browser without a visible window.
        engine_variant: Standard Firefox or the hardened build.
        use_cache: Read from and write to the content cache.
    """

    url: str
    proxy_url: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    headless: bool = True
    engine_variant: EngineVariant = EngineVariant.STANDARD
    use_cache: bool = True

    @classmethod
    def create(
        cls,
        url: str,
        *,
        proxy_url: str | None = None,
        timeout_seconds: Any = DEFAULT_TIMEOUT_SECONDS,
        headless: bool = True,
        engine_variant: EngineVariant | str = EngineVariant.STANDARD,
        use_cache: bool = True,
    ) -> "FetchRequest":
        """Build a validated request.

        Raises:
            ValidationError: On a malformed URL, proxy URL, timeout or engine.
        """
        if not is_valid_url(url):
            raise ValidationError("First argument must be a valid URL.", param_name="url")
        if proxy_url is not None and not is_valid_proxy_url(proxy_url):
            raise ValidationError(
                "--proxy must be a valid HTTP/HTTPS/SOCKS5 URL.", param_name="proxy"
            )
        try:
            variant = EngineVariant(engine_variant)
        except ValueError:
            raise ValidationError(
                f"Unknown engine variant: {engine_variant}", param_name="engine"
            ) from None

        return cls(
            url=url,
            proxy_url=proxy_url,
            timeout_seconds=validate_timeout(timeout_seconds),
            headless=headless,
            engine_variant=variant,
            use_cache=use_cache,
        )


# ============================================================================
# Launch profile
# ============================================================================


@dataclass(frozen=True)
class ProxyConfig:
    """Proxy settings in the shape Playwright expects."""

    server: str
    username: str | None = None
    password: str | None = None

    def to_dict(self) -> dict[str, str]:
        result = {"server": self.server}
        if self.username is not None:
            result["username"] = self.username
        if self.password is not None:
            result["password"] = self.password
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProxyConfig":
        return cls(
            server=data["server"],
            username=data.get("username"),
            password=data.get("password"),
        )


def _freeze(mapping: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class LaunchProfile:
    """
    Resolved startup parameters for one browser session.

    Attributes:
        engine_variant: Engine flavour the profile was built for.
        headless: Headless flag.
        proxy: Proxy settings, if any.
        extra_args: Ordered, de-duplicated browser startup flags.
        profile_overrides: Variant-specific launch fields (executable path,
            environment, browser prefs...).
        context_options: Browser context options (locale, TLS errors...).
    """

    engine_variant: EngineVariant
    headless: bool
    proxy: ProxyConfig | None = None
    extra_args: tuple[str, ...] = ()
    profile_overrides: Mapping[str, Any] = field(default_factory=_freeze)
    context_options: Mapping[str, Any] = field(default_factory=_freeze)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra_args", tuple(self.extra_args))
        object.__setattr__(self, "profile_overrides", _freeze(self.profile_overrides))
        object.__setattr__(self, "context_options", _freeze(self.context_options))

    def to_launch_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``BrowserType.launch``."""
        kwargs: dict[str, Any] = dict(self.profile_overrides)
        kwargs["headless"] = self.headless
        kwargs["args"] = list(self.extra_args)
        if self.proxy is not None:
            kwargs["proxy"] = self.proxy.to_dict()
        return kwargs

    def to_dict(self) -> dict[str, Any]:
        """Log-friendly view; proxy credentials are not included."""
        return {
            "engine_variant": self.engine_variant.value,
            "headless": self.headless,
            "proxy_server": self.proxy.server if self.proxy else None,
            "extra_args": list(self.extra_args),
            "profile_overrides": sorted(self.profile_overrides),
        }


# ============================================================================
# Outcome
# ============================================================================


@dataclass
class SessionOutcome:
    """
    Terminal outcome of one navigation lifecycle run.

    Attributes:
        kind: Success, blocked or failed.
        html: Captured document (success only).
        status_code: Main navigation status, when known.
        reason: Failure description (blocked/failed).
        error_code: Error code for blocked/failed outcomes.
        warnings: Best-effort steps that failed without aborting the run.
    """

    kind: OutcomeKind
    html: str | None = None
    status_code: int | None = None
    reason: str | None = None
    error_code: ErrorCode | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS

    @classmethod
    def success(cls, html: str, *, status_code: int | None = None) -> "SessionOutcome":
        return cls(kind=OutcomeKind.SUCCESS, html=html, status_code=status_code)

    @classmethod
    def blocked(cls, status_code: int) -> "SessionOutcome":
        return cls(
            kind=OutcomeKind.BLOCKED,
            status_code=status_code,
            reason=f"Blocked with status code {status_code}",
            error_code=ErrorCode.RESPONSE_BLOCKED,
        )

    @classmethod
    def failed(
        cls,
        reason: str,
        *,
        error_code: ErrorCode = ErrorCode.ENGINE_FAULT,
    ) -> "SessionOutcome":
        return cls(kind=OutcomeKind.FAILED, reason=reason, error_code=error_code)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (HTML is summarised by length)."""
        return {
            "kind": self.kind.value,
            "ok": self.ok,
            "status_code": self.status_code,
            "reason": self.reason,
            "error_code": self.error_code.value if self.error_code else None,
            "content_length": len(self.html) if self.html is not None else None,
            "warnings": list(self.warnings),
        }
