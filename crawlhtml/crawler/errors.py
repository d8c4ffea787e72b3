"""
Error definitions for crawlhtml.

Error codes follow the pattern:
- INVALID_*: Input validation errors (caller must fix the request)
- *_ERROR: Best-effort subsystem failures (logged, never fatal)
- *_TIMEOUT / *_BLOCKED / *_FAULT: Terminal fetch failures
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for fetch failures."""

    INVALID_PARAMS = "INVALID_PARAMS"
    """URL, proxy URL or timeout is malformed. Rejected before any engine work."""

    CACHE_ERROR = "CACHE_ERROR"
    """Cache read/write/clear failed. The cache degrades to pass-through."""

    NAVIGATION_TIMEOUT = "NAVIGATION_TIMEOUT"
    """Navigation or request handling exceeded its bound."""

    RESPONSE_BLOCKED = "RESPONSE_BLOCKED"
    """Main navigation answered with HTTP status >= 400."""

    ENGINE_FAULT = "ENGINE_FAULT"
    """Unexpected failure inside the automation engine or one of its hooks."""


class CrawlError(Exception):
    """Base exception for crawlhtml errors."""

    code: ErrorCode = ErrorCode.ENGINE_FAULT

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to a log-friendly dictionary."""
        result: dict[str, Any] = {
            "error_code": self.code.value,
            "error": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(CrawlError):
    """Malformed input URL, proxy URL or timeout."""

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, message: str, param_name: str | None = None):
        super().__init__(message, param_name=param_name)
        self.param_name = param_name


class CacheError(CrawlError):
    """Cache operation failed."""

    code = ErrorCode.CACHE_ERROR


class NavigationTimeout(CrawlError):
    """Navigation or request handling timed out."""

    code = ErrorCode.NAVIGATION_TIMEOUT

    def __init__(self, message: str, timeout_seconds: float | None = None):
        super().__init__(message, timeout_seconds=timeout_seconds)
        self.timeout_seconds = timeout_seconds


class BlockedResponse(CrawlError):
    """Main navigation returned an HTTP error status."""

    code = ErrorCode.RESPONSE_BLOCKED

    def __init__(self, status_code: int):
        super().__init__(f"Blocked with status code {status_code}", status_code=status_code)
        self.status_code = status_code


class EngineFault(CrawlError):
    """Unexpected automation engine failure."""

    code = ErrorCode.ENGINE_FAULT
