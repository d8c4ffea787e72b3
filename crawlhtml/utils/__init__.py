"""
crawlhtml utilities module.
"""

from crawlhtml.utils.config import get_settings
from crawlhtml.utils.logging import (
    get_logger,
    configure_logging,
    bind_context,
    unbind_context,
    LogContext,
)

__all__ = [
    "get_settings",
    "get_logger",
    "configure_logging",
    "bind_context",
    "unbind_context",
    "LogContext",
]
