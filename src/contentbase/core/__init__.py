"""Core configuration and logging for ContentBase."""

from contentbase.core.config import Settings, get_settings
from contentbase.core.logging import (
    LoggingContext,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "LoggingContext",
    "Settings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
]
