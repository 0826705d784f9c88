"""tokenbridge logging system.

Structured logging for the bridge core: contexts carrying chain and token,
JSON and text formatting, console and in-memory handlers.
"""

from .core import (
    BridgeLogger,
    LogConfig,
    LogContext,
    LogEntry,
    LogFormatter,
    LogHandler,
    LogLevel,
    LogManager,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .formatters import JSONFormatter, TextFormatter
from .handlers import ConsoleHandler, MemoryHandler

__all__ = [
    # Core
    "LogLevel",
    "LogConfig",
    "LogContext",
    "LogEntry",
    "LogFormatter",
    "LogHandler",
    "LogManager",
    "BridgeLogger",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Handlers
    "ConsoleHandler",
    "MemoryHandler",
]
