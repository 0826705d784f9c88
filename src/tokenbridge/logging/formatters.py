"""Log formatters for tokenbridge.

JSON and plain-text renderings of ``LogEntry`` records.
"""

import json
import time
import traceback
from typing import Any, Dict, Optional

from .core import LogEntry, LogFormatter


class JSONFormatter(LogFormatter):
    """JSON log formatter."""

    def __init__(
        self,
        include_context: bool = True,
        include_exception: bool = True,
        include_extra: bool = True,
        include_thread: bool = False,
        timestamp_format: str = "iso",
        indent: Optional[int] = None,
    ):
        self.include_context = include_context
        self.include_exception = include_exception
        self.include_extra = include_extra
        self.include_thread = include_thread
        self.timestamp_format = timestamp_format
        self.indent = indent

    def format(self, entry: LogEntry) -> str:
        """Format log entry as JSON."""
        data: Dict[str, Any] = {
            "timestamp": self._format_timestamp(entry.timestamp),
            "level": entry.level.value,
            "logger": entry.logger_name,
        }

        if self.include_context:
            context = {k: v for k, v in entry.context.to_dict().items() if v}
            if context:
                data["context"] = context

        if self.include_exception and entry.exception:
            data["exception"] = {
                "type": type(entry.exception).__name__,
                "message": str(entry.exception),
                "traceback": "".join(
                    traceback.format_exception(
                        type(entry.exception),
                        entry.exception,
                        entry.exception.__traceback__,
                    )
                ),
            }

        if self.include_extra and entry.extra:
            data["extra"] = entry.extra

        if self.include_thread:
            data["thread_id"] = entry.thread_id
            data["process_id"] = entry.process_id

        data["message"] = entry.message

        return json.dumps(data, indent=self.indent, default=str)

    def _format_timestamp(self, timestamp: float) -> str:
        """Format timestamp."""
        if self.timestamp_format == "iso":
            return (
                time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(timestamp))
                + f".{int((timestamp % 1) * 1000000):06d}Z"
            )
        elif self.timestamp_format == "unix":
            return str(timestamp)
        else:
            return time.strftime(self.timestamp_format, time.gmtime(timestamp))


class TextFormatter(LogFormatter):
    """Human readable single-line formatter."""

    def __init__(self, timestamp_format: str = "%Y-%m-%d %H:%M:%S"):
        self.timestamp_format = timestamp_format

    def format(self, entry: LogEntry) -> str:
        """Format log entry as text."""
        timestamp = time.strftime(self.timestamp_format, time.localtime(entry.timestamp))
        line = f"{timestamp} [{entry.level.value.upper()}] {entry.logger_name}: {entry.message}"

        ctx = entry.context
        tags = [
            f"{key}={value}"
            for key, value in (
                ("chain", ctx.chain),
                ("token", ctx.token),
                ("op", ctx.operation),
                ("tx", ctx.tx_hash),
            )
            if value
        ]
        if tags:
            line += " (" + " ".join(tags) + ")"

        if entry.exception:
            line += f" | {type(entry.exception).__name__}: {entry.exception}"

        return line
