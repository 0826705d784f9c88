"""Log handlers for tokenbridge."""

import sys
from typing import Any, Dict, List, Optional, TextIO

from .core import LogEntry, LogHandler


class ConsoleHandler(LogHandler):
    """Console log handler writing to stderr by default."""

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__()
        self.stream = stream

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to the console."""
        stream = self.stream or sys.stderr
        with self._lock:
            stream.write(self.format(entry) + "\n")
            stream.flush()


class MemoryHandler(LogHandler):
    """Memory log handler, mainly for tests and diagnostics."""

    def __init__(self, max_size: int = 1000):
        super().__init__()
        self.max_size = max_size
        self.buffer: List[Dict[str, Any]] = []

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to memory."""
        with self._lock:
            self.buffer.append(
                {
                    "timestamp": entry.timestamp,
                    "level": entry.level.value,
                    "message": entry.message,
                    "logger_name": entry.logger_name,
                    "context": entry.context.to_dict(),
                    "formatted": self.format(entry),
                }
            )

            if len(self.buffer) > self.max_size:
                self.buffer.pop(0)

    def get_logs(self) -> List[Dict[str, Any]]:
        """Get all logs from memory."""
        with self._lock:
            return self.buffer.copy()

    def clear_logs(self) -> None:
        """Clear all logs from memory."""
        with self._lock:
            self.buffer.clear()

    def close(self) -> None:
        """Close handler."""
        with self._lock:
            self.buffer.clear()
