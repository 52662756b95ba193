"""In-memory log ring buffer exposed by ``GET /api/logs``.

Records logged under the ``citybot`` logger are copied here so the debug
panel can show recent activity without reading server output.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List, Optional

from pydantic import BaseModel


ROOT_LOGGER = "citybot"
LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"

_LEVELS = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class LogEntry(BaseModel):
    timestamp: str
    level: str
    message: str
    source: str


class LogBuffer:
    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: LogEntry) -> None:
        # deque(maxlen) drops the oldest entry on overflow
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return [entry.model_copy() for entry in self._entries]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def source_for(logger_name: str) -> str:
    prefix = ROOT_LOGGER + "."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    return "server"


class RingBufferHandler(logging.Handler):
    def __init__(self, buffer: LogBuffer, level: int = logging.NOTSET):
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                level=_LEVELS.get(record.levelno, record.levelname.lower()),
                message=record.getMessage(),
                source=source_for(record.name),
            )
            self.buffer.append(entry)
        except Exception:
            self.handleError(record)


_buffer: Optional[LogBuffer] = None
_handler: Optional[RingBufferHandler] = None


def get_log_buffer(capacity: int = 1000) -> LogBuffer:
    global _buffer
    if _buffer is None:
        _buffer = LogBuffer(capacity)
    return _buffer


def configure_logging(level: str = "INFO", capacity: int = 1000) -> LogBuffer:
    """Set up console logging and attach the ring buffer once."""
    global _handler
    logging.basicConfig(level=level, format=LOG_FORMAT)
    buffer = get_log_buffer(capacity)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    if _handler is None:
        _handler = RingBufferHandler(buffer)
        logger.addHandler(_handler)
    return buffer


def get_logger(source: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{source}")
