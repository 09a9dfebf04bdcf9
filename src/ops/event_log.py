"""
Bounded operator event log.

Holds the most recent human-readable status lines (model load, per-frame
detection counts, FPS, upload results, errors) for display to an operator.
Every entry is also forwarded to the standard logging module.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, List, Optional

DEFAULT_MAX_ENTRIES = 100


class EventLog:
    """
    Timestamped, append-only log keeping at most `max_entries` lines.

    Safe to append from the pipeline thread and the dispatch worker.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._entries: deque = deque(maxlen=max_entries)
        self._lock = threading.Lock()
        self._clock = clock or time.time
        self._logger = logger or logging.getLogger("relay.events")

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen

    def append(self, message: str, level: int = logging.INFO) -> str:
        """Append a message and return the formatted line."""
        stamp = time.strftime("%H:%M:%S", time.localtime(self._clock()))
        line = f"[{stamp}] {message}"
        with self._lock:
            self._entries.append(line)
        self._logger.log(level, message)
        return line

    def info(self, message: str) -> str:
        return self.append(message, logging.INFO)

    def warning(self, message: str) -> str:
        return self.append(message, logging.WARNING)

    def error(self, message: str) -> str:
        return self.append(message, logging.ERROR)

    def snapshot(self) -> List[str]:
        """Return a copy of the current entries, oldest first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
