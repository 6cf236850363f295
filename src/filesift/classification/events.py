"""Log events emitted while a classification run progresses."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from typing import Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["info", "warn", "error", "success"]
DEFAULT_HISTORY_LIMIT = 200


class LogEvent(BaseModel):
    """Single timestamped log line."""

    model_config = ConfigDict(frozen=True)

    message: str
    severity: Severity = "info"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LogHistory:
    """Bounded record of the most recent log events, oldest first."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1.")
        self._events: deque[LogEvent] = deque(maxlen=limit)

    def add(self, message: str, severity: Severity = "info") -> LogEvent:
        """Record a message, dropping the oldest event once the limit is reached."""
        event = LogEvent(message=message, severity=severity)
        self._events.append(event)
        return event

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)


__all__ = ["DEFAULT_HISTORY_LIMIT", "LogEvent", "LogHistory", "Severity"]
