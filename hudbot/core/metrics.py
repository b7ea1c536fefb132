"""Counters and timings gathered while the bot loop runs.

The loop thread records; anyone may call ``get_metrics()`` for an immutable
``BotMetrics`` snapshot.

Example:
    >>> metrics = MetricsCollector()
    >>> metrics.record_tick(100.5)
    >>> metrics.record_capture(12.0, success=True)
    >>> metrics.get_metrics().tick_count
    1
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter, deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Tick timestamps kept for the rate estimate
TICK_RATE_WINDOW = 100


class BotMetrics(BaseModel):
    """Point-in-time view of the loop's health.

    Attributes:
        tick_count: Ticks in which the behavior ran.
        tick_rate_hz: Rate over the last ticks.
        frames_captured: Successful captures.
        frames_missed: Ticks skipped because no frame was available.
        errors_total: Recovered plus fatal errors.
        errors_by_type: Errors keyed by exception class name.
        uptime_seconds: Seconds since ``start()``.
    """

    tick_count: int = Field(default=0, ge=0)
    tick_rate_hz: float = Field(default=0.0, ge=0.0)
    avg_tick_time_ms: float = Field(default=0.0, ge=0.0)
    avg_capture_time_ms: float = Field(default=0.0, ge=0.0)
    avg_behavior_time_ms: float = Field(default=0.0, ge=0.0)

    frames_captured: int = Field(default=0, ge=0)
    frames_missed: int = Field(default=0, ge=0)

    errors_total: int = Field(default=0, ge=0)
    errors_recovered: int = Field(default=0, ge=0)
    errors_by_type: dict[str, int] = Field(default_factory=dict)

    started_at: datetime | None = None
    uptime_seconds: float = Field(default=0.0, ge=0.0)

    model_config = {"frozen": True}

    @property
    def capture_success_rate(self) -> float:
        attempts = self.frames_captured + self.frames_missed
        return self.frames_captured / attempts if attempts else 0.0


@dataclass
class _Timing:
    count: int = 0
    sum_ms: float = 0.0

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.sum_ms += duration_ms

    @property
    def mean_ms(self) -> float:
        return self.sum_ms / self.count if self.count else 0.0


class MetricsCollector:
    """Thread-safe accumulator behind ``BotMetrics``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._clear()

    def _clear(self) -> None:
        self._tick_timing = _Timing()
        self._capture_timing = _Timing()
        self._behavior_timing = _Timing()
        self._frames = Counter[str]()
        self._errors = Counter[str]()
        self._errors_fatal = 0
        self._tick_stamps: deque[float] = deque(maxlen=TICK_RATE_WINDOW)
        self._started_at: datetime | None = None

    def start(self) -> None:
        with self._lock:
            self._started_at = datetime.now()

    def reset(self) -> None:
        with self._lock:
            self._clear()
        logger.debug("Metrics cleared")

    def record_tick(self, duration_ms: float) -> None:
        with self._lock:
            self._tick_timing.add(duration_ms)
            self._tick_stamps.append(time.monotonic())

    def record_capture(self, duration_ms: float, success: bool) -> None:
        with self._lock:
            self._capture_timing.add(duration_ms)
            self._frames["captured" if success else "missed"] += 1

    def record_behavior(self, duration_ms: float) -> None:
        with self._lock:
            self._behavior_timing.add(duration_ms)

    def record_error(self, error_type: str, recovered: bool) -> None:
        """Count an error under its exception class name.

        Args:
            error_type: Exception class name.
            recovered: False when the error ended the loop.
        """
        with self._lock:
            self._errors[error_type] += 1
            if not recovered:
                self._errors_fatal += 1

    @contextmanager
    def time_behavior(self) -> Iterator[None]:
        """Record how long the enclosed block took, even if it raised."""
        began = time.monotonic()
        try:
            yield
        finally:
            self.record_behavior((time.monotonic() - began) * 1000)

    def _tick_rate(self) -> float:
        if len(self._tick_stamps) < 2:
            return 0.0
        span = self._tick_stamps[-1] - self._tick_stamps[0]
        return (len(self._tick_stamps) - 1) / span if span > 0 else 0.0

    def get_metrics(self) -> BotMetrics:
        with self._lock:
            total_errors = sum(self._errors.values())
            uptime = 0.0
            if self._started_at is not None:
                uptime = (datetime.now() - self._started_at).total_seconds()

            return BotMetrics(
                tick_count=self._tick_timing.count,
                tick_rate_hz=self._tick_rate(),
                avg_tick_time_ms=self._tick_timing.mean_ms,
                avg_capture_time_ms=self._capture_timing.mean_ms,
                avg_behavior_time_ms=self._behavior_timing.mean_ms,
                frames_captured=self._frames["captured"],
                frames_missed=self._frames["missed"],
                errors_total=total_errors,
                errors_recovered=total_errors - self._errors_fatal,
                errors_by_type=dict(self._errors),
                started_at=self._started_at,
                uptime_seconds=uptime,
            )
