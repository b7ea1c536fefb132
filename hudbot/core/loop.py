"""Tick loop that drives the active behavior.

Every tick grabs a frame, bails out early when there is no frame or the
client shows a disconnect, and otherwise hands the analyzer to the
behavior. Ticks are paced to ``target_rate_hz``.

Example:
    >>> loop = BotLoop(analyzer, behavior, config=LoopConfig(target_rate_hz=2.0))
    >>> loop.start()
    >>> loop.stop()
"""

from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from hudbot.core.metrics import MetricsCollector

if TYPE_CHECKING:
    from hudbot.config.loader import BotSettings
    from hudbot.core.behavior import Behavior
    from hudbot.vision.analyzer import ImageAnalyzer

logger = logging.getLogger(__name__)

PAUSE_POLL_S = 0.1


class LoopState(StrEnum):
    """Lifecycle of a BotLoop."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    ERROR = "error"
    STOPPING = "stopping"


_ACTIVE = (LoopState.RUNNING, LoopState.PAUSED)


class RecoverableError(Exception):
    """Raised by a behavior for a failure that only spoils the current tick."""

    pass


class FatalError(Exception):
    """Raised by a behavior when the session cannot go on."""

    pass


@dataclass
class LoopConfig:
    """Pacing and error limits for BotLoop.

    Attributes:
        target_rate_hz: Ticks per second.
        min_iteration_ms: Floor on a tick's period.
        max_consecutive_errors: Unexpected errors in a row before giving up.
        error_recovery_delay_ms: Pause after a failed tick.
        enable_signal_handlers: Stop on SIGINT/SIGTERM.
        max_ticks: Stop after this many ticks; None runs until stopped.
    """

    target_rate_hz: float = 2.0
    min_iteration_ms: float = 50.0
    max_consecutive_errors: int = 5
    error_recovery_delay_ms: float = 1000.0
    enable_signal_handlers: bool = True
    max_ticks: int | None = None

    @property
    def period_s(self) -> float:
        return max(1.0 / self.target_rate_hz, self.min_iteration_ms / 1000)

    @classmethod
    def from_settings(cls, settings: BotSettings, max_ticks: int | None = None) -> LoopConfig:
        return cls(
            target_rate_hz=settings.tick_rate_hz,
            max_consecutive_errors=settings.max_consecutive_errors,
            error_recovery_delay_ms=settings.error_recovery_delay_ms,
            max_ticks=max_ticks,
        )


class BotLoop:
    """Runs one behavior against one analyzer, tick after tick.

    ``start(blocking=True)`` runs on the caller's thread; otherwise a daemon
    thread named ``BotLoop`` is spawned.
    """

    def __init__(
        self,
        analyzer: ImageAnalyzer,
        behavior: Behavior,
        metrics: MetricsCollector | None = None,
        config: LoopConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._analyzer = analyzer
        self._behavior = behavior
        self._metrics = metrics or MetricsCollector()
        self._config = config or LoopConfig()
        self._sleep = sleep

        self._state = LoopState.STOPPED
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._error_streak = 0
        self._ticks = 0

        self._on_error: Callable[[Exception], None] | None = None
        self._on_state_change: Callable[[LoopState], None] | None = None

    @property
    def state(self) -> LoopState:
        with self._lock:
            return self._state

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def behavior(self) -> Behavior:
        return self._behavior

    @property
    def ticks(self) -> int:
        return self._ticks

    def set_callbacks(
        self,
        on_error: Callable[[Exception], None] | None = None,
        on_state_change: Callable[[LoopState], None] | None = None,
    ) -> None:
        self._on_error = on_error
        self._on_state_change = on_state_change

    def _notify(self, callback: Callable[[object], None] | None, value: object) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception as e:
            logger.warning(f"Loop callback {callback!r} failed: {e}")

    def _transition(self, new_state: LoopState) -> None:
        with self._lock:
            previous, self._state = self._state, new_state
        if previous == new_state:
            return
        logger.info(f"Loop {previous.value} -> {new_state.value}")
        self._notify(self._on_state_change, new_state)  # type: ignore[arg-type]

    def start(self, blocking: bool = False) -> None:
        """Start ticking.

        Raises:
            RuntimeError: If the loop is already running or paused.
        """
        if self.state in _ACTIVE:
            raise RuntimeError(f"Loop is already {self.state.value}")

        if self._config.enable_signal_handlers:
            self._install_signal_handlers()

        self._ticks = 0
        self._error_streak = 0
        self._behavior.start()
        self._metrics.start()
        self._transition(LoopState.RUNNING)
        logger.info(
            f"Running {self._behavior.name} at {self._config.target_rate_hz}Hz "
            f"(max_ticks={self._config.max_ticks})"
        )

        if blocking:
            self._run()
            return
        self._thread = threading.Thread(target=self._run, name="BotLoop", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Ask the loop to finish its current tick and wait for it."""
        if self.state not in _ACTIVE:
            return
        self._transition(LoopState.STOPPING)

        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(f"BotLoop thread still alive after {timeout}s")

    def pause(self) -> None:
        if self.state == LoopState.RUNNING:
            self._transition(LoopState.PAUSED)

    def resume(self) -> None:
        if self.state == LoopState.PAUSED:
            self._transition(LoopState.RUNNING)

    def _install_signal_handlers(self) -> None:
        def handle(signum: int, _frame: object) -> None:
            logger.info(f"{signal.Signals(signum).name} received")
            self.stop()

        try:
            for signum in (signal.SIGINT, signal.SIGTERM):
                signal.signal(signum, handle)
        except ValueError:
            # signal.signal only works on the main thread
            logger.debug("Signal handlers not installed")

    def _run(self) -> None:
        try:
            while self.state in _ACTIVE:
                if self.state == LoopState.PAUSED:
                    self._sleep(PAUSE_POLL_S)
                    continue

                started = time.monotonic()
                if not self._guarded_tick():
                    break

                self._ticks += 1
                limit = self._config.max_ticks
                if limit is not None and self._ticks >= limit:
                    logger.info(f"Stopping after {self._ticks} ticks")
                    break

                remaining = self._config.period_s - (time.monotonic() - started)
                if remaining > 0:
                    self._sleep(remaining)
        finally:
            self._behavior.stop()
            if self.state != LoopState.ERROR:
                self._transition(LoopState.STOPPED)
            logger.info(f"Loop finished after {self._ticks} ticks")

    def _guarded_tick(self) -> bool:
        """Run one tick, absorbing what can be absorbed.

        Returns:
            False when the loop has to end.
        """
        try:
            self._tick()
        except FatalError as e:
            logger.error(f"Fatal error: {e}")
            self._give_up(e)
            self._notify(self._on_error, e)  # type: ignore[arg-type]
            return False
        except RecoverableError as e:
            logger.warning(f"Tick failed: {e}")
            self._notify(self._on_error, e)  # type: ignore[arg-type]
            self._absorb(e)
        except Exception as e:
            logger.exception(f"Unexpected error in tick: {e}")
            if self._error_streak + 1 >= self._config.max_consecutive_errors:
                logger.error(f"Giving up after {self._error_streak + 1} errors in a row")
                self._give_up(e)
                return False
            self._absorb(e)
        else:
            self._error_streak = 0
        return True

    def _absorb(self, error: Exception) -> None:
        self._error_streak += 1
        self._metrics.record_error(type(error).__name__, recovered=True)
        self._sleep(self._config.error_recovery_delay_ms / 1000)

    def _give_up(self, error: Exception) -> None:
        self._metrics.record_error(type(error).__name__, recovered=False)
        self._transition(LoopState.ERROR)

    def _tick(self) -> bool:
        started = time.monotonic()

        captured = self._analyzer.capture()
        self._metrics.record_capture((time.monotonic() - started) * 1000, success=captured)
        if not captured:
            logger.debug("No frame this tick")
            return False

        if self._analyzer.detect_disconnect(self._behavior.session):
            logger.warning("Client disconnected, skipping tick")
            return False

        with self._metrics.time_behavior():
            self._behavior.run_iteration(self._analyzer)

        elapsed_ms = (time.monotonic() - started) * 1000
        self._metrics.record_tick(elapsed_ms)
        logger.debug(f"Tick {self._ticks + 1} took {elapsed_ms:.0f}ms")
        return True

    def run_once(self) -> bool:
        """Run a single tick outside the loop.

        Returns:
            True if the behavior ran.

        Raises:
            RuntimeError: If the loop is running.
        """
        if self.state == LoopState.RUNNING:
            raise RuntimeError("Cannot run_once while loop is running")
        return self._tick()
