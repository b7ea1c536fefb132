"""Tests for the BotLoop class."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from hudbot.config.loader import BotSettings
from hudbot.core.loop import (
    BotLoop,
    FatalError,
    LoopConfig,
    LoopState,
    RecoverableError,
)
from hudbot.core.metrics import MetricsCollector


def _analyzer(captured: bool = True, disconnected: bool = False) -> MagicMock:
    analyzer = MagicMock()
    analyzer.capture.return_value = captured
    analyzer.detect_disconnect.return_value = disconnected
    return analyzer


def _loop(
    analyzer: MagicMock | None = None,
    behavior: MagicMock | None = None,
    **config: object,
) -> BotLoop:
    config.setdefault("enable_signal_handlers", False)
    return BotLoop(
        analyzer or _analyzer(),
        behavior or MagicMock(),
        config=LoopConfig(**config),  # type: ignore[arg-type]
        sleep=MagicMock(),
    )


class TestLoopConfig:
    """Tests for LoopConfig."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = LoopConfig()

        assert config.target_rate_hz == 2.0
        assert config.max_consecutive_errors == 5
        assert config.enable_signal_handlers is True
        assert config.max_ticks is None

    def test_from_settings(self) -> None:
        """Loop settings come from the bot section."""
        settings = BotSettings(tick_rate_hz=4.0, max_consecutive_errors=7)

        config = LoopConfig.from_settings(settings, max_ticks=10)

        assert config.target_rate_hz == 4.0
        assert config.max_consecutive_errors == 7
        assert config.error_recovery_delay_ms == 1000
        assert config.max_ticks == 10


class TestBotLoopIteration:
    """Tests for single ticks."""

    def test_run_once_runs_behavior(self) -> None:
        """A tick captures, checks the connection and runs the behavior."""
        analyzer = _analyzer()
        behavior = MagicMock()
        loop = _loop(analyzer, behavior)

        assert loop.run_once() is True

        analyzer.detect_disconnect.assert_called_once_with(behavior.session)
        behavior.run_iteration.assert_called_once_with(analyzer)
        metrics = loop.metrics.get_metrics()
        assert metrics.tick_count == 1
        assert metrics.frames_captured == 1

    def test_no_frame_skips_tick(self) -> None:
        """Without a frame the behavior does not run."""
        behavior = MagicMock()
        loop = _loop(_analyzer(captured=False), behavior)

        assert loop.run_once() is False

        behavior.run_iteration.assert_not_called()
        assert loop.metrics.get_metrics().frames_missed == 1

    def test_disconnected_skips_tick(self) -> None:
        """A disconnected client skips the behavior."""
        behavior = MagicMock()
        loop = _loop(_analyzer(disconnected=True), behavior)

        assert loop.run_once() is False
        behavior.run_iteration.assert_not_called()


class TestBotLoopRun:
    """Tests for running the loop."""

    def test_blocking_run_stops_at_max_ticks(self) -> None:
        """A blocking run ends after max_ticks and stops the behavior."""
        behavior = MagicMock()
        loop = _loop(behavior=behavior, max_ticks=3)

        loop.start(blocking=True)

        assert loop.ticks == 3
        assert loop.state == LoopState.STOPPED
        assert behavior.run_iteration.call_count == 3
        behavior.start.assert_called_once()
        behavior.stop.assert_called_once()

    def test_rate_limit_sleeps(self) -> None:
        """Each tick sleeps off the rest of its period."""
        sleep = MagicMock()
        loop = BotLoop(
            _analyzer(),
            MagicMock(),
            config=LoopConfig(target_rate_hz=2.0, enable_signal_handlers=False, max_ticks=2),
            sleep=sleep,
        )

        loop.start(blocking=True)

        assert sleep.call_count == 1
        assert 0.4 < sleep.call_args.args[0] <= 0.5

    def test_state_change_callback(self) -> None:
        """State changes are reported in order."""
        states: list[LoopState] = []
        loop = _loop(max_ticks=1)
        loop.set_callbacks(on_state_change=states.append)

        loop.start(blocking=True)

        assert states == [LoopState.RUNNING, LoopState.STOPPED]

    def test_background_run(self) -> None:
        """A background loop can be stopped; starting twice fails."""
        loop = BotLoop(
            _analyzer(),
            MagicMock(),
            config=LoopConfig(target_rate_hz=50.0, enable_signal_handlers=False),
        )

        loop.start(blocking=False)
        try:
            with pytest.raises(RuntimeError):
                loop.start()
            with pytest.raises(RuntimeError):
                loop.run_once()
        finally:
            loop.stop()

        assert loop.state == LoopState.STOPPED

    def test_stop_when_already_stopped_is_noop(self) -> None:
        """Stopping a stopped loop does nothing."""
        loop = _loop()
        loop.stop()
        assert loop.state == LoopState.STOPPED

    def test_pause_when_not_running_is_noop(self) -> None:
        """Pause and resume only act on a matching state."""
        loop = _loop()
        loop.pause()
        loop.resume()
        assert loop.state == LoopState.STOPPED


class TestBotLoopErrorHandling:
    """Tests for BotLoop error handling."""

    def test_recoverable_error_continues_loop(self) -> None:
        """Recoverable errors are reported and the loop carries on."""
        behavior = MagicMock()
        behavior.run_iteration.side_effect = [RecoverableError("glitch"), None, None]
        errors: list[Exception] = []
        loop = _loop(behavior=behavior, max_ticks=3)
        loop.set_callbacks(on_error=errors.append)

        loop.start(blocking=True)

        assert loop.state == LoopState.STOPPED
        assert len(errors) == 1
        assert loop.metrics.get_metrics().errors_recovered == 1

    def test_fatal_error_stops_loop(self) -> None:
        """Fatal errors put the loop in ERROR."""
        behavior = MagicMock()
        behavior.run_iteration.side_effect = FatalError("fatal")
        loop = _loop(behavior=behavior)

        loop.start(blocking=True)

        assert loop.state == LoopState.ERROR
        assert loop.metrics.get_metrics().errors_by_type == {"FatalError": 1}
        behavior.stop.assert_called_once()

    def test_max_consecutive_errors_stops_loop(self) -> None:
        """Too many unexpected errors in a row give up."""
        behavior = MagicMock()
        behavior.run_iteration.side_effect = ValueError("error")
        loop = _loop(behavior=behavior, max_consecutive_errors=3)

        loop.start(blocking=True)

        assert loop.state == LoopState.ERROR
        assert behavior.run_iteration.call_count == 3
        assert loop.metrics.get_metrics().errors_total == 3

    def test_errors_reset_after_success(self) -> None:
        """A good tick resets the consecutive error count."""
        behavior = MagicMock()
        behavior.run_iteration.side_effect = [
            ValueError("a"),
            ValueError("b"),
            None,
            ValueError("c"),
            ValueError("d"),
        ]
        loop = _loop(behavior=behavior, max_consecutive_errors=3, max_ticks=5)

        loop.start(blocking=True)

        assert loop.state == LoopState.STOPPED
        assert loop.ticks == 5

    def test_custom_metrics_collector(self) -> None:
        """An injected collector receives the loop's metrics."""
        metrics = MetricsCollector()
        loop = BotLoop(
            _analyzer(),
            MagicMock(),
            metrics=metrics,
            config=LoopConfig(enable_signal_handlers=False, max_ticks=2),
            sleep=MagicMock(),
        )

        loop.start(blocking=True)

        assert loop.metrics is metrics
        assert metrics.get_metrics().tick_count == 2
