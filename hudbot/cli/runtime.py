"""Runtime assembly used by CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hudbot.actions.backend import InputBackend
from hudbot.actions.keyboard import KeyboardController
from hudbot.actions.mouse import MouseController
from hudbot.actions.movement import MovementPlayer
from hudbot.actions.slots import SlotActivator
from hudbot.config.loader import BotMode, Config, ConfigManager
from hudbot.core.behavior import Behavior, FarmingBehavior, SupportBehavior
from hudbot.core.loop import BotLoop, LoopConfig
from hudbot.core.scheduler import SlotScheduler
from hudbot.core.session import SessionState
from hudbot.environment.browser import BrowserRuntime
from hudbot.vision.analyzer import ImageAnalyzer
from hudbot.vision.capture import FrameCapture
from hudbot.vision.ocr import TextRecognizer
from hudbot.vision.pixels import PixelClassifier
from hudbot.vision.stats import StatsReader

logger = logging.getLogger(__name__)


def build_analyzer(
    config: Config,
    capture: FrameCapture | None = None,
    recognizer: TextRecognizer | None = None,
) -> ImageAnalyzer:
    """Create an analyzer whose classifiers follow the hud settings."""
    hud = config.hud
    classifier = PixelClassifier(
        ignore_area_top=hud.ignore_area_top,
        ignore_area_bottom=hud.ignore_area_bottom,
        queue_size=hud.queue_size,
        max_workers=hud.max_workers,
    )
    stats_reader = StatsReader(queue_size=hud.queue_size, max_workers=hud.max_workers)
    return ImageAnalyzer(capture, classifier, stats_reader, recognizer)


def build_behavior(config: Config, backend: InputBackend) -> Behavior:
    """Create the behavior for the configured mode with its collaborators."""
    keyboard = KeyboardController(backend)
    movement = MovementPlayer(keyboard)
    session = SessionState()

    if config.bot.mode == BotMode.FARMING:
        scheduler = SlotScheduler(
            config.farming.slot_bars, activator=SlotActivator(keyboard), session=session
        )
        mouse = MouseController(backend, config.bot.viewport_width, config.bot.viewport_height)
        return FarmingBehavior(config.farming, scheduler, movement, session, mouse)

    scheduler = SlotScheduler(
        config.support.slot_bars, activator=SlotActivator(keyboard), session=session
    )
    return SupportBehavior(config.support, scheduler, movement, session)


def subscribe_behavior(manager: ConfigManager, behavior: Behavior) -> None:
    """Push runtime config updates into the running behavior."""

    def _on_config(config: Config) -> None:
        if isinstance(behavior, FarmingBehavior):
            behavior.update_config(config.farming)
        elif isinstance(behavior, SupportBehavior):
            behavior.update_config(config.support)

    manager.subscribe(_on_config)


@dataclass
class BotRuntime:
    """Runtime wrapper for an assembled bot session."""

    browser: BrowserRuntime
    loop: BotLoop
    config_manager: ConfigManager

    @classmethod
    def create(
        cls,
        manager: ConfigManager,
        browser: BrowserRuntime,
        backend: InputBackend,
        capture: FrameCapture,
        max_ticks: int | None = None,
    ) -> BotRuntime:
        config = manager.config
        analyzer = build_analyzer(config, capture, TextRecognizer())
        behavior = build_behavior(config, backend)
        subscribe_behavior(manager, behavior)
        loop = BotLoop(
            analyzer,
            behavior,
            config=LoopConfig.from_settings(config.bot, max_ticks=max_ticks),
        )
        return cls(browser=browser, loop=loop, config_manager=manager)

    def run(self) -> int:
        """Run until stopped or max_ticks is reached.

        Returns:
            Number of ticks run.
        """
        self.loop.start(blocking=True)
        metrics = self.loop.metrics.get_metrics()
        logger.info(
            f"Session finished: {self.loop.ticks} ticks, "
            f"{metrics.frames_missed} missed frames, {metrics.errors_total} errors"
        )
        return self.loop.ticks

    def shutdown(self) -> None:
        self.loop.stop()
        self.browser.stop()
