"""CLI entrypoint for running hudbot sessions."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from PIL import Image

from hudbot.cli.helpers import _apply_logging_config, _configure_logging, _load_cli_config
from hudbot.cli.options import LogFormat, build_arg_parser
from hudbot.cli.runtime import BotRuntime, build_analyzer
from hudbot.environment.browser import BrowserRuntime
from hudbot.interfaces.vision import Frame
from hudbot.vision.capture import FrameCapture

logger = logging.getLogger(__name__)


def run_command(args: argparse.Namespace) -> int:
    """Execute the `run` command."""
    if args.command != "run":
        raise ValueError(f"Unsupported command: {args.command}")

    manager = _load_cli_config(args)
    config = manager.config
    _apply_logging_config(config)
    logger.info(f"[BOOT] mode={config.bot.mode.value} url={config.bot.game_url}")

    browser = BrowserRuntime(
        headless=config.bot.headless,
        viewport_width=config.bot.viewport_width,
        viewport_height=config.bot.viewport_height,
    )
    browser.start()
    runtime: BotRuntime | None = None
    try:
        browser.open_game(config.bot.game_url)
        runtime = BotRuntime.create(
            manager,
            browser,
            browser.input_backend(),
            FrameCapture(browser.frame_source()),
            max_ticks=args.max_ticks,
        )
        runtime.run()
        return 0
    finally:
        if runtime is not None:
            runtime.shutdown()
        else:
            browser.stop()


def analyze_command(args: argparse.Namespace) -> int:
    """Execute the `analyze` command: print detections for a screenshot."""
    if args.command != "analyze":
        raise ValueError(f"Unsupported command: {args.command}")

    manager = _load_cli_config(args)
    config = manager.config
    _apply_logging_config(config)

    path = Path(args.image)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    with Image.open(path) as image:
        frame = Frame.from_image(image)

    analyzer = build_analyzer(config)
    analyzer.set_frame(frame)

    stats = analyzer.read_stats()
    print(f"Frame: {frame.width}x{frame.height}")
    print(f"Stats: {stats}")

    mobs = analyzer.identify_mobs(config.farming)
    print(f"Mobs: {len(mobs)}")
    for mob in mobs:
        print(f"  {mob.target_type.value:<16} {mob.bounds!r} attack={mob.attack_point!r}")

    marker = analyzer.identify_target_marker()
    if marker is None:
        print("Target marker: none")
    else:
        print(f"Target marker: {marker.bounds!r} distance={analyzer.marker_distance(marker)}")

    closest = analyzer.find_closest_mob(mobs, None, config.farming.max_target_distance)
    print(f"Closest mob: {closest!r}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint function."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    # Bootstrap logger before config loading
    _configure_logging(
        level=args.log_level or "INFO",
        log_format=args.log_format or LogFormat.READABLE.value,
    )

    try:
        if args.command == "run":
            return run_command(args)
        if args.command == "analyze":
            return analyze_command(args)
        raise ValueError(f"Unsupported command: {args.command}")
    except Exception as exc:
        logger.error(f"[BOOT] CLI execution failed: {exc}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
