"""CLI option models and parser helpers."""

from __future__ import annotations

import argparse
from enum import StrEnum

from hudbot.config.loader import BotMode


class LogFormat(StrEnum):
    """CLI log formatter mode."""

    READABLE = "readable"
    JSON = "json"


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=[fmt.value for fmt in LogFormat],
        help="Terminal log format",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(prog="hudbot", description="HUD-reading game bot")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Open the game client and run the bot")
    _add_common_options(run_parser)
    run_parser.add_argument(
        "--mode",
        type=str,
        default=None,
        choices=[mode.value for mode in BotMode],
        help="Override the configured bot mode",
    )
    run_parser.add_argument("--headless", action="store_true", help="Run browser in headless mode")
    run_parser.add_argument("--game-url", type=str, default=None, help="Game URL override")
    run_parser.add_argument(
        "--max-ticks",
        type=int,
        default=None,
        help="Stop after this many ticks (default: run until interrupted)",
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run detection on a saved screenshot",
    )
    _add_common_options(analyze_parser)
    analyze_parser.add_argument("image", type=str, help="Screenshot to analyze")

    return parser
