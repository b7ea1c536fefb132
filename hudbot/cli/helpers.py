"""Shared helper utilities for CLI commands."""

from __future__ import annotations

import argparse
import json
import logging

from hudbot.cli.options import LogFormat
from hudbot.config.loader import Config, ConfigManager, load_config

logger = logging.getLogger(__name__)


class _JSONLogFormatter(logging.Formatter):
    """Compact JSON formatter for machine-readable logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=True)


def _configure_logging(
    level: str = "INFO",
    log_format: str = LogFormat.READABLE.value,
) -> None:
    """Configure process-wide logging with a single hudbot stream handler."""
    normalized_level = level.upper()
    resolved_level = getattr(logging, normalized_level, logging.INFO)
    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, "_hudbot_handler", False)]

    handler = logging.StreamHandler()
    handler._hudbot_handler = True  # type: ignore[attr-defined]
    if log_format == LogFormat.JSON.value:
        formatter: logging.Formatter = _JSONLogFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(resolved_level)

    # Pillow logs every decoded PNG chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _load_cli_config(args: argparse.Namespace) -> ConfigManager:
    """Load config and apply command-line overrides."""
    manager = ConfigManager(load_config(getattr(args, "config", None)))

    updates: dict[str, dict[str, object]] = {"bot": {}, "logging": {}}
    if getattr(args, "mode", None):
        updates["bot"]["mode"] = args.mode
    if getattr(args, "headless", False):
        updates["bot"]["headless"] = True
    if getattr(args, "game_url", None):
        updates["bot"]["game_url"] = args.game_url
    if getattr(args, "log_level", None):
        updates["logging"]["level"] = args.log_level
    if getattr(args, "log_format", None):
        updates["logging"]["format"] = args.log_format

    if any(updates.values()):
        manager.update(updates)
    return manager


def _apply_logging_config(config: Config) -> None:
    _configure_logging(level=config.logging.level, log_format=config.logging.format)
