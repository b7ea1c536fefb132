"""Configuration management for hudbot."""

from hudbot.config.loader import (
    BotMode,
    Config,
    ConfigManager,
    FarmingConfig,
    SupportConfig,
    load_config,
)

__all__ = [
    "BotMode",
    "Config",
    "ConfigManager",
    "FarmingConfig",
    "SupportConfig",
    "load_config",
]
