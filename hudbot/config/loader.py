"""Configuration loader for hudbot.

Loads configuration from YAML files and environment variables.
Environment variables override YAML values using the HUDBOT_ prefix.
Nested keys use double underscores: HUDBOT_SUPPORT__INTERVAL_BETWEEN_BUFFS_MS=3000

Malformed field values fall back to their documented defaults with a
warning. A slot grid that is not exactly 9x10 is rejected at load time.
"""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, ClassVar

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from hudbot.models.base import LenientModel
from hudbot.models.slots import ActionSlot, SlotRef, check_grid_shape, default_slot_bars

logger = logging.getLogger(__name__)

Channel = Annotated[int, Field(ge=0, le=255)]
RGB = tuple[Channel, Channel, Channel]

DEFAULT_PASSIVE_COLOR: RGB = (234, 234, 149)
DEFAULT_AGGRESSIVE_COLOR: RGB = (179, 23, 23)


class BotMode(StrEnum):
    """Behavior the bot runs."""

    FARMING = "farming"
    SUPPORT = "support"


class BotSettings(LenientModel):
    """Tick loop and client settings."""

    mode: BotMode = Field(default=BotMode.SUPPORT)
    tick_rate_hz: float = Field(default=2.0, gt=0.0, le=60.0, description="Ticks per second")
    max_consecutive_errors: int = Field(default=5, ge=1, le=100)
    error_recovery_delay_ms: int = Field(default=1000, ge=0, le=60000)
    game_url: str = Field(default="https://universe.flyff.com/play")
    headless: bool = Field(default=False)
    viewport_width: int = Field(default=800, ge=640, le=3840)
    viewport_height: int = Field(default=600, ge=480, le=2160)


class HudConfig(LenientModel):
    """Pixel scanning settings for the fixed HUD layout."""

    ignore_area_top: int = Field(default=0, ge=0)
    ignore_area_bottom: int = Field(default=110, ge=0)
    queue_size: int = Field(default=4096, ge=1, le=1_000_000)
    max_workers: int | None = Field(default=None, ge=1, le=256)


class SlotGridConfig(LenientModel):
    """Base for mode configs that own a 9x10 slot grid."""

    _strict_fields: ClassVar[frozenset[str]] = frozenset({"slot_bars"})

    slot_bars: list[list[ActionSlot]] = Field(default_factory=default_slot_bars)

    @field_validator("slot_bars")
    @classmethod
    def _check_slot_bars_shape(cls, value: list[list[ActionSlot]]) -> list[list[ActionSlot]]:
        return check_grid_shape(value, "slot_bars")

    def slot(self, ref: SlotRef) -> ActionSlot:
        return self.slot_bars[ref.bar][ref.slot]


class SupportConfig(SlotGridConfig):
    """Support mode: follow and sustain a party member."""

    obstacle_avoidance_cooldown_ms: int = Field(default=0, ge=0)
    interval_between_buffs_ms: int = Field(default=2000, ge=0)
    marker_distance_threshold: int = Field(default=200, ge=0)


class FarmingConfig(SlotGridConfig):
    """Farming mode: find, engage and kill mobs."""

    passive_mobs_color: RGB = Field(default=DEFAULT_PASSIVE_COLOR)
    passive_tolerance: Channel = Field(default=5)
    aggressive_mobs_color: RGB = Field(default=DEFAULT_AGGRESSIVE_COLOR)
    aggressive_tolerance: Channel = Field(default=10)
    min_mobs_name_width: int = Field(default=11, ge=0)
    max_mobs_name_width: int = Field(default=180, ge=1)
    max_target_distance: int = Field(default=325, ge=1)
    prevent_already_attacked: bool = Field(default=True)
    mobs_timeout_ms: int = Field(default=0, ge=0, description="0 disables engagement timeout")
    avoid_duration_ms: int = Field(default=5000, ge=0)
    circle_pattern_rotation_duration_ms: int = Field(default=30, ge=0)
    obstacle_avoidance_cooldown_ms: int = Field(default=5000, ge=0)

    @field_validator("passive_mobs_color", "aggressive_mobs_color", mode="before")
    @classmethod
    def _fill_missing_channels(cls, value: Any, info: ValidationInfo) -> Any:
        """Channels left null take the default color's channel."""
        if isinstance(value, list | tuple) and len(value) == 3:
            default = (
                DEFAULT_PASSIVE_COLOR
                if info.field_name == "passive_mobs_color"
                else DEFAULT_AGGRESSIVE_COLOR
            )
            return tuple(d if v is None else v for v, d in zip(value, default))
        return value


class LoggingConfig(LenientModel):
    """Logging settings."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = Field(default="readable", pattern="^(readable|json)$")


class Config(BaseModel):
    """Root configuration model."""

    bot: BotSettings = Field(default_factory=BotSettings)
    hud: HudConfig = Field(default_factory=HudConfig)
    farming: FarmingConfig = Field(default_factory=FarmingConfig)
    support: SupportConfig = Field(default_factory=SupportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _get_env_value(key: str) -> str | None:
    """Get environment variable with HUDBOT_ prefix."""
    env_key = f"HUDBOT_{key.upper()}"
    return os.environ.get(env_key)


def _apply_env_overrides(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Apply environment variable overrides to config data.

    Only keys present in the data (or in the defaults) are overridden.
    Example: HUDBOT_BOT__TICK_RATE_HZ=5 sets bot.tick_rate_hz to 5
    """
    result = data.copy()

    for key, value in result.items():
        env_key = f"{prefix}__{key}" if prefix else key

        if isinstance(value, dict):
            result[key] = _apply_env_overrides(value, env_key)
        elif isinstance(value, list):
            continue
        else:
            env_value = _get_env_value(env_key)
            if env_value is not None:
                if isinstance(value, bool):
                    result[key] = env_value.lower() in ("true", "1", "yes")
                elif isinstance(value, int):
                    result[key] = int(env_value)
                elif isinstance(value, float):
                    result[key] = float(env_value)
                else:
                    result[key] = env_value

    return result


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Deep merge updates into base dict."""
    result = base.copy()

    for key, value in updates.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def default_config_path() -> Path:
    project_root = Path(__file__).parent.parent.parent
    return project_root / "configs" / "default.yaml"


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses
            configs/default.yaml, or built-in defaults if that is missing.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        ValidationError: If a slot grid is not 9x10.
    """
    if config_path is None:
        path = default_config_path()
        if not path.exists():
            logger.info(f"No config at {path}, using built-in defaults")
            path = None
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

    data: dict[str, Any] = {}
    if path is not None:
        with open(path) as f:
            data = yaml.safe_load(f) or {}

    # Defaults are merged in first so every field can be overridden from env
    # (mode="json" keeps enum values as plain strings)
    defaults = Config().model_dump(
        mode="json",
        exclude={"farming": {"slot_bars"}, "support": {"slot_bars"}},
    )
    data = _deep_merge(defaults, data)
    data = _apply_env_overrides(data)

    return Config.model_validate(data)


def get_default_config() -> Config:
    """Get default configuration without loading from file."""
    return Config()


# Type for config change callbacks
ConfigCallback = Callable[[Config], None]


class ConfigManager:
    """Holds the live Config and tells subscribers when it is replaced.

    Example:
        >>> manager = ConfigManager(load_config())
        >>> manager.subscribe(lambda c: print(c.bot.mode))
        >>> manager.update({"bot": {"mode": "farming"}})
        farming
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._subscribers: list[ConfigCallback] = []

    @property
    def config(self) -> Config:
        return self._config

    def subscribe(self, callback: ConfigCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ConfigCallback) -> None:
        with contextlib.suppress(ValueError):
            self._subscribers.remove(callback)

    def _publish(self, config: Config) -> Config:
        self._config = config
        for callback in list(self._subscribers):
            try:
                callback(config)
            except Exception as e:
                logger.warning(f"Config subscriber {callback!r} failed: {e}")
        return config

    def update(self, updates: dict[str, Any]) -> Config:
        """Merge nested ``updates`` into the live config and publish it.

        Example: ``{"support": {"interval_between_buffs_ms": 3000}}``.

        Raises:
            ValidationError: If the result has a slot grid that is not 9x10.
                The live config is left untouched.
        """
        merged = _deep_merge(self._config.model_dump(), updates)
        return self._publish(Config.model_validate(merged))

    def reset(self) -> Config:
        """Go back to the built-in defaults."""
        return self._publish(Config())
