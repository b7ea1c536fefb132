"""Tests for configuration loading and management."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from hudbot.config import Config, ConfigManager, load_config
from hudbot.config.loader import BotMode, FarmingConfig
from hudbot.models.slots import SlotRef, SlotType


def _write(tmp_path: Path, data: dict) -> Path:
    config_file = tmp_path / "test.yaml"
    with open(config_file, "w") as f:
        yaml.dump(data, f)
    return config_file


def _grid(bars: int = 9, slots: int = 10) -> list[list[dict]]:
    return [[{"slot_type": "unused"} for _ in range(slots)] for _ in range(bars)]


class TestConfigLoader:
    """Tests for load_config function."""

    def test_load_default_config(self) -> None:
        """Test loading the default configuration file."""
        config = load_config()

        assert config.bot.mode == BotMode.SUPPORT
        assert config.hud.ignore_area_bottom == 110
        assert config.farming.passive_mobs_color == (234, 234, 149)
        assert config.farming.max_target_distance == 325
        assert config.support.interval_between_buffs_ms == 2000
        assert config.logging.level == "INFO"

    def test_default_grid_is_unused(self) -> None:
        """Without configured slots every cell is unused."""
        config = load_config()

        assert len(config.farming.slot_bars) == 9
        assert all(len(bar) == 10 for bar in config.farming.slot_bars)
        assert config.support.slot(SlotRef(8, 9)).slot_type == SlotType.UNUSED

    def test_load_custom_config_file(self, tmp_path: Path) -> None:
        """Test loading from a custom config file path."""
        grid = _grid()
        grid[0][2] = {"slot_type": "pill", "threshold": 60, "cooldown_ms": 1500}
        config_file = _write(
            tmp_path,
            {"bot": {"mode": "farming"}, "farming": {"mobs_timeout_ms": 8000, "slot_bars": grid}},
        )

        config = load_config(config_file)

        assert config.bot.mode == BotMode.FARMING
        assert config.farming.mobs_timeout_ms == 8000
        slot = config.farming.slot(SlotRef(0, 2))
        assert slot.slot_type == SlotType.PILL
        assert slot.threshold == 60
        assert slot.effective_cooldown_ms == 1500
        # Default values still apply for unspecified fields
        assert config.farming.avoid_duration_ms == 5000

    def test_missing_config_file_raises_error(self) -> None:
        """Test that missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/path/config.yaml")

    def test_empty_config_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test that empty config file uses all defaults."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        config = load_config(config_file)

        assert config == Config()


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_env_override_nested_value(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment override for nested config values."""
        config_file = _write(tmp_path, {"support": {"marker_distance_threshold": 150}})
        monkeypatch.setenv("HUDBOT_SUPPORT__INTERVAL_BETWEEN_BUFFS_MS", "3000")

        config = load_config(config_file)

        assert config.support.interval_between_buffs_ms == 3000
        assert config.support.marker_distance_threshold == 150  # unchanged

    def test_env_override_boolean_value(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment override for boolean values."""
        config_file = _write(tmp_path, {"farming": {"prevent_already_attacked": True}})
        monkeypatch.setenv("HUDBOT_FARMING__PREVENT_ALREADY_ATTACKED", "false")

        config = load_config(config_file)

        assert config.farming.prevent_already_attacked is False

    def test_env_override_enum_value(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment override for the bot mode."""
        monkeypatch.setenv("HUDBOT_BOT__MODE", "farming")

        config = load_config(_write(tmp_path, {}))

        assert config.bot.mode == BotMode.FARMING


class TestConfigValidation:
    """Tests for configuration validation."""

    def test_invalid_scalar_falls_back_to_default(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Malformed values use the default and log a warning."""
        config_file = _write(
            tmp_path,
            {"bot": {"tick_rate_hz": 500}, "support": {"interval_between_buffs_ms": "soon"}},
        )

        with caplog.at_level(logging.WARNING):
            config = load_config(config_file)

        assert config.bot.tick_rate_hz == 2.0
        assert config.support.interval_between_buffs_ms == 2000
        assert "tick_rate_hz" in caplog.text

    def test_invalid_log_level_falls_back(self, tmp_path: Path) -> None:
        """An unknown log level falls back to INFO."""
        config = load_config(_write(tmp_path, {"logging": {"level": "INVALID"}}))
        assert config.logging.level == "INFO"

    def test_invalid_slot_field_falls_back(self, tmp_path: Path) -> None:
        """A bad slot threshold falls back to unset."""
        grid = _grid()
        grid[1][1] = {"slot_type": "food", "threshold": 250}
        config = load_config(_write(tmp_path, {"support": {"slot_bars": grid}}))

        slot = config.support.slot(SlotRef(1, 1))
        assert slot.slot_type == SlotType.FOOD
        assert slot.threshold is None

    @pytest.mark.parametrize(("bars", "slots"), [(8, 10), (9, 9), (10, 10)])
    def test_grid_shape_mismatch_rejected(self, tmp_path: Path, bars: int, slots: int) -> None:
        """A slot grid that is not 9x10 fails at load time."""
        config_file = _write(tmp_path, {"farming": {"slot_bars": _grid(bars, slots)}})

        with pytest.raises(ValidationError):
            load_config(config_file)

    def test_color_missing_channels_use_default(self) -> None:
        """Null color channels take the default color's channel."""
        config = FarmingConfig.model_validate({"passive_mobs_color": [None, 10, None]})
        assert config.passive_mobs_color == (234, 10, 149)


class TestConfigManager:
    """Tests for ConfigManager runtime updates."""

    def test_update_merges_and_notifies(self) -> None:
        """Updates merge into the config and reach subscribers."""
        manager = ConfigManager(Config())
        seen: list[Config] = []
        manager.subscribe(seen.append)

        config = manager.update({"support": {"interval_between_buffs_ms": 3000}})

        assert config.support.interval_between_buffs_ms == 3000
        assert config.support.marker_distance_threshold == 200
        assert seen == [config]

    def test_unsubscribe(self) -> None:
        """Unsubscribed callbacks are not called."""
        manager = ConfigManager(Config())
        seen: list[Config] = []
        manager.subscribe(seen.append)
        manager.unsubscribe(seen.append)

        manager.update({"bot": {"mode": "farming"}})

        assert seen == []

    def test_subscriber_error_does_not_block_update(self) -> None:
        """A failing subscriber is logged, not raised."""

        def broken(_config: Config) -> None:
            raise RuntimeError("boom")

        manager = ConfigManager(Config())
        manager.subscribe(broken)

        assert manager.update({"bot": {"mode": "farming"}}).bot.mode == BotMode.FARMING

    def test_bad_grid_update_rejected(self) -> None:
        """An invalid grid update raises and keeps the old config."""
        manager = ConfigManager(Config())

        with pytest.raises(ValidationError):
            manager.update({"farming": {"slot_bars": _grid(3, 10)}})

        assert len(manager.config.farming.slot_bars) == 9

    def test_reset(self) -> None:
        """reset() restores defaults."""
        manager = ConfigManager(Config())
        manager.update({"bot": {"mode": "farming"}})

        assert manager.reset().bot.mode == BotMode.SUPPORT
