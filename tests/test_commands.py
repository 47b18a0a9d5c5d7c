#!/usr/bin/env python3
"""
Slash Command and Configuration Tests.

Run all tests:
    pytest tests/test_commands.py -v
"""

import logging
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from position_indicator.commands import CommandHandler, HELP_LINES, PACKAGE_LOGGER
from position_indicator.config import (
    Config,
    IndicatorConfig,
    load_config,
    save_config,
    save_settings,
    clamp_poll_interval,
    clamp_size,
)
from position_indicator.engine import VisualState, create_engine
from position_indicator.probe import ScriptedProbe, ProbeReading
from position_indicator.sim import LIVE_TARGET


# ==============================================================================
# Configuration Tests
# ==============================================================================

class TestClamping:
    """Test setting clamps."""

    @pytest.mark.parametrize("value,expected", [
        (0.01, 0.05),
        (0.05, 0.05),
        (0.2, 0.2),
        (0.5, 0.5),
        (3.0, 0.5),
    ])
    def test_poll_interval(self, value, expected):
        assert clamp_poll_interval(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (8, 32),
        (64, 64),
        (100.7, 100),
        (500, 128),
    ])
    def test_size(self, value, expected):
        assert clamp_size(value) == expected


class TestLoadConfig:
    """Test YAML configuration loading."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))

        assert config.indicator == IndicatorConfig()
        assert config.indicator.poll_interval == 0.2
        assert config.indicator.size == 64
        assert config.indicator.pos_y == -150.0

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == Config()

    def test_out_of_range_values_clamped(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "indicator:\n"
            "  poll_interval: 2.0\n"
            "  size: 10\n"
            "  locked: true\n"
        )

        config = load_config(str(path))

        assert config.indicator.poll_interval == 0.5
        assert config.indicator.size == 32
        assert config.indicator.locked is True

    def test_sections_parsed(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "system:\n"
            "  tick_rate_hz: 30\n"
            "display:\n"
            "  canvas_size: [320, 240]\n"
            "simulation:\n"
            "  seed: 7\n"
            "  probe_error_rate: 0.25\n"
        )

        config = load_config(str(path))

        assert config.system.tick_rate_hz == 30
        assert config.display.canvas_size == (320, 240)
        assert config.simulation.seed == 7
        assert config.simulation.probe_error_rate == 0.25

    def test_saved_settings_load_back(self, tmp_path):
        config = Config()
        config.indicator.size = 96
        config.indicator.poll_interval = 0.1
        config.indicator.enabled = False

        path = save_config(config, str(tmp_path / "nested" / "config.yaml"))

        assert path.exists()
        assert load_config(str(path)) == config

    def test_settings_keep_other_sections(self, tmp_path):
        """Only the indicator section is rewritten."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "system:\n"
            "  log_file: custom.jsonl\n"
            "simulation:\n"
            "  probe_error_rate: 0.0\n"
            "indicator:\n"
            "  size: 64\n"
        )

        save_settings(IndicatorConfig(size=96, locked=True), str(path))

        data = yaml.safe_load(path.read_text())
        assert data["system"] == {"log_file": "custom.jsonl"}
        assert data["simulation"] == {"probe_error_rate": 0.0}
        assert data["indicator"]["size"] == 96
        assert data["indicator"]["locked"] is True

        config = load_config(str(path))
        assert config.indicator.size == 96
        assert config.system.log_file == "custom.jsonl"

    def test_settings_default_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        path = save_settings(IndicatorConfig(enabled=False))

        assert path.resolve() == (tmp_path / "config.yaml").resolve()
        data = yaml.safe_load(path.read_text())
        assert list(data) == ["indicator"]
        assert data["indicator"]["enabled"] is False

    def test_indicator_reset(self):
        indicator = IndicatorConfig(enabled=False, locked=True, size=100, poll_interval=0.4)
        indicator.reset()
        assert indicator == IndicatorConfig()


# ==============================================================================
# Command Handler Tests
# ==============================================================================

class TestCommandHandler:
    """Test /posi command handling."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = Config()
        self.probe = ScriptedProbe([ProbeReading(5.0)])
        self.engine = create_engine(self.config.indicator, self.probe)
        self.save = Mock()
        self.handler = CommandHandler(
            engine=self.engine,
            config=self.config,
            validity_provider=lambda: LIVE_TARGET,
            save=self.save,
        )

    def teardown_method(self):
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.NOTSET)

    def test_toggle(self):
        """Bare /posi flips the enabled flag and persists it."""
        assert self.handler.handle("") == ["PositionIndicator OFF"]
        assert self.config.indicator.enabled is False
        assert self.engine.enabled is False
        self.save.assert_called_once()

        assert self.handler.handle(None) == ["PositionIndicator ON"]
        assert self.engine.enabled is True
        assert self.engine.context.is_tracking is True
        assert self.engine.state == VisualState.OUT_OF_RANGE

    def test_debug_toggle(self):
        assert self.handler.handle("debug") == ["Debug ON"]
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG

        assert self.handler.handle("debug") == ["Debug OFF"]
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.NOTSET

    def test_status(self):
        lines = self.handler.handle("status")

        assert lines == [
            "State: in_melee=False is_behind=False state=hidden",
            "Tracking: False poll_interval=0.2s",
        ]

    def test_lock_unlock(self):
        assert self.handler.handle("lock") == ["Locked"]
        assert self.config.indicator.locked is True

        assert self.handler.handle("  UNLOCK ") == ["Unlocked"]
        assert self.config.indicator.locked is False
        assert self.save.call_count == 2

    def test_size_clamped(self):
        assert self.handler.handle("size 200") == ["Size: 128"]
        assert self.config.indicator.size == 128

        assert self.handler.handle("size 48") == ["Size: 48"]

    def test_size_non_numeric_ignored(self):
        assert self.handler.handle("size big") == []
        assert self.config.indicator.size == 64
        self.save.assert_not_called()

    def test_interval(self):
        assert self.handler.handle("interval 0.1") == ["Poll interval: 0.1s (10 Hz)"]
        assert self.config.indicator.poll_interval == 0.1
        assert self.engine.poll_interval_s == 0.1

    def test_interval_clamped(self):
        assert self.handler.handle("interval 2") == ["Poll interval: 0.5s (2 Hz)"]
        assert self.engine.poll_interval_s == 0.5

    def test_interval_usage(self):
        lines = self.handler.handle("interval fast")

        assert lines == ["Usage: /posi interval N (0.05-0.5 seconds)"]
        assert self.engine.poll_interval_s == 0.2

    def test_reset(self):
        self.handler.handle("")
        self.handler.handle("interval 0.05")
        self.handler.handle("size 100")

        assert self.handler.handle("reset") == ["Reset"]
        assert self.config.indicator == IndicatorConfig()
        assert self.engine.enabled is True
        assert self.engine.poll_interval_s == 0.2

    def test_unknown_prints_help(self):
        assert self.handler.handle("bogus") == HELP_LINES
        assert len(HELP_LINES) == 7

    def test_without_save_callback(self):
        handler = CommandHandler(self.engine, self.config, lambda: LIVE_TARGET)
        assert handler.handle("lock") == ["Locked"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
