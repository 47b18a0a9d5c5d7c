#!/usr/bin/env python3
"""
Display, Telemetry and Host Loop Tests.

Rendering is tested headless: frames are composed in memory and no window
is opened.

Run all tests:
    pytest tests/test_display_telemetry.py -v
"""

import json
import sys
from pathlib import Path

import numpy as np
import pytest
import yaml

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from position_indicator.config import Config, DisplayConfig, IndicatorConfig
from position_indicator.display import IndicatorRenderer, composite_layer, generate_texture
from position_indicator.engine import (
    VisualState,
    TrackingContext,
    RenderSurface,
    CrossfadeAnimator,
)
from position_indicator.telemetry import (
    TelemetryLogger,
    TransitionRecord,
    EngineMetrics,
    LatencyTracker,
)
from position_indicator.utils.timing import TickClock


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


# ==============================================================================
# Compositing Tests
# ==============================================================================

class TestCompositeLayer:
    """Test alpha blending of a texture onto the canvas."""

    def setup_method(self):
        """Set up test fixtures."""
        self.canvas = np.zeros((20, 20, 3), dtype=np.uint8)
        self.texture = np.zeros((10, 10, 4), dtype=np.uint8)
        self.texture[...] = (200, 100, 50, 255)

    def test_zero_alpha_leaves_canvas(self):
        composite_layer(self.canvas, self.texture, 0.0, (10, 10))
        assert not self.canvas.any()

    def test_full_alpha_copies_texture(self):
        composite_layer(self.canvas, self.texture, 1.0, (10, 10))

        assert tuple(self.canvas[10, 10]) == (200, 100, 50)
        assert tuple(self.canvas[0, 0]) == (0, 0, 0)

    def test_half_alpha_blends(self):
        composite_layer(self.canvas, self.texture, 0.5, (10, 10))
        assert tuple(self.canvas[10, 10]) == (100, 50, 25)

    def test_clipped_at_edges(self):
        composite_layer(self.canvas, self.texture, 1.0, (0, 0))

        assert tuple(self.canvas[0, 0]) == (200, 100, 50)
        assert tuple(self.canvas[10, 10]) == (0, 0, 0)

    def test_fully_off_canvas(self):
        composite_layer(self.canvas, self.texture, 1.0, (100, 100))
        assert not self.canvas.any()


class TestGenerateTexture:
    """Test generated fallback textures."""

    def test_shape_and_transparent_corner(self):
        texture = generate_texture((0, 0, 220), size=64)

        assert texture.shape == (64, 64, 4)
        assert texture.dtype == np.uint8
        assert texture[0, 0, 3] == 0
        assert tuple(texture[32, 32]) == (0, 0, 220, 255)


# ==============================================================================
# Renderer Tests
# ==============================================================================

class TestIndicatorRenderer:
    """Test IndicatorRenderer frame composition."""

    def setup_method(self):
        """Set up test fixtures."""
        self.display_config = DisplayConfig(texture_dir="does-not-exist")
        self.indicator = IndicatorConfig()
        self.renderer = IndicatorRenderer(self.display_config, self.indicator)

    def test_indicator_center(self):
        """Positive pos_y moves the indicator up the screen."""
        assert self.renderer.indicator_center() == (320, 390)

        self.indicator.pos_x = 10
        self.indicator.pos_y = 100
        assert self.renderer.indicator_center() == (330, 140)

    def test_hidden_surface_draws_background(self):
        frame = self.renderer.render(RenderSurface())

        assert frame.shape == (480, 640, 3)
        assert (frame == np.array(self.display_config.background_color, dtype=np.uint8)).all()

    def test_visible_state_drawn(self):
        self.indicator.locked = True
        animator = CrossfadeAnimator()
        animator.begin_transition(VisualState.IN_RANGE_BEHIND)
        surface = animator.on_tick(1.0)

        frame = self.renderer.render(surface)
        x, y = self.renderer.indicator_center()

        assert tuple(frame[y, x]) == (0, 200, 0)

    def test_texture_scaled_to_size(self):
        texture = self.renderer.texture(VisualState.OUT_OF_RANGE, 48)
        assert texture.shape == (48, 48, 4)

    def test_info_panel(self):
        frame = self.renderer.render(RenderSurface(), info={"state": "Hidden", "fps": 60.0})
        background = np.array(self.display_config.background_color, dtype=np.uint8)
        assert not (frame[5:40, 5:100] == background).all()

    def test_show_without_window_is_noop(self):
        frame = self.renderer.render(RenderSurface())
        self.renderer.show(frame)

        assert self.renderer.is_active is False
        assert self.renderer.should_quit() is False


# ==============================================================================
# Telemetry Tests
# ==============================================================================

class TestTransitionRecord:
    """Test TransitionRecord serialization."""

    def test_from_transition(self):
        context = TrackingContext(is_tracking=True, has_valid_target=True, in_melee=True)
        record = TransitionRecord.from_transition(
            tick=12,
            old_state=VisualState.OUT_OF_RANGE,
            new_state=VisualState.IN_RANGE_FRONT,
            context=context,
            interrupted=False,
        )

        data = json.loads(record.to_json())
        assert data["tick"] == 12
        assert data["from_state"] == "out"
        assert data["to_state"] == "in"
        assert data["in_melee"] is True
        assert data["is_behind"] is False


class TestTelemetryLogger:
    """Test JSON Lines telemetry logger."""

    def _record(self, tick=0):
        return TransitionRecord.from_transition(
            tick=tick,
            old_state=VisualState.HIDDEN,
            new_state=VisualState.OUT_OF_RANGE,
            context=TrackingContext(is_tracking=True, has_valid_target=True),
            interrupted=False,
        )

    def test_log_before_start_dropped(self, tmp_path):
        telemetry = TelemetryLogger(str(tmp_path / "t.jsonl"))

        assert telemetry.log(self._record()) is False
        assert telemetry.records_dropped == 1

    def test_buffered_until_stop(self, tmp_path):
        clock = FakeClock()
        log_file = tmp_path / "logs" / "t.jsonl"
        telemetry = TelemetryLogger(str(log_file), flush_interval=5.0, clock=clock)
        telemetry.start()

        telemetry.log(self._record(1))
        telemetry.log(self._record(2))
        assert telemetry.pending == 2
        assert not log_file.exists()

        telemetry.stop()

        lines = log_file.read_text().splitlines()
        assert [json.loads(line)["tick"] for line in lines] == [1, 2]
        assert telemetry.records_written == 2

    def test_flush_after_interval(self, tmp_path):
        clock = FakeClock()
        log_file = tmp_path / "t.jsonl"

        with TelemetryLogger(str(log_file), flush_interval=1.0, clock=clock) as telemetry:
            telemetry.log(self._record())
            clock.now = 1.5
            telemetry.log(self._record())

            assert telemetry.pending == 0
            assert telemetry.records_written == 2

    def test_flush_when_buffer_full(self, tmp_path):
        telemetry = TelemetryLogger(
            str(tmp_path / "t.jsonl"), flush_interval=60.0, max_buffer=3, clock=FakeClock()
        )
        telemetry.start()
        for tick in range(3):
            telemetry.log(self._record(tick))

        assert telemetry.records_written == 3
        telemetry.stop()

    def test_rotation(self, tmp_path):
        log_file = tmp_path / "t.jsonl"
        log_file.write_text("x" * 100)

        telemetry = TelemetryLogger(str(log_file), max_file_size=10, clock=FakeClock())
        telemetry.start()
        telemetry.log(self._record())
        telemetry.stop()

        rotated = [p for p in tmp_path.iterdir() if p.name != "t.jsonl"]
        assert len(rotated) == 1
        assert len(log_file.read_text().splitlines()) == 1


class TestMetrics:
    """Test engine counters and latency statistics."""

    def test_engine_metrics(self):
        metrics = EngineMetrics(polls=4, probe_errors=1)

        assert metrics.probe_error_rate == 0.25
        assert metrics.to_dict()["probe_error_rate"] == 0.25

        metrics.reset()
        assert metrics == EngineMetrics()

    def test_latency_tracker(self):
        tracker = LatencyTracker(window_size=10)
        for value in range(1, 21):
            tracker.record(float(value))

        assert tracker.count == 10
        assert tracker.mean == pytest.approx(15.5)
        assert tracker.max == 20.0
        assert tracker.p95 == 20.0


# ==============================================================================
# Host Loop Tests
# ==============================================================================

class TestTickClock:
    """Test tick delta source."""

    def test_first_tick_zero_then_capped(self):
        clock = FakeClock(10.0)
        tick_clock = TickClock(max_delta_s=0.25, time_source=clock)

        assert tick_clock.tick() == 0.0
        clock.now = 10.1
        assert tick_clock.tick() == pytest.approx(0.1)
        clock.now = 15.0
        assert tick_clock.tick() == 0.25
        assert tick_clock.ticks == 3
        assert tick_clock.elapsed_s == pytest.approx(0.35)


class TestApplication:
    """Test the headless application end to end."""

    def test_parse_args(self):
        from position_indicator.main import parse_args

        args = parse_args(["--duration", "2", "--command", "status", "--command", "lock"])

        assert args.duration == 2.0
        assert args.command == ["status", "lock"]
        assert args.display is False

    def test_headless_run(self, tmp_path):
        from position_indicator.main import PositionIndicatorApp

        config = Config()
        config.system.log_file = str(tmp_path / "telemetry.jsonl")
        config.system.tick_rate_hz = 200

        app = PositionIndicatorApp(config, duration_s=0.1, persist_settings=False)
        assert app.setup() is True
        assert app.engine.context.is_tracking is True

        assert app.run_command("interval 0.05") == ["Poll interval: 0.05s (20 Hz)"]

        app.run()
        app.cleanup()

        assert app.engine.metrics.ticks > 0
        assert app.engine.metrics.polls > 0
        assert (tmp_path / "telemetry.jsonl").exists()

    def test_cli_overrides_not_persisted(self, tmp_path):
        """Commands save indicator settings without the run-time overrides."""
        from position_indicator.main import main

        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "simulation:\n"
            "  probe_error_rate: 0.0\n"
        )

        code = main([
            "--config", str(config_path),
            "--duration", "0.05",
            "--tick-rate", "200",
            "--error-rate", "0.5",
            "--interval", "0.1",
            "--log-file", str(tmp_path / "run.jsonl"),
            "--command", "lock",
        ])

        assert code == 0
        data = yaml.safe_load(config_path.read_text())
        assert data["indicator"]["locked"] is True
        assert data["indicator"]["poll_interval"] == 0.2
        assert data["simulation"] == {"probe_error_rate": 0.0}
        assert "system" not in data


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
