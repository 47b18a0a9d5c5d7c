#!/usr/bin/env python3
"""
Position Indicator - Main Entry Point

Shows whether the current target is out of melee range, in melee range and
facing the player, or in melee range with the player behind it.

The host loop below stands in for the game client: it supplies per-tick
elapsed time, raises target-lifecycle events from a simulated world and
renders the indicator.

Usage:
    # Headless run for 30 seconds, transitions logged to telemetry.jsonl
    python -m position_indicator.main --duration 30

    # With display window
    python -m position_indicator.main --display

    # Apply slash commands at startup
    python -m position_indicator.main --display --command "interval 0.1" --command "size 96"
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

import yaml

from position_indicator.config import Config, load_config, save_settings, clamp_poll_interval
from position_indicator.commands import CommandHandler
from position_indicator.display import IndicatorRenderer
from position_indicator.engine import ProximityEngine, TargetEvent, create_engine
from position_indicator.probe import create_probe
from position_indicator.sim import SimulatedWorld
from position_indicator.telemetry import (
    TelemetryLogger,
    TransitionRecord,
    FPSCounter,
    LatencyTracker,
)
from position_indicator.utils.timing import TickClock, FrameRateEnforcer, measure_time

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


# Display-mode keys mapped to /posi commands
KEY_COMMANDS = {
    ord('t'): "",
    ord('d'): "debug",
    ord('s'): "status",
    ord('l'): "lock",
    ord('u'): "unlock",
    ord('r'): "reset",
}


class PositionIndicatorApp:
    """
    Main application class for the position indicator.

    Coordinates all modules in the single-threaded tick loop:
    1. Clock tick (elapsed-time delta)
    2. World step and target-lifecycle events
    3. Engine tick (polling, classification, crossfade)
    4. Optional rendering and key commands
    """

    def __init__(
        self,
        config: Config,
        config_path: Optional[str] = None,
        display_enabled: bool = False,
        duration_s: float = 0.0,
        persist_settings: bool = True,
    ):
        """
        Initialize application.

        Args:
            config: System configuration
            config_path: Where indicator settings are persisted (default: ./config.yaml)
            display_enabled: Whether to open a display window
            duration_s: Stop after this much simulated time (0 = run until quit)
            persist_settings: Save settings changed by commands
        """
        self._config = config
        self._config_path = config_path
        self._display_enabled = display_enabled
        self._duration_s = duration_s
        self._persist_settings = persist_settings

        self._running = False

        # Module instances (initialized in setup)
        self._world: Optional[SimulatedWorld] = None
        self._engine: Optional[ProximityEngine] = None
        self._commands: Optional[CommandHandler] = None
        self._display: Optional[IndicatorRenderer] = None
        self._telemetry: Optional[TelemetryLogger] = None

        self._clock = TickClock()
        self._rate = FrameRateEnforcer(config.system.tick_rate_hz)
        self._fps_counter = FPSCounter(window_size=30)
        self._tick_latency = LatencyTracker()

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    @property
    def engine(self) -> Optional[ProximityEngine]:
        return self._engine

    @property
    def commands(self) -> Optional[CommandHandler]:
        return self._commands

    def setup(self) -> bool:
        """
        Initialize all modules.

        Returns:
            True if all critical modules initialized successfully
        """
        logger.info("=" * 60)
        logger.info("Position Indicator - Initializing")
        logger.info("=" * 60)

        try:
            self._world = SimulatedWorld(self._config.simulation)
            probe = create_probe(self._config.simulation, self._world)
        except ValueError as e:
            logger.critical(f"Simulation setup failed: {e}")
            return False

        self._setup_telemetry()

        self._engine = create_engine(
            self._config.indicator,
            probe,
            on_transition=self._record_transition,
        )

        self._commands = CommandHandler(
            engine=self._engine,
            config=self._config,
            validity_provider=lambda: self._world.validity,
            save=self._save_settings if self._persist_settings else None,
        )

        if self._display_enabled:
            self._setup_display()

        # Enter the world with a fresh target selected
        self._world.spawn()
        self._engine.handle_event(TargetEvent.WORLD_ENTERED, self._world.validity)

        logger.info("PositionIndicator loaded. /posi for help")
        return True

    def _setup_telemetry(self) -> None:
        """Initialize telemetry logger."""
        self._telemetry = TelemetryLogger(
            log_file=self._config.system.log_file,
            flush_interval=self._config.system.telemetry_flush_interval_s,
        )
        self._telemetry.start()

    def _setup_display(self) -> None:
        """Initialize display renderer."""
        self._display = IndicatorRenderer(self._config.display, self._config.indicator)
        if not self._display.initialize():
            logger.warning("Display initialization failed - running headless")
            self._display = None

    def run_command(self, message: str) -> List[str]:
        """Run one /posi command and log its output."""
        lines = self._commands.handle(message)
        for line in lines:
            logger.info(line)
        return lines

    def run(self) -> None:
        """Run the tick loop until quit, signal or duration elapsed."""
        logger.info("Starting tick loop...")
        self._running = True

        while self._running:
            frame_start = self._rate.start_frame()
            self._process_tick()
            self._rate.end_frame(frame_start)

            if self._duration_s > 0 and self._clock.elapsed_s >= self._duration_s:
                logger.info("Duration reached")
                self._running = False

    def _process_tick(self) -> None:
        """Process a single host tick."""
        delta_s = self._clock.tick()

        for event, validity in self._world.step(delta_s):
            self._engine.handle_event(event, validity)

        with measure_time() as timer:
            surface = self._engine.on_tick(delta_s)
        self._tick_latency.record(timer.elapsed_ms)
        fps = self._fps_counter.tick()

        if self._display is None:
            return

        status = self._engine.status()
        frame = self._display.render(
            surface,
            info={
                "state": status.state.display_name,
                "tracking": status.is_tracking,
                "poll_interval": status.poll_interval_s,
                "distance": self._world.melee_gap if self._world.alive else None,
                "fps": fps,
            },
        )
        self._display.show(frame)

        if self._display.should_quit():
            logger.info("Quit requested via display")
            self._running = False
        elif self._display.last_key in KEY_COMMANDS:
            self.run_command(KEY_COMMANDS[self._display.last_key])

    def _record_transition(self, old_state, new_state, context, interrupted) -> None:
        if self._telemetry is None:
            return
        self._telemetry.log(
            TransitionRecord.from_transition(
                tick=self._clock.ticks,
                old_state=old_state,
                new_state=new_state,
                context=context,
                interrupted=interrupted,
            )
        )

    def _save_settings(self) -> None:
        try:
            save_settings(self._config.indicator, self._config_path)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self._running = False

    def cleanup(self) -> None:
        """Release resources and log a summary."""
        if self._display is not None:
            self._display.cleanup()
            self._display = None

        if self._telemetry is not None:
            self._telemetry.stop()
            self._telemetry = None

        if self._engine is not None:
            logger.info(f"Engine metrics: {self._engine.metrics.to_dict()}")
            logger.info(f"Tick latency: {self._tick_latency.to_dict()}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Melee position indicator (simulated host)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    display_group = parser.add_argument_group("Display")
    display_mutex = display_group.add_mutually_exclusive_group()
    display_mutex.add_argument(
        "--display",
        action="store_true",
        help="Open the indicator window",
    )
    display_mutex.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window (default)",
    )

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration YAML file",
    )
    config_group.add_argument(
        "--no-save",
        action="store_true",
        help="Do not persist settings changed by commands",
    )
    config_group.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Path to telemetry log file (default: telemetry.jsonl)",
    )
    config_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config)",
    )
    config_group.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Poll interval in seconds, clamped to 0.05-0.5 (default: from config)",
    )

    run_group = parser.add_argument_group("Run")
    run_group.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Stop after N seconds (default: run until quit)",
    )
    run_group.add_argument(
        "--tick-rate",
        type=int,
        default=None,
        help="Host ticks per second (default: from config)",
    )
    run_group.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for simulated probe failures",
    )
    run_group.add_argument(
        "--error-rate",
        type=float,
        default=None,
        help="Probability that a simulated probe query fails",
    )
    run_group.add_argument(
        "--command",
        action="append",
        default=[],
        metavar="MSG",
        help="Run a /posi command at startup (repeatable)",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except yaml.YAMLError as e:
        logger.critical(f"Malformed configuration: {e}")
        return 1

    log_level = args.log_level or config.system.log_level
    logging.getLogger().setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Apply CLI overrides (runtime only, never persisted)
    if args.log_file:
        config.system.log_file = args.log_file
    if args.tick_rate is not None:
        if args.tick_rate <= 0:
            logger.error(f"Invalid tick rate: {args.tick_rate}")
            return 1
        config.system.tick_rate_hz = args.tick_rate
    if args.seed is not None:
        config.simulation.seed = args.seed
    if args.error_rate is not None:
        config.simulation.probe_error_rate = args.error_rate

    app = PositionIndicatorApp(
        config=config,
        config_path=args.config,
        display_enabled=args.display,
        duration_s=args.duration,
        persist_settings=not args.no_save,
    )

    try:
        if not app.setup():
            logger.critical("Setup failed - aborting")
            return 1

        if args.interval is not None:
            app.engine.set_poll_interval(clamp_poll_interval(args.interval))

        for message in args.command:
            app.run_command(message)

        app.run()
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1
    finally:
        app.cleanup()


if __name__ == "__main__":
    sys.exit(main())
