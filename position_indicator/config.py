"""
Configuration management for the position indicator.

Handles loading, validation, clamping and saving of settings. Numeric
settings are clamped here, at the boundary, so the engine can assume valid
values.
"""

import logging
import yaml
from dataclasses import dataclass, field, asdict
from typing import Tuple, Optional, Any, Dict
from pathlib import Path

logger = logging.getLogger(__name__)


MIN_POLL_INTERVAL = 0.05
MAX_POLL_INTERVAL = 0.5
DEFAULT_POLL_INTERVAL = 0.2

MIN_SIZE = 32
MAX_SIZE = 128
DEFAULT_SIZE = 64

DEFAULT_POS_X = 0.0
DEFAULT_POS_Y = -150.0

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

# Settings are written next to where the indicator runs, never into the install
SETTINGS_FILENAME = "config.yaml"


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def clamp_poll_interval(seconds: float) -> float:
    """Clamp a poll interval to [0.05, 0.5] seconds."""
    return _clamp(float(seconds), MIN_POLL_INTERVAL, MAX_POLL_INTERVAL)


def clamp_size(size: float) -> int:
    """Clamp an indicator size to [32, 128] pixels."""
    return int(_clamp(size, MIN_SIZE, MAX_SIZE))


@dataclass
class IndicatorConfig:
    """User-facing indicator settings."""
    enabled: bool = True
    locked: bool = False
    size: int = DEFAULT_SIZE
    pos_x: float = DEFAULT_POS_X
    pos_y: float = DEFAULT_POS_Y
    poll_interval: float = DEFAULT_POLL_INTERVAL
    target: str = "target"

    def reset(self) -> None:
        """Restore default settings."""
        self.enabled = True
        self.locked = False
        self.size = DEFAULT_SIZE
        self.pos_x = DEFAULT_POS_X
        self.pos_y = DEFAULT_POS_Y
        self.poll_interval = DEFAULT_POLL_INTERVAL


@dataclass
class SystemConfig:
    """Top-level system configuration."""
    log_level: str = "INFO"
    log_file: str = "telemetry.jsonl"
    telemetry_flush_interval_s: float = 1.0
    tick_rate_hz: int = 60


@dataclass
class DisplayConfig:
    """Display window configuration."""
    window_name: str = "Position Indicator"
    canvas_size: Tuple[int, int] = (640, 480)
    texture_dir: str = "textures"
    font_scale: float = 0.5
    background_color: Tuple[int, int, int] = (40, 40, 40)


@dataclass
class SimulationConfig:
    """Simulated world used by the demo host loop."""
    orbit_radius: float = 6.0
    orbit_amplitude: float = 4.0
    orbit_period_s: float = 8.0
    melee_reach: float = 5.0
    facing_period_s: float = 3.0
    target_lifetime_s: float = 20.0
    respawn_delay_s: float = 2.0
    probe_error_rate: float = 0.0
    seed: Optional[int] = None


@dataclass
class Config:
    """Complete system configuration."""
    indicator: IndicatorConfig = field(default_factory=IndicatorConfig)
    system: SystemConfig = field(default_factory=SystemConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


def _parse_indicator(data: Dict[str, Any]) -> IndicatorConfig:
    """Parse indicator settings, clamping out-of-range values."""
    poll_interval = float(data.get("poll_interval", DEFAULT_POLL_INTERVAL))
    clamped_interval = clamp_poll_interval(poll_interval)
    if clamped_interval != poll_interval:
        logger.warning(
            f"poll_interval {poll_interval} out of range, clamped to {clamped_interval}"
        )

    size = data.get("size", DEFAULT_SIZE)
    clamped_size = clamp_size(size)
    if clamped_size != size:
        logger.warning(f"size {size} out of range, clamped to {clamped_size}")

    return IndicatorConfig(
        enabled=bool(data.get("enabled", True)),
        locked=bool(data.get("locked", False)),
        size=clamped_size,
        pos_x=float(data.get("pos_x", DEFAULT_POS_X)),
        pos_y=float(data.get("pos_y", DEFAULT_POS_Y)),
        poll_interval=clamped_interval,
        target=str(data.get("target", "target")),
    )


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default config.yaml

    Returns:
        Populated Config object

    Raises:
        yaml.YAMLError: If config file is malformed
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.info(f"No config at {path}, using defaults")
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    config = Config()

    if "indicator" in data:
        config.indicator = _parse_indicator(data["indicator"] or {})

    if "system" in data:
        sys_data = data["system"] or {}
        config.system = SystemConfig(
            log_level=sys_data.get("log_level", "INFO"),
            log_file=sys_data.get("log_file", "telemetry.jsonl"),
            telemetry_flush_interval_s=sys_data.get("telemetry_flush_interval_s", 1.0),
            tick_rate_hz=sys_data.get("tick_rate_hz", 60),
        )

    if "display" in data:
        disp_data = data["display"] or {}
        config.display = DisplayConfig(
            window_name=disp_data.get("window_name", "Position Indicator"),
            canvas_size=tuple(disp_data.get("canvas_size", [640, 480])),
            texture_dir=disp_data.get("texture_dir", "textures"),
            font_scale=disp_data.get("font_scale", 0.5),
            background_color=tuple(disp_data.get("background_color", [40, 40, 40])),
        )

    if "simulation" in data:
        sim_data = data["simulation"] or {}
        config.simulation = SimulationConfig(
            orbit_radius=sim_data.get("orbit_radius", 6.0),
            orbit_amplitude=sim_data.get("orbit_amplitude", 4.0),
            orbit_period_s=sim_data.get("orbit_period_s", 8.0),
            melee_reach=sim_data.get("melee_reach", 5.0),
            facing_period_s=sim_data.get("facing_period_s", 3.0),
            target_lifetime_s=sim_data.get("target_lifetime_s", 20.0),
            respawn_delay_s=sim_data.get("respawn_delay_s", 2.0),
            probe_error_rate=sim_data.get("probe_error_rate", 0.0),
            seed=sim_data.get("seed"),
        )

    return config


def save_config(config: Config, config_path: Optional[str] = None) -> Path:
    """
    Write configuration to a YAML file.

    Args:
        config: Configuration to save
        config_path: Destination. If None, uses config.yaml in the working directory

    Returns:
        Path written
    """
    path = _settings_path(config_path)

    data = asdict(config)
    # YAML has no tuples
    data["display"]["canvas_size"] = list(config.display.canvas_size)
    data["display"]["background_color"] = list(config.display.background_color)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    logger.debug(f"Saved configuration to {path}")
    return path


def save_settings(indicator: IndicatorConfig, config_path: Optional[str] = None) -> Path:
    """
    Persist the user-facing indicator settings.

    Only the indicator section is replaced; every other section already in
    the file is written back unchanged, so runtime overrides of system or
    simulation values never reach disk.

    Args:
        indicator: Settings to save
        config_path: Destination. If None, uses config.yaml in the working directory

    Returns:
        Path written
    """
    path = _settings_path(config_path)

    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

    data["indicator"] = asdict(indicator)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    logger.debug(f"Saved indicator settings to {path}")
    return path


def _settings_path(config_path: Optional[str]) -> Path:
    if config_path is not None:
        return Path(config_path)
    return Path.cwd() / SETTINGS_FILENAME
