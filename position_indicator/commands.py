"""
Slash-command handling for the indicator (/posi).

Commands:
    /posi               toggle on/off
    /posi debug         toggle debug output
    /posi status        show current state
    /posi lock|unlock   lock frame position
    /posi size N        set icon size (32-128)
    /posi interval N    set poll interval (0.05-0.5s)
    /posi reset         reset to defaults
"""

import logging
from typing import Callable, List, Optional

from position_indicator.config import Config, clamp_poll_interval, clamp_size
from position_indicator.engine.indicator import ProximityEngine
from position_indicator.engine.types import TargetValidity


logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "position_indicator"

HELP_LINES = [
    "/posi - toggle on/off",
    "/posi debug - toggle debug output",
    "/posi status - show current state",
    "/posi lock/unlock - lock frame position",
    "/posi size N - set icon size (32-128)",
    "/posi interval N - set poll interval (0.05-0.5s)",
    "/posi reset - reset to defaults",
]


def _parse_number(text: str) -> Optional[float]:
    try:
        return float(text.strip())
    except ValueError:
        return None


class CommandHandler:
    """
    Parses /posi messages and applies them to the engine and settings.

    Every handled command returns the chat lines to print. Settings that
    change are persisted through the save callback.

    Usage:
        handler = CommandHandler(engine, config, lambda: world.validity, save)
        for line in handler.handle("interval 0.1"):
            print(line)
    """

    def __init__(
        self,
        engine: ProximityEngine,
        config: Config,
        validity_provider: Callable[[], TargetValidity],
        save: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize command handler.

        Args:
            engine: Engine to control
            config: Live configuration, updated in place
            validity_provider: Returns the current target validity
            save: Persists the configuration
        """
        self._engine = engine
        self._config = config
        self._validity_provider = validity_provider
        self._save = save
        self._debug = False

    @property
    def debug(self) -> bool:
        return self._debug

    def handle(self, message: Optional[str]) -> List[str]:
        """
        Handle one /posi message.

        Args:
            message: Text after the slash command (may be empty or None)

        Returns:
            Lines to print
        """
        msg = (message or "").strip().lower()
        logger.debug(f"Command: '{msg}'")

        if msg == "":
            return self._toggle()
        if msg == "debug":
            return self._toggle_debug()
        if msg == "status":
            return self._status()
        if msg in ("lock", "unlock"):
            return self._set_locked(msg == "lock")
        if msg.startswith("size "):
            return self._set_size(msg[5:])
        if msg.startswith("interval "):
            return self._set_interval(msg[9:])
        if msg == "reset":
            return self._reset()
        return list(HELP_LINES)

    def _toggle(self) -> List[str]:
        indicator = self._config.indicator
        indicator.enabled = not indicator.enabled
        self._persist()
        self._engine.set_enabled(indicator.enabled, self._validity_provider())
        return [f"PositionIndicator {'ON' if indicator.enabled else 'OFF'}"]

    def _toggle_debug(self) -> List[str]:
        self._debug = not self._debug
        logging.getLogger(PACKAGE_LOGGER).setLevel(
            logging.DEBUG if self._debug else logging.NOTSET
        )
        return [f"Debug {'ON' if self._debug else 'OFF'}"]

    def _status(self) -> List[str]:
        status = self._engine.status()
        return [
            f"State: in_melee={status.in_melee} is_behind={status.is_behind} "
            f"state={status.state.value}",
            f"Tracking: {status.is_tracking} poll_interval={status.poll_interval_s}s",
        ]

    def _set_locked(self, locked: bool) -> List[str]:
        self._config.indicator.locked = locked
        self._persist()
        return ["Locked" if locked else "Unlocked"]

    def _set_size(self, argument: str) -> List[str]:
        value = _parse_number(argument)
        if value is None:
            return []
        size = clamp_size(value)
        self._config.indicator.size = size
        self._persist()
        return [f"Size: {size}"]

    def _set_interval(self, argument: str) -> List[str]:
        value = _parse_number(argument)
        if value is None:
            return ["Usage: /posi interval N (0.05-0.5 seconds)"]
        interval = clamp_poll_interval(value)
        self._config.indicator.poll_interval = interval
        self._engine.set_poll_interval(interval)
        self._persist()
        return [f"Poll interval: {interval:g}s ({1.0 / interval:g} Hz)"]

    def _reset(self) -> List[str]:
        self._config.indicator.reset()
        self._engine.set_enabled(True)
        self._engine.set_poll_interval(self._config.indicator.poll_interval)
        self._persist()
        return ["Reset"]

    def _persist(self) -> None:
        if self._save is not None:
            self._save()
