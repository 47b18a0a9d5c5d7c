"""
JSON Lines telemetry logger.

Provides append-only logging of indicator state transitions for offline
analysis. Writes happen on the caller's thread: records are buffered and
flushed once the flush interval has passed, so the render loop never blocks
on disk for more than one small batch.
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TransitionRecord:
    """
    Telemetry record for a single accepted state transition.
    """
    # ISO 8601 timestamp
    timestamp: str

    # Host tick at which the transition happened
    tick: int

    from_state: str
    to_state: str

    # Tracking flags after the transition was requested
    is_tracking: bool
    in_melee: bool
    is_behind: bool

    # True when the transition cut into a running fade
    interrupted: bool

    def to_json(self) -> str:
        """Serialize to compact JSON string."""
        return json.dumps(asdict(self), separators=(',', ':'))

    @classmethod
    def from_transition(
        cls,
        tick: int,
        old_state,
        new_state,
        context,
        interrupted: bool,
    ) -> "TransitionRecord":
        """Create record from an engine transition callback."""
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(),
            tick=tick,
            from_state=old_state.value,
            to_state=new_state.value,
            is_tracking=context.is_tracking,
            in_melee=context.in_melee,
            is_behind=context.is_behind,
            interrupted=interrupted,
        )


class TelemetryLogger:
    """
    Append-only JSON Lines logger for transition records.

    Features:
    - Buffered writes flushed on an interval or when the buffer fills
    - Log rotation at configurable size
    - Records counted as dropped when the disk write fails

    Usage:
        telemetry = TelemetryLogger("telemetry.jsonl")
        telemetry.start()

        # From the engine's transition callback:
        telemetry.log(record)

        # On shutdown:
        telemetry.stop()
    """

    DEFAULT_FLUSH_INTERVAL = 1.0  # seconds
    DEFAULT_MAX_BUFFER = 100  # records
    DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

    def __init__(
        self,
        log_file: str,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        max_buffer: int = DEFAULT_MAX_BUFFER,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize telemetry logger.

        Args:
            log_file: Path to output .jsonl file
            flush_interval: Seconds between flushes
            max_buffer: Records buffered before a forced flush
            max_file_size: Maximum file size before rotation
            clock: Monotonic time source
        """
        self._log_file = Path(log_file)
        self._flush_interval = flush_interval
        self._max_buffer = max_buffer
        self._max_file_size = max_file_size
        self._clock = clock

        self._buffer: List[str] = []
        self._last_flush = 0.0
        self._file_handle = None
        self._running = False

        self._records_written = 0
        self._records_dropped = 0

    def start(self) -> None:
        """Open the logger for writing."""
        if self._running:
            return
        self._running = True
        self._last_flush = self._clock()
        logger.info(f"Telemetry logger started: {self._log_file}")

    def stop(self) -> None:
        """Flush remaining records and close the file."""
        if not self._running:
            return
        self.flush()
        self._running = False

        if self._file_handle is not None:
            self._file_handle.close()
            self._file_handle = None

        logger.info(
            f"Telemetry logger stopped. "
            f"Written: {self._records_written}, Dropped: {self._records_dropped}"
        )

    def log(self, record: TransitionRecord) -> bool:
        """
        Buffer a record, flushing if due.

        Args:
            record: Record to log

        Returns:
            True if the record was accepted
        """
        if not self._running:
            self._records_dropped += 1
            return False

        self._buffer.append(record.to_json())

        now = self._clock()
        if len(self._buffer) >= self._max_buffer or now - self._last_flush >= self._flush_interval:
            self.flush()
        return True

    def flush(self) -> None:
        """Write buffered records to file."""
        self._last_flush = self._clock()
        if not self._buffer:
            return

        buffer, self._buffer = self._buffer, []
        try:
            self._check_rotation()

            if self._file_handle is None:
                self._log_file.parent.mkdir(parents=True, exist_ok=True)
                self._file_handle = open(self._log_file, "a", encoding="utf-8")

            for line in buffer:
                self._file_handle.write(line + "\n")

            self._file_handle.flush()
            self._records_written += len(buffer)

        except IOError as e:
            logger.error(f"Telemetry write error: {e}")
            self._records_dropped += len(buffer)

    def _check_rotation(self) -> None:
        """Check if log file needs rotation."""
        if not self._log_file.exists():
            return

        if self._log_file.stat().st_size < self._max_file_size:
            return

        if self._file_handle is not None:
            self._file_handle.close()
            self._file_handle = None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        rotated_name = self._log_file.with_suffix(f".{timestamp}.jsonl")

        try:
            self._log_file.rename(rotated_name)
            logger.info(f"Rotated telemetry log to: {rotated_name}")
        except OSError as e:
            logger.error(f"Log rotation failed: {e}")

    @property
    def records_written(self) -> int:
        return self._records_written

    @property
    def records_dropped(self) -> int:
        return self._records_dropped

    @property
    def pending(self) -> int:
        """Records buffered but not yet written."""
        return len(self._buffer)

    def __enter__(self) -> "TelemetryLogger":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
