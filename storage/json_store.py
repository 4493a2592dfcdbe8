"""JSON persistence for cumulative traffic totals."""
import json
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from config import INTERVALS, STORAGE, get_logger
from config.exceptions import StorageError
from monitor.stats import TrafficTotals

logger = get_logger(__name__)


class TotalsStore:
    """Persists TrafficTotals to traffic_totals.json.

    Saves are throttled: save() marks the totals dirty and only writes once
    SAVE_INTERVAL_SECONDS have passed since the last write. flush() writes
    immediately and is called on shutdown.
    """

    DEFAULT_DATA_DIR = Path.home() / STORAGE.DATA_DIR_NAME
    DEFAULT_DATA_FILE = STORAGE.TOTALS_FILE

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        save_interval: float = INTERVALS.SAVE_INTERVAL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.data_dir = data_dir or self.DEFAULT_DATA_DIR
        self.data_file = self.data_dir / self.DEFAULT_DATA_FILE
        self._lock = threading.Lock()
        self._clock = clock or time.time
        self._save_interval = save_interval
        self._last_save_time: float = 0
        self._dirty = False
        self._totals = TrafficTotals()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._load()
        logger.info(f"TotalsStore initialized at {self.data_file}")

    def _load(self) -> None:
        if self.data_file.exists():
            try:
                with open(self.data_file, encoding='utf-8') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._totals = TrafficTotals.from_dict(data)
                else:
                    logger.warning("Totals file is not a JSON object, starting fresh")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Could not load totals file: {e}")
                self._totals = TrafficTotals()
        else:
            logger.debug("No existing totals file, starting fresh")

        if self._totals.launch_date == 0:
            # First launch: totals count from now
            self._totals.launch_date = self._clock()
            self._dirty = True

    def load(self) -> TrafficTotals:
        """Return a copy of the stored totals."""
        with self._lock:
            return self._totals.copy()

    def _write(self, now: float) -> None:
        try:
            temp_file = self.data_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(self._totals.to_dict(), f, indent=2)
            temp_file.replace(self.data_file)
        except OSError as e:
            logger.error(f"Error saving totals: {e}")
            raise StorageError(f"Failed to save totals: {e}", {"path": str(self.data_file)})
        self._dirty = False
        self._last_save_time = now
        logger.debug("Totals saved")

    def save(self, totals: TrafficTotals, force: bool = False) -> bool:
        """Record new totals, writing them if the save interval has passed.

        Returns:
            True if the file was written.

        Raises:
            StorageError: The file could not be written.
        """
        with self._lock:
            self._totals = totals.copy()
            self._dirty = True
            now = self._clock()
            if not force and (now - self._last_save_time) < self._save_interval:
                return False
            self._write(now)
            return True

    def flush(self) -> None:
        """Write pending totals now. Call on application shutdown."""
        with self._lock:
            if self._dirty:
                self._write(self._clock())
