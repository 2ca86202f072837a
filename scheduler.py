"""
Recurring background refresh of the map data.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Run a refresh task once at start and then every interval seconds.

    A tick that fires while the previous one is still running is skipped.
    stop() sets the cancellation event and waits for the worker to exit.
    """

    def __init__(self, task: Callable[[], object], interval_seconds: float):
        self.task = task
        self.interval_seconds = max(1.0, float(interval_seconds))
        self._running = threading.Lock()
        self._stop_event = threading.Event()
        self._worker = threading.Thread(target=self._run_loop, daemon=True, name="map-refresh")

    def start(self):
        self.run_once()
        self._worker.start()

    def stop(self, timeout: float = 5.0):
        self._stop_event.set()
        if self._worker.is_alive():
            self._worker.join(timeout=timeout)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run_once(self) -> bool:
        """
        Run one tick unless another is in progress.

        Returns:
            False if the tick was skipped
        """
        if not self._running.acquire(blocking=False):
            logger.info("Previous refresh still running, skipping tick")
            return False
        try:
            self.task()
        except Exception as e:
            logger.error(f"Refresh failed: {e}", exc_info=True)
        finally:
            self._running.release()
        return True

    def _run_loop(self):
        while not self._stop_event.wait(self.interval_seconds):
            self.run_once()
