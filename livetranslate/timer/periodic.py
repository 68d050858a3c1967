"""Cancelable background task that fires a callback on a fixed interval."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs ``callback`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "PeriodicTask",
                 first_delay: Optional[float] = None):
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.interval = interval
        # Delay before the first tick; later ticks use interval
        self.first_delay = interval if first_delay is None else max(0.0, first_delay)
        self.callback = callback
        self.name = name
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.thread is not None:
            logger.warning(f"{self.name} already started")
            return
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.name = self.name
        self.thread.start()

    def cancel(self) -> None:
        """Stop future ticks without waiting for a tick already in progress."""
        self.stop_event.set()

    @property
    def is_cancelled(self) -> bool:
        return self.stop_event.is_set()

    def _run(self) -> None:
        delay = self.first_delay
        # wait() returns True once cancelled, ending the loop
        while not self.stop_event.wait(delay):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Unhandled exception in {self.name} callback: {e}", exc_info=True)
            delay = self.interval
