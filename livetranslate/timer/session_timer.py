"""Elapsed-time tracking for the active session."""

import logging
import threading
from typing import Callable, Optional

from .periodic import PeriodicTask

logger = logging.getLogger(__name__)


class SessionTimer:
    """Counts whole seconds while a session is active.

    The count is reset to 0 by ``start`` and forced back to 0 by ``stop``.
    Ticks only advance the count while running, so a tick racing a ``stop``
    cannot leave a non-zero value behind.
    """

    def __init__(self,
                 interval: float = 1.0,
                 task_factory: Callable[..., PeriodicTask] = PeriodicTask):
        self.interval = interval
        self.task_factory = task_factory
        self._seconds = 0
        self._running = False
        self._lock = threading.Lock()
        self._task: Optional[PeriodicTask] = None

    def start(self) -> None:
        self.stop()
        with self._lock:
            self._seconds = 0
            self._running = True
        self._task = self.task_factory(self.interval, self.tick, name="SessionTimer")
        self._task.start()
        logger.debug("Session timer started")

    def stop(self) -> None:
        task, self._task = self._task, None
        with self._lock:
            self._running = False
            self._seconds = 0
        if task is not None:
            task.cancel()
            logger.debug("Session timer stopped")

    def tick(self) -> None:
        with self._lock:
            if self._running:
                self._seconds += 1

    @property
    def elapsed_seconds(self) -> int:
        with self._lock:
            return self._seconds

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running
