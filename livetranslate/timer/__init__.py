"""Periodic tasks and the session elapsed-time counter."""

from .periodic import PeriodicTask
from .session_timer import SessionTimer

__all__ = [
    "PeriodicTask",
    "SessionTimer",
]
