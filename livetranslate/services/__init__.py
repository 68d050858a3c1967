"""Services layer for live-translate session control."""

from .session_controller import SessionController, Intent, DEFAULT_TOPIC

__all__ = [
    "SessionController",
    "Intent",
    "DEFAULT_TOPIC",
]
