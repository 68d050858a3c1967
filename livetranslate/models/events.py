"""Event models for the per-session provider event channel."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ProviderEventKind(Enum):
    """Signals a provider session can emit."""
    INTERIM = "interim"
    FINAL = "final"
    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"
    CANCELED = "canceled"
    STOP_DONE = "stop_done"
    STOP_FAILED = "stop_failed"


@dataclass
class ProviderEvent:
    """Provider signal tagged with the session that produced it."""
    session_id: str
    kind: ProviderEventKind
    source_text: str = ""
    translated_text: str = ""
    target_language: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
