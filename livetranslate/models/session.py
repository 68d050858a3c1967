"""Session-related data models."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class SessionStatus(Enum):
    """Lifecycle states of a recognition session."""
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"
    STOPPING = "stopping"


class LanguageRole(Enum):
    """Which side of the translation a language tag configures."""
    SOURCE = "source"
    TARGET = "target"


@dataclass
class Token:
    """Authorization token bound to a service region."""
    auth_token: str
    region: str
    issued_at: datetime = field(default_factory=datetime.now)

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now()
        return (now - self.issued_at).total_seconds()


@dataclass
class SessionConfig:
    """Language configuration held by the session controller."""
    speech_language: str = "en-US"
    target_language: str = "es"


@dataclass
class Session:
    """One live recognition attempt and its provider handle."""
    session_id: str
    speech_language: str
    target_language: str
    auth_token: str
    region: str
    status: SessionStatus = SessionStatus.STARTING
    handle: Any = None
    _token_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def apply_token(self, token: Token) -> None:
        """Swap in a refreshed token without touching the provider connection."""
        with self._token_lock:
            self.auth_token = token.auth_token
            self.region = token.region
