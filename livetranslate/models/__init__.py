"""Data models for the live-translate application."""

from .session import SessionStatus, LanguageRole, Token, SessionConfig, Session
from .events import ProviderEventKind, ProviderEvent
from .transcription import TranscriptEventKind, TranscriptEvent, TranscriptState

__all__ = [
    "SessionStatus",
    "LanguageRole",
    "Token",
    "SessionConfig",
    "Session",
    "ProviderEventKind",
    "ProviderEvent",
    "TranscriptEventKind",
    "TranscriptEvent",
    "TranscriptState",
]
