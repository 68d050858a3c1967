"""Transcript accumulation for live-translate."""

from .accumulator import TranscriptAccumulator, format_utterance
from ..models.transcription import TranscriptEvent, TranscriptEventKind, TranscriptState

__all__ = [
    "TranscriptAccumulator",
    "format_utterance",
    "TranscriptEvent",
    "TranscriptEventKind",
    "TranscriptState",
]
