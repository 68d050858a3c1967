"""Transcript-related data models."""

from dataclasses import dataclass
from enum import Enum


class TranscriptEventKind(Enum):
    INTERIM = "interim"
    FINAL = "final"


@dataclass
class TranscriptEvent:
    """Recognition result with its translation."""
    kind: TranscriptEventKind
    source_text: str
    translated_text: str = ""
    target_language: str = ""

    @property
    def is_final(self) -> bool:
        return self.kind is TranscriptEventKind.FINAL


@dataclass
class TranscriptState:
    """Snapshot of the accumulated transcript."""
    committed: str = ""
    pending: str = ""
