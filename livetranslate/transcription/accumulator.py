"""Transcript accumulator that merges interim and final events into display text.

Final events are appended to an append-only ``committed`` log. Interim events
only replace ``pending``, which is cleared whenever a final event lands. While
a session is active the rendered transcript is the committed text followed by
the pending text; otherwise only the committed text is shown (and may be
edited by the user).
"""

import logging
import threading

from ..models.transcription import TranscriptEvent, TranscriptState

logger = logging.getLogger(__name__)


def format_utterance(source_text: str, translated_text: str) -> str:
    """Render a recognized utterance with its translation."""
    return f"{source_text} (Translated: {translated_text})"


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


class TranscriptAccumulator:
    """Accumulates recognition results into committed and pending text."""

    def __init__(self, committed: str = ""):
        self._committed = committed
        self._pending = ""
        self.lock = threading.RLock()

    def on_interim(self, event: TranscriptEvent) -> None:
        if not event.source_text:
            logger.debug("Ignoring interim event with empty source text")
            return
        with self.lock:
            self._pending = format_utterance(event.source_text, event.translated_text)

    def on_final(self, event: TranscriptEvent) -> None:
        if not event.source_text:
            logger.debug("Ignoring final event with empty source text")
            return
        utterance = format_utterance(event.source_text, event.translated_text)
        with self.lock:
            self._committed = _join(self._committed, utterance)
            self._pending = ""
        logger.info(f"Committed: '{utterance}'")

    def on_event(self, event: TranscriptEvent) -> None:
        if event.is_final:
            self.on_final(event)
        else:
            self.on_interim(event)

    def render(self, active: bool = False) -> str:
        with self.lock:
            if active:
                return _join(self._committed, self._pending)
            return self._committed

    def edit(self, text: str) -> None:
        """Replace the committed transcript wholesale."""
        with self.lock:
            self._committed = text
            self._pending = ""

    def clear_pending(self) -> None:
        with self.lock:
            self._pending = ""

    @property
    def state(self) -> TranscriptState:
        with self.lock:
            return TranscriptState(committed=self._committed, pending=self._pending)
