"""Per-session event channel publishing provider signals via pubsub."""

import logging
from pubsub import pub

from ..models.events import ProviderEvent, ProviderEventKind
from .base import ProviderHandlers

logger = logging.getLogger(__name__)


class SessionEventChannel:
    """Publishes one provider session's signals, tagged with its session id.

    Every signal (including stop completion) goes through the same topic so
    the subscriber sees them in arrival order and can discard events from a
    session that is no longer current.
    """

    def __init__(self, topic: str, session_id: str, target_language: str):
        """Initialize session event channel.

        Args:
            topic: Pub/sub topic name for provider events
            session_id: Identity of the session that owns this channel
            target_language: Translation target attached to transcript events
        """
        self.topic = topic
        self.session_id = session_id
        self.target_language = target_language
        logger.debug(f"SessionEventChannel opened for {session_id} on topic: {topic}")

    def publish(self, kind: ProviderEventKind, **fields) -> None:
        event = ProviderEvent(session_id=self.session_id, kind=kind, **fields)
        pub.sendMessage(self.topic, event=event)

    def interim(self, source_text: str, translated_text: str) -> None:
        self.publish(ProviderEventKind.INTERIM,
                     source_text=source_text or "",
                     translated_text=translated_text or "",
                     target_language=self.target_language)

    def final(self, source_text: str, translated_text: str) -> None:
        self.publish(ProviderEventKind.FINAL,
                     source_text=source_text or "",
                     translated_text=translated_text or "",
                     target_language=self.target_language)

    def session_started(self) -> None:
        self.publish(ProviderEventKind.SESSION_STARTED)

    def session_stopped(self) -> None:
        self.publish(ProviderEventKind.SESSION_STOPPED)

    def canceled(self, error: str) -> None:
        self.publish(ProviderEventKind.CANCELED, error=error)

    def stop_done(self) -> None:
        self.publish(ProviderEventKind.STOP_DONE)

    def stop_failed(self, error: str) -> None:
        self.publish(ProviderEventKind.STOP_FAILED, error=error)

    def handlers(self) -> ProviderHandlers:
        """Get the callbacks a provider should invoke for this session."""
        return ProviderHandlers(
            on_interim=self.interim,
            on_final=self.final,
            on_session_started=self.session_started,
            on_session_stopped=self.session_stopped,
            on_canceled=self.canceled,
        )
