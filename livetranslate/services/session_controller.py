"""Session controller that owns the recognizer lifecycle.

States run ``IDLE -> STARTING -> ACTIVE -> STOPPING -> IDLE``. At most one
provider handle is live at any time: a new recognizer is only constructed
after the previous one has been closed. Requests that arrive while a
transition is in flight are held as a single pending intent and drained when
the transition completes, so a language change while active becomes a
sequenced stop-then-start rather than two overlapping sessions.

Provider signals arrive on a pubsub topic tagged with the session id that
produced them; anything tagged with an id other than the current session's is
dropped.
"""

import logging
import threading
import uuid
from dataclasses import replace
from enum import Enum
from functools import partial
from typing import Callable, Optional

from pubsub import pub

from ..auth.token_manager import TokenManager
from ..errors import AuthError, InvalidTransitionError, LiveTranslateError, ProviderError
from ..languages import validate_language_tag
from ..models.events import ProviderEvent, ProviderEventKind
from ..models.session import LanguageRole, Session, SessionConfig, SessionStatus
from ..models.transcription import TranscriptEvent, TranscriptEventKind
from ..providers.base import AbstractTranslationProvider, ProviderConfig
from ..providers.channel import SessionEventChannel
from ..timer.session_timer import SessionTimer
from ..transcription.accumulator import TranscriptAccumulator

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "provider.events"


class Intent(Enum):
    """A request deferred until the in-flight transition completes."""
    START = "start"
    STOP = "stop"


def _new_session_id() -> str:
    return uuid.uuid4().hex[:12]


class SessionController:
    """Drives start/stop/restart of a streaming translation session."""

    def __init__(self,
                 provider: AbstractTranslationProvider,
                 token_manager: TokenManager,
                 config: Optional[SessionConfig] = None,
                 accumulator: Optional[TranscriptAccumulator] = None,
                 timer: Optional[SessionTimer] = None,
                 topic: str = DEFAULT_TOPIC,
                 session_id_factory: Callable[[], str] = _new_session_id):
        """Initialize session controller.

        Args:
            provider: Streaming translation provider adapter
            token_manager: Source of authorization tokens and refresh scheduling
            config: Initial language configuration
            accumulator: Transcript model fed by recognition events
            timer: Elapsed-time counter for the active session
            topic: Pub/sub topic used for provider events
            session_id_factory: Generates the id each new session is tagged with
        """
        self.provider = provider
        self.token_manager = token_manager
        self.accumulator = accumulator or TranscriptAccumulator()
        self.timer = timer or SessionTimer()
        self.topic = topic
        self.session_id_factory = session_id_factory

        self._config = replace(config) if config else SessionConfig()
        self._session: Optional[Session] = None
        self._pending_intent: Optional[Intent] = None
        self._lock = threading.RLock()
        self.last_error: Optional[LiveTranslateError] = None

        pub.subscribe(self._on_provider_event, topic)
        logger.info(f"SessionController initialized on topic {topic}: "
                    f"{self._config.speech_language} -> {self._config.target_language}")

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start a session, or queue the start if the previous one is still stopping.

        Raises:
            AuthError: If no token could be acquired; state stays IDLE
            ProviderError: If the recognizer could not be constructed or started
            InvalidTransitionError: If a session is already starting or active
        """
        with self._lock:
            status = self.status
            if status is SessionStatus.STOPPING:
                if self._pending_intent is not Intent.START:
                    self._pending_intent = Intent.START
                    logger.info("Start queued until the stopping session is released")
                return
            if status is not SessionStatus.IDLE:
                raise InvalidTransitionError("start", status)
            self._start_session()

    def stop(self) -> None:
        """Stop the current session.

        From STARTING the stop is held until the start completes or fails.
        From STOPPING it cancels a queued start.

        Raises:
            InvalidTransitionError: If there is nothing to stop
        """
        with self._lock:
            status = self.status
            if status is SessionStatus.ACTIVE:
                self._begin_stop(self._session)
                return
            if status is SessionStatus.STARTING:
                if self._pending_intent is not Intent.STOP:
                    self._pending_intent = Intent.STOP
                    logger.info("Stop queued until the starting session settles")
                return
            if status is SessionStatus.STOPPING and self._pending_intent is Intent.START:
                self._pending_intent = None
                logger.info("Queued start cancelled")
                return
            raise InvalidTransitionError("stop", status)

    def set_language(self, role: LanguageRole, value: str) -> None:
        """Update the source or target language.

        While ACTIVE this restarts the session: the stop runs now and the start
        is queued until the old recognizer has been released. In any other
        state the change is picked up by the next start.
        """
        value = validate_language_tag(value)
        with self._lock:
            if role is LanguageRole.SOURCE:
                self._config.speech_language = value
            else:
                self._config.target_language = value
            logger.info(f"{role.value.capitalize()} language set to {value}")

            if self.status is SessionStatus.ACTIVE:
                logger.info("Restarting session to apply language change")
                self._pending_intent = Intent.START
                self._begin_stop(self._session)

    def set_speech_language(self, tag: str) -> None:
        self.set_language(LanguageRole.SOURCE, tag)

    def set_target_language(self, tag: str) -> None:
        self.set_language(LanguageRole.TARGET, tag)

    def edit_transcript(self, text: str) -> None:
        """Replace the committed transcript. Only allowed while IDLE."""
        with self._lock:
            status = self.status
            if status is not SessionStatus.IDLE:
                raise InvalidTransitionError("edit_transcript", status)
            self.accumulator.edit(text)

    def get_rendered_transcript(self) -> str:
        with self._lock:
            return self.accumulator.render(active=self.status is SessionStatus.ACTIVE)

    def get_elapsed_seconds(self) -> int:
        return self.timer.elapsed_seconds

    def get_status(self) -> SessionStatus:
        return self.status

    def get_config(self) -> SessionConfig:
        with self._lock:
            return replace(self._config)

    @property
    def status(self) -> SessionStatus:
        with self._lock:
            return self._session.status if self._session else SessionStatus.IDLE

    @property
    def current_session_id(self) -> Optional[str]:
        with self._lock:
            return self._session.session_id if self._session else None

    @property
    def pending_intent(self) -> Optional[Intent]:
        with self._lock:
            return self._pending_intent

    def shutdown(self) -> None:
        """Release any live recognizer and stop listening for provider events."""
        logger.info("Shutting down SessionController...")
        with self._lock:
            self._pending_intent = None
            session = self._session
            if session is not None:
                self._leave_active()
                self._release(session)

        try:
            pub.unsubscribe(self._on_provider_event, self.topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
        logger.info("SessionController shutdown complete")

    # ------------------------------------------------------------------
    # Transitions (lock held)
    # ------------------------------------------------------------------

    def _start_session(self) -> None:
        token = self.token_manager.acquire()
        config = replace(self._config)

        provider_config = ProviderConfig(
            auth_token=token.auth_token,
            region=token.region,
            speech_recognition_language=config.speech_language,
            target_languages=[config.target_language],
        )
        try:
            handle = self.provider.construct(provider_config)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Could not construct recognizer: {e}") from e

        session = Session(
            session_id=self.session_id_factory(),
            speech_language=config.speech_language,
            target_language=config.target_language,
            auth_token=token.auth_token,
            region=token.region,
            status=SessionStatus.STARTING,
            handle=handle,
        )
        channel = SessionEventChannel(self.topic, session.session_id, session.target_language)
        self._session = session
        logger.info(f"Starting session {session.session_id}: "
                    f"{session.speech_language} -> {session.target_language} ({session.region})")

        try:
            self.provider.subscribe(handle, channel.handlers())
            self.provider.start_async(handle, on_error=channel.canceled)
        except Exception as e:
            logger.error(f"Failed to start session {session.session_id}: {e}")
            self._release(session)
            if isinstance(e, ProviderError):
                raise
            raise ProviderError(f"Could not start recognizer: {e}") from e

    def _enter_active(self, session: Session) -> None:
        session.status = SessionStatus.ACTIVE
        self.accumulator.clear_pending()
        self.timer.start()
        self.token_manager.start_refreshing(partial(self._refresh_token, session))
        logger.info(f"Session {session.session_id} active")

    def _leave_active(self) -> None:
        self.token_manager.cancel_refreshing()
        self.timer.stop()

    def _begin_stop(self, session: Session) -> None:
        self._leave_active()
        session.status = SessionStatus.STOPPING
        channel = SessionEventChannel(self.topic, session.session_id, session.target_language)
        logger.info(f"Stopping session {session.session_id}")
        try:
            self.provider.stop_async(session.handle, on_done=channel.stop_done, on_error=channel.stop_failed)
        except Exception as e:
            logger.error(f"Provider stop failed for session {session.session_id}, forcing idle: {e}")
            self.last_error = ProviderError(str(e))
            self._finish_teardown(session)

    def _finish_teardown(self, session: Session) -> None:
        self._release(session)
        intent, self._pending_intent = self._pending_intent, None
        if intent is not Intent.START:
            return

        logger.info("Draining queued start")
        try:
            self._start_session()
        except LiveTranslateError as e:
            self.last_error = e
            logger.error(f"Queued start failed, staying idle: {e}")

    def _release(self, session: Session) -> None:
        handle, session.handle = session.handle, None
        if handle is not None:
            try:
                self.provider.close(handle)
            except Exception as e:
                logger.error(f"Error closing recognizer for session {session.session_id}: {e}")
        session.status = SessionStatus.IDLE
        if self._session is session:
            self._session = None
            logger.info(f"Session {session.session_id} released")

    # ------------------------------------------------------------------
    # Provider events and token refresh
    # ------------------------------------------------------------------

    def _on_provider_event(self, event: ProviderEvent) -> None:
        with self._lock:
            session = self._session
            if session is None or event.session_id != session.session_id:
                logger.debug(f"Dropping {event.kind.value} event from stale session {event.session_id}")
                return
            try:
                self._dispatch(session, event)
            except Exception as e:
                logger.error(f"Error handling {event.kind.value} event: {e}", exc_info=True)

    def _dispatch(self, session: Session, event: ProviderEvent) -> None:
        kind = event.kind
        if kind is ProviderEventKind.INTERIM:
            self.accumulator.on_interim(self._transcript_event(TranscriptEventKind.INTERIM, event))
        elif kind is ProviderEventKind.FINAL:
            self.accumulator.on_final(self._transcript_event(TranscriptEventKind.FINAL, event))
        elif kind is ProviderEventKind.SESSION_STARTED:
            self._on_session_started(session)
        elif kind is ProviderEventKind.SESSION_STOPPED:
            self._on_session_stopped(session)
        elif kind is ProviderEventKind.CANCELED:
            self._on_canceled(session, event.error)
        elif kind is ProviderEventKind.STOP_DONE:
            logger.info(f"Provider acknowledged stop for session {session.session_id}")
            self._finish_teardown(session)
        elif kind is ProviderEventKind.STOP_FAILED:
            logger.error(f"Provider stop failed for session {session.session_id}, forcing idle: {event.error}")
            self.last_error = ProviderError(event.error or "stop failed")
            self._finish_teardown(session)

    @staticmethod
    def _transcript_event(kind: TranscriptEventKind, event: ProviderEvent) -> TranscriptEvent:
        return TranscriptEvent(
            kind=kind,
            source_text=event.source_text,
            translated_text=event.translated_text,
            target_language=event.target_language or "",
        )

    def _on_session_started(self, session: Session) -> None:
        if session.status is not SessionStatus.STARTING:
            logger.debug(f"Ignoring session-started while {session.status.value}")
            return
        self._enter_active(session)
        if self._pending_intent is Intent.STOP:
            self._pending_intent = None
            logger.info("Honoring stop requested while starting")
            self._begin_stop(session)

    def _on_session_stopped(self, session: Session) -> None:
        if session.status is SessionStatus.STOPPING:
            logger.debug(f"Session {session.session_id} stopped")
            return
        logger.warning(f"Session {session.session_id} stopped by provider while {session.status.value}")
        self._leave_active()
        self._finish_teardown(session)

    def _on_canceled(self, session: Session, error: Optional[str]) -> None:
        if session.status is SessionStatus.STOPPING:
            logger.warning(f"Session {session.session_id} canceled while stopping: {error}")
            return
        logger.error(f"Session {session.session_id} canceled by provider: {error}")
        self.last_error = ProviderError(error or "canceled")
        self._leave_active()
        self._finish_teardown(session)

    def _refresh_token(self, session: Session) -> None:
        with self._lock:
            if self._session is not session or session.status is not SessionStatus.ACTIVE:
                logger.debug(f"Skipping token refresh for inactive session {session.session_id}")
                return

        try:
            token = self.token_manager.refresh(session)
        except AuthError as e:
            logger.warning(f"Token refresh failed for session {session.session_id}, "
                           f"retrying in {self.token_manager.refresh_interval}s: {e}")
            return

        with self._lock:
            if self._session is not session or session.handle is None:
                logger.debug(f"Session {session.session_id} ended during refresh; discarding token")
                return
            try:
                self.provider.update_token(session.handle, token.auth_token)
            except Exception as e:
                logger.error(f"Could not push refreshed token to session {session.session_id}: {e}")
