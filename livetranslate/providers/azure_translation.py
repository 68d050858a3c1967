"""Azure Speech translation provider."""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import azure.cognitiveservices.speech as speechsdk

from ..errors import ProviderError
from .base import AbstractTranslationProvider, ProviderConfig, ProviderHandlers

logger = logging.getLogger(__name__)

_handle_ids = itertools.count(1)


@dataclass
class AzureRecognizerHandle:
    """A TranslationRecognizer and the bookkeeping needed to release it."""
    recognizer: Optional[speechsdk.translation.TranslationRecognizer]
    target_languages: List[str]
    handle_id: int = field(default_factory=lambda: next(_handle_ids))
    running: bool = False
    closed: bool = False
    release_thread: Optional[threading.Thread] = None


class AzureTranslationProvider(AbstractTranslationProvider):
    """Continuous translation from the default microphone via the Azure Speech SDK."""

    def __init__(self, use_default_microphone: bool = True):
        self.use_default_microphone = use_default_microphone
        self.service_name = "Azure Speech Translation"

    def construct(self, config: ProviderConfig) -> AzureRecognizerHandle:
        if not config.target_languages:
            raise ProviderError("At least one target language is required")
        try:
            translation_config = speechsdk.translation.SpeechTranslationConfig(
                auth_token=config.auth_token,
                region=config.region,
            )
            translation_config.speech_recognition_language = config.speech_recognition_language
            for language in config.target_languages:
                translation_config.add_target_language(language)

            audio_config = speechsdk.audio.AudioConfig(use_default_microphone=self.use_default_microphone)
            recognizer = speechsdk.translation.TranslationRecognizer(
                translation_config=translation_config,
                audio_config=audio_config,
            )
        except Exception as e:
            logger.error(f"Failed to construct translation recognizer: {e}")
            raise ProviderError(f"Could not construct recognizer: {e}") from e

        handle = AzureRecognizerHandle(recognizer=recognizer, target_languages=list(config.target_languages))
        logger.info(f"Constructed recognizer #{handle.handle_id}: "
                    f"{config.speech_recognition_language} -> {', '.join(config.target_languages)}")
        return handle

    def subscribe(self, handle: AzureRecognizerHandle, handlers: ProviderHandlers) -> None:
        recognizer = self._live(handle)
        target = handle.target_languages[0]

        def on_recognizing(evt):
            handlers.on_interim(evt.result.text, (evt.result.translations or {}).get(target, ""))

        def on_recognized(evt):
            result = evt.result
            if result.reason == speechsdk.ResultReason.NoMatch or not result.text:
                logger.debug(f"Recognizer #{handle.handle_id} ignored result: {result.reason}")
                return
            # RecognizedSpeech results carry source text without a translation
            handlers.on_final(result.text, (result.translations or {}).get(target, ""))

        def on_canceled(evt):
            details = evt.cancellation_details
            if details.reason == speechsdk.CancellationReason.Error:
                handlers.on_canceled(f"{details.code}: {details.error_details}")
            else:
                logger.debug(f"Recognizer #{handle.handle_id} canceled: {details.reason}")

        recognizer.recognizing.connect(on_recognizing)
        recognizer.recognized.connect(on_recognized)
        recognizer.session_started.connect(lambda evt: handlers.on_session_started())
        recognizer.session_stopped.connect(lambda evt: handlers.on_session_stopped())
        recognizer.canceled.connect(on_canceled)

    def start_async(self, handle: AzureRecognizerHandle,
                    on_error: Optional[Callable[[str], None]] = None) -> None:
        future = self._live(handle).start_continuous_recognition_async()
        handle.running = True
        self._await_in_background(f"RecognizerStart-{handle.handle_id}", future,
                                  on_done=None, on_error=on_error)

    def stop_async(self, handle: AzureRecognizerHandle,
                   on_done: Callable[[], None],
                   on_error: Callable[[str], None]) -> None:
        try:
            future = self._live(handle).stop_continuous_recognition_async()
        except ProviderError as e:
            on_error(str(e))
            return

        def stopped():
            handle.running = False
            on_done()

        self._await_in_background(f"RecognizerStop-{handle.handle_id}", future,
                                  on_done=stopped, on_error=on_error)

    def close(self, handle: AzureRecognizerHandle) -> None:
        """Mark the handle closed now and release the SDK recognizer on a worker thread.

        Close is often reached from inside an SDK callback, so the blocking
        SDK calls must not run on the caller's thread.
        """
        if handle.closed:
            return
        recognizer = handle.recognizer
        was_running = handle.running
        handle.closed = True
        handle.running = False
        handle.recognizer = None
        if recognizer is None:
            return

        def release():
            try:
                if was_running:
                    # Released without a completed stop; let the SDK wind down on its own
                    recognizer.stop_continuous_recognition_async()
                for signal in (recognizer.recognizing, recognizer.recognized, recognizer.session_started,
                               recognizer.session_stopped, recognizer.canceled):
                    signal.disconnect_all()
            except Exception as e:
                logger.error(f"Error releasing recognizer #{handle.handle_id}: {e}")
                return
            logger.info(f"Closed recognizer #{handle.handle_id}")

        thread = threading.Thread(target=release, daemon=True)
        thread.name = f"RecognizerClose-{handle.handle_id}"
        handle.release_thread = thread
        thread.start()

    def update_token(self, handle: AzureRecognizerHandle, auth_token: str) -> None:
        self._live(handle).authorization_token = auth_token
        logger.debug(f"Updated authorization token on recognizer #{handle.handle_id}")

    def _live(self, handle: AzureRecognizerHandle) -> speechsdk.translation.TranslationRecognizer:
        if handle.closed or handle.recognizer is None:
            raise ProviderError(f"Recognizer #{handle.handle_id} is closed")
        return handle.recognizer

    @staticmethod
    def _await_in_background(name: str, future: Any,
                             on_done: Optional[Callable[[], None]],
                             on_error: Optional[Callable[[str], None]]) -> None:
        """Wait on an SDK ResultFuture without blocking the caller."""
        def wait():
            try:
                future.get()
            except Exception as e:
                logger.error(f"{name} failed: {e}")
                if on_error:
                    on_error(str(e))
                return
            if on_done:
                on_done()

        thread = threading.Thread(target=wait, daemon=True)
        thread.name = name
        thread.start()
