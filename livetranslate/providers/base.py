"""Abstract base class for streaming translation providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional


@dataclass
class ProviderConfig:
    """Everything a provider needs to open one recognition session."""
    auth_token: str
    region: str
    speech_recognition_language: str
    target_languages: List[str] = field(default_factory=list)


@dataclass
class ProviderHandlers:
    """Callbacks a provider invokes for one session."""
    on_interim: Callable[[str, str], None]
    on_final: Callable[[str, str], None]
    on_session_started: Callable[[], None]
    on_session_stopped: Callable[[], None]
    on_canceled: Callable[[str], None]


class AbstractTranslationProvider(ABC):
    """Narrow interface to a streaming recognition/translation service.

    Start and stop are asynchronous: they return immediately and report
    completion through callbacks or session signals. ``close`` must be called
    on a handle before ``construct`` is called for the next session.
    """

    @abstractmethod
    def construct(self, config: ProviderConfig) -> Any:
        """Create a recognizer bound to ``config`` and return its handle.

        Raises:
            ProviderError: If the recognizer cannot be created
        """
        pass

    @abstractmethod
    def subscribe(self, handle: Any, handlers: ProviderHandlers) -> None:
        """Route the recognizer's signals to ``handlers``."""
        pass

    @abstractmethod
    def start_async(self, handle: Any, on_error: Optional[Callable[[str], None]] = None) -> None:
        """Begin continuous recognition; failures are reported through ``on_error``."""
        pass

    @abstractmethod
    def stop_async(self,
                   handle: Any,
                   on_done: Callable[[], None],
                   on_error: Callable[[str], None]) -> None:
        """End continuous recognition and report completion."""
        pass

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Release the recognizer and its audio device. Must be idempotent."""
        pass

    @abstractmethod
    def update_token(self, handle: Any, auth_token: str) -> None:
        """Push a refreshed authorization token into a live recognizer."""
        pass
