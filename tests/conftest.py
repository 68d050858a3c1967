"""Pytest configuration and fixtures for live-translate tests."""

import itertools
import logging
from datetime import datetime, timedelta
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import pytest

from livetranslate.auth.token_manager import TokenManager
from livetranslate.auth.token_source import AbstractTokenSource
from livetranslate.errors import ProviderError
from livetranslate.models.session import Token
from livetranslate.providers.base import AbstractTranslationProvider, ProviderConfig, ProviderHandlers
from livetranslate.services.session_controller import SessionController
from livetranslate.timer.session_timer import SessionTimer


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class FakeHandle:
    """Recognizer handle recorded by FakeProvider."""
    handle_id: int
    config: ProviderConfig
    handlers: Optional[ProviderHandlers] = None
    on_start_error: Optional[Callable[[str], None]] = None
    on_stop_done: Optional[Callable[[], None]] = None
    on_stop_error: Optional[Callable[[str], None]] = None
    closed: bool = False
    close_calls: int = 0
    tokens: List[str] = field(default_factory=list)


class FakeProvider(AbstractTranslationProvider):
    """In-memory provider: records every call and lets tests emit provider signals."""

    def __init__(self):
        self.handles: List[FakeHandle] = []
        self.calls: List[tuple] = []
        self.max_live = 0
        self.construct_error: Optional[Exception] = None
        self.start_error: Optional[Exception] = None
        self.stop_error: Optional[Exception] = None
        self._ids = itertools.count(1)

    @property
    def live_handles(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.closed]

    def construct(self, config: ProviderConfig) -> FakeHandle:
        if self.construct_error:
            raise self.construct_error
        handle = FakeHandle(handle_id=next(self._ids), config=config)
        self.handles.append(handle)
        self.calls.append(("construct", handle.handle_id))
        self.max_live = max(self.max_live, len(self.live_handles))
        return handle

    def subscribe(self, handle: FakeHandle, handlers: ProviderHandlers) -> None:
        handle.handlers = handlers

    def start_async(self, handle: FakeHandle, on_error=None) -> None:
        if self.start_error:
            raise self.start_error
        handle.on_start_error = on_error
        self.calls.append(("start", handle.handle_id))

    def stop_async(self, handle: FakeHandle, on_done, on_error) -> None:
        if self.stop_error:
            raise self.stop_error
        handle.on_stop_done = on_done
        handle.on_stop_error = on_error
        self.calls.append(("stop", handle.handle_id))

    def close(self, handle: FakeHandle) -> None:
        handle.close_calls += 1
        if handle.closed:
            return
        handle.closed = True
        self.calls.append(("close", handle.handle_id))

    def update_token(self, handle: FakeHandle, auth_token: str) -> None:
        if handle.closed:
            raise ProviderError("closed")
        handle.tokens.append(auth_token)

    # Signals a real recognizer would deliver
    def emit_started(self, handle: FakeHandle) -> None:
        handle.handlers.on_session_started()

    def emit_stopped(self, handle: FakeHandle) -> None:
        handle.handlers.on_session_stopped()

    def emit_interim(self, handle: FakeHandle, source: str, translated: str = "") -> None:
        handle.handlers.on_interim(source, translated)

    def emit_final(self, handle: FakeHandle, source: str, translated: str = "") -> None:
        handle.handlers.on_final(source, translated)

    def emit_canceled(self, handle: FakeHandle, error: str = "connection lost") -> None:
        handle.handlers.on_canceled(error)

    def fail_start(self, handle: FakeHandle, error: str = "start failed") -> None:
        handle.on_start_error(error)

    def ack_stop(self, handle: FakeHandle) -> None:
        handle.on_stop_done()

    def fail_stop(self, handle: FakeHandle, error: str = "stop failed") -> None:
        handle.on_stop_error(error)


class FakeTokenSource(AbstractTokenSource):
    """Issues numbered tokens; set ``fail`` to simulate an unreachable source."""

    def __init__(self, region: str = "westus2"):
        self.region = region
        self.calls = 0
        self.fail: Optional[Exception] = None
        self.empty = False

    def fetch_token(self) -> Token:
        if self.fail:
            raise self.fail
        self.calls += 1
        if self.empty:
            return Token(auth_token="", region=self.region)
        return Token(auth_token=f"token-{self.calls}", region=self.region)


class FakeClock:
    """Settable clock for token ageing."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ManualTask:
    """PeriodicTask stand-in that only ticks when a test calls ``fire``."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "ManualTask",
                 first_delay: Optional[float] = None):
        self.interval = interval
        self.first_delay = interval if first_delay is None else first_delay
        self.callback = callback
        self.name = name
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.started and not self.cancelled:
                self.callback()


class ManualTaskFactory:
    """Builds ManualTasks and remembers them by name."""

    def __init__(self):
        self.tasks: List[ManualTask] = []

    def __call__(self, interval: float, callback: Callable[[], None], name: str = "ManualTask",
                 first_delay: Optional[float] = None) -> ManualTask:
        task = ManualTask(interval, callback, name, first_delay)
        self.tasks.append(task)
        return task

    def latest(self, name: str) -> Optional[ManualTask]:
        matching = [t for t in self.tasks if t.name == name]
        return matching[-1] if matching else None

    def active(self, name: str) -> List[ManualTask]:
        return [t for t in self.tasks if t.name == name and t.started and not t.cancelled]


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def token_source():
    return FakeTokenSource()


@pytest.fixture
def task_factory():
    return ManualTaskFactory()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_manager(token_source, task_factory, clock):
    return TokenManager(token_source, task_factory=task_factory, clock=clock)


@pytest.fixture
def session_timer(task_factory):
    return SessionTimer(task_factory=task_factory)


@pytest.fixture
def controller(fake_provider, token_manager, session_timer):
    """SessionController wired to fakes; unsubscribed from pubsub after the test."""
    controller = SessionController(fake_provider, token_manager, timer=session_timer)
    yield controller
    controller.shutdown()


@pytest.fixture
def active_controller(controller, fake_provider):
    """Controller whose first session has reached ACTIVE."""
    controller.start()
    fake_provider.emit_started(fake_provider.handles[-1])
    return controller
