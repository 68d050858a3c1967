"""Unit tests for TokenManager."""

import pytest

from livetranslate.auth.token_manager import TokenManager
from livetranslate.errors import AuthError
from livetranslate.models.session import Session, SessionStatus


def make_session(token="token-1"):
    return Session(
        session_id="abc",
        speech_language="en-US",
        target_language="es",
        auth_token=token,
        region="westus2",
        status=SessionStatus.ACTIVE,
    )


@pytest.mark.unit
class TestTokenManager:
    """Test cases for TokenManager."""

    def test_default_cadence_is_nine_minutes(self, token_source):
        manager = TokenManager(token_source)
        assert manager.refresh_interval == 540

    def test_cadence_derived_from_validity(self, token_source):
        manager = TokenManager(token_source, validity_seconds=300, refresh_margin_seconds=30)
        assert manager.refresh_interval == 270

    @pytest.mark.parametrize("margin", [0, -5, 600, 900])
    def test_margin_must_leave_positive_cadence(self, token_source, margin):
        with pytest.raises(ValueError):
            TokenManager(token_source, validity_seconds=600, refresh_margin_seconds=margin)

    def test_acquire_returns_token(self, token_source):
        token = TokenManager(token_source).acquire()

        assert token.auth_token == "token-1"
        assert token.region == "westus2"

    def test_acquire_reuses_young_token(self, token_source, clock):
        manager = TokenManager(token_source, clock=clock)

        first = manager.acquire()
        clock.advance(539)
        second = manager.acquire()

        assert second.auth_token == first.auth_token
        assert token_source.calls == 1

    def test_acquire_fetches_when_cached_token_is_old(self, token_source, clock):
        manager = TokenManager(token_source, clock=clock)

        manager.acquire()
        clock.advance(540)
        token = manager.acquire()

        assert token.auth_token == "token-2"
        assert token.issued_at == clock.now

    def test_unreachable_source_raises_auth_error(self, token_source):
        token_source.fail = ConnectionError("no route to host")

        with pytest.raises(AuthError):
            TokenManager(token_source).acquire()

    def test_empty_token_raises_auth_error(self, token_source):
        token_source.empty = True

        with pytest.raises(AuthError):
            TokenManager(token_source).acquire()

    def test_refresh_always_fetches_and_updates_session(self, token_source):
        manager = TokenManager(token_source)
        manager.acquire()
        session = make_session()

        token = manager.refresh(session)

        assert token.auth_token == "token-2"
        assert session.auth_token == "token-2"
        assert session.region == "westus2"

    def test_failed_refresh_keeps_old_token(self, token_source):
        manager = TokenManager(token_source)
        session = make_session("old")
        token_source.fail = TimeoutError("slow")

        with pytest.raises(AuthError):
            manager.refresh(session)
        assert session.auth_token == "old"

    def test_start_and_cancel_refreshing(self, token_source, task_factory):
        manager = TokenManager(token_source, task_factory=task_factory)
        ticks = []

        manager.start_refreshing(lambda: ticks.append(1))
        task = task_factory.latest("TokenRefresh")
        assert task.interval == 540
        assert task.started
        assert manager.is_refreshing

        task.fire(2)
        assert len(ticks) == 2

        manager.cancel_refreshing()
        assert task.cancelled
        assert not manager.is_refreshing

    def test_first_refresh_timed_from_token_issue(self, token_source, task_factory, clock):
        manager = TokenManager(token_source, task_factory=task_factory, clock=clock)
        manager.acquire()
        clock.advance(200)

        manager.start_refreshing(lambda: None)

        task = task_factory.latest("TokenRefresh")
        assert task.first_delay == 340
        assert task.interval == 540
        assert manager.next_refresh_delay() == 340

    def test_refresh_due_immediately_without_token(self, token_source, task_factory):
        manager = TokenManager(token_source, task_factory=task_factory)

        manager.start_refreshing(lambda: None)

        assert task_factory.latest("TokenRefresh").first_delay == 0.0

    def test_restarting_refresh_cancels_previous_schedule(self, token_source, task_factory):
        manager = TokenManager(token_source, task_factory=task_factory)

        manager.start_refreshing(lambda: None)
        manager.start_refreshing(lambda: None)

        assert len(task_factory.active("TokenRefresh")) == 1
