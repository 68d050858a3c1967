"""Token manager that keeps a session's authorization token fresh."""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from ..errors import AuthError
from ..models.session import Session, Token
from ..timer.periodic import PeriodicTask
from .token_source import AbstractTokenSource

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_SECONDS = 600.0
DEFAULT_REFRESH_MARGIN_SECONDS = 60.0


class TokenManager:
    """Acquires tokens from a credential source and renews them on a fixed cadence."""

    def __init__(self,
                 source: AbstractTokenSource,
                 validity_seconds: float = DEFAULT_VALIDITY_SECONDS,
                 refresh_margin_seconds: float = DEFAULT_REFRESH_MARGIN_SECONDS,
                 task_factory: Callable[..., PeriodicTask] = PeriodicTask,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize token manager.

        Args:
            source: Credential source issuing tokens
            validity_seconds: How long an issued token stays valid
            refresh_margin_seconds: How long before expiry to renew
            task_factory: Builds the periodic refresh task (injectable for tests)
            clock: Time source used to age cached tokens
        """
        if refresh_margin_seconds <= 0 or refresh_margin_seconds >= validity_seconds:
            raise ValueError(
                f"Refresh margin must be in (0, {validity_seconds}), got {refresh_margin_seconds}"
            )
        self.source = source
        self.validity_seconds = validity_seconds
        self.refresh_interval = validity_seconds - refresh_margin_seconds
        self.task_factory = task_factory
        self.clock = clock

        self._token: Optional[Token] = None
        self._lock = threading.Lock()
        self._refresh_task: Optional[PeriodicTask] = None

        logger.info(f"TokenManager initialized: validity={validity_seconds}s, "
                    f"refresh every {self.refresh_interval}s")

    def acquire(self) -> Token:
        """Return a usable token, reusing the cached one while it is young enough.

        Raises:
            AuthError: If the credential source fails or returns an empty token
        """
        with self._lock:
            cached = self._token
        if cached and cached.age_seconds(self.clock()) < self.refresh_interval:
            logger.debug("Reusing cached token")
            return cached
        return self._fetch()

    def refresh(self, session: Session) -> Token:
        """Re-acquire a token and swap it into the live session in place.

        Raises:
            AuthError: If the credential source fails; the session keeps its old token
        """
        token = self._fetch()
        session.apply_token(token)
        logger.info(f"Refreshed token for session {session.session_id}")
        return token

    def _fetch(self) -> Token:
        try:
            token = self.source.fetch_token()
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(f"Credential source failed: {e}") from e

        if token is None or not token.auth_token or not token.region:
            raise AuthError("Credential source returned an empty token")

        token = Token(auth_token=token.auth_token, region=token.region, issued_at=self.clock())
        with self._lock:
            self._token = token
        return token

    def next_refresh_delay(self) -> float:
        """Seconds until the current token is due for renewal.

        A token reused from the cache has already aged, so its first renewal
        comes sooner than a full refresh interval.
        """
        with self._lock:
            token = self._token
        if token is None:
            return 0.0
        return max(0.0, self.refresh_interval - token.age_seconds(self.clock()))

    def start_refreshing(self, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` every refresh interval, replacing any prior schedule.

        The first tick is timed from when the current token was issued, not
        from now.
        """
        self.cancel_refreshing()
        first_delay = self.next_refresh_delay()
        task = self.task_factory(self.refresh_interval, callback, name="TokenRefresh", first_delay=first_delay)
        self._refresh_task = task
        task.start()
        logger.debug(f"Token refresh scheduled in {first_delay:.0f}s, then every {self.refresh_interval}s")

    def cancel_refreshing(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is not None:
            task.cancel()
            logger.debug("Token refresh cancelled")

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None
