"""Per-session hourly request quota."""

import logging
import time
from collections.abc import Callable

from consensus_chat.entities import Admission, RateTracker
from consensus_chat.prompts import rate_limit_message
from consensus_chat.protocols import SessionStore

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 3600.0


class RateGate:
    """Admit or reject a request against the session's hourly window.

    The whole check-and-increment runs inside ``SessionStore.update_tracker``,
    so two concurrent requests for the same session cannot both squeeze
    under the limit.

    Example:
        ```python
        gate = RateGate(store, hourly_limit=15)
        admission = gate.admit("session-abc")
        if not admission.allowed:
            return admission.reason
        ```
    """

    def __init__(
        self,
        store: SessionStore,
        hourly_limit: int = 15,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if hourly_limit < 1:
            raise ValueError("hourly_limit must be at least 1")
        self._store = store
        self._limit = hourly_limit
        self._window = window_seconds
        self._clock = clock

    @property
    def hourly_limit(self) -> int:
        return self._limit

    def admit(self, session_key: str) -> Admission:
        """Count one request for ``session_key`` and decide.

        Raises:
            ValueError: If ``session_key`` is empty
        """
        if not session_key:
            raise ValueError("session_key must not be empty")

        now = self._clock()

        def check(tracker: RateTracker) -> bool:
            if tracker.is_premium:
                return True
            if now - tracker.window_start >= self._window:
                tracker.hourly_count = 0
                tracker.window_start = now
            tracker.hourly_count += 1
            return tracker.hourly_count <= self._limit

        if self._store.update_tracker(session_key, check, now):
            return Admission.allow()

        logger.info("Session %s is over the hourly limit of %d", session_key, self._limit)
        return Admission.reject(rate_limit_message(self._limit))
