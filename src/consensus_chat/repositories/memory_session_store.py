"""In-memory implementation of SessionStore.

All session state lives in this process and disappears with it. One
exclusive lock guards every map; critical sections are a lookup-or-create,
a counter update or an append. Nothing here performs I/O.
"""

import copy
import threading
import uuid
from collections.abc import Callable, Iterable
from typing import TypeVar

from consensus_chat.entities import RateTracker, SavedConversation, Turn

T = TypeVar("T")


class InMemorySessionStore:
    """Dict-backed session store guarded by a single ``threading.Lock``.

    This class satisfies the SessionStore protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        store = InMemorySessionStore.create(premium_sessions=["vip-session"])
        store.append_turns("abc", [Turn.user("hi"), Turn.assistant("hello")])
        store.history("abc")  # copy, safe to mutate
        ```
    """

    def __init__(self, premium_sessions: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._histories: dict[str, list[Turn]] = {}
        self._trackers: dict[str, RateTracker] = {}
        self._premium: set[str] = set(premium_sessions)
        self._conversations: dict[str, SavedConversation] = {}

    @classmethod
    def create(cls, premium_sessions: Iterable[str] = ()) -> "InMemorySessionStore":
        """Factory method mirroring the other repositories."""
        return cls(premium_sessions=premium_sessions)

    def _tracker_unlocked(self, session_key: str, now: float) -> RateTracker:
        """Lookup-or-create. Must be called while holding self._lock."""
        tracker = self._trackers.get(session_key)
        if tracker is None:
            tracker = RateTracker(
                hourly_count=0,
                window_start=now,
                is_premium=session_key in self._premium,
            )
            self._trackers[session_key] = tracker
        return tracker

    def update_tracker(self, session_key: str, update: Callable[[RateTracker], T], now: float) -> T:
        with self._lock:
            return update(self._tracker_unlocked(session_key, now))

    def tracker(self, session_key: str) -> RateTracker | None:
        with self._lock:
            tracker = self._trackers.get(session_key)
            return copy.copy(tracker) if tracker is not None else None

    def set_premium(self, session_key: str, premium: bool, now: float) -> None:
        with self._lock:
            if premium:
                self._premium.add(session_key)
            else:
                self._premium.discard(session_key)
            self._tracker_unlocked(session_key, now).is_premium = premium

    def history(self, session_key: str) -> list[Turn]:
        with self._lock:
            return list(self._histories.get(session_key, ()))

    def append_turns(self, session_key: str, turns: list[Turn]) -> None:
        with self._lock:
            self._histories.setdefault(session_key, []).extend(turns)

    def clear_history(self, session_key: str) -> bool:
        with self._lock:
            return self._histories.pop(session_key, None) is not None

    def save_conversation(self, conversation: SavedConversation) -> str:
        conversation_id = str(uuid.uuid4())
        with self._lock:
            self._conversations[conversation_id] = conversation
        return conversation_id

    def get_conversation(self, conversation_id: str) -> SavedConversation | None:
        with self._lock:
            return self._conversations.get(conversation_id)

    def stats(self) -> dict:
        with self._lock:
            return {
                "sessions": len(self._histories),
                "tracked_sessions": len(self._trackers),
                "premium_sessions": len(self._premium),
                "saved_conversations": len(self._conversations),
            }
