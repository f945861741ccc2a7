"""Session store protocol.

Defines the interface for the single piece of state shared between
concurrent requests: per-session history, rate trackers and saved
conversations. Implementations must make every operation atomic and must
never hand out their internal containers.
"""

from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

from consensus_chat.entities import RateTracker, SavedConversation, Turn

T = TypeVar("T")


@runtime_checkable
class SessionStore(Protocol):
    """Protocol for session state backends."""

    def update_tracker(self, session_key: str, update: Callable[[RateTracker], T], now: float) -> T:
        """Run ``update`` on the session's tracker while holding the store lock.

        The tracker is created with ``hourly_count=0`` and ``window_start=now``
        on first sight.

        Args:
            session_key: Opaque session identifier
            update: Callback that may mutate the tracker; must not block
            now: Current Unix timestamp

        Returns:
            Whatever ``update`` returns
        """
        ...

    def tracker(self, session_key: str) -> RateTracker | None:
        """Return a copy of the session's tracker, or None if unseen."""
        ...

    def set_premium(self, session_key: str, premium: bool, now: float) -> None:
        """Flag or unflag a session as premium."""
        ...

    def history(self, session_key: str) -> list[Turn]:
        """Return a copy of the session's history (empty if unseen)."""
        ...

    def append_turns(self, session_key: str, turns: list[Turn]) -> None:
        """Append turns to the session's history in one critical section."""
        ...

    def clear_history(self, session_key: str) -> bool:
        """Drop the session's history.

        Returns:
            True if there was a history to drop
        """
        ...

    def save_conversation(self, conversation: SavedConversation) -> str:
        """Store a shared conversation and return its new id."""
        ...

    def get_conversation(self, conversation_id: str) -> SavedConversation | None:
        """Look up a shared conversation by id."""
        ...

    def stats(self) -> dict:
        """Return counts of tracked sessions, histories and conversations."""
        ...
