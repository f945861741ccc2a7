"""Rate tracking domain entities."""

from dataclasses import dataclass


@dataclass
class RateTracker:
    """Per-session request counter for the current hourly window.

    Mutable on purpose: the session store hands it to update callbacks while
    holding its lock. Callers outside the store only ever see copies.

    Attributes:
        hourly_count: Requests counted in the current window
        window_start: Unix timestamp at which the window opened
        is_premium: Premium sessions are never capped
    """

    hourly_count: int
    window_start: float
    is_premium: bool = False


@dataclass(frozen=True)
class Admission:
    """Result of a rate gate decision."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "Admission":
        return cls(allowed=True)

    @classmethod
    def reject(cls, reason: str) -> "Admission":
        return cls(allowed=False, reason=reason)
