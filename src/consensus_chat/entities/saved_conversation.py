"""Saved conversation domain entity."""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SavedConversation:
    """A shared answer kept in memory for the process lifetime."""

    response: str
    contributions: dict[str, float] = field(default_factory=dict)
    saved_at: float = field(default_factory=time.time)
