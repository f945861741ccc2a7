"""Conversation turn domain entity."""

from dataclasses import dataclass

USER = "user"
ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One message in a session's conversation history.

    Attributes:
        role: Either "user" or "assistant"
        text: The message content
    """

    role: str
    text: str

    def __post_init__(self) -> None:
        if self.role not in (USER, ASSISTANT):
            raise ValueError(f"Unknown turn role: {self.role!r}")

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(role=USER, text=text)

    @classmethod
    def assistant(cls, text: str) -> "Turn":
        return cls(role=ASSISTANT, text=text)
