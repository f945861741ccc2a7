"""
In-process test doubles for the provider protocols.
"""

import asyncio

from consensus_chat.entities import Turn
from consensus_chat.errors import EmbeddingUnavailable


class FakeProvider:
    """GenerationProvider that answers from memory and records every call."""

    def __init__(
        self,
        name: str,
        answer: str = "",
        error: Exception | None = None,
        errors: list[Exception] | None = None,
        delay: float = 0.0,
        configured: bool = True,
    ) -> None:
        self._name = name
        self.answer = answer
        self.error = error
        self.errors = list(errors or [])
        self.delay = delay
        self.configured = configured
        self.calls: list[tuple[list[Turn], str, str]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, history: list[Turn], question: str, language: str) -> str:
        self.calls.append((list(history), question, language))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.errors:
            raise self.errors.pop(0)
        if self.error is not None:
            raise self.error
        return self.answer

    async def aclose(self) -> None:
        self.closed = True


class FakeEmbeddingProvider:
    """EmbeddingProvider backed by a text -> vector table.

    Texts missing from the table raise EmbeddingUnavailable.
    """

    def __init__(self, vectors: dict[str, list[float]] | None = None, model_name: str = "fake-embed") -> None:
        self.vectors = dict(vectors or {})
        self._model_name = model_name
        self.calls: list[str] = []
        self.closed = False

    @property
    def model_name(self) -> str:
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        self.calls.append(text)
        if text not in self.vectors:
            raise EmbeddingUnavailable(f"no vector for {text!r}")
        return list(self.vectors[text])

    async def is_available(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that returns immediately and remembers the delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
