"""Provider response domain entity."""

from dataclasses import dataclass

# Display marker for failed answers. Only used when rendering, never for control flow.
ERROR_PREFIX = "Error:"


@dataclass(frozen=True)
class ProviderResponse:
    """Outcome of one provider call within a single fanout.

    This is a tagged result: ``success`` decides which of ``content`` and
    ``error`` is meaningful. It lives for one request and is never persisted.

    Attributes:
        provider: Provider name, unique within the fanout
        content: Answer text (empty on failure)
        success: Whether the provider produced an answer
        error: Failure reason (None on success)
        latency_ms: Wall time spent on the provider, retries included
        attempts: Number of calls issued (0 when not configured)
        arrival: Completion order stamped by the collector (-1 until collected)
    """

    provider: str
    content: str
    success: bool
    error: str | None = None
    latency_ms: int = 0
    attempts: int = 0
    arrival: int = -1

    @classmethod
    def ok(cls, provider: str, content: str, latency_ms: int = 0, attempts: int = 1) -> "ProviderResponse":
        return cls(provider=provider, content=content, success=True, latency_ms=latency_ms, attempts=attempts)

    @classmethod
    def failed(cls, provider: str, error: str, latency_ms: int = 0, attempts: int = 0) -> "ProviderResponse":
        return cls(
            provider=provider,
            content="",
            success=False,
            error=error,
            latency_ms=latency_ms,
            attempts=attempts,
        )

    def display_text(self, language: str) -> str:
        """Render for users: the answer, or an "Error:"-prefixed explanation."""
        if self.success:
            return self.content
        return f"{ERROR_PREFIX} {self.provider} did not respond: {self.error}. (in {language})"
