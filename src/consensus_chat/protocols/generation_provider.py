"""Generation provider protocol.

Defines the interface every text-generation vendor adapter implements. The
core only relies on this shape; authentication and payload formats stay
inside the adapters.
"""

from typing import Protocol, runtime_checkable

from consensus_chat.entities import Turn


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for text-generation services.

    Example:
        ```python
        provider: GenerationProvider = OpenAICompatibleProvider.openai(api_key="...")
        if provider.is_configured:
            answer = await provider.generate(history, "Capital of France?", "English")
        ```
    """

    @property
    def name(self) -> str:
        """Display name, unique among the configured providers (e.g. "OpenAI")."""
        ...

    @property
    def is_configured(self) -> bool:
        """Whether a credential is present. Unconfigured providers are never called."""
        ...

    async def generate(self, history: list[Turn], question: str, language: str) -> str:
        """Answer ``question`` in ``language`` given the prior conversation.

        Args:
            history: Prior turns of the session, oldest first
            question: The new user question
            language: Target response language (e.g. "Italiano")

        Returns:
            The answer text

        Raises:
            ProviderError: On missing credentials, non-success status or
                malformed payloads
            httpx.TransportError: On network-level failures (retried by the caller)
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
