"""Build the configured providers from settings.

The generation providers come back in the fixed order used everywhere
(OpenAI, DeepSeek, Gemini, Mistral, Cohere). Providers without a key are
still built: the fanout reports them as "not set" instead of skipping them.
"""

from consensus_chat.config import Settings
from consensus_chat.protocols import EmbeddingProvider, GenerationProvider

from .cohere_provider import CohereEmbeddingProvider, CohereGenerationProvider
from .gemini_provider import GeminiProvider
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .openai_provider import OpenAICompatibleProvider


def build_generation_providers(settings: Settings) -> list[GenerationProvider]:
    """Create one adapter per supported vendor.

    Args:
        settings: Application settings

    Returns:
        Providers in fixed priority order
    """
    return [
        OpenAICompatibleProvider.openai(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.timeout_for("OpenAI"),
        ),
        OpenAICompatibleProvider.deepseek(
            api_key=settings.deepseek_api_key,
            model=settings.deepseek_model,
            timeout=settings.timeout_for("DeepSeek"),
        ),
        GeminiProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.timeout_for("Gemini"),
        ),
        OpenAICompatibleProvider.mistral(
            api_key=settings.mistral_api_key,
            model=settings.mistral_model,
            timeout=settings.timeout_for("Mistral"),
        ),
        CohereGenerationProvider(
            api_key=settings.cohere_api_key,
            model=settings.cohere_model,
            timeout=settings.timeout_for("Cohere"),
        ),
    ]


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Create the embedding backend named by EMBEDDING_BACKEND."""
    if settings.embedding_backend == "ollama":
        return OllamaEmbeddingProvider.create(
            model_name=settings.embedding_model,
            base_url=settings.ollama_base_url,
            timeout=settings.embedding_timeout,
        )
    return CohereEmbeddingProvider.create(
        api_key=settings.cohere_api_key,
        model_name=settings.embedding_model,
        timeout=settings.embedding_timeout,
    )
