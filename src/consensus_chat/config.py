import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str = "") -> tuple[str, ...]:
    """Split a comma-separated environment variable into a tuple."""
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


SELECTION_POLICIES = ("reference", "synthesis")
EMBEDDING_BACKENDS = ("cohere", "ollama")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Generation providers
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
    deepseek_api_key: str | None = os.getenv("DEEPSEEK_API_KEY")
    deepseek_model: str = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    mistral_api_key: str | None = os.getenv("MISTRAL_API_KEY")
    mistral_model: str = os.getenv("MISTRAL_MODEL", "mistral-small-latest")
    cohere_api_key: str | None = os.getenv("COHERE_API_KEY")
    cohere_model: str = os.getenv("COHERE_MODEL", "command")

    # Timeouts (seconds) and retry
    openai_timeout: float = float(os.getenv("OPENAI_TIMEOUT", "10"))
    provider_timeout: float = float(os.getenv("PROVIDER_TIMEOUT", "30"))
    retry_attempts: int = int(os.getenv("RETRY_ATTEMPTS", "3"))
    retry_base_delay: float = float(os.getenv("RETRY_BASE_DELAY", "1.0"))

    # Rate gate
    hourly_limit: int = int(os.getenv("HOURLY_LIMIT", "15"))
    premium_sessions: tuple[str, ...] = field(default_factory=lambda: _env_list("PREMIUM_SESSIONS"))

    # Selection
    selection_policy: str = os.getenv("SELECTION_POLICY", "reference")
    synthesis_provider: str = os.getenv("SYNTHESIS_PROVIDER", "OpenAI")
    fallback_order: tuple[str, ...] = field(
        default_factory=lambda: _env_list("FALLBACK_ORDER", "OpenAI,DeepSeek,Gemini,Mistral,Cohere")
    )
    default_language: str = os.getenv("DEFAULT_LANGUAGE", "Italiano")

    # Embedding
    embedding_backend: str = os.getenv("EMBEDDING_BACKEND", "cohere")
    # None picks the backend default (embed-multilingual-v3.0 / nomic-embed-text)
    embedding_model: str | None = os.getenv("EMBEDDING_MODEL")
    embedding_timeout: float = float(os.getenv("EMBEDDING_TIMEOUT", "30"))
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", os.getenv("PORT", "8080")))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.selection_policy not in SELECTION_POLICIES:
            raise ValueError(
                f"SELECTION_POLICY must be one of {list(SELECTION_POLICIES)}, got {self.selection_policy!r}"
            )

        if self.embedding_backend not in EMBEDDING_BACKENDS:
            raise ValueError(
                f"EMBEDDING_BACKEND must be one of {list(EMBEDDING_BACKENDS)}, got {self.embedding_backend!r}"
            )

        if self.hourly_limit < 1:
            raise ValueError("HOURLY_LIMIT must be at least 1")

        if self.retry_attempts < 1:
            raise ValueError("RETRY_ATTEMPTS must be at least 1")

        if self.retry_base_delay < 0:
            raise ValueError("RETRY_BASE_DELAY must not be negative")

        if min(self.openai_timeout, self.provider_timeout, self.embedding_timeout) <= 0:
            raise ValueError("Timeouts must be positive")

    def timeout_for(self, provider_name: str) -> float:
        """Per-provider timeout budget in seconds.

        OpenAI gets a tighter budget than the HTTP-only vendors.
        """
        if provider_name == "OpenAI":
            return self.openai_timeout
        return self.provider_timeout


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
