"""Aggregation service: one question in, one reconciled answer out.

This service orchestrates the whole request by coordinating the rate gate,
the provider fanout, the embedding scorer and the active selection policy.
"""

import logging
import time
from collections.abc import Callable

from consensus_chat.config import Settings, get_settings
from consensus_chat.entities import AggregationResult, ChatOutcome, ProviderResponse, SavedConversation, Turn
from consensus_chat.prompts import no_valid_responses_message
from consensus_chat.protocols import EmbeddingProvider, GenerationProvider, SessionStore
from consensus_chat.repositories import InMemorySessionStore, build_embedding_provider, build_generation_providers

from .collector import ResponseCollector, valid_responses
from .fanout import ProviderFanout
from .rate_gate import RateGate
from .retry import RetryPolicy
from .scoring import EmbeddingScorer
from .selection import ReferenceSelector, SelectionContext, Selector, SynthesisSelector

logger = logging.getLogger(__name__)


class AggregationService:
    """Core multi-provider answer reconciliation.

    This service depends on PROTOCOLS, not concrete implementations:
    - GenerationProvider: any vendor adapter (OpenAI, Gemini, a test fake...)
    - EmbeddingProvider: Cohere, Ollama, etc.
    - SessionStore: in-memory today, anything atomic tomorrow

    Example:
        ```python
        from consensus_chat.services import AggregationService

        # Create with defaults from settings
        service = AggregationService.create()

        outcome = await service.ask("session-abc", "What is the capital of France?", "English")
        if outcome.rejected:
            print(outcome.admission.reason)
        else:
            print(outcome.result.answer, outcome.result.contributions)
        ```
    """

    def __init__(
        self,
        fanout: ProviderFanout,
        scorer: EmbeddingScorer,
        store: SessionStore,
        rate_gate: RateGate,
        selector: Selector,
        default_language: str = "Italiano",
        collector: ResponseCollector | None = None,
    ) -> None:
        """Initialize the aggregation service.

        Args:
            fanout: Dispatches the question to every provider (required).
            scorer: Embeds answers for agreement scoring (required).
            store: Shared session state (required).
            rate_gate: Per-session admission control (required).
            selector: Active selection policy (required).
            default_language: Language used when a request names none.
            collector: Join barrier over the fanout. Defaults to ResponseCollector().
        """
        self._fanout = fanout
        self._scorer = scorer
        self._store = store
        self._gate = rate_gate
        self._selector = selector
        self._default_language = default_language
        self._collector = collector or ResponseCollector()

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        providers: list[GenerationProvider] | None = None,
        embedding_provider: EmbeddingProvider | None = None,
        store: SessionStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> "AggregationService":
        """Factory method wiring the default collaborators from settings.

        Args:
            settings: Application settings. If None, uses get_settings().
            providers: Generation providers. If None, builds the five vendor adapters.
            embedding_provider: Embedding backend. If None, uses EMBEDDING_BACKEND.
            store: Session store. If None, a fresh InMemorySessionStore.
            clock: Time source for the rate gate.

        Returns:
            Configured AggregationService instance

        Example:
            ```python
            service = AggregationService.create()

            # Or with test doubles
            service = AggregationService.create(
                providers=[FakeProvider("A", "Paris")],
                embedding_provider=FakeEmbeddingProvider({"Paris": [1.0, 0.0]}),
            )
            ```
        """
        settings = settings or get_settings()
        if providers is None:
            providers = build_generation_providers(settings)
        if embedding_provider is None:
            embedding_provider = build_embedding_provider(settings)
        if store is None:
            store = InMemorySessionStore.create(premium_sessions=settings.premium_sessions)

        fanout = ProviderFanout(
            providers,
            retry_policy=RetryPolicy(max_attempts=settings.retry_attempts, base_delay=settings.retry_base_delay),
            timeouts={p.name: settings.timeout_for(p.name) for p in providers},
            default_timeout=settings.provider_timeout,
        )
        scorer = EmbeddingScorer(embedding_provider)

        selector: Selector
        if settings.selection_policy == "synthesis":
            selector = SynthesisSelector(
                fanout,
                scorer,
                synthesis_provider=settings.synthesis_provider,
                fallback_order=settings.fallback_order,
            )
        else:
            selector = ReferenceSelector()

        return cls(
            fanout=fanout,
            scorer=scorer,
            store=store,
            rate_gate=RateGate(store, hourly_limit=settings.hourly_limit, clock=clock),
            selector=selector,
            default_language=settings.default_language,
        )

    async def ask(self, session_key: str, question: str, language: str | None = None) -> ChatOutcome:
        """Answer one question for one session.

        Business logic:
        1. Rate gate (a rejection short-circuits: no provider call, no history change)
        2. Fan the question out to every provider and wait for all of them
        3. Embed the valid answers and run the selection policy
        4. Append the user turn and the final answer to the session history

        Args:
            session_key: Opaque session identifier
            question: The user's question
            language: Target response language. Defaults to the configured one.

        Returns:
            ChatOutcome with either a rejection or an AggregationResult

        Raises:
            ValueError: If the question is blank or the session key is empty
        """
        if not question or not question.strip():
            raise ValueError("question must not be blank")

        admission = self._gate.admit(session_key)
        if not admission.allowed:
            return ChatOutcome(admission=admission)

        language = language or self._default_language
        history = self._store.history(session_key)

        responses = await self._collector.collect(
            self._fanout.dispatch(history, question, language),
            expected=self._fanout.names,
        )
        result = await self.aggregate(responses, question, history, language)

        self._store.append_turns(session_key, [Turn.user(question), Turn.assistant(result.answer)])
        return ChatOutcome(admission=admission, result=result)

    async def aggregate(
        self,
        responses: list[ProviderResponse],
        question: str,
        history: list[Turn],
        language: str,
    ) -> AggregationResult:
        """Reduce collected responses to the final result."""
        by_name = {r.provider: r for r in responses}
        raw = {name: by_name[name].display_text(language) for name in self._fanout.names if name in by_name}

        valid = valid_responses(responses)
        if not valid:
            logger.warning("No valid responses from %d providers", len(responses))
            return AggregationResult(answer=no_valid_responses_message(language), raw_responses=raw)

        vectors = await self._scorer.embed_responses(valid)
        selection = await self._selector.select(
            SelectionContext(
                valid=valid,
                vectors=vectors,
                question=question,
                history=history,
                language=language,
            )
        )

        logger.info(
            "%d/%d valid answers, policy=%s selected=%s degraded=%s",
            len(valid),
            len(responses),
            selection.policy,
            selection.selected_provider,
            selection.degraded,
        )
        return AggregationResult(
            answer=selection.answer,
            raw_responses=raw,
            contributions=selection.contributions,
            policy=selection.policy,
            degraded=selection.degraded,
            selected_provider=selection.selected_provider,
        )

    def reset(self, session_key: str) -> bool:
        """Clear the session's history. The rate tracker is kept.

        Returns:
            True if there was a history to clear
        """
        return self._store.clear_history(session_key)

    def history(self, session_key: str) -> list[Turn]:
        return self._store.history(session_key)

    def save_conversation(self, response: str, contributions: dict[str, float] | None = None) -> str:
        """Keep a shared answer for later retrieval; returns its id."""
        return self._store.save_conversation(
            SavedConversation(response=response, contributions=dict(contributions or {}))
        )

    def get_conversation(self, conversation_id: str) -> SavedConversation | None:
        return self._store.get_conversation(conversation_id)

    def grant_premium(self, session_key: str, premium: bool = True) -> None:
        self._store.set_premium(session_key, premium, time.time())

    def provider_status(self) -> dict[str, bool]:
        """Provider name -> whether it has a credential."""
        return {p.name: p.is_configured for p in self._fanout.providers}

    @property
    def embedding_model(self) -> str:
        return self._scorer.model_name

    def is_healthy(self) -> bool:
        """Healthy when at least one provider can be called."""
        return any(self.provider_status().values())

    def get_stats(self) -> dict:
        return self._store.stats()

    async def aclose(self) -> None:
        """Close every provider's HTTP client and the embedding backend."""
        for provider in self._fanout.providers:
            await provider.aclose()
        await self._scorer.aclose()
