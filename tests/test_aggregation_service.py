"""
End-to-end tests for the aggregation service with in-process providers.
"""

import asyncio

import httpx
import pytest
from fakes import FakeClock, FakeEmbeddingProvider, FakeProvider

from consensus_chat.config import Settings
from consensus_chat.entities import ERROR_PREFIX, Turn
from consensus_chat.errors import ProviderResponseError
from consensus_chat.prompts import no_valid_responses_message, rate_limit_message
from consensus_chat.repositories import InMemorySessionStore
from consensus_chat.services import (
    AggregationService,
    EmbeddingScorer,
    ProviderFanout,
    RateGate,
    ReferenceSelector,
    RetryPolicy,
)

PARIS_A = "Paris is the capital."
PARIS_C = "The capital of France is Paris."


async def _no_sleep(delay):
    return None


def _service(providers, vectors=None, store=None, clock=None, hourly_limit=15):
    store = store or InMemorySessionStore.create()
    clock = clock or FakeClock()
    return AggregationService(
        fanout=ProviderFanout(providers, retry_policy=RetryPolicy(max_attempts=3, base_delay=0.0), sleep=_no_sleep),
        scorer=EmbeddingScorer(FakeEmbeddingProvider(vectors or {})),
        store=store,
        rate_gate=RateGate(store, hourly_limit=hourly_limit, clock=clock),
        selector=ReferenceSelector(),
        default_language="Italiano",
    )


def _five_providers_three_valid():
    return [
        FakeProvider("OpenAI", PARIS_A),
        FakeProvider("DeepSeek", error=ProviderResponseError("no valid response from DeepSeek")),
        FakeProvider("Gemini", PARIS_C, delay=0.05),
        FakeProvider("Mistral", configured=False),
        FakeProvider("Cohere", "Paris", delay=0.1),
    ]


VECTORS = {PARIS_A: [1.0, 0.0, 0.0], PARIS_C: [0.95, 0.31, 0.0], "Paris": [0.9, 0.0, 0.4]}


def test_five_providers_three_valid():
    """Three valid answers out of five providers."""
    service = _service(_five_providers_three_valid(), VECTORS)

    outcome = asyncio.run(service.ask("s1", "What is the capital of France?", "English"))

    assert not outcome.rejected
    result = outcome.result
    assert list(result.raw_responses) == ["OpenAI", "DeepSeek", "Gemini", "Mistral", "Cohere"]
    assert result.raw_responses["OpenAI"] == PARIS_A
    assert result.raw_responses["DeepSeek"].startswith(ERROR_PREFIX)
    assert result.raw_responses["Mistral"] == (
        f"{ERROR_PREFIX} Mistral did not respond: MISTRAL_API_KEY is not set. (in English)"
    )
    assert 0 < len(result.contributions) <= 3
    assert set(result.contributions) <= {"OpenAI", "Gemini", "Cohere"}
    assert sum(result.contributions.values()) == pytest.approx(100.0)
    assert result.policy == "reference"


def test_rejection_makes_no_provider_calls():
    """Test that a rejected request never reaches a provider."""
    providers = [FakeProvider("A", "a"), FakeProvider("B", "b")]
    store = InMemorySessionStore.create()
    service = _service(providers, store=store, hourly_limit=15)
    store.update_tracker("s1", lambda t: setattr(t, "hourly_count", 15), now=FakeClock().now)

    outcome = asyncio.run(service.ask("s1", "anything at all"))

    assert outcome.rejected
    assert outcome.result is None
    assert outcome.admission.reason == rate_limit_message(15)
    assert all(p.calls == [] for p in providers)
    assert store.history("s1") == []


def test_rejection_message_does_not_depend_on_question():
    """Test the rate limit message is fixed."""
    service = _service([FakeProvider("A", "a")], hourly_limit=1)
    asyncio.run(service.ask("s1", "first"))

    first = asyncio.run(service.ask("s1", "second question"))
    second = asyncio.run(service.ask("s1", "something else entirely"))

    assert first.admission.reason == second.admission.reason == rate_limit_message(1)


def test_all_providers_failing_gives_no_valid_message():
    """Test the localized message when every provider fails."""
    providers = [
        FakeProvider("A", error=ProviderResponseError("bad")),
        FakeProvider("B", error=httpx.ConnectError("refused")),
        FakeProvider("C", configured=False),
    ]
    service = _service(providers)

    outcome = asyncio.run(service.ask("s1", "Hello?", "English"))

    assert outcome.result.answer == no_valid_responses_message("English")
    assert outcome.result.contributions == {}
    assert outcome.result.policy == "none"
    assert all(text.startswith(ERROR_PREFIX) for text in outcome.result.raw_responses.values())


def test_default_language_is_used_when_missing():
    """Test the default language fills in a missing one."""
    provider = FakeProvider("A", "Parigi")
    service = _service([provider])

    asyncio.run(service.ask("s1", "Capitale della Francia?"))

    assert provider.calls[0][2] == "Italiano"


def test_history_grows_with_each_answered_request():
    """Test each answered request appends a user/assistant pair."""
    provider = FakeProvider("A", "Paris")
    store = InMemorySessionStore.create()
    service = _service([provider], store=store)

    asyncio.run(service.ask("s1", "Capital of France?", "English"))
    asyncio.run(service.ask("s1", "And of Italy?", "English"))

    assert store.history("s1") == [
        Turn.user("Capital of France?"),
        Turn.assistant("Paris"),
        Turn.user("And of Italy?"),
        Turn.assistant("Paris"),
    ]
    # The second call saw the first exchange
    assert provider.calls[1][0] == [Turn.user("Capital of France?"), Turn.assistant("Paris")]


def test_reset_clears_history_but_keeps_quota():
    """Test reset forgets history but not the hourly count."""
    store = InMemorySessionStore.create()
    service = _service([FakeProvider("A", "a")], store=store, hourly_limit=1)
    asyncio.run(service.ask("s1", "q"))

    assert service.reset("s1") is True
    assert service.history("s1") == []
    assert asyncio.run(service.ask("s1", "again")).rejected


def test_blank_question_is_rejected():
    """Test blank questions raise."""
    service = _service([FakeProvider("A", "a")])
    with pytest.raises(ValueError):
        asyncio.run(service.ask("s1", "   "))


def test_grant_premium_lifts_limit():
    """Test granting premium lifts the hourly limit."""
    service = _service([FakeProvider("A", "a")], hourly_limit=1)
    asyncio.run(service.ask("s1", "q"))
    service.grant_premium("s1")

    assert not asyncio.run(service.ask("s1", "q")).rejected


def test_save_and_get_conversation():
    """Test saving and loading a conversation."""
    service = _service([FakeProvider("A", "a")])

    conversation_id = service.save_conversation("Paris", {"A": 100.0})

    saved = service.get_conversation(conversation_id)
    assert saved.response == "Paris"
    assert saved.contributions == {"A": 100.0}
    assert service.get_conversation("nope") is None


def test_health_and_aclose():
    """Test provider status, health and shutdown."""
    providers = [FakeProvider("A", "a"), FakeProvider("B", configured=False)]
    embeddings = FakeEmbeddingProvider()
    store = InMemorySessionStore.create()
    service = AggregationService(
        fanout=ProviderFanout(providers),
        scorer=EmbeddingScorer(embeddings),
        store=store,
        rate_gate=RateGate(store),
        selector=ReferenceSelector(),
    )

    assert service.provider_status() == {"A": True, "B": False}
    assert service.is_healthy()
    assert service.embedding_model == "fake-embed"

    asyncio.run(service.aclose())
    assert all(p.closed for p in providers)
    assert embeddings.closed


def test_create_wires_synthesis_policy_from_settings():
    """Test create() picks the synthesis policy from settings."""
    synth = FakeProvider("OpenAI", "Merged: Paris")
    other = FakeProvider("Gemini", "Paris")
    settings = Settings(selection_policy="synthesis", synthesis_provider="OpenAI", retry_base_delay=0.0)

    service = AggregationService.create(
        settings,
        providers=[synth, other],
        embedding_provider=FakeEmbeddingProvider({"Merged: Paris": [1.0, 0.0], "Paris": [1.0, 0.0]}),
    )
    outcome = asyncio.run(service.ask("s1", "Capital of France?", "English"))

    assert outcome.result.policy == "synthesis"
    assert outcome.result.answer == "Merged: Paris"
    assert len(synth.calls) == 2


def test_create_uses_configured_premium_sessions():
    """Test create() passes premium sessions to the store."""
    settings = Settings(premium_sessions=("vip",), hourly_limit=1)
    service = AggregationService.create(
        settings,
        providers=[FakeProvider("A", "a")],
        embedding_provider=FakeEmbeddingProvider(),
    )

    for _ in range(3):
        assert not asyncio.run(service.ask("vip", "q")).rejected


def test_paris_scenario_returns_the_reference_answer():
    """The earliest valid answer wins when the others agree with it."""
    providers = [
        FakeProvider("A", PARIS_A),
        FakeProvider("B", error=httpx.ConnectError("refused")),
        FakeProvider("C", PARIS_C, delay=0.05),
    ]
    vectors = {PARIS_A: [1.0, 0.0], PARIS_C: [0.95, 0.312]}
    service = _service(providers, vectors)

    outcome = asyncio.run(service.ask("s1", "What is the capital of France?", "English"))

    result = outcome.result
    assert result.answer == PARIS_A
    assert set(result.contributions) == {"A", "C"}
    assert result.contributions["A"] == pytest.approx(50.0, abs=5.0)
    assert result.raw_responses["B"].startswith(ERROR_PREFIX)


def test_all_providers_failing_under_synthesis_policy():
    """With no valid answer the synthesis provider is never asked to merge."""
    synth = FakeProvider("OpenAI", error=ProviderResponseError("bad"))
    other = FakeProvider("Gemini", configured=False)
    settings = Settings(selection_policy="synthesis", synthesis_provider="OpenAI", retry_base_delay=0.0)
    service = AggregationService.create(settings, providers=[synth, other], embedding_provider=FakeEmbeddingProvider())

    outcome = asyncio.run(service.ask("s1", "Hello?", "English"))

    assert outcome.result.answer == no_valid_responses_message("English")
    assert outcome.result.contributions == {}
    assert outcome.result.policy == "none"
    assert not outcome.result.degraded
    # Only the fan-out call, no second call for synthesis
    assert len(synth.calls) == 1
    assert other.calls == []
