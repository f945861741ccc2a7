"""
Tests for the consensus chat API.
"""

import pytest
from fakes import FakeClock, FakeEmbeddingProvider, FakeProvider
from fastapi.testclient import TestClient

from consensus_chat.api.app import create_app
from consensus_chat.api.dependencies import SESSION_COOKIE
from consensus_chat.errors import ProviderResponseError
from consensus_chat.prompts import rate_limit_message
from consensus_chat.repositories import InMemorySessionStore
from consensus_chat.services import (
    AggregationService,
    EmbeddingScorer,
    ProviderFanout,
    RateGate,
    ReferenceSelector,
)


@pytest.fixture
def providers():
    return [
        FakeProvider("OpenAI", "Paris is the capital."),
        FakeProvider("DeepSeek", error=ProviderResponseError("no valid response from DeepSeek")),
        FakeProvider("Gemini", "The capital of France is Paris.", delay=0.02),
    ]


@pytest.fixture
def service(providers):
    store = InMemorySessionStore.create()
    embeddings = FakeEmbeddingProvider(
        {
            "Paris is the capital.": [1.0, 0.0],
            "The capital of France is Paris.": [0.95, 0.31],
        }
    )
    return AggregationService(
        fanout=ProviderFanout(providers),
        scorer=EmbeddingScorer(embeddings),
        store=store,
        rate_gate=RateGate(store, hourly_limit=2, clock=FakeClock()),
        selector=ReferenceSelector(),
    )


@pytest.fixture
def client(service):
    """Create a test client."""
    with TestClient(create_app(service)) as client:
        yield client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Consensus Chat API"
    assert "chat" in data["endpoints"]


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["providers"] == {"OpenAI": True, "DeepSeek": True, "Gemini": True}
    assert data["embedding_backend"] == "fake-embed"


def test_chat(client):
    """Test chat endpoint."""
    response = client.post("/chat", json={"message": "What is the capital of France?", "language": "English"})
    assert response.status_code == 200
    data = response.json()
    assert data["response"] == "Paris is the capital."
    assert set(data["raw_responses"]) == {"OpenAI", "DeepSeek", "Gemini"}
    assert data["raw_responses"]["DeepSeek"].startswith("Error:")
    assert set(data["contributions"]) == {"OpenAI", "Gemini"}
    assert sum(data["contributions"].values()) == pytest.approx(100.0)
    assert data["rejected"] is False
    assert data["policy"] == "reference"


def test_chat_sets_and_reuses_session_cookie(client, service):
    """Test the session cookie is minted once and reused."""
    first = client.post("/chat", json={"message": "Hi"})
    session_id = first.cookies.get(SESSION_COOKIE)
    assert session_id

    client.post("/chat", json={"message": "Again"})

    assert len(service.history(session_id)) == 4


def test_chat_rate_limited_is_still_ok(client, providers):
    """Test a rate limited chat is a 200 with rejected set."""
    for _ in range(2):
        client.post("/chat", json={"message": "q"})
    calls_before = len(providers[0].calls)

    response = client.post("/chat", json={"message": "q"})

    assert response.status_code == 200
    data = response.json()
    assert data["rejected"] is True
    assert data["response"] == rate_limit_message(2)
    assert data["raw_responses"] == {}
    assert len(providers[0].calls) == calls_before


def test_chat_blank_message(client):
    """Test blank and empty messages."""
    assert client.post("/chat", json={"message": "   "}).status_code == 400
    assert client.post("/chat", json={"message": ""}).status_code == 422


def test_clear(client, service):
    """Test clear endpoint."""
    client.post("/chat", json={"message": "Hi"})
    session_id = client.cookies.get(SESSION_COOKIE)

    response = client.post("/clear")

    assert response.status_code == 200
    assert response.json()["cleared"] is True
    assert service.history(session_id) == []


def test_save_and_fetch_conversation(client):
    """Test saving and fetching a conversation."""
    response = client.post("/conversations", json={"response": "Paris", "contributions": {"OpenAI": 100.0}})
    assert response.status_code == 200
    conversation_id = response.json()["conversation_id"]

    fetched = client.get(f"/conversations/{conversation_id}")
    assert fetched.status_code == 200
    data = fetched.json()
    assert data["response"] == "Paris"
    assert data["contributions"] == {"OpenAI": 100.0}


def test_missing_conversation(client):
    """Test unknown conversation ids return 404."""
    response = client.get("/conversations/does-not-exist")
    assert response.status_code == 404


def test_stats(client):
    """Test stats endpoint."""
    client.post("/chat", json={"message": "Hi"})
    client.post("/conversations", json={"response": "Paris"})

    response = client.get("/stats")

    assert response.status_code == 200
    store = response.json()["store"]
    assert store["sessions"] == 1
    assert store["tracked_sessions"] == 1
    assert store["saved_conversations"] == 1
