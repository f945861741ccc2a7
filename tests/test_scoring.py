"""
Tests for cosine similarity and the embedding scorer.
"""

import asyncio

import pytest
from fakes import FakeEmbeddingProvider

from consensus_chat.entities import ProviderResponse
from consensus_chat.errors import EmbeddingUnavailable
from consensus_chat.services import EmbeddingScorer, cosine_similarity


def test_cosine_is_symmetric():
    """Test symmetry."""
    a = [0.3, -1.2, 4.0]
    b = [2.0, 0.5, -0.7]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_cosine_self_similarity_is_one():
    """Test self similarity."""
    v = [0.1, 0.2, 0.3, 0.4]
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_unequal_length_is_zero():
    """Test unequal lengths."""
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0


def test_cosine_zero_vector_is_zero():
    """Test zero vectors."""
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0


def test_cosine_empty_is_zero():
    """Test empty vectors."""
    assert cosine_similarity([], []) == 0.0


def test_cosine_negative_is_not_clamped():
    """Test negative similarity."""
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_cosine_orthogonal():
    """Test orthogonal vectors."""
    assert cosine_similarity([1.0, 0.0], [0.0, 3.0]) == pytest.approx(0.0)


def test_embed_returns_vector():
    """Test embedding a text."""
    scorer = EmbeddingScorer(FakeEmbeddingProvider({"hello": [1, 2, 3]}))
    assert asyncio.run(scorer.embed("hello")) == [1.0, 2.0, 3.0]


def test_embed_empty_vector_is_unavailable():
    """Test empty vectors are unavailable."""
    scorer = EmbeddingScorer(FakeEmbeddingProvider({"hello": []}))
    with pytest.raises(EmbeddingUnavailable):
        asyncio.run(scorer.embed("hello"))


def test_embed_wraps_unexpected_errors():
    """Test unexpected backend errors."""
    class Broken(FakeEmbeddingProvider):
        async def encode(self, text):
            raise RuntimeError("boom")

    scorer = EmbeddingScorer(Broken())
    with pytest.raises(EmbeddingUnavailable, match="boom"):
        asyncio.run(scorer.embed("anything"))


def test_embed_responses_skips_failures_and_missing_vectors():
    """Test only valid, embeddable answers get vectors."""
    provider = FakeEmbeddingProvider({"Paris": [1.0, 0.0], "Rome": [0.0, 1.0]})
    scorer = EmbeddingScorer(provider)
    responses = [
        ProviderResponse.ok("A", "Paris"),
        ProviderResponse.failed("B", "timeout"),
        ProviderResponse.ok("C", "Rome"),
        ProviderResponse.ok("D", "unknown text"),
    ]

    vectors = asyncio.run(scorer.embed_responses(responses))

    assert vectors == {"A": [1.0, 0.0], "C": [0.0, 1.0]}
    # Failed responses are never sent to the embedding backend
    assert sorted(provider.calls) == ["Paris", "Rome", "unknown text"]


def test_model_name_comes_from_provider():
    """Test model name."""
    scorer = EmbeddingScorer(FakeEmbeddingProvider(model_name="embed-multilingual-v3.0"))
    assert scorer.model_name == "embed-multilingual-v3.0"
