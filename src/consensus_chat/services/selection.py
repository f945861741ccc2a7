"""Answer selection policies.

Two policies are available:

- ``reference``: the earliest valid answer is the reference; the answer
  that agrees with it most becomes the final text.
- ``synthesis``: one provider merges every valid answer into a new one;
  if that fails, the first valid answer in a fixed priority order is used.

Both are only called with at least one valid answer. The "no valid
responses" case is handled by the aggregation service before selection.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from consensus_chat.entities import ProviderResponse, Turn
from consensus_chat.errors import EmbeddingUnavailable
from consensus_chat.prompts import build_synthesis_prompt

from .contributions import compute_contributions, equal_split
from .fanout import ProviderFanout
from .scoring import EmbeddingScorer, cosine_similarity

logger = logging.getLogger(__name__)

FALLBACK_ORDER = ("OpenAI", "DeepSeek", "Gemini", "Mistral", "Cohere")


@dataclass(frozen=True)
class SelectionContext:
    """Everything a policy may look at.

    Attributes:
        valid: Successful responses, earliest arrival first (never empty)
        vectors: Provider -> embedding, only for answers that could be embedded
        question: The user's question
        history: Prior turns of the session
        language: Target response language
    """

    valid: list[ProviderResponse]
    vectors: dict[str, list[float]]
    question: str
    history: list[Turn] = field(default_factory=list)
    language: str = "Italiano"

    def __post_init__(self) -> None:
        if not self.valid:
            raise ValueError("SelectionContext needs at least one valid response")

    @property
    def vectored(self) -> list[str]:
        """Providers with an embedding, in arrival order."""
        return [r.provider for r in self.valid if r.provider in self.vectors]


@dataclass(frozen=True)
class Selection:
    answer: str
    contributions: dict[str, float]
    policy: str
    degraded: bool = False
    selected_provider: str | None = None


class Selector(Protocol):
    async def select(self, context: SelectionContext) -> Selection: ...


def similarities_to(context: SelectionContext, vector: list[float]) -> dict[str, float]:
    """Similarity of every vectored provider to ``vector``, in arrival order."""
    return {name: cosine_similarity(vector, context.vectors[name]) for name in context.vectored}


def reference_contributions(context: SelectionContext, reference: ProviderResponse) -> dict[str, float]:
    """Contributions measured against ``reference``'s embedding.

    Falls back to an equal split over vectored providers when the reference
    itself has no embedding.
    """
    ref_vector = context.vectors.get(reference.provider)
    if ref_vector is None:
        return equal_split(context.vectored)
    return compute_contributions(similarities_to(context, ref_vector), participants=context.vectored)


class ReferenceSelector:
    """Pick the answer closest to the earliest valid one.

    Every vectored answer is a candidate, the reference included, so the
    reference itself usually wins with its self similarity (~1.0). Ties go
    to the earliest arrival.
    """

    policy = "reference"

    async def select(self, context: SelectionContext) -> Selection:
        reference = context.valid[0]
        ref_vector = context.vectors.get(reference.provider)

        if ref_vector is None:
            logger.info("Reference %s has no embedding, using its answer as-is", reference.provider)
            return Selection(
                answer=reference.content,
                contributions=equal_split(context.vectored),
                policy=self.policy,
                selected_provider=reference.provider,
            )

        scores = similarities_to(context, ref_vector)
        candidates = [r for r in context.valid if r.provider in scores]
        best = max(candidates, key=lambda r: (scores[r.provider], -r.arrival))

        logger.debug("Reference %s, selected %s, scores %s", reference.provider, best.provider, scores)
        return Selection(
            answer=best.content,
            contributions=compute_contributions(scores, participants=context.vectored),
            policy=self.policy,
            selected_provider=best.provider,
        )


class SynthesisSelector:
    """Ask one provider to merge all valid answers into a single reply.

    Example:
        ```python
        selector = SynthesisSelector(fanout, scorer, synthesis_provider="OpenAI")
        selection = await selector.select(context)
        ```
    """

    policy = "synthesis"

    def __init__(
        self,
        fanout: ProviderFanout,
        scorer: EmbeddingScorer,
        synthesis_provider: str = "OpenAI",
        fallback_order: tuple[str, ...] = FALLBACK_ORDER,
    ) -> None:
        """Initialize the synthesizer.

        Args:
            fanout: Used for its single-provider call (timeout and retries included)
            scorer: Embeds the synthesized text for contributions
            synthesis_provider: Name of the provider that writes the merged answer
            fallback_order: Priority order used when synthesis fails
        """
        self._fanout = fanout
        self._scorer = scorer
        self._synthesis_provider = synthesis_provider
        self._fallback_order = tuple(fallback_order)

    async def select(self, context: SelectionContext) -> Selection:
        synthesized = await self._synthesize(context)
        if synthesized is None:
            return self._fallback(context)

        try:
            vector = await self._scorer.embed(synthesized)
        except EmbeddingUnavailable as e:
            logger.warning("Synthesized answer could not be embedded: %s", e)
            contributions = equal_split(context.vectored)
        else:
            contributions = compute_contributions(similarities_to(context, vector), participants=context.vectored)

        return Selection(
            answer=synthesized,
            contributions=contributions,
            policy=self.policy,
            selected_provider=self._synthesis_provider,
        )

    async def _synthesize(self, context: SelectionContext) -> str | None:
        provider = self._fanout.get(self._synthesis_provider)
        if provider is None:
            logger.warning("Synthesis provider %s is not registered", self._synthesis_provider)
            return None

        prompt = build_synthesis_prompt(
            context.history,
            context.question,
            context.language,
            {r.provider: r.content for r in context.valid},
        )
        # The prompt already carries the history.
        response = await self._fanout.call(provider, [], prompt, context.language)
        if not response.success or not response.content.strip():
            logger.warning("Synthesis by %s failed: %s", self._synthesis_provider, response.error or "empty answer")
            return None
        return response.content

    def _fallback(self, context: SelectionContext) -> Selection:
        by_name = {r.provider: r for r in context.valid}
        chosen = next((by_name[name] for name in self._fallback_order if name in by_name), context.valid[0])
        logger.info("Falling back to %s answer", chosen.provider)

        return Selection(
            answer=chosen.content,
            contributions=reference_contributions(context, chosen),
            policy=self.policy,
            degraded=True,
            selected_provider=chosen.provider,
        )
