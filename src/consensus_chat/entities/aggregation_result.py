"""Aggregation result domain entities."""

from dataclasses import dataclass, field

from .rate_tracker import Admission


@dataclass(frozen=True)
class AggregationResult:
    """Final per-request output of the aggregation engine.

    Attributes:
        answer: Selected or synthesized text shown to the user
        raw_responses: Display text for every dispatched provider
        contributions: Provider -> percentage; sums to 100 or is empty
        policy: "reference", "synthesis", or "none" when nothing was valid
        degraded: True when synthesis failed and a fallback answer was used
        selected_provider: Provider whose text became the answer, if any
    """

    answer: str
    raw_responses: dict[str, str] = field(default_factory=dict)
    contributions: dict[str, float] = field(default_factory=dict)
    policy: str = "none"
    degraded: bool = False
    selected_provider: str | None = None


@dataclass(frozen=True)
class ChatOutcome:
    """What the caller of the core gets back: a rejection or a result."""

    admission: Admission
    result: AggregationResult | None = None

    @property
    def rejected(self) -> bool:
        return not self.admission.allowed
