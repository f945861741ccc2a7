"""Similarity scores to contribution percentages."""

from collections.abc import Iterable


def equal_split(providers: Iterable[str]) -> dict[str, float]:
    """Give every provider the same share of 100."""
    providers = list(dict.fromkeys(providers))
    if not providers:
        return {}
    share = 100.0 / len(providers)
    return {name: share for name in providers}


def compute_contributions(
    scores: dict[str, float],
    participants: Iterable[str] | None = None,
) -> dict[str, float]:
    """Normalize similarity scores into percentages.

    Scores at or below zero weigh nothing. If no score is positive, the
    result is an equal split across ``participants`` (defaults to the
    providers in ``scores``).

    Args:
        scores: Provider -> similarity
        participants: Providers sharing the result when every score is non-positive

    Returns:
        Provider -> percentage, summing to 100, or empty for empty input

    Example:
        >>> compute_contributions({"A": 1.0, "B": 1.0})
        {'A': 50.0, 'B': 50.0}
    """
    if not scores:
        return {}

    weights = {name: max(score, 0.0) for name, score in scores.items()}
    total = sum(weights.values())
    if total <= 0:
        return equal_split(participants if participants is not None else scores)

    return {name: weight / total * 100.0 for name, weight in weights.items()}
