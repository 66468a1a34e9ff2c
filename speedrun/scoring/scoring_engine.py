"""Scores benchmark outcomes against each other and groups them by tier."""
from typing import Dict, List, Optional, Sequence

from speedrun.shared.models import BenchmarkOutcome, MemoryTier, ScoredOutcome

from .tiers import tier_for_size


def normalize(value: float, maximum: float) -> float:
    """Scale ``value`` to 0-100 against ``maximum``; 0 when the maximum is 0."""
    return value / maximum * 100 if maximum > 0 else 0.0


class ScoringEngine:
    """Computes speed, quality, and composite scores for a full result set.

    Scores depend on the maxima of the whole set, so they are recomputed from
    scratch on every call.
    """

    def __init__(self, speed_weight: float = 0.6, quality_weight: float = 0.4):
        self.speed_weight = speed_weight
        self.quality_weight = quality_weight

    def composite(self, speed_score: float, quality_score: float) -> float:
        return speed_score * self.speed_weight + quality_score * self.quality_weight

    def score(self, outcomes: Sequence[BenchmarkOutcome]) -> List[ScoredOutcome]:
        """
        Score every outcome.

        Quality is output length relative to the longest answer, a proxy for
        thoroughness only; it says nothing about correctness.

        Args:
            outcomes: All successful benchmark outcomes of a run.

        Returns:
            ScoredOutcome list in input order.
        """
        if not outcomes:
            return []

        max_tps = max(o.tokens_per_second for o in outcomes)
        max_tokens = max(o.total_tokens for o in outcomes)

        scored = []
        for outcome in outcomes:
            speed_score = normalize(outcome.tokens_per_second, max_tps)
            quality_score = normalize(outcome.total_tokens, max_tokens)
            scored.append(ScoredOutcome(
                outcome=outcome,
                speed_score=speed_score,
                quality_score=quality_score,
                composite_score=self.composite(speed_score, quality_score),
                tier=tier_for_size(outcome.model.size_bytes),
            ))
        return scored


def group_by_tier(scored: Sequence[ScoredOutcome]) -> Dict[MemoryTier, List[ScoredOutcome]]:
    """Group by tier (smallest first), best composite first, empty tiers omitted."""
    grouped: Dict[MemoryTier, List[ScoredOutcome]] = {}
    for tier in MemoryTier:
        in_tier = [s for s in scored if s.tier == tier]
        if in_tier:
            grouped[tier] = sorted(in_tier, key=lambda s: s.composite_score, reverse=True)
    return grouped


def top_recommendation(scored: Sequence[ScoredOutcome]) -> Optional[ScoredOutcome]:
    """The single best composite score across every tier."""
    if not scored:
        return None
    return max(scored, key=lambda s: s.composite_score)
