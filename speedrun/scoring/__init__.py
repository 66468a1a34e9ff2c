"""Scoring package initialization."""
from .tiers import tier_for_size
from .scoring_engine import ScoringEngine, group_by_tier, normalize, top_recommendation

__all__ = [
    'tier_for_size',
    'ScoringEngine',
    'group_by_tier',
    'normalize',
    'top_recommendation',
]
