"""Pairwise compatibility scoring: weights, factors, analytics and descriptions."""

from .weights import ScoringWeights
from .swipe_analytics import (
    SwipeAnalytics,
    ContentTypeBreakdown,
    analyze_swipe_preferences,
    swipe_insights,
)
from .debate import (
    DebateCompatibility,
    calculate_debate_compatibility,
    sweet_spot_score,
    prompts_by_category,
    debate_categories,
)
from .factors import SharedItem, FactorResult, FactorContext, tone_profile
from .description import (
    DescriptionThresholds,
    pluralize,
    join_phrases,
    build_clauses,
    generate_description,
)
from .scorer import PairScore, PairwiseScorer, score_pair

__all__ = [
    "ScoringWeights",
    "SwipeAnalytics",
    "ContentTypeBreakdown",
    "analyze_swipe_preferences",
    "swipe_insights",
    "DebateCompatibility",
    "calculate_debate_compatibility",
    "sweet_spot_score",
    "prompts_by_category",
    "debate_categories",
    "SharedItem",
    "FactorResult",
    "FactorContext",
    "tone_profile",
    "DescriptionThresholds",
    "pluralize",
    "join_phrases",
    "build_clauses",
    "generate_description",
    "PairScore",
    "PairwiseScorer",
    "score_pair",
]
