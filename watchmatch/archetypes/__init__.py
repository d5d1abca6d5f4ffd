"""Behavioural viewing archetype classification and compatibility lookup."""

from .classifier import (
    ArchetypeCompatibilityConfig,
    ArchetypeScore,
    ArchetypeResult,
    score_archetypes,
    classify_archetype,
    annotate_with_archetype,
    archetype_compatibility,
    archetype_recommendations,
)

__all__ = [
    "ArchetypeCompatibilityConfig",
    "ArchetypeScore",
    "ArchetypeResult",
    "score_archetypes",
    "classify_archetype",
    "annotate_with_archetype",
    "archetype_compatibility",
    "archetype_recommendations",
]
