"""Quiz scoring engine: answers -> category scores -> personality traits."""

from .attempt import (
    QuizAttempt,
    QuizAnswer,
    ArchetypeStrength,
    PersonalityTraits,
    TraitLevel,
    DominantTrait,
)
from .scoring import (
    QuizScoringConfig,
    QuizCompatibility,
    process_quiz_completion,
    calculate_category_scores,
    compute_personality_traits,
    calculate_compatibility_factors,
    calculate_quiz_compatibility,
    compare_category_scores,
    compare_archetypes,
    compare_answers,
    generate_personality_bio,
    latest_attempt,
    trait_level,
)

__all__ = [
    "QuizAttempt",
    "QuizAnswer",
    "ArchetypeStrength",
    "PersonalityTraits",
    "TraitLevel",
    "DominantTrait",
    "QuizScoringConfig",
    "QuizCompatibility",
    "process_quiz_completion",
    "calculate_category_scores",
    "compute_personality_traits",
    "calculate_compatibility_factors",
    "calculate_quiz_compatibility",
    "compare_category_scores",
    "compare_archetypes",
    "compare_answers",
    "generate_personality_bio",
    "latest_attempt",
    "trait_level",
]
