"""
Quiz scoring engine.

Turns a raw answer set into a QuizAttempt and compares two attempts.

Category Score Formula:
    score(C) = 100 * sum(points of answers in C) / sum(max points of those questions)

Archetype Strength:
    strength(A) = mean of score(C) over A's indicator categories that were answered
    A is retained when strength >= threshold (65); top 3 kept, strongest first.

Quiz Compatibility Formula:
    category = mean over union of categories of (100 - |a - b|), missing -> 50
    archetype = 100 * |shared| / |union|, or 50 if either side has none
    answers   = 100 * literal matches / shared question ids, 0 if none shared
    score = round(0.4 * category + 0.3 * archetype + 0.3 * answers)

Unknown questions and options are dropped silently rather than rejected.
"""

import logging
import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Iterable

from ..clock import Clock, utc_now
from ..ids import IdGenerator, uuid_id_generator
from ..reference import ReferenceData, default_reference
from .attempt import (
    QuizAttempt,
    QuizAnswer,
    ArchetypeStrength,
    PersonalityTraits,
    TraitLevel,
    DominantTrait,
)

logger = logging.getLogger(__name__)


@dataclass
class QuizScoringConfig:
    """
    Constants of the quiz scoring model.

    Attributes:
        category_weight: Weight of category-score similarity
        archetype_weight: Weight of archetype-set similarity
        answer_weight: Weight of literal answer agreement
        archetype_threshold: Minimum indicator average to include an archetype
        max_archetypes: Number of archetypes retained per attempt
        dominant_trait_count: Number of dominant traits reported
        neutral_category_score: Stand-in score for a category one side lacks
    """
    category_weight: float = 0.4
    archetype_weight: float = 0.3
    answer_weight: float = 0.3
    archetype_threshold: float = 65.0
    max_archetypes: int = 3
    dominant_trait_count: int = 5
    neutral_category_score: float = 50.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "QuizScoringConfig":
        """Create from main config dictionary."""
        quiz = config.get("quiz", {})
        return cls(
            category_weight=quiz.get("category_weight", 0.4),
            archetype_weight=quiz.get("archetype_weight", 0.3),
            answer_weight=quiz.get("answer_weight", 0.3),
            archetype_threshold=quiz.get("archetype_threshold", 65),
            max_archetypes=quiz.get("max_archetypes", 3),
            dominant_trait_count=quiz.get("dominant_trait_count", 5),
            neutral_category_score=quiz.get("neutral_category_score", 50),
        )


@dataclass
class QuizCompatibility:
    """Result of comparing two quiz attempts."""
    score: int
    category_compatibility: float = 0.0
    archetype_compatibility: float = 0.0
    answer_compatibility: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "details": {
                "categoryCompatibility": self.category_compatibility,
                "archetypeCompatibility": self.archetype_compatibility,
                "answerCompatibility": self.answer_compatibility,
            },
        }


def trait_level(score: float) -> str:
    """Qualitative level for a 0-100 category score."""
    if score >= 80:
        return "very_high"
    if score >= 60:
        return "high"
    if score >= 40:
        return "moderate"
    if score >= 20:
        return "low"
    return "very_low"


def resolve_answers(
    answers: Iterable[Dict[str, Any]],
    reference: ReferenceData
) -> List[QuizAnswer]:
    """
    Attach point values to raw answers.

    Answers to unknown questions are dropped; an unknown option on a known
    question is kept with 0 points. A repeated question keeps its position
    and takes the latest value.
    """
    resolved: Dict[str, QuizAnswer] = {}
    for raw in answers:
        question_id = str(raw.get("questionId", raw.get("question_id", "")))
        selected = str(raw.get("selectedValue", raw.get("selected_value", "")))
        question = reference.questions.get(question_id)
        if question is None:
            logger.debug(f"Dropping answer to unknown question {question_id!r}")
            continue
        points = question.points_for(selected)
        resolved[question_id] = QuizAnswer(question_id, selected, points or 0.0)
    return list(resolved.values())


def calculate_category_scores(
    answers: List[QuizAnswer],
    reference: ReferenceData
) -> Dict[str, float]:
    """
    Normalize answer points to a 0-100 score per category.

    Args:
        answers: Answers with resolved point values
        reference: Reference tables holding the question bank

    Returns:
        Category -> score; categories with zero attainable points score 0
    """
    totals: Dict[str, float] = {}
    max_points: Dict[str, float] = {}

    for answer in answers:
        question = reference.questions.get(answer.question_id)
        if question is None or not question.category:
            continue
        category = question.category
        totals[category] = totals.get(category, 0.0) + (answer.points or 0.0)
        max_points[category] = max_points.get(category, 0.0) + question.max_points

    scores = {}
    for category, total in totals.items():
        if max_points[category] > 0:
            scores[category] = total / max_points[category] * 100
        else:
            scores[category] = 0.0
    return scores


def compute_personality_traits(
    category_scores: Dict[str, float],
    reference: ReferenceData,
    config: Optional[QuizScoringConfig] = None
) -> PersonalityTraits:
    """
    Derive archetypes, trait levels and dominant traits from category scores.

    An indicator category missing from the scores is excluded from that
    archetype's average rather than counted as zero.
    """
    config = config or QuizScoringConfig()

    traits = {
        category: TraitLevel(score=score, level=trait_level(score))
        for category, score in category_scores.items()
    }

    archetypes = []
    for archetype in reference.personality_archetypes.values():
        present = [category_scores[c] for c in archetype.indicators if c in category_scores]
        average = sum(present) / len(present) if present else 0.0
        if present and average >= config.archetype_threshold:
            archetypes.append(ArchetypeStrength(
                type=archetype.type,
                name=archetype.name,
                description=archetype.description,
                strength=average,
            ))

    archetypes.sort(key=lambda a: a.strength, reverse=True)

    ranked = sorted(category_scores.items(), key=lambda kv: kv[1], reverse=True)
    dominant = [
        DominantTrait(category=c, name=reference.category_name(c), score=s)
        for c, s in ranked[:config.dominant_trait_count]
    ]

    return PersonalityTraits(
        archetypes=archetypes[:config.max_archetypes],
        traits=traits,
        dominant_traits=dominant,
    )


def calculate_compatibility_factors(category_scores: Dict[str, float]) -> Dict[str, float]:
    """Aggregate category scores into the four matching factors."""
    s = category_scores
    return {
        "viewingStyle": s.get("viewing_style", 0.0),
        "contentPreferences": (
            s.get("movie_preferences", 0.0) + s.get("content", 0.0) + s.get("franchises", 0.0)
        ) / 3,
        "socialViewing": (s.get("social_viewing", 0.0) + s.get("viewing_etiquette", 0.0)) / 2,
        "engagement": (s.get("engagement", 0.0) + s.get("viewing_habits", 0.0)) / 2,
    }


def generate_personality_bio(
    traits: PersonalityTraits,
    reference: Optional[ReferenceData] = None
) -> str:
    """Short profile bio from the primary archetype and top trait."""
    if not traits.archetypes:
        return ""

    reference = reference or default_reference()
    parts = [traits.archetypes[0].description]

    if traits.dominant_traits:
        top = traits.dominant_traits[0]
        description = reference.trait_descriptions.get(top.category)
        if description:
            parts.append(description)

    if len(traits.archetypes) > 1:
        parts.append(f"Also {traits.archetypes[1].description.lower()}")

    return ". ".join(parts) + "."


def process_quiz_completion(
    user_id: str,
    answers: Iterable[Dict[str, Any]],
    reference: Optional[ReferenceData] = None,
    config: Optional[QuizScoringConfig] = None,
    id_generator: Optional[IdGenerator] = None,
    clock: Clock = utc_now
) -> QuizAttempt:
    """
    Score a completed quiz.

    Args:
        user_id: Owning user id
        answers: Ordered ``{questionId, selectedValue}`` records
        reference: Reference tables (default: packaged tables)
        config: Scoring constants
        id_generator: Attempt id source (default: uuid-based)
        clock: Source of the completion timestamp

    Returns:
        A fully populated QuizAttempt
    """
    reference = reference or default_reference()
    config = config or QuizScoringConfig()
    id_generator = id_generator or uuid_id_generator("quiz")

    attempt = QuizAttempt(id=id_generator(), user_id=user_id, completed_at=clock())
    for answer in resolve_answers(answers, reference):
        attempt.set_answer(answer.question_id, answer.selected_value, answer.points)

    for category, score in calculate_category_scores(attempt.answers, reference).items():
        attempt.set_category_score(category, score)

    attempt.personality_traits = compute_personality_traits(
        attempt.category_scores, reference, config
    )
    attempt.compatibility_factors = calculate_compatibility_factors(attempt.category_scores)

    logger.info(
        f"Scored quiz attempt {attempt.id} for {user_id}: {len(attempt.answers)} answers, "
        f"archetypes={attempt.personality_traits.archetype_types}"
    )
    return attempt


def compare_category_scores(
    scores_a: Dict[str, float],
    scores_b: Dict[str, float],
    neutral: float = 50.0
) -> float:
    """Mean of (100 - |a - b|) over the union of categories."""
    categories = set(scores_a) | set(scores_b)
    if not categories:
        return 0.0
    total_difference = sum(
        abs(scores_a.get(c, neutral) - scores_b.get(c, neutral)) for c in categories
    )
    return max(0.0, 100 - total_difference / len(categories))


def compare_archetypes(
    archetypes_a: List[ArchetypeStrength],
    archetypes_b: List[ArchetypeStrength]
) -> float:
    """Jaccard overlap of archetype types scaled to 100; 50 if either is empty."""
    if not archetypes_a or not archetypes_b:
        return 50.0
    types_a = {a.type for a in archetypes_a}
    types_b = {b.type for b in archetypes_b}
    union = types_a | types_b
    return len(types_a & types_b) / len(union) * 100


def compare_answers(answers_a: List[QuizAnswer], answers_b: List[QuizAnswer]) -> float:
    """Percentage of shared questions answered identically; 0 if none shared."""
    map_a = {a.question_id: a.selected_value for a in answers_a}
    map_b = {b.question_id: b.selected_value for b in answers_b}
    shared = [q for q in map_a if q in map_b]
    if not shared:
        return 0.0
    matches = sum(1 for q in shared if map_a[q] == map_b[q])
    return matches / len(shared) * 100


def calculate_quiz_compatibility(
    attempt_a: Optional[QuizAttempt],
    attempt_b: Optional[QuizAttempt],
    config: Optional[QuizScoringConfig] = None
) -> QuizCompatibility:
    """
    Weighted compatibility between two quiz attempts.

    Returns a zero score when either attempt is missing.
    """
    if attempt_a is None or attempt_b is None:
        return QuizCompatibility(score=0)

    config = config or QuizScoringConfig()

    category = compare_category_scores(
        attempt_a.category_scores, attempt_b.category_scores, config.neutral_category_score
    )
    archetype = compare_archetypes(
        attempt_a.personality_traits.archetypes, attempt_b.personality_traits.archetypes
    )
    answers = compare_answers(attempt_a.answers, attempt_b.answers)

    total = (
        category * config.category_weight
        + archetype * config.archetype_weight
        + answers * config.answer_weight
    )

    return QuizCompatibility(
        score=int(math.floor(total + 0.5)),
        category_compatibility=category,
        archetype_compatibility=archetype,
        answer_compatibility=answers,
    )


def latest_attempt(attempts: Optional[List[QuizAttempt]]) -> Optional[QuizAttempt]:
    """Most recently completed attempt; the later entry wins on equal timestamps."""
    if not attempts:
        return None
    latest = attempts[0]
    for attempt in attempts[1:]:
        if attempt.completed_at is None:
            continue
        if latest.completed_at is None or attempt.completed_at >= latest.completed_at:
            latest = attempt
    return latest
