"""
Pair compatibility report.

Turns two users' latest quiz attempts into a qualitative report:

1. Overall score (the quiz compatibility score)
2. Archetype analysis: shared, complementary and different archetypes
3. Category breakdown, best aligned first
4. Up to 5 strengths and 3 challenges
5. Recommendations and a one-paragraph summary

Users without a quiz attempt get a report carrying only an explanatory
summary.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..clock import Clock, utc_now, isoformat
from ..profiles.schema import Profile
from ..quiz.attempt import ArchetypeStrength
from ..quiz.scoring import (
    QuizCompatibility,
    QuizScoringConfig,
    calculate_quiz_compatibility,
    latest_attempt,
)
from ..reference import ReferenceData, default_reference

logger = logging.getLogger(__name__)

MISSING_QUIZ_SUMMARY = (
    "One or both users have not completed the quiz. Complete the personality "
    "quiz for detailed compatibility insights."
)

MAX_STRENGTHS = 5
MAX_CHALLENGES = 3
MAX_DIFFERENT = 3


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def compatibility_level(score: float) -> str:
    if score >= 90:
        return "excellent"
    if score >= 75:
        return "great"
    if score >= 60:
        return "good"
    if score >= 45:
        return "moderate"
    return "challenging"


@dataclass
class CategoryComparison:
    category: str
    name: str
    user1_score: int
    user2_score: int
    compatibility: int
    difference: int
    level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "name": self.name,
            "user1Score": self.user1_score,
            "user2Score": self.user2_score,
            "compatibility": self.compatibility,
            "difference": self.difference,
            "level": self.level,
        }


@dataclass
class ArchetypeAnalysis:
    """
    Overlap between two users' personality archetypes.

    Attributes:
        shared: Archetypes both users hold
        complementary: Cross-pairs listed in the complementary table
        different: Remaining cross-pairs, at most three
        compatibility: shared x30 + complementary x20 - different x5, in [0, 100]
    """
    shared: List[Dict[str, Any]] = field(default_factory=list)
    complementary: List[Dict[str, Any]] = field(default_factory=list)
    different: List[Dict[str, Any]] = field(default_factory=list)
    compatibility: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shared": list(self.shared),
            "complementary": list(self.complementary),
            "different": list(self.different),
            "compatibility": self.compatibility,
        }


@dataclass
class CompatibilityReport:
    """Quiz-based compatibility report for two users."""
    user1: Dict[str, str]
    user2: Dict[str, str]
    overall_compatibility: int = 0
    quiz_compatibility: Optional[QuizCompatibility] = None
    archetype_analysis: Optional[ArchetypeAnalysis] = None
    category_breakdown: List[CategoryComparison] = field(default_factory=list)
    strengths: List[Dict[str, Any]] = field(default_factory=list)
    challenges: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    summary: str = ""
    generated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": {"user1": dict(self.user1), "user2": dict(self.user2)},
            "overallCompatibility": self.overall_compatibility,
            "quizCompatibility": self.quiz_compatibility.to_dict()
            if self.quiz_compatibility else None,
            "archetypeAnalysis": self.archetype_analysis.to_dict()
            if self.archetype_analysis else None,
            "categoryBreakdown": [c.to_dict() for c in self.category_breakdown],
            "strengths": list(self.strengths),
            "challenges": list(self.challenges),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
            "generatedAt": isoformat(self.generated_at),
        }


def complementary_reason(type_a: str, type_b: str, reference: ReferenceData) -> str:
    reasons = reference.complementary_reasons
    return (
        reasons.get(f"{type_a}-{type_b}")
        or reasons.get(f"{type_b}-{type_a}")
        or "Compatible viewing styles"
    )


def analyze_archetypes(
    archetypes_a: List[ArchetypeStrength],
    archetypes_b: List[ArchetypeStrength],
    reference: Optional[ReferenceData] = None
) -> ArchetypeAnalysis:
    """Classify archetype pairs as shared, complementary or different."""
    reference = reference or default_reference()
    by_type_b = {a.type: a for a in archetypes_b}

    shared = []
    for a in archetypes_a:
        match = by_type_b.get(a.type)
        if match is not None:
            shared.append({
                "type": a.type,
                "name": a.name,
                "description": a.description,
                "user1Strength": a.strength,
                "user2Strength": match.strength,
                "impact": "positive",
            })
    shared_types = {s["type"] for s in shared}

    complementary = []
    for a in archetypes_a:
        for complement in reference.complementary_pairs.get(a.type, ()):
            b = by_type_b.get(complement)
            if b is not None and b.type not in shared_types:
                complementary.append({
                    "user1": {"type": a.type, "name": a.name},
                    "user2": {"type": b.type, "name": b.name},
                    "reason": complementary_reason(a.type, b.type, reference),
                    "impact": "positive",
                })
    complementary_types = {c["user1"]["type"] for c in complementary}

    different = []
    for a in archetypes_a:
        if a.type in shared_types or a.type in complementary_types:
            continue
        for b in archetypes_b:
            if a.type != b.type:
                different.append({
                    "user1": {"type": a.type, "name": a.name},
                    "user2": {"type": b.type, "name": b.name},
                    "impact": "neutral",
                })

    score = len(shared) * 30 + len(complementary) * 20 - len(different) * 5
    return ArchetypeAnalysis(
        shared=shared,
        complementary=complementary,
        different=different[:MAX_DIFFERENT],
        compatibility=max(0, min(100, score)),
    )


def analyze_categories(
    scores_a: Dict[str, float],
    scores_b: Dict[str, float],
    reference: Optional[ReferenceData] = None,
    neutral: float = 50.0
) -> List[CategoryComparison]:
    """Per-category comparison sorted by compatibility, best first."""
    reference = reference or default_reference()
    categories = list(scores_a) + [c for c in scores_b if c not in scores_a]

    breakdown = []
    for category in categories:
        score_a = scores_a.get(category, neutral)
        score_b = scores_b.get(category, neutral)
        difference = abs(score_a - score_b)
        compatibility = 100 - difference
        breakdown.append(CategoryComparison(
            category=category,
            name=reference.category_name(category),
            user1_score=_round(score_a),
            user2_score=_round(score_b),
            compatibility=_round(compatibility),
            difference=_round(difference),
            level=compatibility_level(compatibility),
        ))

    breakdown.sort(key=lambda c: c.compatibility, reverse=True)
    return breakdown


def identify_strengths(
    breakdown: List[CategoryComparison],
    analysis: ArchetypeAnalysis
) -> List[Dict[str, Any]]:
    strengths = []
    for category in [c for c in breakdown if c.compatibility >= 75][:3]:
        strengths.append({
            "type": "category",
            "title": f"Aligned {category.name}",
            "description": (
                f"Both users have similar preferences in {category.name.lower()}, "
                "making this a strong foundation for compatibility."
            ),
            "score": category.compatibility,
        })

    for shared in analysis.shared:
        strengths.append({
            "type": "archetype",
            "title": f"Shared {shared['name']}",
            "description": shared["description"],
            "score": (shared["user1Strength"] + shared["user2Strength"]) / 2,
        })

    for comp in analysis.complementary:
        strengths.append({
            "type": "complementary",
            "title": f"{comp['user1']['name']} meets {comp['user2']['name']}",
            "description": comp["reason"],
            "score": 80,
        })

    strengths.sort(key=lambda s: s["score"], reverse=True)
    return strengths[:MAX_STRENGTHS]


def identify_challenges(
    breakdown: List[CategoryComparison],
    reference: Optional[ReferenceData] = None
) -> List[Dict[str, Any]]:
    reference = reference or default_reference()
    challenges = []
    for category in breakdown:
        if category.compatibility >= 50:
            continue
        description = reference.challenge_descriptions.get(
            category.category, f"Different preferences in {category.name.lower()}"
        )
        suggestions = reference.challenge_suggestions.get(
            category.category, reference.default_challenge_suggestions
        )
        challenges.append({
            "category": category.name,
            "description": description,
            "severity": "high" if category.difference > 50 else "moderate",
            "suggestions": list(suggestions),
        })
    return challenges[:MAX_CHALLENGES]


def generate_recommendations(report: CompatibilityReport) -> List[Dict[str, Any]]:
    recommendations = []
    score = report.overall_compatibility

    if score >= 80:
        recommendations.append({
            "type": "general",
            "priority": "high",
            "title": "Excellent Match!",
            "suggestion": "Your viewing styles are highly compatible. Consider planning a movie marathon together!",
        })
    elif score >= 60:
        recommendations.append({
            "type": "general",
            "priority": "medium",
            "title": "Good Match",
            "suggestion": "You have solid compatibility. Focus on your shared preferences for best results.",
        })
    else:
        recommendations.append({
            "type": "general",
            "priority": "medium",
            "title": "Growing Compatibility",
            "suggestion": (
                "While you have some differences, these can complement each other. "
                "Focus on communication and compromise."
            ),
        })

    if report.strengths:
        top = report.strengths[0]
        recommendations.append({
            "type": "strength",
            "priority": "high",
            "title": f"Leverage Your {top['title']}",
            "suggestion": (
                f"Your shared {top['title'].lower()} is a strong foundation. "
                "Build on this compatibility for successful watch sessions."
            ),
        })

    if report.challenges:
        top = report.challenges[0]
        suggestions = top["suggestions"]
        recommendations.append({
            "type": "challenge",
            "priority": "high" if top["severity"] == "high" else "medium",
            "title": f"Navigate {top['category']} Differences",
            "suggestion": suggestions[0] if suggestions else "Communicate openly about preferences",
        })

    return recommendations


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def generate_summary(report: CompatibilityReport) -> str:
    score = report.overall_compatibility
    if score >= 80:
        parts = ["Excellent compatibility!"]
    elif score >= 60:
        parts = ["Good compatibility."]
    elif score >= 40:
        parts = ["Moderate compatibility."]
    else:
        parts = ["Growing compatibility."]

    analysis = report.archetype_analysis
    if analysis is not None and analysis.shared:
        sentence = f"You share {_plural(len(analysis.shared), 'personality archetype')}"
        if analysis.complementary:
            sentence += ", and your different traits complement each other well."
        else:
            sentence += "."
        parts.append(sentence)
    elif analysis is not None and analysis.complementary:
        parts.append("Your different traits complement each other well.")

    if report.strengths:
        parts.append(f"You have {_plural(len(report.strengths), 'key strength')} to build on.")

    if report.challenges:
        parts.append(
            f"Be mindful of {_plural(len(report.challenges), 'area')} that may need compromise."
        )
    else:
        parts.append("Your preferences align smoothly across most areas.")

    return " ".join(parts)


def profile_archetypes(profile: Profile) -> List[ArchetypeStrength]:
    """Personality archetypes from the profile, else from the latest quiz attempt."""
    if profile.personality_profile is not None and profile.personality_profile.archetypes:
        return list(profile.personality_profile.archetypes)
    attempt = latest_attempt(profile.quiz_attempts)
    if attempt is None:
        return []
    return list(attempt.personality_traits.archetypes)


def generate_pair_report(
    profile_a: Profile,
    profile_b: Profile,
    reference: Optional[ReferenceData] = None,
    quiz_config: Optional[QuizScoringConfig] = None,
    clock: Clock = utc_now
) -> CompatibilityReport:
    """
    Build the compatibility report for two users.

    Args:
        profile_a: First user
        profile_b: Second user
        reference: Reference tables
        quiz_config: Quiz comparator constants
        clock: Source of ``generated_at``

    Returns:
        CompatibilityReport; only the summary is filled when a quiz is missing
    """
    reference = reference or default_reference()
    quiz_config = quiz_config or QuizScoringConfig()

    report = CompatibilityReport(
        user1={"id": profile_a.id, "username": profile_a.username},
        user2={"id": profile_b.id, "username": profile_b.username},
        generated_at=clock(),
    )

    if not profile_a.has_quiz_data() or not profile_b.has_quiz_data():
        report.summary = MISSING_QUIZ_SUMMARY
        return report

    attempt_a = latest_attempt(profile_a.quiz_attempts)
    attempt_b = latest_attempt(profile_b.quiz_attempts)

    report.quiz_compatibility = calculate_quiz_compatibility(attempt_a, attempt_b, quiz_config)
    report.overall_compatibility = report.quiz_compatibility.score
    report.archetype_analysis = analyze_archetypes(
        profile_archetypes(profile_a), profile_archetypes(profile_b), reference
    )
    report.category_breakdown = analyze_categories(
        attempt_a.category_scores,
        attempt_b.category_scores,
        reference,
        quiz_config.neutral_category_score,
    )
    report.strengths = identify_strengths(report.category_breakdown, report.archetype_analysis)
    report.challenges = identify_challenges(report.category_breakdown, reference)
    report.recommendations = generate_recommendations(report)
    report.summary = generate_summary(report)

    logger.info(
        f"Generated pair report for ({profile_a.id}, {profile_b.id}): "
        f"{report.overall_compatibility}, {len(report.strengths)} strengths, "
        f"{len(report.challenges)} challenges"
    )
    return report
