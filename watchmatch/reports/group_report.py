"""Group compatibility report built from pairwise quiz compatibility."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional, Sequence, Union

from ..clock import Clock, utc_now, isoformat
from ..profiles.schema import Profile
from ..quiz.scoring import QuizScoringConfig, calculate_quiz_compatibility, latest_attempt
from .pair_report import profile_archetypes

logger = logging.getLogger(__name__)


@dataclass
class GroupReportError:
    """Returned instead of a report when the group is too small."""
    error: str
    group_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "groupSize": self.group_size}


@dataclass
class GroupCompatibilityReport:
    """
    Compatibility summary for a group of two or more users.

    Attributes:
        group_size: Number of users in the group
        users: Id and username of every member
        overall_compatibility: Rounded mean of the pairwise scores
        pairwise_compatibility: One entry per pair where both completed the quiz
        common_archetypes: Archetypes held by at least two members
        recommendations: Group recommendations
        summary: One-paragraph summary
        generated_at: Generation timestamp
    """
    group_size: int
    users: List[Dict[str, str]]
    overall_compatibility: int = 0
    pairwise_compatibility: List[Dict[str, Any]] = field(default_factory=list)
    common_archetypes: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    summary: str = ""
    generated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupSize": self.group_size,
            "users": list(self.users),
            "overallCompatibility": self.overall_compatibility,
            "pairwiseCompatibility": list(self.pairwise_compatibility),
            "commonArchetypes": list(self.common_archetypes),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
            "generatedAt": isoformat(self.generated_at),
        }


def find_common_archetypes(profiles: Sequence[Profile]) -> List[Dict[str, Any]]:
    """Archetypes shared by two or more quiz-complete members, most common first."""
    counts: Dict[str, Dict[str, Any]] = {}
    for profile in profiles:
        if not profile.has_quiz_data():
            continue
        for archetype in profile_archetypes(profile):
            entry = counts.setdefault(archetype.type, {
                "type": archetype.type,
                "name": archetype.name,
                "description": archetype.description,
                "count": 0,
                "users": [],
            })
            entry["count"] += 1
            entry["users"].append(profile.display_name)

    common = [a for a in counts.values() if a["count"] >= 2]
    common.sort(key=lambda a: a["count"], reverse=True)
    return common


def generate_group_summary(report: GroupCompatibilityReport) -> str:
    summary = f"Group of {report.group_size} users "
    if report.overall_compatibility >= 75:
        summary += "has excellent compatibility for group watching!"
    elif report.overall_compatibility >= 60:
        summary += "has good compatibility for group watching."
    else:
        summary += "has moderate compatibility, so communication will be key."

    if report.common_archetypes:
        top = report.common_archetypes[0]
        summary += f" {top['count']} members share the {top['name']} archetype."
    return summary


def generate_group_recommendations(report: GroupCompatibilityReport) -> List[Dict[str, Any]]:
    recommendations = []
    if report.overall_compatibility >= 70:
        recommendations.append({
            "type": "general",
            "title": "Great Group Dynamic",
            "suggestion": "Your group has strong compatibility. Consider hosting regular watch parties!",
        })

    if report.common_archetypes:
        top = report.common_archetypes[0]
        description = top["description"] or "this viewing style"
        recommendations.append({
            "type": "archetype",
            "title": f"Embrace Your {top['name']} Majority",
            "suggestion": (
                f"With {top['count']} members sharing this archetype, "
                f"lean into {description.lower()}"
            ),
        })

    recommendations.append({
        "type": "logistics",
        "title": "Plan for Everyone",
        "suggestion": "With a group, establish clear viewing guidelines and rotate who picks the content.",
    })
    return recommendations


def generate_group_report(
    profiles: Sequence[Profile],
    quiz_config: Optional[QuizScoringConfig] = None,
    clock: Clock = utc_now
) -> Union[GroupCompatibilityReport, GroupReportError]:
    """
    Build a group report.

    Args:
        profiles: Group members
        quiz_config: Quiz comparator constants
        clock: Source of ``generated_at``

    Returns:
        GroupCompatibilityReport, or GroupReportError for fewer than 2 users
    """
    if not profiles or len(profiles) < 2:
        return GroupReportError(
            error="At least 2 users required for group compatibility",
            group_size=len(profiles or []),
        )

    quiz_config = quiz_config or QuizScoringConfig()
    report = GroupCompatibilityReport(
        group_size=len(profiles),
        users=[{"id": p.id, "username": p.username} for p in profiles],
        generated_at=clock(),
    )

    for i, first in enumerate(profiles):
        for second in profiles[i + 1:]:
            if not first.has_quiz_data() or not second.has_quiz_data():
                continue
            result = calculate_quiz_compatibility(
                latest_attempt(first.quiz_attempts),
                latest_attempt(second.quiz_attempts),
                quiz_config,
            )
            report.pairwise_compatibility.append({
                "user1": first.display_name,
                "user2": second.display_name,
                "score": result.score,
            })

    if report.pairwise_compatibility:
        scores = [p["score"] for p in report.pairwise_compatibility]
        report.overall_compatibility = int(math.floor(sum(scores) / len(scores) + 0.5))

    report.common_archetypes = find_common_archetypes(profiles)
    report.summary = generate_group_summary(report)
    report.recommendations = generate_group_recommendations(report)

    logger.info(
        f"Generated group report for {len(profiles)} users: "
        f"{len(report.pairwise_compatibility)} pairs, overall {report.overall_compatibility}"
    )
    return report
