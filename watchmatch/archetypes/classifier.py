"""
Rule-based viewing archetype classifier.

Scores every viewing archetype from behavioural profile fields:

    binge count        >=5 marathon +30 | >=3 casual +20 | else casual +10, critic +10
    unique genres      >=8 explorer +25 | >=5 casual +15 | <=3 loyalist +20, rewatcher +15
    preferred genres   +15 to the mapped archetype per matching genre
    history size       >50 marathon +20, explorer +10 | >30 loyalist +15 | >10 casual +15
    any rewatch        rewatcher +25

Rules are additive. The primary archetype is the highest total, ties going to
whichever archetype is declared first in the reference table.

Classification never touches the profile it reads; ``annotate_with_archetype``
returns an annotated copy for callers that want to persist the label.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Any, List, Optional

from ..profiles.schema import Profile
from ..reference import ReferenceData, ViewingArchetype, default_reference

logger = logging.getLogger(__name__)


@dataclass
class ArchetypeCompatibilityConfig:
    """Figures returned by the archetype compatibility lookup."""
    identical: float = 95.0
    listed: float = 85.0
    unlisted: float = 60.0
    unknown: float = 50.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ArchetypeCompatibilityConfig":
        section = config.get("archetypes", {})
        return cls(
            identical=section.get("identical", 95),
            listed=section.get("listed", 85),
            unlisted=section.get("unlisted", 60),
            unknown=section.get("unknown", 50),
        )


@dataclass
class ArchetypeScore:
    type: str
    name: str
    description: str
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "score": self.score,
        }


@dataclass
class ArchetypeResult:
    """
    Classification outcome.

    Attributes:
        primary: Highest-scoring archetype
        secondary: Runner-up, None if only one archetype is defined
        all_scores: Archetype type -> rule total, in declaration order
    """
    primary: ArchetypeScore
    secondary: Optional[ArchetypeScore] = None
    all_scores: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.to_dict(),
            "secondary": self.secondary.to_dict() if self.secondary else None,
            "allScores": dict(self.all_scores),
        }


def _add(scores: Dict[str, int], archetype: str, points: int) -> None:
    # Tables may omit an archetype; rules targeting it are skipped
    if archetype in scores:
        scores[archetype] += points


def score_archetypes(profile: Profile, reference: Optional[ReferenceData] = None) -> Dict[str, int]:
    """Apply every classification rule and return the per-archetype totals."""
    reference = reference or default_reference()
    scores = {key: 0 for key in reference.viewing_archetypes}

    binge = profile.preferences.binge_count or 0
    if binge >= 5:
        _add(scores, "marathon_viewer", 30)
    elif binge >= 3:
        _add(scores, "casual_viewer", 20)
    else:
        _add(scores, "casual_viewer", 10)
        _add(scores, "critic", 10)

    history = profile.watch_history
    unique_genres = {g for entry in history for g in entry.genres}
    if len(unique_genres) >= 8:
        _add(scores, "genre_explorer", 25)
    elif len(unique_genres) >= 5:
        _add(scores, "casual_viewer", 15)
    elif len(unique_genres) <= 3:
        _add(scores, "franchise_loyalist", 20)
        _add(scores, "comfort_rewatcher", 15)

    for genre in profile.preferences.genre_names:
        mapped = reference.genre_archetypes.get(genre)
        if mapped:
            _add(scores, mapped, 15)

    if len(history) > 50:
        _add(scores, "marathon_viewer", 20)
        _add(scores, "genre_explorer", 10)
    elif len(history) > 30:
        _add(scores, "franchise_loyalist", 15)
    elif len(history) > 10:
        _add(scores, "casual_viewer", 15)

    if any(entry.rewatch for entry in history):
        _add(scores, "comfort_rewatcher", 25)

    return scores


def _to_score(archetype: ViewingArchetype, score: int) -> ArchetypeScore:
    return ArchetypeScore(
        type=archetype.type,
        name=archetype.name,
        description=archetype.description,
        score=score,
    )


def classify_archetype(
    profile: Profile,
    reference: Optional[ReferenceData] = None
) -> ArchetypeResult:
    """
    Classify a profile into a primary and secondary viewing archetype.

    Args:
        profile: Profile to classify (not modified)
        reference: Reference tables holding the archetype catalog

    Returns:
        ArchetypeResult with primary, secondary and all scores
    """
    reference = reference or default_reference()
    scores = score_archetypes(profile, reference)

    # sorted() is stable, so equal totals keep declaration order
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    primary_type, primary_score = ranked[0]
    secondary = None
    if len(ranked) > 1:
        secondary_type, secondary_score = ranked[1]
        secondary = _to_score(reference.viewing_archetypes[secondary_type], secondary_score)

    result = ArchetypeResult(
        primary=_to_score(reference.viewing_archetypes[primary_type], primary_score),
        secondary=secondary,
        all_scores=scores,
    )
    logger.debug(f"Classified {profile.id} as {primary_type} ({primary_score})")
    return result


def annotate_with_archetype(
    profile: Profile,
    reference: Optional[ReferenceData] = None
) -> Profile:
    """Return a copy of ``profile`` with its primary archetype assigned."""
    result = classify_archetype(profile, reference)
    return replace(profile, archetype=result.primary.type)


def archetype_compatibility(
    archetype_a: Optional[str],
    archetype_b: Optional[str],
    reference: Optional[ReferenceData] = None,
    config: Optional[ArchetypeCompatibilityConfig] = None
) -> float:
    """
    Compatibility between two viewing archetypes.

    Only ``archetype_a``'s compatibility list is consulted, so the result
    is not guaranteed to be symmetric.
    """
    reference = reference or default_reference()
    config = config or ArchetypeCompatibilityConfig()

    first = reference.viewing_archetypes.get(archetype_a) if archetype_a else None
    second = reference.viewing_archetypes.get(archetype_b) if archetype_b else None
    if first is None or second is None:
        return config.unknown
    if first.type == second.type:
        return config.identical
    if second.type in first.compatibility:
        return config.listed
    return config.unlisted


def archetype_recommendations(
    archetype: str,
    reference: Optional[ReferenceData] = None
) -> List[Dict[str, Any]]:
    """Archetypes listed as compatible with ``archetype``, with their metadata."""
    reference = reference or default_reference()
    source = reference.viewing_archetypes.get(archetype)
    if source is None:
        return []
    recommendations = []
    for key in source.compatibility:
        target = reference.viewing_archetypes.get(key)
        if target is None:
            continue
        recommendations.append({
            "type": target.type,
            "name": target.name,
            "description": target.description,
            "traits": list(target.traits),
        })
    return recommendations
