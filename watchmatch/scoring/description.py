"""
Match description generation.

Builds a short sentence from a scored pair, e.g.::

    82% match — you both love Fight Club, you both enjoy comedies and
    thrillers, and you have similar binge-watching habits

Clauses are added in a fixed order and each only when its factor cleared
its threshold; the first profile's data decides the order of items within
a clause.
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from ..profiles.schema import Profile
from ..reference import ReferenceData, default_reference
from .factors import SharedItem
from .swipe_analytics import SwipeAnalytics


@dataclass
class DescriptionThresholds:
    """Minimum factor points for each optional clause."""
    quiz_note_min: float = 8.0
    emotional_note_min: float = 7.0
    swipe_genre_note_min: float = 15.0
    content_type_note_min: float = 8.0
    binge_note_min: float = 12.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DescriptionThresholds":
        section = config.get("description", {})
        defaults = cls()
        return cls(
            quiz_note_min=section.get("quiz_note_min", defaults.quiz_note_min),
            emotional_note_min=section.get("emotional_note_min", defaults.emotional_note_min),
            swipe_genre_note_min=section.get("swipe_genre_note_min", defaults.swipe_genre_note_min),
            content_type_note_min=section.get("content_type_note_min", defaults.content_type_note_min),
            binge_note_min=section.get("binge_note_min", defaults.binge_note_min),
        )


def pluralize(word: str) -> str:
    """Naive English plural: comedy -> comedies, mystery -> mysteries, drama -> dramas."""
    if not word:
        return word
    lower = word.lower()
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def strip_article(name: str) -> str:
    """Drop a leading 'The ' from a display name: The Critic -> Critic."""
    if name.lower().startswith("the "):
        return name[4:].lstrip()
    return name


def join_phrases(phrases: List[str]) -> str:
    """Join with 'and', using an Oxford comma for three or more."""
    if not phrases:
        return ""
    if len(phrases) == 1:
        return phrases[0]
    if len(phrases) == 2:
        return f"{phrases[0]} and {phrases[1]}"
    return ", ".join(phrases[:-1]) + f", and {phrases[-1]}"


def format_match_percentage(score: float) -> int:
    return int(math.floor(score + 0.5))


def _title(item: SharedItem) -> str:
    if item.title:
        return item.title
    return f"movie #{item.tmdb_id}" if item.tmdb_id is not None else "a movie"


def _movie_clause(items: List[SharedItem], one: str, two: str, many: str) -> Optional[str]:
    if not items:
        return None
    if len(items) == 1:
        return one.format(_title(items[0]))
    if len(items) == 2:
        return two.format(_title(items[0]), _title(items[1]))
    return many.format(len(items))


def _content_type_clause(
    analytics_a: Optional[SwipeAnalytics],
    analytics_b: Optional[SwipeAnalytics]
) -> str:
    if analytics_a is None or analytics_b is None:
        return "you have a similar movie and TV mix"
    tv_a = analytics_a.content_type.tv_show_percentage
    tv_b = analytics_b.content_type.tv_show_percentage
    if tv_a > 60 and tv_b > 60:
        return "you both lean toward TV shows"
    if tv_a < 40 and tv_b < 40:
        return "you both prefer movies"
    return "you have a similar movie and TV mix"


def build_clauses(
    profile_a: Profile,
    profile_b: Profile,
    breakdown: Dict[str, float],
    shared: List[SharedItem],
    analytics_a: Optional[SwipeAnalytics] = None,
    analytics_b: Optional[SwipeAnalytics] = None,
    thresholds: Optional[DescriptionThresholds] = None,
    reference: Optional[ReferenceData] = None
) -> List[str]:
    """Ordered description clauses for a scored pair."""
    thresholds = thresholds or DescriptionThresholds()
    reference = reference or default_reference()
    clauses = []

    if profile_a.archetype and profile_a.archetype == profile_b.archetype:
        archetype = reference.viewing_archetypes.get(profile_a.archetype)
        name = archetype.name if archetype else profile_a.archetype.replace("_", " ")
        clauses.append(f"you're both {pluralize(strip_article(name))}")
    elif breakdown.get("quiz", 0.0) >= thresholds.quiz_note_min:
        clauses.append("your movie personalities click")

    def of_kind(kind: str) -> List[SharedItem]:
        return [item for item in shared if item.kind == kind]

    movie_clauses = [
        _movie_clause(
            of_kind("favorite"),
            "you both love {}",
            "you both love {} and {}",
            "you share {} favorite movies",
        ),
        _movie_clause(
            of_kind("liked"),
            "you both liked {}",
            "you both liked {} and {}",
            "you both liked {} of the same titles",
        ),
        _movie_clause(
            of_kind("watchlist"),
            "{} is on both your watchlists",
            "{} and {} are on both your watchlists",
            "you have {} titles in common on your watchlists",
        ),
    ]
    clauses.extend(c for c in movie_clauses if c)

    genres = of_kind("genre")
    if genres:
        names = [pluralize(g.title.lower()) for g in genres]
        clauses.append(f"you both enjoy {join_phrases(names)}")

    if breakdown.get("emotional_tone", 0.0) >= thresholds.emotional_note_min:
        clauses.append("you're drawn to the same kind of stories")
    if breakdown.get("swipe_genres", 0.0) >= thresholds.swipe_genre_note_min:
        clauses.append("your swipes favor the same genres")
    if breakdown.get("content_type", 0.0) >= thresholds.content_type_note_min:
        clauses.append(_content_type_clause(analytics_a, analytics_b))
    if breakdown.get("binge_pattern", 0.0) >= thresholds.binge_note_min:
        clauses.append("you have similar binge-watching habits")

    return clauses


def generate_description(score: float, clauses: List[str]) -> str:
    """Prefix the clauses with the rounded match percentage."""
    prefix = f"{format_match_percentage(score)}% match"
    if not clauses:
        return prefix
    return f"{prefix} — {join_phrases(clauses)}"
