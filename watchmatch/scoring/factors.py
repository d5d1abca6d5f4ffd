"""
Per-factor contributions of the pairwise scorer.

Each factor is a pure function ``(profile_a, profile_b, context) ->
FactorResult``. Factors only read their inputs and return the points they
contribute plus any shared-content evidence. A factor whose inputs are
missing on either side contributes 0.

Core factors count shared items and are always evaluated directly.
Enrichment factors derive from swipe analytics, timestamps, quiz attempts
and other optional data; the scorer runs them through a guard so a failure
in one of them costs only that factor.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Set, Tuple

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from ..archetypes.classifier import ArchetypeCompatibilityConfig, archetype_compatibility
from ..profiles.schema import Profile
from ..quiz.scoring import QuizScoringConfig, calculate_quiz_compatibility, latest_attempt
from ..reference import ReferenceData
from .debate import DebateCompatibility, calculate_debate_compatibility
from .swipe_analytics import SwipeAnalytics, analyze_swipe_preferences
from .weights import ScoringWeights

logger = logging.getLogger(__name__)

TIME_BUCKETS = ("morning", "afternoon", "evening", "night")
DIVERSITY_BUCKETS = ("narrow", "balanced", "eclectic")
FREQUENCY_TIERS = ("dormant", "light", "regular", "heavy")


@dataclass
class SharedItem:
    """One piece of content or preference both users have in common."""
    kind: str
    title: str
    tmdb_id: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        d: Dict[str, object] = {"kind": self.kind, "title": self.title}
        if self.tmdb_id is not None:
            d["tmdbId"] = self.tmdb_id
        return d


@dataclass
class FactorResult:
    points: float = 0.0
    shared: List[SharedItem] = field(default_factory=list)


class FactorContext:
    """
    Shared inputs for one pair evaluation.

    Swipe analytics, the quiz comparison and the debate comparison are
    computed on first use and reused by every factor that needs them.
    """

    def __init__(
        self,
        weights: ScoringWeights,
        reference: ReferenceData,
        now: datetime,
        quiz_config: Optional[QuizScoringConfig] = None,
        archetype_config: Optional[ArchetypeCompatibilityConfig] = None
    ):
        self.weights = weights
        self.reference = reference
        self.now = now
        self.quiz_config = quiz_config or QuizScoringConfig()
        self.archetype_config = archetype_config or ArchetypeCompatibilityConfig()
        self._analytics: Dict[int, Tuple[Profile, SwipeAnalytics]] = {}
        self.debate: Optional[DebateCompatibility] = None

    def swipe_analytics(self, profile: Profile) -> SwipeAnalytics:
        # Keyed by object identity; two profiles in a pair may share an id.
        key = id(profile)
        if key not in self._analytics:
            analytics = analyze_swipe_preferences(
                profile.swiped_movies, now=self.now, reference=self.reference
            )
            self._analytics[key] = (profile, analytics)
        return self._analytics[key][1]

    @property
    def window_start(self) -> datetime:
        return self.now - timedelta(days=self.weights.active_window_days)


def _tier_points(difference: float, tiers: List[Tuple[float, float]], fallback: float) -> float:
    for limit, points in tiers:
        if difference <= limit:
            return points
    return fallback


# Core factors

def shared_services(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    names_b = {s.name.strip().lower() for s in b.streaming_services}
    shared = []
    seen: Set[str] = set()
    for service in a.streaming_services:
        key = service.name.strip().lower()
        if key in names_b and key not in seen:
            seen.add(key)
            shared.append(SharedItem("service", service.name))
    return FactorResult(len(shared) * ctx.weights.shared_service, shared)


def shared_watch_history(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    titles_b = {w.normalized_title for w in b.watch_history if w.normalized_title}
    shared = []
    seen: Set[str] = set()
    for entry in a.watch_history:
        key = entry.normalized_title
        if key and key in titles_b and key not in seen:
            seen.add(key)
            shared.append(SharedItem("watch_history", entry.title.strip()))
    return FactorResult(len(shared) * ctx.weights.shared_watch_history, shared)


def shared_genres(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    names_b = {g.name.lower() for g in b.preferences.genres}
    shared = []
    seen: Set[str] = set()
    for genre in a.preferences.genres:
        key = genre.name.lower()
        if key and key in names_b and key not in seen:
            seen.add(key)
            shared.append(SharedItem("genre", genre.name, genre.id))
    return FactorResult(len(shared) * ctx.weights.shared_genre, shared)


def _shared_movies(movies_a, movies_b, kind: str) -> List[SharedItem]:
    titles_b = {m.tmdb_id: m.title for m in movies_b if m.tmdb_id}
    shared = []
    seen: Set[int] = set()
    for movie in movies_a:
        if movie.tmdb_id in titles_b and movie.tmdb_id not in seen:
            seen.add(movie.tmdb_id)
            title = movie.title or titles_b[movie.tmdb_id]
            shared.append(SharedItem(kind, title, movie.tmdb_id))
    return shared


def shared_favorites(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    shared = _shared_movies(a.favorite_movies, b.favorite_movies, "favorite")
    return FactorResult(len(shared) * ctx.weights.shared_favorite, shared)


def shared_likes(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    shared = _shared_movies(a.liked_movies(), b.liked_movies(), "liked")
    return FactorResult(len(shared) * ctx.weights.shared_like, shared)


def shared_watchlist(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    shared = _shared_movies(a.watchlist, b.watchlist, "watchlist")
    return FactorResult(len(shared) * ctx.weights.shared_watchlist, shared)


def binge_pattern(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    count_a = a.preferences.binge_count
    count_b = b.preferences.binge_count
    if count_a is None or count_b is None:
        return FactorResult()
    w = ctx.weights
    return FactorResult(_tier_points(abs(count_a - count_b), w.binge_tiers, w.binge_fallback))


def video_chat(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    pref_a = (a.video_chat_preference or "").lower()
    pref_b = (b.video_chat_preference or "").lower()
    if not pref_a or not pref_b:
        return FactorResult()
    if pref_a == pref_b or "either" in (pref_a, pref_b):
        return FactorResult(ctx.weights.video_chat_match)
    return FactorResult()


def snack_overlap(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    snacks_b = {s.strip().lower() for s in b.favorite_snacks}
    shared = []
    seen: Set[str] = set()
    for snack in a.favorite_snacks:
        key = snack.strip().lower()
        if key and key in snacks_b and key not in seen:
            seen.add(key)
            shared.append(SharedItem("snack", snack.strip()))
    w = ctx.weights
    return FactorResult(min(len(shared) * w.snack_per_item, w.snack_cap), shared)


# Swipe-derived enrichment

def tv_binge_bonus(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    analytics_a = ctx.swipe_analytics(a)
    analytics_b = ctx.swipe_analytics(b)
    if not analytics_a.total_likes or not analytics_b.total_likes:
        return FactorResult()
    threshold = ctx.weights.tv_share_threshold
    if (analytics_a.content_type.tv_show_percentage > threshold
            and analytics_b.content_type.tv_show_percentage > threshold):
        return FactorResult(ctx.weights.tv_bonus)
    return FactorResult()


def swipe_genre_similarity(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    prefs_a = ctx.swipe_analytics(a).genre_preferences
    prefs_b = ctx.swipe_analytics(b).genre_preferences
    if not prefs_a or not prefs_b:
        return FactorResult()
    categories = sorted(set(prefs_a) | set(prefs_b))
    vectors = np.array([
        [prefs_a.get(c, 0) for c in categories],
        [prefs_b.get(c, 0) for c in categories],
    ], dtype=float)
    similarity = float(cosine_similarity(vectors)[0, 1])
    return FactorResult(similarity * ctx.weights.genre_similarity_max)


def content_type_similarity(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    analytics_a = ctx.swipe_analytics(a)
    analytics_b = ctx.swipe_analytics(b)
    if not analytics_a.total_likes or not analytics_b.total_likes:
        return FactorResult()
    difference = abs(
        analytics_a.content_type.tv_show_percentage - analytics_b.content_type.tv_show_percentage
    )
    return FactorResult((1 - difference / 100) * ctx.weights.content_type_max)


# Creative factors

def _time_bucket(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 22:
        return "evening"
    return "night"


def _chronotype(profile: Profile) -> Optional[np.ndarray]:
    hours = [w.watched_at.hour for w in profile.watch_history if w.watched_at is not None]
    if not hours:
        return None
    counts = np.zeros(len(TIME_BUCKETS))
    for hour in hours:
        counts[TIME_BUCKETS.index(_time_bucket(hour))] += 1
    return counts / counts.sum()


def chronotype_similarity(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    profile_a = _chronotype(a)
    profile_b = _chronotype(b)
    if profile_a is None or profile_b is None:
        return FactorResult()
    similarity = 1 - 0.5 * float(np.abs(profile_a - profile_b).sum())
    return FactorResult(similarity * ctx.weights.chronotype_max)


def marathon_length(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    if not a.watch_history or not b.watch_history:
        return FactorResult()
    average_a = np.mean([w.episodes_watched for w in a.watch_history])
    average_b = np.mean([w.episodes_watched for w in b.watch_history])
    w = ctx.weights
    return FactorResult(
        _tier_points(abs(float(average_a - average_b)), w.marathon_tiers, w.marathon_fallback)
    )


def _diversity_bucket(profile: Profile) -> Optional[int]:
    unique = {g.lower() for entry in profile.watch_history for g in entry.genres}
    if not unique:
        return None
    if len(unique) <= 3:
        return 0
    if len(unique) <= 7:
        return 1
    return 2


def genre_diversity(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    bucket_a = _diversity_bucket(a)
    bucket_b = _diversity_bucket(b)
    if bucket_a is None or bucket_b is None:
        return FactorResult()
    distance = abs(bucket_a - bucket_b)
    if distance == 0:
        return FactorResult(ctx.weights.genre_diversity_max)
    if distance == 1:
        return FactorResult(ctx.weights.genre_diversity_max / 2)
    return FactorResult()


def rewatch_tendency(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    if not a.watch_history or not b.watch_history:
        return FactorResult()
    rewatches_a = any(w.rewatch for w in a.watch_history)
    rewatches_b = any(w.rewatch for w in b.watch_history)
    w = ctx.weights
    return FactorResult(w.rewatch_match if rewatches_a == rewatches_b else w.rewatch_mismatch)


def watchlist_style(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    if not a.watchlist or not b.watchlist:
        return FactorResult()
    w = ctx.weights
    planner_a = len(a.watchlist) > w.planner_threshold
    planner_b = len(b.watchlist) > w.planner_threshold
    return FactorResult(w.watchlist_match if planner_a == planner_b else w.watchlist_mismatch)


def _frequency_tier(profile: Profile, since: datetime) -> Optional[int]:
    stamped = [w.watched_at for w in profile.watch_history if w.watched_at is not None]
    if not stamped:
        return None
    recent = sum(1 for t in stamped if t >= since)
    if recent >= 20:
        return 3
    if recent >= 8:
        return 2
    if recent >= 1:
        return 1
    return 0


def viewing_frequency(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    tier_a = _frequency_tier(a, ctx.window_start)
    tier_b = _frequency_tier(b, ctx.window_start)
    if tier_a is None or tier_b is None:
        return FactorResult()
    distance = abs(tier_a - tier_b)
    return FactorResult(ctx.weights.frequency_max * (1 - distance / (len(FREQUENCY_TIERS) - 1)))


def _active_services(profile: Profile, names: Set[str], since: datetime) -> Set[str]:
    return {
        s.name.strip().lower()
        for s in profile.streaming_services
        if s.name.strip().lower() in names and s.last_used_at is not None and s.last_used_at >= since
    }


def active_service_usage(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    names = (
        {s.name.strip().lower() for s in a.streaming_services}
        & {s.name.strip().lower() for s in b.streaming_services}
    )
    if not names:
        return FactorResult()
    active_a = _active_services(a, names, ctx.window_start)
    active_b = _active_services(b, names, ctx.window_start)
    union = active_a | active_b
    if not union:
        return FactorResult()
    return FactorResult(len(active_a & active_b) / len(union) * ctx.weights.active_usage_max)


# Emotional tone

def tone_profile(profile: Profile, reference: ReferenceData) -> Dict[str, float]:
    """Share of a user's genre tags falling into each emotional tone."""
    tags: List[str] = []
    for swipe in profile.liked_movies():
        tags.extend(reference.genres[g] for g in swipe.genre_ids if g in reference.genres)
    for entry in profile.watch_history:
        tags.extend(entry.genres)
    tags.extend(profile.preferences.genre_names)

    counts = {tone: 0 for tone in reference.emotional_tones}
    for tag in tags:
        tone = reference.tone_for(tag)
        if tone is not None:
            counts[tone] += 1

    total = sum(counts.values())
    if total == 0:
        return {}
    return {tone: count / total for tone, count in counts.items()}


def emotional_tone(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    tones_a = tone_profile(a, ctx.reference)
    tones_b = tone_profile(b, ctx.reference)
    if not tones_a or not tones_b:
        return FactorResult()
    differences = []
    for tone in ctx.reference.emotional_tones:
        pa = tones_a.get(tone, 0.0)
        pb = tones_b.get(tone, 0.0)
        peak = max(pa, pb)
        differences.append(abs(pa - pb) / peak if peak > 0 else 0.0)
    alignment = 1 - sum(differences) / len(differences)
    return FactorResult(alignment * ctx.weights.emotional_tone_max)


# Quiz, archetype and debate

def quiz_compatibility(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    attempt_a = latest_attempt(a.quiz_attempts)
    attempt_b = latest_attempt(b.quiz_attempts)
    if attempt_a is None or attempt_b is None:
        return FactorResult()
    result = calculate_quiz_compatibility(attempt_a, attempt_b, ctx.quiz_config)
    return FactorResult(result.score * ctx.weights.quiz_share)


def archetype_match(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    if not a.archetype or not b.archetype:
        return FactorResult()
    score = archetype_compatibility(a.archetype, b.archetype, ctx.reference, ctx.archetype_config)
    return FactorResult(score * ctx.weights.archetype_share)


def debate_agreement(a: Profile, b: Profile, ctx: FactorContext) -> FactorResult:
    if not a.debate_answers or not b.debate_answers:
        return FactorResult()
    ctx.debate = calculate_debate_compatibility(a.debate_answers, b.debate_answers)
    return FactorResult(ctx.debate.score * ctx.weights.debate_share)


Factor = Callable[[Profile, Profile, FactorContext], FactorResult]

CORE_FACTORS: List[Tuple[str, Factor]] = [
    ("streaming_services", shared_services),
    ("watch_history", shared_watch_history),
    ("genres", shared_genres),
    ("favorite_movies", shared_favorites),
    ("liked_movies", shared_likes),
    ("watchlist", shared_watchlist),
    ("binge_pattern", binge_pattern),
    ("video_chat", video_chat),
    ("snacks", snack_overlap),
]

ENRICHMENT_FACTORS: List[Tuple[str, Factor]] = [
    ("tv_binge_bonus", tv_binge_bonus),
    ("swipe_genres", swipe_genre_similarity),
    ("content_type", content_type_similarity),
    ("chronotype", chronotype_similarity),
    ("marathon_length", marathon_length),
    ("genre_diversity", genre_diversity),
    ("rewatch_tendency", rewatch_tendency),
    ("watchlist_style", watchlist_style),
    ("viewing_frequency", viewing_frequency),
    ("active_services", active_service_usage),
    ("emotional_tone", emotional_tone),
    ("quiz", quiz_compatibility),
    ("archetype", archetype_match),
    ("debate", debate_agreement),
]
