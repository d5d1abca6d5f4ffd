"""
Scoring weights for the pairwise compatibility scorer.

Every constant the scorer uses lives in ScoringWeights, loaded from the
``scoring`` section of the config. Weights are fixed data; nothing here is
fitted.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Tuple


def _tiers(value: Any) -> List[Tuple[float, float]]:
    return [(float(limit), float(points)) for limit, points in value]


@dataclass
class ScoringWeights:
    """
    Weights and caps of the pairwise scorer.

    Attributes:
        base_score: Floor every pair starts from
        max_score: Upper clamp of the final score
        shared_service: Points per shared streaming service
        shared_watch_history: Points per shared watched title
        shared_genre: Points per shared preferred genre
        shared_favorite: Points per shared favorite movie
        shared_like: Points per movie both liked while swiping
        shared_watchlist: Points per shared watchlist entry
        binge_tiers: (max |difference|, points) pairs, first match wins
        binge_fallback: Points when no binge tier matches
        tv_bonus: Bonus when both swipe histories lean TV
        tv_share_threshold: TV percentage above which a history leans TV
        genre_similarity_max: Points for identical swipe genre vectors
        content_type_max: Points for identical movie/TV split
        video_chat_match: Points for compatible video chat preferences
        chronotype_max: Points for identical viewing-time profiles
        marathon_tiers: (max episode difference, points) pairs
        marathon_fallback: Points when no marathon tier matches
        genre_diversity_max: Points for the same genre-diversity bucket
        rewatch_match: Points when rewatch tendencies agree
        rewatch_mismatch: Points when they differ
        planner_threshold: Watchlist size above which a user is a planner
        watchlist_match: Points when watchlist styles agree
        watchlist_mismatch: Points when they differ
        frequency_max: Points for the same viewing-frequency tier
        active_usage_max: Points for identical active shared services
        snack_per_item: Points per shared snack
        snack_cap: Cap on snack points
        emotional_tone_max: Points for identical emotional-tone profiles
        quiz_share: Fraction of quiz compatibility added
        archetype_share: Fraction of archetype compatibility added
        debate_share: Fraction of debate compatibility added
        active_window_days: Window for "active" service usage and frequency
    """
    base_score: float = 10.0
    max_score: float = 100.0
    shared_service: float = 10.0
    shared_watch_history: float = 20.0
    shared_genre: float = 5.0
    shared_favorite: float = 25.0
    shared_like: float = 30.0
    shared_watchlist: float = 15.0
    binge_tiers: List[Tuple[float, float]] = field(
        default_factory=lambda: [(0, 15), (1, 12), (2, 10), (3, 7), (5, 4)]
    )
    binge_fallback: float = 1.0
    tv_bonus: float = 5.0
    tv_share_threshold: float = 40.0
    genre_similarity_max: float = 25.0
    content_type_max: float = 10.0
    video_chat_match: float = 5.0
    chronotype_max: float = 8.0
    marathon_tiers: List[Tuple[float, float]] = field(
        default_factory=lambda: [(1, 10), (3, 7), (6, 4)]
    )
    marathon_fallback: float = 1.0
    genre_diversity_max: float = 10.0
    rewatch_match: float = 7.0
    rewatch_mismatch: float = 2.0
    planner_threshold: int = 10
    watchlist_match: float = 6.0
    watchlist_mismatch: float = 2.0
    frequency_max: float = 12.0
    active_usage_max: float = 10.0
    snack_per_item: float = 3.0
    snack_cap: float = 10.0
    emotional_tone_max: float = 10.0
    quiz_share: float = 0.15
    archetype_share: float = 0.15
    debate_share: float = 0.10
    active_window_days: int = 30

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoringWeights":
        """Create from a flat dictionary; unknown keys are ignored."""
        known = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        for key in ("binge_tiers", "marathon_tiers"):
            if key in known:
                known[key] = _tiers(known[key])
        return cls(**known)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScoringWeights":
        """Create from main config dictionary."""
        scoring = config.get("scoring", {})
        per_item = scoring.get("per_item", {})
        binge = scoring.get("binge", {})
        swipe = scoring.get("swipe", {})
        creative = scoring.get("creative", {})
        snack = scoring.get("snack", {})
        defaults = cls()

        return cls(
            base_score=scoring.get("base_score", defaults.base_score),
            max_score=scoring.get("max_score", defaults.max_score),
            shared_service=per_item.get("shared_service", defaults.shared_service),
            shared_watch_history=per_item.get("shared_watch_history", defaults.shared_watch_history),
            shared_genre=per_item.get("shared_genre", defaults.shared_genre),
            shared_favorite=per_item.get("shared_favorite", defaults.shared_favorite),
            shared_like=per_item.get("shared_like", defaults.shared_like),
            shared_watchlist=per_item.get("shared_watchlist", defaults.shared_watchlist),
            binge_tiers=_tiers(binge.get("tiers", defaults.binge_tiers)),
            binge_fallback=binge.get("fallback_points", defaults.binge_fallback),
            tv_bonus=binge.get("tv_bonus", defaults.tv_bonus),
            tv_share_threshold=binge.get("tv_share_threshold", defaults.tv_share_threshold),
            genre_similarity_max=swipe.get("genre_similarity_max", defaults.genre_similarity_max),
            content_type_max=swipe.get("content_type_max", defaults.content_type_max),
            video_chat_match=scoring.get("video_chat_match", defaults.video_chat_match),
            chronotype_max=creative.get("chronotype_max", defaults.chronotype_max),
            marathon_tiers=_tiers(creative.get("marathon_tiers", defaults.marathon_tiers)),
            marathon_fallback=creative.get("marathon_fallback", defaults.marathon_fallback),
            genre_diversity_max=creative.get("genre_diversity_max", defaults.genre_diversity_max),
            rewatch_match=creative.get("rewatch_match", defaults.rewatch_match),
            rewatch_mismatch=creative.get("rewatch_mismatch", defaults.rewatch_mismatch),
            planner_threshold=creative.get("planner_threshold", defaults.planner_threshold),
            watchlist_match=creative.get("watchlist_match", defaults.watchlist_match),
            watchlist_mismatch=creative.get("watchlist_mismatch", defaults.watchlist_mismatch),
            frequency_max=creative.get("frequency_max", defaults.frequency_max),
            active_usage_max=creative.get("active_usage_max", defaults.active_usage_max),
            snack_per_item=snack.get("per_item", defaults.snack_per_item),
            snack_cap=snack.get("cap", defaults.snack_cap),
            emotional_tone_max=scoring.get("emotional_tone_max", defaults.emotional_tone_max),
            quiz_share=scoring.get("quiz_share", defaults.quiz_share),
            archetype_share=scoring.get("archetype_share", defaults.archetype_share),
            debate_share=scoring.get("debate_share", defaults.debate_share),
            active_window_days=config.get("global", {}).get(
                "active_window_days", defaults.active_window_days
            ),
        )

    def validate(self) -> List[str]:
        """
        Check weights for consistency.

        Returns:
            List of issues (empty if valid)
        """
        issues = []
        for name, value in asdict(self).items():
            if isinstance(value, list):
                for limit, points in value:
                    if limit < 0 or points < 0:
                        issues.append(f"{name} contains a negative tier: ({limit}, {points})")
            elif value < 0:
                issues.append(f"{name} must be non-negative, got {value}")

        if self.base_score > self.max_score:
            issues.append(f"base_score ({self.base_score}) exceeds max_score ({self.max_score})")

        for name in ("quiz_share", "archetype_share", "debate_share"):
            value = getattr(self, name)
            if value > 1:
                issues.append(f"{name} must be in [0, 1], got {value}")

        for name in ("binge_tiers", "marathon_tiers"):
            limits = [limit for limit, _ in getattr(self, name)]
            if limits != sorted(limits):
                issues.append(f"{name} limits must be ascending")

        return issues
