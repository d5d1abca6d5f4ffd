"""
Swipe analytics.

Summarizes a user's discovery swipes: like ratio, genre-category counts over
liked titles, the movie/TV split and recent activity. The pairwise scorer
derives its swipe genre and content-type factors from this structure.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional, Sequence

from ..clock import utc_now, isoformat
from ..profiles.schema import SwipeRecord
from ..reference import ReferenceData, default_reference

logger = logging.getLogger(__name__)

TV_CONTENT_TYPES = ("tv", "tvshow", "tv_show", "series", "show")


@dataclass
class ContentTypeBreakdown:
    movies: int = 0
    tv_shows: int = 0
    movie_percentage: int = 0
    tv_show_percentage: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "movies": self.movies,
            "tvShows": self.tv_shows,
            "moviePercentage": self.movie_percentage,
            "tvShowPercentage": self.tv_show_percentage,
        }


@dataclass
class SwipeAnalytics:
    """
    Summary of one user's swipe history.

    Attributes:
        total_swipes: All swipes recorded
        total_likes: Likes and superlikes
        total_dislikes: Explicit dislikes
        like_percentage: Rounded share of swipes that were likes
        genre_preferences: Genre category -> count over liked titles
        genre_details: TMDB genre name -> count over liked titles
        content_type: Movie/TV split of liked titles
        top_genres: Up to five categories, most liked first
        last_7_days: Swipes within the last week
        last_30_days: Swipes within the last 30 days
        last_swiped_at: Timestamp of the last recorded swipe
    """
    total_swipes: int = 0
    total_likes: int = 0
    total_dislikes: int = 0
    like_percentage: int = 0
    genre_preferences: Dict[str, int] = field(default_factory=dict)
    genre_details: Dict[str, int] = field(default_factory=dict)
    content_type: ContentTypeBreakdown = field(default_factory=ContentTypeBreakdown)
    top_genres: List[Dict[str, Any]] = field(default_factory=list)
    last_7_days: int = 0
    last_30_days: int = 0
    last_swiped_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSwipes": self.total_swipes,
            "totalLikes": self.total_likes,
            "totalDislikes": self.total_dislikes,
            "likePercentage": self.like_percentage,
            "genrePreferences": dict(self.genre_preferences),
            "genreDetails": dict(self.genre_details),
            "contentTypeBreakdown": self.content_type.to_dict(),
            "topGenres": list(self.top_genres),
            "recentActivity": {
                "last7Days": self.last_7_days,
                "last30Days": self.last_30_days,
            },
            "lastSwipedAt": isoformat(self.last_swiped_at),
        }


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(part / whole * 100 + 0.5)


def is_tv_swipe(swipe: SwipeRecord, reference: ReferenceData) -> bool:
    """A swipe counts as TV by content type or by any TV-only genre id."""
    if swipe.content_type.lower() in TV_CONTENT_TYPES:
        return True
    return any(g in reference.tv_genre_ids for g in swipe.genre_ids)


def analyze_swipe_preferences(
    swipes: Sequence[SwipeRecord],
    now: Optional[datetime] = None,
    reference: Optional[ReferenceData] = None
) -> SwipeAnalytics:
    """
    Summarize a swipe history.

    Args:
        swipes: Swipe records in the order they were made
        now: Reference time for the activity windows (default: current UTC time)
        reference: Reference tables holding genre names and categories

    Returns:
        SwipeAnalytics; an empty history yields all-zero analytics
    """
    if not swipes:
        return SwipeAnalytics()

    reference = reference or default_reference()
    now = now or utc_now()

    liked = [s for s in swipes if s.is_like]
    disliked = [s for s in swipes if s.action == "dislike"]

    categories: Dict[str, int] = {}
    details: Dict[str, int] = {}
    movies = 0
    tv_shows = 0

    for swipe in liked:
        for genre_id in swipe.genre_ids:
            name = reference.genres.get(genre_id, "Unknown")
            details[name] = details.get(name, 0) + 1
            category = reference.genre_category(genre_id)
            categories[category] = categories.get(category, 0) + 1
        if is_tv_swipe(swipe, reference):
            tv_shows += 1
        else:
            movies += 1

    ranked = sorted(categories.items(), key=lambda kv: kv[1], reverse=True)
    top_genres = [
        {"genre": genre, "count": count, "percentage": _percent(count, len(liked))}
        for genre, count in ranked[:5]
    ]

    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    stamped = [s.swiped_at for s in swipes if s.swiped_at is not None]

    return SwipeAnalytics(
        total_swipes=len(swipes),
        total_likes=len(liked),
        total_dislikes=len(disliked),
        like_percentage=_percent(len(liked), len(swipes)),
        genre_preferences=categories,
        genre_details=details,
        content_type=ContentTypeBreakdown(
            movies=movies,
            tv_shows=tv_shows,
            movie_percentage=_percent(movies, len(liked)),
            tv_show_percentage=_percent(tv_shows, len(liked)),
        ),
        top_genres=top_genres,
        last_7_days=sum(1 for t in stamped if t >= week_ago),
        last_30_days=sum(1 for t in stamped if t >= month_ago),
        last_swiped_at=swipes[-1].swiped_at,
    )


def swipe_insights(analytics: SwipeAnalytics) -> List[str]:
    """Short descriptive sentences about a swipe summary."""
    if analytics.total_swipes == 0:
        return ["Start swiping to see your preferences!"]

    insights = []
    if analytics.like_percentage >= 70:
        insights.append(
            f"You're quite generous! You liked {analytics.like_percentage}% of movies you swiped on."
        )
    elif analytics.like_percentage <= 30:
        insights.append(f"You're selective! Only {analytics.like_percentage}% of movies made the cut.")

    if analytics.top_genres:
        top = analytics.top_genres[0]
        insights.append(f"{top['genre']} is your go-to genre with {top['count']} liked titles.")

    movies = analytics.content_type.movies
    tv_shows = analytics.content_type.tv_shows
    if movies > tv_shows * 2:
        insights.append("You prefer movies over TV shows.")
    elif tv_shows > movies * 2:
        insights.append("You love TV shows, perfect for binge-watching sessions.")
    elif movies > 0 and tv_shows > 0:
        insights.append("You enjoy movies and TV shows about equally.")

    if analytics.last_7_days > 10:
        insights.append(f"You've been active with {analytics.last_7_days} swipes in the last week.")

    return insights
