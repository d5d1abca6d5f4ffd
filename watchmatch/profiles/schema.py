"""
Profile schema for the matching core.

Profiles are owned by an external store and arrive as loosely shaped
records: camelCase or snake_case keys, genres as plain strings or
``{id, name}`` objects, timestamps as ISO strings. ``Profile.from_dict``
normalizes all of that once at the boundary so internal components only
ever see the typed dataclasses below.

Profiles are treated as read-only by the core. Classification results are
returned as new values (see ``annotate_with_archetype``), never written back.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any, List

from ..clock import parse_timestamp, isoformat
from ..quiz.attempt import QuizAttempt, PersonalityTraits
from ..reference import ReferenceData, default_reference

logger = logging.getLogger(__name__)

LIKE_ACTIONS = ("like", "superlike")


class ProfileFormatError(ValueError):
    """Raised when a profile record cannot be normalized."""


def _get(d: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key among camelCase/snake_case alternatives."""
    for key in keys:
        if key in d and d[key] is not None:
            return d[key]
    return default


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Genre:
    """A genre preference; ``id`` is the TMDB id when known."""
    id: Optional[int]
    name: str


@dataclass
class StreamingService:
    name: str
    connected_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: Any) -> "StreamingService":
        if isinstance(d, str):
            return cls(name=d)
        return cls(
            name=str(_get(d, "name", default="")),
            connected_at=parse_timestamp(_get(d, "connectedAt", "connected_at")),
            last_used_at=parse_timestamp(_get(d, "lastUsedAt", "last_used_at", "lastUsed")),
        )


@dataclass
class WatchHistoryEntry:
    """
    One watched title.

    Attributes:
        title: Display title (compared case- and whitespace-insensitively)
        content_type: 'movie', 'tvshow' or 'series'
        genres: Genre tags attached to the entry
        service: Streaming service the title was watched on
        episodes_watched: Episodes watched in the session
        watched_at: When it was watched
        rewatch: Whether this was a rewatch
    """
    title: str
    content_type: str = "movie"
    genres: List[str] = field(default_factory=list)
    service: Optional[str] = None
    episodes_watched: int = 1
    watched_at: Optional[datetime] = None
    rewatch: bool = False

    @property
    def normalized_title(self) -> str:
        return " ".join(self.title.lower().split())

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WatchHistoryEntry":
        genres = []
        single = _get(d, "genre")
        if isinstance(single, str) and single:
            genres.append(single)
        for g in _get(d, "genres", default=[]) or []:
            name = g.get("name") if isinstance(g, dict) else g
            if name and name not in genres:
                genres.append(str(name))
        return cls(
            title=str(_get(d, "title", default="")),
            content_type=str(_get(d, "type", "contentType", "content_type", default="movie")),
            genres=genres,
            service=_get(d, "service"),
            episodes_watched=_as_int(_get(d, "episodesWatched", "episodes_watched")) or 1,
            watched_at=parse_timestamp(_get(d, "watchedAt", "watched_at")),
            rewatch=bool(_get(d, "rewatch", default=False)),
        )


@dataclass
class MovieRef:
    """A movie referenced by external (TMDB) id."""
    tmdb_id: int
    title: str = ""
    release_year: Optional[int] = None
    genre_ids: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MovieRef":
        year = _as_int(_get(d, "releaseYear", "release_year", "year"))
        if year is None:
            release_date = _get(d, "releaseDate", "release_date", "firstAirDate")
            if isinstance(release_date, str) and len(release_date) >= 4:
                year = _as_int(release_date[:4])
        return cls(
            tmdb_id=_as_int(_get(d, "tmdbId", "tmdb_id", "id")) or 0,
            title=str(_get(d, "title", "name", default="")),
            release_year=year,
            genre_ids=[int(g) for g in _get(d, "genreIds", "genre_ids", default=[]) or []],
        )


@dataclass
class SwipeRecord:
    """A discovery swipe on a movie or show."""
    tmdb_id: int
    title: str = ""
    genre_ids: List[int] = field(default_factory=list)
    content_type: str = "movie"
    action: str = "like"
    swiped_at: Optional[datetime] = None

    @property
    def is_like(self) -> bool:
        return self.action in LIKE_ACTIONS

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SwipeRecord":
        return cls(
            tmdb_id=_as_int(_get(d, "tmdbId", "tmdb_id", "id")) or 0,
            title=str(_get(d, "title", default="")),
            genre_ids=[int(g) for g in _get(d, "genreIds", "genre_ids", default=[]) or []],
            content_type=str(_get(d, "contentType", "content_type", default="movie")),
            action=str(_get(d, "action", default="like")).lower(),
            swiped_at=parse_timestamp(_get(d, "swipedAt", "swiped_at")),
        )


@dataclass
class DebateAnswer:
    prompt_id: str
    answer: str


@dataclass
class AgeRange:
    min: Any
    max: Any


@dataclass
class Preferences:
    """
    Matching preferences.

    ``binge_count`` is None when the user never set it, so absent data
    does not look like a deliberate zero.
    """
    genres: List[Genre] = field(default_factory=list)
    binge_count: Optional[int] = None
    age_range: Optional[AgeRange] = None
    location_radius: Optional[Any] = None
    gender_preference: List[str] = field(default_factory=list)
    orientation_preference: List[str] = field(default_factory=list)

    @property
    def genre_names(self) -> List[str]:
        return [g.name for g in self.genres]

    @property
    def genre_ids(self) -> List[int]:
        return [g.id for g in self.genres if g.id is not None]


@dataclass
class Profile:
    """
    A user profile as seen by the matching core.

    Attributes:
        id: Opaque user id
        username: Display name
        age: Age in years, None if unknown
        location: Free-form "city, state" string
        gender: Gender value ('' when unset)
        sexual_orientation: Orientation value ('' when unset)
        streaming_services: Connected services
        watch_history: Watched titles
        favorite_movies: Favorites by TMDB id
        swiped_movies: Discovery swipes (likes and dislikes)
        watchlist: Movies and shows queued to watch
        preferences: Matching preferences
        debate_answers: Sides picked on debate prompts
        favorite_snacks: Snack preferences
        video_chat_preference: 'facetime', 'zoom', 'either' or None
        is_premium: Premium status (enables premium filters)
        archetype: Assigned viewing archetype key, None if unclassified
        personality_profile: Traits from the latest quiz, if any
        quiz_attempts: Completed quiz attempts
    """
    id: str
    username: str = ""
    age: Optional[int] = None
    location: str = ""
    gender: str = ""
    sexual_orientation: str = ""
    streaming_services: List[StreamingService] = field(default_factory=list)
    watch_history: List[WatchHistoryEntry] = field(default_factory=list)
    favorite_movies: List[MovieRef] = field(default_factory=list)
    swiped_movies: List[SwipeRecord] = field(default_factory=list)
    watchlist: List[MovieRef] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)
    debate_answers: List[DebateAnswer] = field(default_factory=list)
    favorite_snacks: List[str] = field(default_factory=list)
    video_chat_preference: Optional[str] = None
    is_premium: bool = False
    archetype: Optional[str] = None
    personality_profile: Optional[PersonalityTraits] = None
    quiz_attempts: List[QuizAttempt] = field(default_factory=list)

    def liked_movies(self) -> List[SwipeRecord]:
        """Swipes recorded as a like or superlike."""
        return [s for s in self.swiped_movies if s.is_like]

    def has_quiz_data(self) -> bool:
        return len(self.quiz_attempts) > 0

    @property
    def display_name(self) -> str:
        return self.username or self.id

    @classmethod
    def from_dict(
        cls,
        record: Dict[str, Any],
        reference: Optional[ReferenceData] = None
    ) -> "Profile":
        """
        Normalize a raw profile record.

        Args:
            record: Profile record from the store or an API payload
            reference: Reference tables used to resolve genre names to ids

        Returns:
            Profile instance

        Raises:
            ProfileFormatError: If the record has no id
        """
        if "id" not in record or record["id"] in (None, ""):
            raise ProfileFormatError(f"Profile record has no id: {sorted(record)[:10]}")
        reference = reference or default_reference()

        prefs = _get(record, "preferences", default={}) or {}
        age_range = _get(prefs, "ageRange", "age_range")
        preferences = Preferences(
            genres=[_normalize_genre(g, reference) for g in _get(prefs, "genres", default=[]) or []],
            binge_count=_as_int(_get(prefs, "bingeWatchCount", "bingeCount", "binge_count")),
            age_range=AgeRange(age_range.get("min"), age_range.get("max"))
            if isinstance(age_range, dict) else None,
            location_radius=_get(prefs, "locationRadius", "location_radius"),
            gender_preference=list(_get(prefs, "genderPreference", "gender_preference", default=[])),
            orientation_preference=list(_get(
                prefs,
                "sexualOrientationPreference",
                "orientationPreference",
                "orientation_preference",
                default=[],
            )),
        )

        watchlist = [
            MovieRef.from_dict(m)
            for m in (
                (_get(record, "watchlist", default=[]) or [])
                + (_get(record, "movieWatchlist", "movie_watchlist", default=[]) or [])
                + (_get(record, "tvWatchlist", "tv_watchlist", default=[]) or [])
            )
        ]

        debate_answers = [
            DebateAnswer(
                prompt_id=str(_get(a, "promptId", "prompt_id", default="")),
                answer=str(_get(a, "answer", default="")),
            )
            for a in _get(record, "debateAnswers", "debate_answers", "movieDebateTopics", default=[]) or []
            if isinstance(a, dict)
        ]

        archetype = _get(record, "archetype")
        if isinstance(archetype, dict):
            archetype = archetype.get("type")

        personality = _get(record, "personalityProfile", "personality_profile")

        return cls(
            id=str(record["id"]),
            username=str(_get(record, "username", default="")),
            age=_as_int(_get(record, "age")),
            location=str(_get(record, "location", default="")),
            gender=str(_get(record, "gender", default="")),
            sexual_orientation=str(_get(record, "sexualOrientation", "sexual_orientation", default="")),
            streaming_services=[
                StreamingService.from_dict(s)
                for s in _get(record, "streamingServices", "streaming_services", default=[]) or []
            ],
            watch_history=[
                WatchHistoryEntry.from_dict(w)
                for w in _get(record, "watchHistory", "watch_history", default=[]) or []
            ],
            favorite_movies=[
                MovieRef.from_dict(m)
                for m in _get(record, "favoriteMovies", "favorite_movies", default=[]) or []
            ],
            swiped_movies=[
                SwipeRecord.from_dict(s)
                for s in _get(record, "swipedMovies", "swiped_movies", default=[]) or []
            ],
            watchlist=watchlist,
            preferences=preferences,
            debate_answers=debate_answers,
            favorite_snacks=[
                str(s) for s in _get(
                    record, "favoriteSnacks", "favorite_snacks", "snackPreferences", default=[]
                ) or []
            ],
            video_chat_preference=_get(record, "videoChatPreference", "video_chat_preference"),
            is_premium=bool(_get(record, "isPremium", "is_premium", default=False)),
            archetype=archetype,
            personality_profile=PersonalityTraits.from_dict(personality)
            if isinstance(personality, dict) else None,
            quiz_attempts=[
                QuizAttempt.from_dict(a)
                for a in _get(record, "quizAttempts", "quiz_attempts", default=[]) or []
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the fields the matching core reads."""
        p = self.preferences
        return {
            "id": self.id,
            "username": self.username,
            "age": self.age,
            "location": self.location,
            "gender": self.gender,
            "sexualOrientation": self.sexual_orientation,
            "streamingServices": [
                {
                    "name": s.name,
                    "connectedAt": isoformat(s.connected_at),
                    "lastUsedAt": isoformat(s.last_used_at),
                }
                for s in self.streaming_services
            ],
            "watchHistory": [
                {
                    "title": w.title,
                    "type": w.content_type,
                    "genres": list(w.genres),
                    "service": w.service,
                    "episodesWatched": w.episodes_watched,
                    "watchedAt": isoformat(w.watched_at),
                    "rewatch": w.rewatch,
                }
                for w in self.watch_history
            ],
            "favoriteMovies": [_movie_to_dict(m) for m in self.favorite_movies],
            "swipedMovies": [
                {
                    "tmdbId": s.tmdb_id,
                    "title": s.title,
                    "genreIds": list(s.genre_ids),
                    "contentType": s.content_type,
                    "action": s.action,
                    "swipedAt": isoformat(s.swiped_at),
                }
                for s in self.swiped_movies
            ],
            "watchlist": [_movie_to_dict(m) for m in self.watchlist],
            "preferences": {
                "genres": [{"id": g.id, "name": g.name} for g in p.genres],
                "bingeWatchCount": p.binge_count,
                "ageRange": {"min": p.age_range.min, "max": p.age_range.max}
                if p.age_range else None,
                "locationRadius": p.location_radius,
                "genderPreference": list(p.gender_preference),
                "sexualOrientationPreference": list(p.orientation_preference),
            },
            "debateAnswers": [
                {"promptId": a.prompt_id, "answer": a.answer} for a in self.debate_answers
            ],
            "favoriteSnacks": list(self.favorite_snacks),
            "videoChatPreference": self.video_chat_preference,
            "isPremium": self.is_premium,
            "archetype": self.archetype,
            "personalityProfile": self.personality_profile.to_dict()
            if self.personality_profile else None,
            "quizAttempts": [a.to_dict() for a in self.quiz_attempts],
        }


def _movie_to_dict(movie: MovieRef) -> Dict[str, Any]:
    return {
        "tmdbId": movie.tmdb_id,
        "title": movie.title,
        "releaseYear": movie.release_year,
        "genreIds": list(movie.genre_ids),
    }


def _normalize_genre(value: Any, reference: ReferenceData) -> Genre:
    """Accept 'Comedy', 35 or {'id': 35, 'name': 'Comedy'}."""
    if isinstance(value, dict):
        genre_id = _as_int(value.get("id"))
        name = value.get("name") or reference.genres.get(genre_id, "")
        return Genre(id=genre_id, name=str(name))
    if isinstance(value, int) and not isinstance(value, bool):
        return Genre(id=value, name=reference.genres.get(value, str(value)))
    name = str(value).strip()
    return Genre(id=reference.genre_id_for(name), name=name)
